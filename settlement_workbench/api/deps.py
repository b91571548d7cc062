"""FastAPI dependency injection for narrative collaborators."""

from fastapi import Request

from settlement_workbench.narrative.provider import FallbackNarrativeProvider, NarrativeProvider
from settlement_workbench.orchestration.circuit_breaker import CircuitBreaker


async def get_narrative_provider(request: Request) -> NarrativeProvider:
    """Get the primary narrative provider from app state.

    Args:
        request: FastAPI request containing app state.

    Returns:
        Narrative provider configured at startup.
    """
    return request.app.state.narrative_provider


async def get_narrative_breaker(request: Request) -> CircuitBreaker | None:
    """Get the circuit breaker guarding the narrative provider, if any."""
    return getattr(request.app.state, "narrative_breaker", None)


async def get_narrative_fallback(request: Request) -> FallbackNarrativeProvider | None:
    """Get the local fallback provider, if startup configured one."""
    return getattr(request.app.state, "narrative_fallback", None)
