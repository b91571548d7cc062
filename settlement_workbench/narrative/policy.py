"""Fallback policy for obtaining an audit narrative.

The primary provider is called through a circuit breaker. Any failure,
including an open circuit, is recovered by asking the local
FallbackNarrativeProvider instead, so callers always receive a result.
"""

from __future__ import annotations

from settlement_workbench.core.logging import get_logger
from settlement_workbench.core.sentry import report_degraded
from settlement_workbench.narrative.models import (
    NarrativeRequest,
    NarrativeResult,
    NarrativeSource,
)
from settlement_workbench.narrative.provider import FallbackNarrativeProvider, NarrativeProvider
from settlement_workbench.orchestration.circuit_breaker import (
    CircuitBreaker,
    CircuitBreakerError,
)

logger = get_logger(__name__)

_LOCAL_FALLBACK = FallbackNarrativeProvider()


async def resolve_narrative(
    request: NarrativeRequest,
    provider: NarrativeProvider,
    breaker: CircuitBreaker | None = None,
    fallback: FallbackNarrativeProvider | None = None,
) -> NarrativeResult:
    """Get a narrative from the provider, falling back locally on failure.

    Args:
        request: Settlement data for the narrative.
        provider: Primary narrative provider.
        breaker: Optional circuit breaker guarding the provider.
        fallback: Local provider used on failure. Defaults to a shared
            FallbackNarrativeProvider.

    Returns:
        NarrativeResult from the provider, or the fallback narrative.
    """
    try:
        if breaker is None:
            text = await provider.generate(request)
        else:
            text = await breaker.call(provider.generate, request)
    except CircuitBreakerError as exc:
        logger.warning(
            "narrative_fallback_used",
            reason="circuit_open",
            circuit=exc.circuit_name,
        )
    except Exception as exc:
        logger.warning(
            "narrative_fallback_used",
            reason="provider_error",
            error=str(exc),
            error_type=type(exc).__name__,
        )
        report_degraded(exc, component="narrative_provider")
    else:
        return NarrativeResult(text=text, source=NarrativeSource.PROVIDER)

    local = fallback or _LOCAL_FALLBACK
    return NarrativeResult(
        text=await local.generate(request),
        source=NarrativeSource.FALLBACK,
    )
