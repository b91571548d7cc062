"""Health check endpoint."""

from fastapi import APIRouter, Request
from pydantic import BaseModel

from settlement_workbench.orchestration.circuit_breaker import CircuitBreaker

router = APIRouter(prefix="/api", tags=["health"])


class HealthResponse(BaseModel):
    """Health check response model."""

    status: str
    narrative_circuit: str


@router.get("/health", response_model=HealthResponse)
async def health_check(request: Request) -> HealthResponse:
    """Report liveness and the narrative provider's circuit state.

    An open circuit means narratives are currently served by the local
    fallback; the service itself is still usable, so status is "degraded".
    """
    breaker: CircuitBreaker | None = getattr(request.app.state, "narrative_breaker", None)
    circuit = breaker.state.value if breaker is not None else "disabled"
    return HealthResponse(
        status="degraded" if circuit == "open" else "ok",
        narrative_circuit=circuit,
    )
