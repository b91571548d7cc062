"""FastAPI application entry point with lifespan management."""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from settlement_workbench.api.health import router as health_router
from settlement_workbench.api.middleware import RequestContextMiddleware
from settlement_workbench.api.settlement import router as settlement_router
from settlement_workbench.core.config import settings
from settlement_workbench.core.logging import configure_logging, get_logger
from settlement_workbench.core.sentry import init_sentry
from settlement_workbench.narrative.provider import (
    AnthropicNarrativeProvider,
    FallbackNarrativeProvider,
)
from settlement_workbench.orchestration.circuit_breaker import get_circuit_breaker

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Manage application lifecycle resources.

    Startup:
        - Configure structured logging
        - Initialize Sentry error tracking
        - Create the narrative providers and the circuit breaker
    """
    configure_logging()
    logger.info("Starting application", environment=settings.environment)

    if init_sentry():
        logger.info("Sentry initialized")

    app.state.narrative_provider = AnthropicNarrativeProvider()
    app.state.narrative_fallback = FallbackNarrativeProvider()
    app.state.narrative_breaker = get_circuit_breaker(
        "narrative",
        fail_max=settings.narrative_fail_max,
        reset_timeout=settings.narrative_reset_timeout,
    )
    logger.info("Narrative provider ready", model=settings.narrative_model)

    yield

    logger.info("Shutting down application")


app = FastAPI(
    title="Settlement Workbench",
    description="Subcontract settlement calculation with input-tax simulation",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(RequestContextMiddleware)

app.include_router(health_router)
app.include_router(settlement_router)
