"""Orchestration module for wizard flow and LLM call protection."""

from settlement_workbench.orchestration.circuit_breaker import (
    CircuitBreaker,
    CircuitBreakerError,
    CircuitState,
    get_circuit_breaker,
    reset_all_breakers,
)
from settlement_workbench.orchestration.state_machine import (
    WIZARD_STEPS,
    TransitionNotAllowed,
    WorkbenchStateMachine,
    WorkbenchStep,
)

__all__ = [
    # Circuit breaker
    "CircuitBreaker",
    "CircuitBreakerError",
    "CircuitState",
    "get_circuit_breaker",
    "reset_all_breakers",
    # State machine
    "WIZARD_STEPS",
    "TransitionNotAllowed",
    "WorkbenchStateMachine",
    "WorkbenchStep",
]
