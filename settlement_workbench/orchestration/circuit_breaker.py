"""Circuit breaker for LLM API calls.

Protects the workbench from waiting on an AI service that is already
failing: once the circuit opens, calls are rejected immediately and the
caller goes straight to its fallback. State lives in pybreaker's
in-memory storage; one breaker is shared by all sessions of a process.

Configuration (from settings):
    - narrative_fail_max: consecutive failures to open the circuit
    - narrative_reset_timeout: seconds before entering half-open state
    - success_threshold: successes in half-open to close the circuit
"""

import time
from collections.abc import Awaitable, Callable
from enum import Enum
from functools import wraps
from typing import ParamSpec, TypeVar

import pybreaker
import structlog

logger = structlog.get_logger()

P = ParamSpec("P")
T = TypeVar("T")


class CircuitState(str, Enum):
    """Circuit breaker states."""

    CLOSED = "closed"
    OPEN = "open"
    HALF_OPEN = "half_open"


_STATE_MAP = {
    pybreaker.STATE_CLOSED: CircuitState.CLOSED,
    pybreaker.STATE_OPEN: CircuitState.OPEN,
    pybreaker.STATE_HALF_OPEN: CircuitState.HALF_OPEN,
}
_STORAGE_STATE = {value: key for key, value in _STATE_MAP.items()}


class CircuitBreakerError(Exception):
    """Exception raised when circuit breaker is open."""

    def __init__(self, circuit_name: str, state: CircuitState):
        self.circuit_name = circuit_name
        self.state = state
        super().__init__(f"Circuit '{circuit_name}' is {state.value}")


class CircuitBreaker:
    """Async circuit breaker backed by pybreaker's memory storage.

    Opens after fail_max consecutive failures, enters half-open after
    reset_timeout seconds, and closes after success_threshold successes.
    In half-open state the storage counter counts successes.

    Usage:
        breaker = CircuitBreaker("narrative")
        text = await breaker.call(provider.generate, request)

    Attributes:
        name: Circuit breaker name for identification in logs
        fail_max: Number of consecutive failures before opening
        reset_timeout: Seconds before entering half-open state
        success_threshold: Successes needed in half-open to close
    """

    DEFAULT_FAIL_MAX = 5
    DEFAULT_RESET_TIMEOUT = 30
    DEFAULT_SUCCESS_THRESHOLD = 2

    def __init__(
        self,
        name: str,
        fail_max: int = DEFAULT_FAIL_MAX,
        reset_timeout: int = DEFAULT_RESET_TIMEOUT,
        success_threshold: int = DEFAULT_SUCCESS_THRESHOLD,
        clock: Callable[[], float] = time.monotonic,
    ):
        """Initialize circuit breaker.

        Args:
            name: Unique name for this circuit breaker
            fail_max: Consecutive failures to open circuit (default: 5)
            reset_timeout: Seconds before half-open state (default: 30)
            success_threshold: Successes in half-open to close (default: 2)
            clock: Monotonic time source, injectable for tests
        """
        self.name = name
        self.fail_max = fail_max
        self.reset_timeout = reset_timeout
        self.success_threshold = success_threshold
        self._clock = clock
        self._opened_at: float | None = None
        self._storage = pybreaker.CircuitMemoryStorage(pybreaker.STATE_CLOSED)

    @property
    def state(self) -> CircuitState:
        """Return the current circuit state."""
        return _STATE_MAP.get(self._storage.state, CircuitState.CLOSED)

    @property
    def failure_count(self) -> int:
        """Return the current failure count (success count when half-open)."""
        return self._storage.counter

    def _set_state(self, state: CircuitState) -> None:
        self._storage.state = _STORAGE_STATE[state]

    async def call(
        self,
        func: Callable[P, Awaitable[T]],
        *args: P.args,
        **kwargs: P.kwargs,
    ) -> T:
        """Call an async function through the circuit breaker.

        Args:
            func: Async function to call
            *args: Positional arguments for the function
            **kwargs: Keyword arguments for the function

        Returns:
            The result of the function call

        Raises:
            CircuitBreakerError: If the circuit is open
            Exception: Any exception from the wrapped function
        """
        if self.state == CircuitState.OPEN and not self._should_try_reset():
            logger.warning(
                "circuit_breaker_rejected",
                circuit=self.name,
                state=self.state.value,
            )
            raise CircuitBreakerError(self.name, self.state)

        try:
            result = await func(*args, **kwargs)
        except Exception:
            self._on_failure()
            raise

        self._on_success()
        return result

    def _should_try_reset(self) -> bool:
        """Move to half-open once the reset timeout has elapsed."""
        if self._opened_at is None:
            return True

        elapsed = self._clock() - self._opened_at
        if elapsed < self.reset_timeout:
            return False

        self._set_state(CircuitState.HALF_OPEN)
        self._storage.reset_counter()
        logger.info(
            "circuit_breaker_half_open",
            circuit=self.name,
            elapsed_seconds=elapsed,
        )
        return True

    def _on_success(self) -> None:
        if self.state != CircuitState.HALF_OPEN:
            self._storage.reset_counter()
            return

        self._storage.increment_counter()
        success_count = self._storage.counter
        if success_count >= self.success_threshold:
            self._set_state(CircuitState.CLOSED)
            self._storage.reset_counter()
            self._opened_at = None
            logger.info(
                "circuit_breaker_closed",
                circuit=self.name,
                success_count=success_count,
            )

    def _on_failure(self) -> None:
        if self.state == CircuitState.HALF_OPEN:
            self._open()
            logger.warning("circuit_breaker_reopened", circuit=self.name)
            return

        self._storage.increment_counter()
        failure_count = self._storage.counter
        if failure_count >= self.fail_max:
            self._open()
            logger.warning(
                "circuit_breaker_opened",
                circuit=self.name,
                failure_count=failure_count,
            )

    def _open(self) -> None:
        self._set_state(CircuitState.OPEN)
        self._storage.reset_counter()
        self._opened_at = self._clock()

    def protect(
        self, func: Callable[P, Awaitable[T]]
    ) -> Callable[P, Awaitable[T]]:
        """Decorator to protect an async function with this circuit breaker.

        Usage:
            @breaker.protect
            async def my_api_call():
                ...
        """

        @wraps(func)
        async def wrapper(*args: P.args, **kwargs: P.kwargs) -> T:
            return await self.call(func, *args, **kwargs)

        return wrapper

    def reset(self) -> None:
        """Reset the circuit breaker to closed state."""
        self._set_state(CircuitState.CLOSED)
        self._storage.reset_counter()
        self._opened_at = None
        logger.info("circuit_breaker_reset", circuit=self.name)


# Module-level registry for circuit breakers
_circuit_breakers: dict[str, CircuitBreaker] = {}


def get_circuit_breaker(
    name: str,
    fail_max: int = CircuitBreaker.DEFAULT_FAIL_MAX,
    reset_timeout: int = CircuitBreaker.DEFAULT_RESET_TIMEOUT,
    success_threshold: int = CircuitBreaker.DEFAULT_SUCCESS_THRESHOLD,
) -> CircuitBreaker:
    """Get or create a circuit breaker by name.

    Settings only apply when the breaker is first created.

    Returns:
        CircuitBreaker instance
    """
    if name not in _circuit_breakers:
        _circuit_breakers[name] = CircuitBreaker(
            name=name,
            fail_max=fail_max,
            reset_timeout=reset_timeout,
            success_threshold=success_threshold,
        )
    return _circuit_breakers[name]


def reset_all_breakers() -> None:
    """Reset all circuit breakers and clear the registry.

    Primarily for testing purposes.
    """
    for breaker in _circuit_breakers.values():
        breaker.reset()
    _circuit_breakers.clear()
    logger.info("all_circuit_breakers_reset")


__all__ = [
    "CircuitBreaker",
    "CircuitBreakerError",
    "CircuitState",
    "get_circuit_breaker",
    "reset_all_breakers",
]
