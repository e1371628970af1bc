"""
Circuit breaker for the AI collaborator endpoints.

The AI calls are best-effort: when the endpoint keeps failing we stop
calling it for a while and hand back the safe default immediately.

States:
- CLOSED: calls pass through.
- OPEN: calls are rejected until recovery_timeout has elapsed.
- HALF_OPEN: one trial call decides whether to close or reopen.

Usage:
    breaker = CircuitBreaker(name="ai.breakdown")
    async with breaker:
        response = await client.post(...)
"""

from __future__ import annotations

import asyncio
import logging
import time
from enum import StrEnum
from typing import Any

from metaplan.lib.exceptions import ExternalServiceError

logger = logging.getLogger(__name__)


class CircuitState(StrEnum):
    """Possible states for a circuit breaker."""

    CLOSED = "closed"
    OPEN = "open"
    HALF_OPEN = "half_open"


class CircuitOpenError(ExternalServiceError):
    """Raised when a call is rejected because the circuit is open."""

    def __init__(self, name: str, retry_after: float) -> None:
        self.name = name
        self.retry_after = retry_after
        super().__init__(f"Circuit '{name}' is open. Retry after {retry_after:.1f}s.")


class CircuitBreaker:
    """
    Tracks consecutive failures of one endpoint.

    Args:
        name: Endpoint name used in log lines.
        failure_threshold: Consecutive failures before opening.
        recovery_timeout: Seconds to stay OPEN before allowing a trial call.
    """

    def __init__(
        self,
        name: str,
        failure_threshold: int = 3,
        recovery_timeout: float = 60.0,
    ) -> None:
        self.name = name
        self.failure_threshold = failure_threshold
        self.recovery_timeout = recovery_timeout

        self._state = CircuitState.CLOSED
        self._failure_count = 0
        self._trial_in_flight = False
        self._opened_at = 0.0
        self._lock = asyncio.Lock()

    @property
    def state(self) -> CircuitState:
        return self._state

    @property
    def failure_count(self) -> int:
        return self._failure_count

    def retry_after_seconds(self) -> float:
        """Seconds until an OPEN circuit will accept a trial call."""
        if self._state != CircuitState.OPEN:
            return 0.0
        return max(0.0, self.recovery_timeout - (time.monotonic() - self._opened_at))

    def _transition_to(self, new_state: CircuitState) -> None:
        if self._state == new_state:
            return
        logger.info(
            "Circuit '%s': %s -> %s", self.name, self._state.value, new_state.value
        )
        self._state = new_state
        if new_state == CircuitState.OPEN:
            self._opened_at = time.monotonic()

    async def allow_request(self) -> bool:
        """Return True if a call may go out now."""
        async with self._lock:
            if self._state == CircuitState.CLOSED:
                return True
            if self._state == CircuitState.OPEN:
                if self.retry_after_seconds() > 0:
                    return False
                self._transition_to(CircuitState.HALF_OPEN)
            if self._trial_in_flight:
                return False
            self._trial_in_flight = True
            return True

    async def record_success(self) -> None:
        async with self._lock:
            self._failure_count = 0
            self._trial_in_flight = False
            self._transition_to(CircuitState.CLOSED)

    async def record_failure(self) -> None:
        async with self._lock:
            self._failure_count += 1
            self._trial_in_flight = False
            if self._state == CircuitState.HALF_OPEN:
                logger.warning("Circuit '%s' trial call failed, reopening", self.name)
                self._transition_to(CircuitState.OPEN)
            elif self._failure_count >= self.failure_threshold:
                logger.warning(
                    "Circuit '%s' reached %d consecutive failures, opening",
                    self.name,
                    self._failure_count,
                )
                self._transition_to(CircuitState.OPEN)

    async def __aenter__(self) -> CircuitBreaker:
        if not await self.allow_request():
            raise CircuitOpenError(self.name, self.retry_after_seconds())
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: Any,
    ) -> None:
        if exc_type is None:
            await self.record_success()
        else:
            await self.record_failure()
