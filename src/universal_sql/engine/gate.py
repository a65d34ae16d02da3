"""One-shot readiness gates.

A gate starts PENDING and moves exactly once to RESOLVED or REJECTED.
The first resolve/reject wins; later calls are ignored. Every waiter,
including one that arrives after the transition, observes the same value
or the same error.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from enum import StrEnum
from typing import Any

from universal_sql.core.exceptions import ReadinessTimeoutError

logger = logging.getLogger(__name__)


class GateState(StrEnum):
    """Lifecycle of a readiness gate."""

    PENDING = "pending"
    RESOLVED = "resolved"
    REJECTED = "rejected"


class ReadinessGate:
    """Reusable one-shot synchronization primitive.

    Attributes:
        name: Gate name used in logs and timeout errors.
    """

    def __init__(self, name: str) -> None:
        self.name = name
        self._state = GateState.PENDING
        self._value: Any = None
        self._error: BaseException | None = None
        self._event = asyncio.Event()

    @classmethod
    def create(
        cls, name: str
    ) -> tuple[Callable[..., bool], Callable[[BaseException], bool], ReadinessGate]:
        """Create a gate and hand out its producer functions.

        Returns:
            Tuple of (resolve, reject, gate).
        """
        gate = cls(name)
        return gate.resolve, gate.reject, gate

    @property
    def state(self) -> GateState:
        return self._state

    @property
    def done(self) -> bool:
        return self._state is not GateState.PENDING

    def resolve(self, value: Any = None) -> bool:
        """Resolve the gate.

        Returns:
            True if this call moved the gate out of PENDING.
        """
        if self._state is not GateState.PENDING:
            logger.debug(
                "Ignoring resolve on settled gate",
                extra={"gate": self.name, "state": self._state.value},
            )
            return False
        self._state = GateState.RESOLVED
        self._value = value
        self._event.set()
        return True

    def reject(self, error: BaseException) -> bool:
        """Reject the gate with an error every waiter will receive.

        Returns:
            True if this call moved the gate out of PENDING.
        """
        if self._state is not GateState.PENDING:
            logger.debug(
                "Ignoring reject on settled gate",
                extra={"gate": self.name, "state": self._state.value},
            )
            return False
        self._state = GateState.REJECTED
        self._error = error
        self._event.set()
        return True

    def _outcome(self) -> Any:
        if self._error is not None:
            raise self._error
        return self._value

    async def wait(self) -> Any:
        """Wait without a bound and return the resolved value."""
        await self._event.wait()
        return self._outcome()

    async def wait_with_timeout(self, timeout: float) -> Any:
        """Wait at most ``timeout`` seconds.

        The timeout only ends this wait; the gate keeps its state and
        whatever work will settle it keeps running.

        Raises:
            ReadinessTimeoutError: If the gate is still pending at the bound.
        """
        if self.done:
            return self._outcome()
        try:
            await asyncio.wait_for(self._event.wait(), timeout)
        except TimeoutError as e:
            raise ReadinessTimeoutError(gate=self.name, timeout=timeout) from e
        return self._outcome()

    def __repr__(self) -> str:
        return f"ReadinessGate(name={self.name!r}, state={self._state.value!r})"


async def wait_with_timeout(gate: ReadinessGate, timeout: float) -> Any:
    """Bounded wait on ``gate``."""
    return await gate.wait_with_timeout(timeout)
