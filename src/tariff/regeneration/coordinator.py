"""Per-order serialization of document regeneration.

Each submission for an order takes a monotonically increasing ticket and
waits on that order's lock.  When it acquires the lock it builds only if
its ticket is still the newest; a build whose ticket is overtaken while it
runs is discarded instead of committed.  The last submission wins, not the
last completion.  Orders never contend with each other.
"""

from __future__ import annotations

import asyncio
import itertools
from collections.abc import Callable
from dataclasses import dataclass
from enum import StrEnum
from typing import Generic, TypeVar

import structlog

from tariff.domain.errors import ConcurrentEditConflict

logger = structlog.get_logger()

T = TypeVar("T")


class RegenerationStatus(StrEnum):
    """Outcome of one regeneration submission."""

    COMMITTED = "committed"
    SUPERSEDED = "superseded"


@dataclass(frozen=True)
class RegenerationResult(Generic[T]):
    """The result of :meth:`RegenerationCoordinator.submit`.

    ``value`` is the committed build output, or None when superseded.
    """

    order_id: str
    ticket: int
    status: RegenerationStatus
    value: T | None = None

    @property
    def committed(self) -> bool:
        return self.status is RegenerationStatus.COMMITTED


@dataclass
class _OrderSlot:
    lock: asyncio.Lock
    latest_ticket: int = 0
    pending: int = 0


class RegenerationCoordinator:
    """Serialize builds per order and drop stale results.

    Args:
        max_pending: Maximum number of submissions queued or running for a
            single order.  One more raises :class:`ConcurrentEditConflict`.
        retry_after: Seconds clients are told to wait after a conflict.
    """

    def __init__(self, max_pending: int = 3, retry_after: int = 5) -> None:
        if max_pending < 1:
            raise ValueError("max_pending must be at least 1")
        self._max_pending = max_pending
        self._retry_after = retry_after
        self._slots: dict[str, _OrderSlot] = {}
        self._tickets = itertools.count(1)

    def _slot(self, order_id: str) -> _OrderSlot:
        slot = self._slots.get(order_id)
        if slot is None:
            slot = _OrderSlot(lock=asyncio.Lock())
            self._slots[order_id] = slot
        return slot

    def pending_count(self, order_id: str) -> int:
        """Return how many submissions are queued or running for *order_id*."""
        slot = self._slots.get(order_id)
        return slot.pending if slot is not None else 0

    def is_current(self, order_id: str, ticket: int) -> bool:
        """Return True if *ticket* is still the newest submission for the order."""
        slot = self._slots.get(order_id)
        return slot is not None and slot.latest_ticket == ticket

    def check_capacity(self, order_id: str) -> None:
        """Raise :class:`ConcurrentEditConflict` if *order_id*'s queue is full.

        Callers check before persisting an edit so a rejected edit leaves no
        trace.  :meth:`submit` repeats the check.
        """
        slot = self._slots.get(order_id)
        if slot is not None and slot.pending >= self._max_pending:
            logger.warning(
                "Regeneration queue full",
                order_id=order_id,
                pending=slot.pending,
            )
            raise ConcurrentEditConflict(order_id, slot.pending, retry_after=self._retry_after)

    async def submit(
        self,
        order_id: str,
        build: Callable[[], T],
        commit: Callable[[T], bool | None],
    ) -> RegenerationResult[T]:
        """Run *build* in a worker thread and *commit* it if still current.

        Args:
            order_id: The order being regenerated.
            build: Synchronous, side-effect-free builder (assemble and render).
            commit: Synchronous writer that persists the build output.  Called
                under the order's lock, only for the newest ticket.  Returning
                ``False`` declines the output (the order no longer accepts
                documents) and the result is reported as superseded.

        Returns:
            A committed or superseded result.

        Raises:
            ConcurrentEditConflict: If the order's queue is full.
            Exception: Whatever *build* or *commit* raises; nothing is
                committed in that case.
        """
        self.check_capacity(order_id)
        slot = self._slot(order_id)
        ticket = slot.latest_ticket = next(self._tickets)
        slot.pending += 1
        try:
            async with slot.lock:
                if ticket != slot.latest_ticket:
                    logger.info("Regeneration skipped, newer edit queued", order_id=order_id, ticket=ticket)
                    return RegenerationResult(order_id, ticket, RegenerationStatus.SUPERSEDED)

                value = await asyncio.to_thread(build)

                if ticket != slot.latest_ticket:
                    logger.info(
                        "Regeneration discarded, superseded while building",
                        order_id=order_id,
                        ticket=ticket,
                    )
                    return RegenerationResult(order_id, ticket, RegenerationStatus.SUPERSEDED)

                if commit(value) is False:
                    logger.info("Regeneration declined at commit", order_id=order_id, ticket=ticket)
                    return RegenerationResult(order_id, ticket, RegenerationStatus.SUPERSEDED)
                return RegenerationResult(order_id, ticket, RegenerationStatus.COMMITTED, value)
        finally:
            self._release(order_id, slot)

    async def run_exclusive(self, order_id: str, action: Callable[[], T]) -> T:
        """Run *action* under the order's lock after invalidating queued builds.

        Used by status changes (renewal, expiry) that must not interleave
        with a regeneration.  Any build queued or running for the order is
        discarded rather than committed.  Never rejected for capacity.
        """
        slot = self._slot(order_id)
        slot.latest_ticket = next(self._tickets)
        slot.pending += 1
        try:
            async with slot.lock:
                return action()
        finally:
            self._release(order_id, slot)

    def _release(self, order_id: str, slot: _OrderSlot) -> None:
        slot.pending -= 1
        if slot.pending == 0 and not slot.lock.locked() and self._slots.get(order_id) is slot:
            del self._slots[order_id]
