"""OrderLifecycle class with trigger, history, and valid_events."""

from __future__ import annotations

from tariff.domain.errors import InvalidTransitionError
from tariff.domain.types import OrderStatus
from tariff.lifecycle.transitions import TERMINAL_STATES, TRANSITIONS

History = list[tuple[OrderStatus, str, OrderStatus]]


class OrderLifecycle:
    """Finite state machine governing a tariff order's status.

    Usage::

        lc = OrderLifecycle()
        lc.trigger("document_generated")   # -> COMPLETED
        lc.trigger("document_generated")   # -> COMPLETED (rate edit)
        lc.trigger("expire")               # -> EXPIRED (terminal)
    """

    def __init__(self, initial_state: OrderStatus = OrderStatus.PENDING) -> None:
        self._state: OrderStatus = initial_state
        self._history: History = []

    @classmethod
    def from_snapshot(
        cls,
        state: OrderStatus,
        history: History | tuple[tuple[OrderStatus, str, OrderStatus], ...],
    ) -> OrderLifecycle:
        """Reconstruct a lifecycle from a persisted order without replaying events.

        Args:
            state: The status to restore.
            history: The ``(from, event, to)`` transitions in chronological order.

        Returns:
            An ``OrderLifecycle`` positioned at *state*.
        """
        instance = cls(initial_state=state)
        instance._history = list(history)
        return instance

    @property
    def state(self) -> OrderStatus:
        """Return the current order status."""
        return self._state

    @property
    def is_terminal(self) -> bool:
        """Return True if the order is expired."""
        return self._state in TERMINAL_STATES

    @property
    def history(self) -> History:
        """Return a copy of the transition history."""
        return list(self._history)

    def trigger(self, event: str) -> OrderStatus:
        """Apply an event to the current status and transition.

        Args:
            event: The event string (e.g. ``"expire"``).

        Returns:
            The new status after the transition.

        Raises:
            InvalidTransitionError: If the transition is not allowed from
                the current status, or if the order is expired.
        """
        key = (self._state, event)
        if self.is_terminal or key not in TRANSITIONS:
            raise InvalidTransitionError(self._state, event)

        old_state = self._state
        new_state = TRANSITIONS[key]
        self._history.append((old_state, event, new_state))
        self._state = new_state
        return new_state

    def get_valid_events(self) -> list[str]:
        """Return a sorted list of events valid from the current status."""
        if self.is_terminal:
            return []
        return sorted(event for state, event in TRANSITIONS if state == self._state)
