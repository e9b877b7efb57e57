"""
State transition publishing for work history entries.

Renderers (a UI, a CLI progress printer, a realtime channel) subscribe to
transitions instead of being called by the verifiers directly.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional

from work_history_verification.utils.logging import get_logger

from .models import EntryKey, WorkHistoryEntry, WorkflowState, utcnow
from .protocols import StateObserver

logger = get_logger(__name__)


@dataclass(frozen=True)
class StateTransition:
    """One published state change."""

    entry_key: EntryKey
    previous: WorkflowState
    state: WorkflowState
    detail: Optional[str] = None
    occurred_at: datetime = field(default_factory=utcnow)


class TransitionPublisher:
    """
    Fan-out of state transitions to subscribed observers.

    Observers are called synchronously, in subscription order, right after
    each change. An observer that raises is logged and skipped; it never
    interrupts a verification in progress.

    Example:
        >>> publisher = TransitionPublisher()
        >>> unsubscribe = publisher.subscribe(lambda key, state, detail: None)
        >>> unsubscribe()
    """

    def __init__(self) -> None:
        self._observers: List[StateObserver] = []

    def subscribe(self, observer: StateObserver):
        """Register an observer; returns a callable that unsubscribes it."""
        self._observers.append(observer)

        def _unsubscribe() -> None:
            if observer in self._observers:
                self._observers.remove(observer)

        return _unsubscribe

    def transition(
        self,
        entry: WorkHistoryEntry,
        new_state: WorkflowState,
        detail: Optional[str] = None,
    ) -> StateTransition:
        """Move ``entry`` to ``new_state`` and notify observers."""
        event = StateTransition(
            entry_key=entry.key,
            previous=entry.state,
            state=new_state,
            detail=detail,
        )
        entry.state = new_state

        logger.debug(
            "work_history.state_transition",
            entry_key=str(event.entry_key),
            previous=event.previous.value,
            state=event.state.value,
        )

        for observer in list(self._observers):
            try:
                observer(event.entry_key, new_state, detail)
            except Exception:
                logger.exception(
                    "work_history.observer_failed",
                    entry_key=str(event.entry_key),
                    state=new_state.value,
                )
        return event
