"""Tests for transition publishing."""

import pytest

from work_history_verification.domain.work_history import (
    EntryKey,
    TransitionPublisher,
    WorkflowState,
    WorkHistoryEntry,
)


@pytest.fixture
def entry():
    return WorkHistoryEntry(candidate_id="cand-1", company_id=5, raw_company_name="Acme")


@pytest.mark.unit
class TestTransitionPublisher:
    def test_observer_receives_key_state_and_detail(self, entry):
        publisher = TransitionPublisher()
        received = []
        publisher.subscribe(lambda *args: received.append(args))

        event = publisher.transition(entry, WorkflowState.COMPANY_FAILED, "No match")

        assert entry.state is WorkflowState.COMPANY_FAILED
        assert received == [
            (EntryKey("cand-1", 5), WorkflowState.COMPANY_FAILED, "No match")
        ]
        assert event.previous is WorkflowState.UNVERIFIED

    def test_unsubscribe_stops_notifications(self, entry):
        publisher = TransitionPublisher()
        received = []
        unsubscribe = publisher.subscribe(lambda *args: received.append(args))

        unsubscribe()
        unsubscribe()
        publisher.transition(entry, WorkflowState.COMPANY_VERIFYING)

        assert received == []

    def test_failing_observer_does_not_block_others(self, entry):
        publisher = TransitionPublisher()
        received = []

        def broken(*args):
            raise RuntimeError("renderer crashed")

        publisher.subscribe(broken)
        publisher.subscribe(lambda *args: received.append(args[1]))

        publisher.transition(entry, WorkflowState.COMPANY_VERIFYING)

        assert received == [WorkflowState.COMPANY_VERIFYING]
        assert entry.state is WorkflowState.COMPANY_VERIFYING

    def test_entry_key_renders_as_candidate_and_company(self, entry):
        assert str(entry.key) == "cand-1:5"
