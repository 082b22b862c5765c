"""Tests for FailureEscalationTracker."""

import pytest

from phasegate.domain.escalation import FailureEscalationTracker
from phasegate.domain.models import OperationOutcome, Phase

RETRY = OperationOutcome.RETRY
ESCALATE = OperationOutcome.ESCALATE


class TestRecordFailure:
    def test_retry_retry_escalate(self, session, tracker):
        outcomes = [tracker.record_failure(session, "build", "boom") for _ in range(3)]

        assert outcomes == [RETRY, RETRY, ESCALATE]

    def test_keeps_escalating_past_threshold(self, session, tracker):
        for _ in range(3):
            tracker.record_failure(session, "build")

        assert tracker.record_failure(session, "build") is ESCALATE
        assert session.failure("build").count == 4

    def test_records_count_and_last_error(self, session, tracker):
        tracker.record_failure(session, "build", "first")
        tracker.record_failure(session, "build", "second")

        record = session.failure("build")
        assert record.count == 2
        assert record.last_error == "second"
        assert not record.escalated

    def test_marks_escalated(self, session, tracker):
        for _ in range(3):
            tracker.record_failure(session, "build")

        assert tracker.is_escalated(session, "build")
        assert session.failure("build").escalated

    def test_operations_counted_independently(self, session, tracker):
        tracker.record_failure(session, "build")
        tracker.record_failure(session, "build")

        assert tracker.record_failure(session, "lint") is RETRY
        assert tracker.record_failure(session, "build") is ESCALATE

    def test_does_not_change_phase(self, session, tracker):
        for _ in range(5):
            tracker.record_failure(session, "build")

        assert session.phase is Phase.ANALYZE


class TestRecordSuccess:
    def test_success_after_escalate_resets(self, session, tracker):
        for _ in range(3):
            tracker.record_failure(session, "build")

        tracker.record_success(session, "build")

        assert session.failure("build").count == 0
        assert not tracker.is_escalated(session, "build")
        assert tracker.record_failure(session, "build") is RETRY

    def test_success_between_failures_breaks_the_streak(self, session, tracker):
        tracker.record_failure(session, "build")
        tracker.record_failure(session, "build")
        tracker.record_success(session, "build")

        assert tracker.record_failure(session, "build") is RETRY


class TestThreshold:
    def test_custom_threshold(self, session):
        tracker = FailureEscalationTracker(escalate_after=1)

        assert tracker.record_failure(session, "deploy") is ESCALATE

    @pytest.mark.parametrize("bad", [0, -1])
    def test_threshold_must_be_positive(self, bad):
        with pytest.raises(ValueError, match="escalate_after"):
            FailureEscalationTracker(escalate_after=bad)

    def test_default_threshold_is_three(self, tracker):
        assert tracker.escalate_after == 3
