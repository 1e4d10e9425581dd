"""Unit tests for the eligibility rule and the submission guard."""

import threading

import pytest

from conftest import patient_document
from discharge_desk.domain.guardrails import (
    APPROVE_HINT,
    OUTSTANDING_BALANCE_HINT,
    SubmissionGuard,
    SubmissionInFlightError,
    approval_block_reason,
    approve_hint,
    can_approve,
)
from discharge_desk.domain.models import Patient
from discharge_desk.domain.ports import DocumentSnapshot


def make_patient(**overrides) -> Patient:
    return Patient.from_snapshot(DocumentSnapshot("p1", "patients/p1", patient_document(**overrides)))


class TestEligibilityRule:
    """Approve only when nothing is owed."""

    @pytest.mark.parametrize("balance,expected", [
        (0.0, True),
        (-10.0, True),
        (0.01, False),
        (250.0, False),
    ])
    def test_can_approve(self, balance, expected):
        assert can_approve(make_patient(balance=balance)) is expected

    def test_block_reason_and_hint(self):
        owing = make_patient(balance=40.0)
        settled = make_patient(balance=0.0)
        assert approval_block_reason(owing) == OUTSTANDING_BALANCE_HINT
        assert approval_block_reason(settled) is None
        assert approve_hint(owing) == OUTSTANDING_BALANCE_HINT
        assert approve_hint(settled) == APPROVE_HINT


class TestSubmissionGuard:
    """At most one decision per patient in flight."""

    def test_acquire_and_release(self):
        guard = SubmissionGuard()
        assert guard.try_acquire("p1")
        assert guard.is_in_flight("p1")
        assert not guard.try_acquire("p1")
        assert guard.try_acquire("p2")
        guard.release("p1")
        assert not guard.is_in_flight("p1")
        assert guard.try_acquire("p1")

    def test_hold_refuses_duplicate(self):
        guard = SubmissionGuard()
        with guard.hold("p1"):
            with pytest.raises(SubmissionInFlightError) as exc_info:
                with guard.hold("p1"):
                    pass
            assert exc_info.value.patient_id == "p1"
        assert not guard.is_in_flight("p1")

    def test_hold_releases_on_error(self):
        guard = SubmissionGuard()
        with pytest.raises(RuntimeError):
            with guard.hold("p1"):
                raise RuntimeError("boom")
        assert not guard.is_in_flight("p1")

    def test_only_one_thread_acquires(self):
        guard = SubmissionGuard()
        barrier = threading.Barrier(8)
        acquired = []

        def contender():
            barrier.wait()
            if guard.try_acquire("p1"):
                acquired.append(threading.get_ident())

        threads = [threading.Thread(target=contender) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert len(acquired) == 1
