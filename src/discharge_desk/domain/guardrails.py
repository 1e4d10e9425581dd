"""Domain Guardrails - Discharge Eligibility and Submission Guard.

This module holds the business gates that sit in front of the discharge
transaction:

    - The eligibility rule: a patient may be approved for discharge only when
      no debt is owed (balance zero or negative). Rejection is never gated.
    - The submission guard: at most one decision per patient may be in flight
      at a time, so double-clicks and duplicate requests are refused instead
      of racing each other to the store.

Architecture:
    - Pure domain logic with no infrastructure dependencies
    - Thread-safe guard for concurrent API requests
"""

import logging
from contextlib import contextmanager
from threading import Lock
from typing import Iterator, Optional

from discharge_desk.domain.models import Patient

logger = logging.getLogger(__name__)

OUTSTANDING_BALANCE_HINT = "Cannot approve with an outstanding balance"
APPROVE_HINT = "Approve discharge"


def can_approve(patient: Patient) -> bool:
    """Return True when the patient owes nothing and may be discharged."""
    return patient.financials.balance <= 0


def approval_block_reason(patient: Patient) -> Optional[str]:
    """Explain why approval is unavailable, or None when it is available."""
    if can_approve(patient):
        return None
    return OUTSTANDING_BALANCE_HINT


def approve_hint(patient: Patient) -> str:
    """Tooltip text for the approve control."""
    return approval_block_reason(patient) or APPROVE_HINT


class SubmissionInFlightError(Exception):
    """Raised when a decision for the same patient is already being submitted.

    Attributes:
        patient_id: The patient whose decision is in flight
    """

    def __init__(self, patient_id: str):
        super().__init__("A decision for this patient is already being submitted.")
        self.patient_id = patient_id


class SubmissionGuard:
    """Per-patient in-flight flag.

    Example Usage:
        ```python
        guard = SubmissionGuard()
        try:
            with guard.hold(patient.id):
                service.decide(decision)
        except SubmissionInFlightError:
            ...  # confirm control stays disabled
        ```
    """

    def __init__(self):
        self._lock = Lock()
        self._in_flight: set[str] = set()

    def try_acquire(self, patient_id: str) -> bool:
        with self._lock:
            if patient_id in self._in_flight:
                return False
            self._in_flight.add(patient_id)
            return True

    def release(self, patient_id: str) -> None:
        with self._lock:
            self._in_flight.discard(patient_id)

    def is_in_flight(self, patient_id: str) -> bool:
        with self._lock:
            return patient_id in self._in_flight

    @contextmanager
    def hold(self, patient_id: str) -> Iterator[None]:
        if not self.try_acquire(patient_id):
            logger.warning(f"Refused duplicate submission for patient_id: {patient_id}")
            raise SubmissionInFlightError(patient_id)
        try:
            yield
        finally:
            self.release(patient_id)
