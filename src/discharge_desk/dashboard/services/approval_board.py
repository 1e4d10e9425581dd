"""Discharge approval board - decision UI orchestration.

The board holds the operator-facing state of the discharge approval screen
and drives the domain services:

    idle -> modal_open(action) -> confirmed -> idle (list refreshed)
                               -> cancelled -> idle

Rendering is left to the front ends (HTTP API, CLI); the board only exposes
cards, the open modal and a queue of transient notices.
"""

import logging
from enum import Enum
from typing import Optional

from discharge_desk.dashboard.models.discharge import Notice, PatientCard
from discharge_desk.domain.enums import DischargeAction, NoticeLevel
from discharge_desk.domain.guardrails import SubmissionGuard, SubmissionInFlightError, can_approve
from discharge_desk.domain.models import Patient, StaffIdentity
from discharge_desk.domain.ports import DocumentStorePort, Result, ValidationError
from discharge_desk.domain.services import DecisionOutcome, DischargeDecision, DischargeService, PatientDirectory
from discharge_desk.domain.services.discharge_transaction import COMMIT_FAILED_MESSAGE

logger = logging.getLogger(__name__)

NO_ACTOR_MESSAGE = "Sign in to record a discharge decision."


class CardState(str, Enum):
    IDLE = "idle"
    MODAL_OPEN = "modal_open"
    SUBMITTING = "submitting"


class DischargeApprovalBoard:
    """Operator session over the pending-discharge list.

    Parameters:
        store: Injected document store
        actor: Signed-in staff member (retrieved by an external auth layer)
        guard: Shared in-flight guard; one per process so that concurrent
            sessions cannot submit two decisions for the same patient

    Example Usage:
        ```python
        board = DischargeApprovalBoard(store, actor=staff)
        board.load()
        board.open_modal("p1", DischargeAction.REJECT)
        board.set_reason("Labs pending")
        result = board.confirm()
        for notice in board.drain_notices():
            print(notice.level, notice.message)
        ```
    """

    def __init__(
        self,
        store: DocumentStorePort,
        actor: Optional[StaffIdentity] = None,
        guard: Optional[SubmissionGuard] = None,
    ):
        self.directory = PatientDirectory(store)
        self.service = DischargeService(store)
        self.actor = actor
        self.guard = guard or SubmissionGuard()

        self.patients: list[Patient] = []
        self.loading = False
        self.selected_patient: Optional[Patient] = None
        self.modal_action: Optional[DischargeAction] = None
        self.rejection_reason = ""
        self.notices: list[Notice] = []

    # ------------------------------------------------------------------
    # List
    # ------------------------------------------------------------------

    def load(self) -> list[Patient]:
        """(Re)fetch pending patients; on failure the list is left empty."""
        self.loading = True
        try:
            result = self.directory.fetch_pending_discharges()
            if result.is_success():
                self.patients = result.value
            else:
                self.patients = []
                self.notify(result.error, NoticeLevel.ERROR)
        finally:
            self.loading = False
        return self.patients

    def find_patient(self, patient_id: str) -> Optional[Patient]:
        return next((p for p in self.patients if p.id == patient_id), None)

    def card_state(self, patient_id: str) -> CardState:
        if self.guard.is_in_flight(patient_id):
            return CardState.SUBMITTING
        if self.selected_patient is not None and self.selected_patient.id == patient_id:
            return CardState.MODAL_OPEN
        return CardState.IDLE

    def cards(self) -> list[PatientCard]:
        return [PatientCard.from_patient(p, self.card_state(p.id).value) for p in self.patients]

    # ------------------------------------------------------------------
    # Modal
    # ------------------------------------------------------------------

    @property
    def is_modal_open(self) -> bool:
        return self.selected_patient is not None and self.modal_action is not None

    @property
    def can_confirm(self) -> bool:
        """Confirm stays disabled while this patient's decision is in flight."""
        return self.is_modal_open and not self.guard.is_in_flight(self.selected_patient.id)

    def open_modal(self, patient_id: str, action: DischargeAction) -> bool:
        """Open the confirmation modal for a card.

        Returns False, leaving state untouched, when the patient is not on
        the list or the approve control is disabled for them.
        """
        patient = self.find_patient(patient_id)
        if patient is None:
            return False
        if action is DischargeAction.APPROVE and not can_approve(patient):
            return False

        self.rejection_reason = ""
        self.selected_patient = patient
        self.modal_action = action
        return True

    def close_modal(self) -> None:
        """Cancel: discard transient state without touching the store."""
        self.selected_patient = None
        self.modal_action = None
        self.rejection_reason = ""

    def set_reason(self, reason: str) -> None:
        self.rejection_reason = reason

    # ------------------------------------------------------------------
    # Confirm
    # ------------------------------------------------------------------

    def confirm(self) -> Result[DecisionOutcome]:
        """Submit the open modal's decision.

        On success the list is refreshed and the modal closed. Validation
        failures keep the modal open so the operator can correct the input.
        """
        if not self.is_modal_open:
            return Result.failure_result(ValidationError("No discharge decision is open."))
        if self.actor is None:
            self.notify(NO_ACTOR_MESSAGE, NoticeLevel.WARNING)
            return Result.failure_result(ValidationError(NO_ACTOR_MESSAGE))

        decision = DischargeDecision(
            patient=self.selected_patient,
            action=self.modal_action,
            actor=self.actor,
            reason=self.rejection_reason,
        )

        try:
            with self.guard.hold(decision.patient.id):
                result = self.service.decide(decision)
        except SubmissionInFlightError as e:
            self.notify(str(e), NoticeLevel.WARNING)
            return Result.failure_result(e)

        if result.is_success():
            self.notify(result.value.message, NoticeLevel.SUCCESS)
            self.load()
            self.close_modal()
        elif result.error_type in ("ValidationError", "IneligibleError"):
            self.notify(result.error, NoticeLevel.WARNING)
        elif result.error_type == "ConflictError":
            self.notify(result.error, NoticeLevel.ERROR)
            self.load()
            self.close_modal()
        else:
            self.notify(COMMIT_FAILED_MESSAGE, NoticeLevel.ERROR)
        return result

    # ------------------------------------------------------------------
    # Notices
    # ------------------------------------------------------------------

    def notify(self, message: str, level: NoticeLevel) -> None:
        logger.debug(f"Notice [{level.value}]: {message}")
        self.notices.append(Notice(message=message, level=level))

    def drain_notices(self) -> list[Notice]:
        notices, self.notices = self.notices, []
        return notices
