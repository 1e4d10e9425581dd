"""Discharge Transaction - the decision state machine.

This module turns an operator decision on a pending discharge into one atomic
multi-document write:

    1. Always: patient status becomes Discharged (approve) or Admitted
       (reject) and the pending requester field is removed.
    2. Approve: the ward/bed fields are removed and the open admission
       record, if any, is closed with the server timestamp and the actor.
    3. Reject: when a requester was recorded, one notification addressed
       to them carries the rejection reason.

Every write is guarded by a compare-and-swap precondition that the patient is
still PendingDischarge, so when two operators decide the same patient at
once exactly one wins and the other receives a ConflictError.

Failure Handling:
    - Local precondition failures (blank reason, outstanding balance) are
      refused before any store call
    - Lookup or commit failures abort the whole decision; nothing is written
"""

import logging
from dataclasses import dataclass, field
from typing import Optional

from pydantic import BaseModel, ConfigDict

from discharge_desk.domain.enums import DischargeAction, NotificationType, PatientStatus
from discharge_desk.domain.guardrails import OUTSTANDING_BALANCE_HINT, can_approve
from discharge_desk.domain.models import (
    NOTIFICATIONS_COLLECTION,
    PATIENTS_COLLECTION,
    AdmissionRecord,
    Notification,
    Patient,
    StaffIdentity,
    location_update,
    requester_update,
)
from discharge_desk.domain.ports import (
    ABSENT_OR_NULL,
    CommitError,
    ConflictError,
    DocumentStorePort,
    IneligibleError,
    Precondition,
    Result,
    ValidationError,
    WriteOperation,
    document_path,
)
from discharge_desk.domain.services.admission_locator import (
    AdmissionRecordLocator,
    close_admission_operation,
)

logger = logging.getLogger(__name__)

MISSING_REASON_MESSAGE = "Please provide a reason for rejection."
COMMIT_FAILED_MESSAGE = "Failed to update patient status."
CONFLICT_MESSAGE = "This discharge was already decided by another staff member."
REJECTION_TITLE = "Discharge Request Disapproved"


class DischargeDecision(BaseModel):
    """Operator intent for one pending patient."""

    model_config = ConfigDict(frozen=True)

    patient: Patient
    action: DischargeAction
    actor: StaffIdentity
    reason: Optional[str] = None

    @property
    def trimmed_reason(self) -> str:
        return (self.reason or "").strip()


class DecisionOutcome(BaseModel):
    """What a committed decision changed."""

    patient_id: str
    action: DischargeAction
    new_status: PatientStatus
    closed_admission_id: Optional[str] = None
    notification_id: Optional[str] = None
    operations_applied: int = 0

    @property
    def message(self) -> str:
        return f"Patient status updated to {self.new_status.value}."


@dataclass
class WriteSet:
    """The operations and guards submitted as one atomic write."""

    operations: list[WriteOperation] = field(default_factory=list)
    preconditions: list[Precondition] = field(default_factory=list)
    closed_admission_id: Optional[str] = None
    notification_id: Optional[str] = None


def validate_decision(decision: DischargeDecision) -> Optional[ValidationError]:
    """Return the local validation error for ``decision``, or None."""
    if decision.action is DischargeAction.REJECT and not decision.trimmed_reason:
        return ValidationError(MISSING_REASON_MESSAGE, details={"patient_id": decision.patient.id})
    if decision.action is DischargeAction.APPROVE and not can_approve(decision.patient):
        return IneligibleError(
            OUTSTANDING_BALANCE_HINT,
            details={"patient_id": decision.patient.id, "balance": decision.patient.financials.balance},
        )
    return None


def rejection_message(patient: Patient, reason: str) -> str:
    return (
        f"The discharge request for patient {patient.name} {patient.surname} "
        f"({patient.hospital_number}) was disapproved. Reason: {reason}"
    )


def build_write_set(
    decision: DischargeDecision,
    store: DocumentStorePort,
    open_admission: Optional[AdmissionRecord] = None,
) -> WriteSet:
    """Compose the atomic write for ``decision``.

    Parameters:
        decision: Validated operator decision
        store: Store supplying the timestamp/delete markers and new ids
        open_admission: Record to close on approve (ignored on reject)

    Returns:
        WriteSet: Operations plus compare-and-swap preconditions
    """
    patient = decision.patient
    patient_path = document_path(PATIENTS_COLLECTION, patient.id)
    write_set = WriteSet(preconditions=[
        Precondition(patient_path, "status", PatientStatus.PENDING_DISCHARGE.value),
    ])

    patient_update = {"status": decision.action.resulting_status.value}
    patient_update.update(requester_update(None))

    if decision.action is DischargeAction.APPROVE:
        patient_update.update(location_update(None))
        close_op = close_admission_operation(open_admission, decision.actor, store.server_timestamp())
        if close_op is not None:
            write_set.operations.append(close_op)
            write_set.preconditions.append(Precondition(close_op.path, "dischargeDate", ABSENT_OR_NULL))
            write_set.closed_admission_id = open_admission.id

    # The requester is read from the snapshot captured before the field is cleared
    if decision.action is DischargeAction.REJECT and patient.pending_requester_id:
        notification_id = store.new_document_id(NOTIFICATIONS_COLLECTION)
        notification = Notification(
            recipient_id=patient.pending_requester_id,
            sender_id=decision.actor.id,
            sender_name=decision.actor.display_name,
            title=REJECTION_TITLE,
            message=rejection_message(patient, decision.trimmed_reason),
            type=NotificationType.SYSTEM_ALERT,
            created_at=store.server_timestamp(),
            read=False,
        )
        write_set.operations.append(WriteOperation.set(
            document_path(NOTIFICATIONS_COLLECTION, notification_id),
            notification.to_document(),
        ))
        write_set.notification_id = notification_id

    write_set.operations.append(WriteOperation.update(patient_path, patient_update))
    return write_set


class DischargeService:
    """Applies discharge decisions against an injected document store.

    Example Usage:
        ```python
        service = DischargeService(store)
        result = service.decide(DischargeDecision(
            patient=patient,
            action=DischargeAction.REJECT,
            actor=staff,
            reason="Labs pending",
        ))
        if result.is_success():
            print(result.value.message)
        ```
    """

    def __init__(self, store: DocumentStorePort, locator: Optional[AdmissionRecordLocator] = None):
        self.store = store
        self.locator = locator or AdmissionRecordLocator(store)

    def decide(self, decision: DischargeDecision) -> Result[DecisionOutcome]:
        """Validate, compose and commit one decision.

        Returns:
            Result[DecisionOutcome]: Outcome on success; on failure the
                error_type is one of ValidationError, IneligibleError,
                FetchError, ConflictError or CommitError
        """
        patient_id = decision.patient.id
        validation_error = validate_decision(decision)
        if validation_error is not None:
            logger.info(f"Refused {decision.action.value} for patient_id {patient_id}: {validation_error}")
            return Result.failure_result(validation_error)

        open_admission = None
        if decision.action is DischargeAction.APPROVE:
            locate_result = self.locator.find_open_admission(patient_id)
            if not locate_result.is_success():
                return locate_result
            open_admission = locate_result.value

        write_set = build_write_set(decision, self.store, open_admission)
        commit_result = self.store.atomic_write(write_set.operations, write_set.preconditions)

        if not commit_result.is_success():
            if commit_result.error_type == "PreconditionFailedError":
                logger.warning(f"Decision conflict for patient_id {patient_id}: {commit_result.error}")
                return Result.failure_result(
                    ConflictError(CONFLICT_MESSAGE, details={"patient_id": patient_id}),
                    error_type="ConflictError",
                )
            logger.error(f"Error updating patient status for patient_id {patient_id}: {commit_result.error}")
            return Result.failure_result(
                CommitError(
                    COMMIT_FAILED_MESSAGE,
                    details={"patient_id": patient_id, "cause": commit_result.error_type},
                ),
                error_type="CommitError",
            )

        outcome = DecisionOutcome(
            patient_id=patient_id,
            action=decision.action,
            new_status=decision.action.resulting_status,
            closed_admission_id=write_set.closed_admission_id,
            notification_id=write_set.notification_id,
            operations_applied=commit_result.value,
        )
        logger.info(
            f"Committed {decision.action.value} for patient_id {patient_id}: "
            f"status={outcome.new_status.value}, closed_admission={outcome.closed_admission_id}, "
            f"notification={outcome.notification_id}"
        )
        return Result.success_result(outcome)
