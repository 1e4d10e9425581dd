"""Discharge approval endpoints for dashboard API."""

import logging

from fastapi import APIRouter, HTTPException

from discharge_desk.dashboard.api.dependencies import GuardDep, StaffDep, StoreDep
from discharge_desk.dashboard.models.discharge import DecisionRequest, DecisionResponse, PatientCard
from discharge_desk.dashboard.services.approval_board import DischargeApprovalBoard
from discharge_desk.domain.guardrails import OUTSTANDING_BALANCE_HINT

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/discharges", tags=["discharges"])

# Failure error_type -> HTTP status
STATUS_BY_ERROR_TYPE = {
    "ValidationError": 400,
    "IneligibleError": 400,
    "SubmissionInFlightError": 409,
    "ConflictError": 409,
    "FetchError": 503,
    "CommitError": 503,
}


@router.get("/pending", response_model=list[PatientCard])
def list_pending_discharges(store: StoreDep, guard: GuardDep) -> list[PatientCard]:
    """List patients waiting for a discharge decision.

    Each card carries ``approve_enabled`` and ``approve_hint`` so clients can
    disable the approve control while a balance is outstanding.
    """
    board = DischargeApprovalBoard(store, guard=guard)
    board.load()
    notices = board.drain_notices()
    if notices:
        raise HTTPException(status_code=503, detail=notices[0].message)
    return board.cards()


@router.post("/{patient_id}/decision", response_model=DecisionResponse)
def decide_discharge(
    patient_id: str,
    request: DecisionRequest,
    store: StoreDep,
    guard: GuardDep,
    staff: StaffDep,
) -> DecisionResponse:
    """Approve or reject a pending discharge.

    The decision is applied as one atomic write. A second decision on the
    same patient, concurrent or later, is answered with 409.
    """
    board = DischargeApprovalBoard(store, actor=staff, guard=guard)
    board.load()
    load_notices = board.drain_notices()
    if load_notices:
        raise HTTPException(status_code=503, detail=load_notices[0].message)

    patient = board.find_patient(patient_id)
    if patient is None:
        raise HTTPException(status_code=404, detail="Patient is not pending discharge")

    if not board.open_modal(patient_id, request.action):
        raise HTTPException(status_code=400, detail=OUTSTANDING_BALANCE_HINT)
    board.set_reason(request.reason or "")

    result = board.confirm()
    notices = board.drain_notices()
    if not result.is_success():
        status_code = STATUS_BY_ERROR_TYPE.get(result.error_type, 503)
        detail = notices[-1].message if notices else result.error
        logger.info(f"Decision on patient_id {patient_id} refused with {status_code}: {result.error_type}")
        raise HTTPException(status_code=status_code, detail=detail)

    outcome = result.value
    return DecisionResponse(
        patient_id=outcome.patient_id,
        action=outcome.action,
        new_status=outcome.new_status,
        message=outcome.message,
        closed_admission_id=outcome.closed_admission_id,
        notification_id=outcome.notification_id,
    )
