"""Discharge approval models for dashboard API."""

from typing import Optional

from pydantic import BaseModel, Field

from discharge_desk.domain.enums import DischargeAction, NoticeLevel, PatientStatus
from discharge_desk.domain.guardrails import approve_hint, can_approve
from discharge_desk.domain.models import Patient


class FinancialsView(BaseModel):
    total_bill: float
    amount_paid: float
    balance: float
    has_balance: bool = Field(..., description="True when money is still owed")


class PatientCard(BaseModel):
    """One pending-discharge card as rendered by the approval board.

    Attributes:
        approve_enabled: Whether the approve control is enabled
        approve_hint: Tooltip explaining the approve control state
        location: "Ward - Bed N" while the patient occupies a bed
    """
    id: str
    name: str
    surname: str
    hospital_number: str
    status: PatientStatus
    financials: FinancialsView
    location: Optional[str] = None
    approve_enabled: bool
    approve_hint: str
    card_state: str = "idle"

    @classmethod
    def from_patient(cls, patient: Patient, card_state: str = "idle") -> 'PatientCard':
        return cls(
            id=patient.id,
            name=patient.name,
            surname=patient.surname,
            hospital_number=patient.hospital_number,
            status=patient.status,
            financials=FinancialsView(
                total_bill=patient.financials.total_bill,
                amount_paid=patient.financials.amount_paid,
                balance=patient.financials.balance,
                has_balance=not can_approve(patient),
            ),
            location=patient.location.describe() if patient.location else None,
            approve_enabled=can_approve(patient),
            approve_hint=approve_hint(patient),
            card_state=card_state,
        )


class DecisionRequest(BaseModel):
    action: DischargeAction
    reason: Optional[str] = Field(None, description="Required for reject, ignored for approve")


class DecisionResponse(BaseModel):
    patient_id: str
    action: DischargeAction
    new_status: PatientStatus
    message: str
    closed_admission_id: Optional[str] = None
    notification_id: Optional[str] = None


class Notice(BaseModel):
    """Transient operator notice (toast)."""
    message: str
    level: NoticeLevel
