"""Discharge Domain Models.

This module defines the canonical models for the entities the discharge
workflow reads and writes: patients, their admission history, staff members
and notifications.

Documents are stored with camelCase field names; the models use snake_case
attributes with camelCase aliases so that ``model_validate`` accepts raw
documents and the ``to_document`` helpers produce them.

Field presence:
    The store represents "not currently located anywhere" and "no pending
    discharge request" by the ABSENCE of fields, never by null or empty
    values. The models expose these as tagged optionals
    (``Patient.location``, ``Patient.pending_requester_id``) and translate
    ``None`` back into delete-field markers on write.

Architecture:
    - Pure domain models with zero infrastructure dependencies
    - Type safety enforced at runtime via Pydantic V2
"""

from datetime import datetime
from typing import Any, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from discharge_desk.domain.enums import NotificationType, PatientStatus
from discharge_desk.domain.ports import DELETE_FIELD, DocumentSnapshot, FieldSentinel

# Patient document fields that only exist while the patient occupies a bed
LOCATION_FIELDS = ("currentWardId", "currentWardName", "currentBedNumber")
REQUESTER_FIELD = "dischargeRequesterId"

PATIENTS_COLLECTION = "patients"
ADMISSION_HISTORY_COLLECTION = "admissionHistory"
NOTIFICATIONS_COLLECTION = "notifications"


class Financials(BaseModel):
    """Billing summary consumed (never computed) by the discharge gate.

    Parameters:
        total_bill: Total amount billed
        amount_paid: Amount paid so far
        balance: Outstanding balance; derived as total_bill - amount_paid
            when the document does not carry it
    """

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    total_bill: float = Field(0.0, alias="totalBill")
    amount_paid: float = Field(0.0, alias="amountPaid")
    balance: float = Field(0.0)

    @model_validator(mode="before")
    @classmethod
    def derive_balance(cls, data: Any) -> Any:
        if isinstance(data, dict) and "balance" not in data:
            total = data.get("totalBill", data.get("total_bill", 0.0)) or 0.0
            paid = data.get("amountPaid", data.get("amount_paid", 0.0)) or 0.0
            data = {**data, "balance": float(total) - float(paid)}
        return data

    def to_document(self) -> dict:
        return self.model_dump(by_alias=True)


class WardBed(BaseModel):
    """Current ward and bed of an admitted patient."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    ward_id: Optional[str] = Field(None, alias="currentWardId")
    ward_name: Optional[str] = Field(None, alias="currentWardName")
    bed_number: Optional[Union[str, int]] = Field(None, alias="currentBedNumber")

    def describe(self) -> str:
        ward = self.ward_name or self.ward_id or "Unknown ward"
        if self.bed_number is None:
            return ward
        return f"{ward} - Bed {self.bed_number}"


class Patient(BaseModel):
    """Patient record as seen by the discharge workflow.

    Parameters:
        id: Opaque document id
        name: Given name
        surname: Family name
        hospital_number: Human-readable hospital identifier
        status: Lifecycle state
        location: Ward/bed while admitted; None when not located anywhere
        financials: Billing summary; required, so a patient with unknown
            billing never passes the approval gate
        pending_requester_id: Staff id of whoever requested discharge; None
            when there is no pending request
    """

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    id: str
    name: str = ""
    surname: str = ""
    hospital_number: str = Field("", alias="hospitalNumber")
    status: PatientStatus
    location: Optional[WardBed] = None
    financials: Financials
    pending_requester_id: Optional[str] = Field(None, alias=REQUESTER_FIELD)

    @field_validator("pending_requester_id", mode="before")
    @classmethod
    def blank_requester_is_absent(cls, v: Any) -> Any:
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @property
    def full_name(self) -> str:
        return f"{self.name} {self.surname}".strip()

    @classmethod
    def from_snapshot(cls, snapshot: DocumentSnapshot) -> 'Patient':
        """Build a Patient from a stored document.

        The three flat location fields become a single WardBed, present only
        if at least one of them exists on the document.
        """
        data = dict(snapshot.data)
        location_data = {key: data.pop(key) for key in LOCATION_FIELDS if key in data}
        data.pop("id", None)
        return cls.model_validate({
            **data,
            "id": snapshot.id,
            "location": location_data or None,
        })

    def to_document(self) -> dict:
        """Serialize to the stored form, omitting absent optionals entirely."""
        document = {
            "name": self.name,
            "surname": self.surname,
            "hospitalNumber": self.hospital_number,
            "status": self.status.value,
            "financials": self.financials.to_document(),
        }
        if self.location is not None:
            document.update(self.location.model_dump(by_alias=True, exclude_none=True))
        if self.pending_requester_id is not None:
            document[REQUESTER_FIELD] = self.pending_requester_id
        return document


def location_update(location: Optional[WardBed]) -> dict:
    """Patient-document field changes for a location value.

    ``None`` maps to delete markers on every location field.
    """
    if location is None:
        return {key: DELETE_FIELD for key in LOCATION_FIELDS}
    values = location.model_dump(by_alias=True)
    return {key: (DELETE_FIELD if values.get(key) is None else values[key]) for key in LOCATION_FIELDS}


def requester_update(requester_id: Optional[str]) -> dict:
    """Patient-document field change for the pending requester."""
    return {REQUESTER_FIELD: DELETE_FIELD if requester_id is None else requester_id}


class AdmissionRecord(BaseModel):
    """One hospital stay, stored under ``patients/{id}/admissionHistory``."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    id: str
    path: str
    admission_date: datetime = Field(..., alias="admissionDate")
    discharge_date: Optional[datetime] = Field(None, alias="dischargeDate")
    discharged_by_id: Optional[str] = Field(None, alias="dischargedById")
    discharged_by_name: Optional[str] = Field(None, alias="dischargedByName")

    @property
    def is_open(self) -> bool:
        return self.discharge_date is None

    @classmethod
    def from_snapshot(cls, snapshot: DocumentSnapshot) -> 'AdmissionRecord':
        return cls.model_validate({**snapshot.data, "id": snapshot.id, "path": snapshot.path})


class StaffIdentity(BaseModel):
    """The staff member acting on a decision (identity retrieval is external)."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., min_length=1)
    name: str = ""
    surname: str = ""

    @property
    def display_name(self) -> str:
        return f"{self.name} {self.surname}"


class Notification(BaseModel):
    """Message addressed to a staff member, delivered by an external pipeline."""

    model_config = ConfigDict(populate_by_name=True)

    recipient_id: str = Field(..., alias="recipientId")
    sender_id: str = Field(..., alias="senderId")
    sender_name: str = Field(..., alias="senderName")
    title: str
    message: str
    type: NotificationType = NotificationType.SYSTEM_ALERT
    created_at: Union[datetime, FieldSentinel, None] = Field(None, alias="createdAt")
    read: bool = False

    def to_document(self) -> dict:
        return {
            "recipientId": self.recipient_id,
            "senderId": self.sender_id,
            "senderName": self.sender_name,
            "title": self.title,
            "message": self.message,
            "type": self.type.value,
            "createdAt": self.created_at,
            "read": self.read,
        }
