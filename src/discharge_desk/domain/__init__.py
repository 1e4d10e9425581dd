"""Domain layer for Discharge Desk.

This module contains the discharge workflow core: models, ports, guardrails
and services. All domain models are pure Python with no external
dependencies beyond Pydantic.
"""

from .enums import DischargeAction, PatientStatus
from .models import (
    AdmissionRecord,
    Financials,
    Notification,
    Patient,
    StaffIdentity,
    WardBed,
)

__all__ = [
    "DischargeAction",
    "PatientStatus",
    "AdmissionRecord",
    "Financials",
    "Notification",
    "Patient",
    "StaffIdentity",
    "WardBed",
]
