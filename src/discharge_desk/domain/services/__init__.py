"""Domain Services.

This package contains the discharge workflow services. They depend only on
the DocumentStorePort, which is injected by the caller.
"""

from discharge_desk.domain.services.admission_locator import AdmissionRecordLocator, close_admission_operation
from discharge_desk.domain.services.discharge_transaction import (
    DecisionOutcome,
    DischargeDecision,
    DischargeService,
    build_write_set,
)
from discharge_desk.domain.services.patient_directory import PatientDirectory

__all__ = [
    'AdmissionRecordLocator',
    'close_admission_operation',
    'DecisionOutcome',
    'DischargeDecision',
    'DischargeService',
    'build_write_set',
    'PatientDirectory',
]
