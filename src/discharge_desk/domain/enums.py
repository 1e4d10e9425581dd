"""Enumerations shared by the discharge domain models."""

from enum import Enum


class PatientStatus(str, Enum):
    """Lifecycle state stored in the patient ``status`` field."""
    ADMITTED = "Admitted"
    PENDING_DISCHARGE = "PendingDischarge"
    DISCHARGED = "Discharged"


class DischargeAction(str, Enum):
    """Operator decision on a pending discharge."""
    APPROVE = "approve"
    REJECT = "reject"

    @property
    def resulting_status(self) -> PatientStatus:
        if self is DischargeAction.APPROVE:
            return PatientStatus.DISCHARGED
        return PatientStatus.ADMITTED


class NotificationType(str, Enum):
    SYSTEM_ALERT = "system_alert"


class NoticeLevel(str, Enum):
    """Severity of a transient operator notice."""
    SUCCESS = "success"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
