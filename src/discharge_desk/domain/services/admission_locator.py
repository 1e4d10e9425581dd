"""Admission Record Locator.

Finds the open (undischarged) admission record that an approval closes out.
"""

import logging
from typing import Optional

from pydantic import ValidationError as PydanticValidationError

from discharge_desk.domain.models import (
    ADMISSION_HISTORY_COLLECTION,
    PATIENTS_COLLECTION,
    AdmissionRecord,
    StaffIdentity,
)
from discharge_desk.domain.ports import (
    DocumentStorePort,
    FetchError,
    Result,
    WriteOperation,
    document_path,
)

logger = logging.getLogger(__name__)


class AdmissionRecordLocator:
    """Looks up the latest admission record of a patient.

    Only the record with the most recent admissionDate is considered. If it
    is already closed, nothing is returned: a second approval must never
    overwrite an existing dischargeDate. If the patient has no admission
    history at all, nothing is returned either and the approval proceeds
    without closing a record.

    Parameters:
        store: Injected document store
    """

    def __init__(self, store: DocumentStorePort):
        self.store = store

    def find_open_admission(self, patient_id: str) -> Result[Optional[AdmissionRecord]]:
        """Return the open admission record to close, or None.

        Parameters:
            patient_id: Patient document id

        Returns:
            Result[Optional[AdmissionRecord]]: The open record, None when there
                is nothing to close, or a FetchError failure
        """
        collection = document_path(PATIENTS_COLLECTION, patient_id, ADMISSION_HISTORY_COLLECTION)
        query_result = self.store.query_ordered_limit(collection, "admissionDate", descending=True, limit=1)
        if not query_result.is_success():
            logger.error(f"Error locating admission record for patient_id {patient_id}: {query_result.error}")
            return Result.failure_result(
                FetchError(
                    "Failed to locate admission record.",
                    details={"patient_id": patient_id, "cause": query_result.error_type},
                ),
                error_type="FetchError",
            )

        if not query_result.value:
            logger.warning(f"No admission history for patient_id {patient_id}; discharging without closing a record")
            return Result.success_result(None)

        try:
            latest = AdmissionRecord.from_snapshot(query_result.value[0])
        except PydanticValidationError as e:
            return Result.failure_result(
                FetchError(
                    "Latest admission record is malformed.",
                    details={"patient_id": patient_id, "errors": e.error_count()},
                ),
                error_type="FetchError",
            )

        if not latest.is_open:
            logger.info(f"Latest admission {latest.id} for patient_id {patient_id} is already closed")
            return Result.success_result(None)
        return Result.success_result(latest)


def close_admission_operation(
    record: Optional[AdmissionRecord],
    actor: StaffIdentity,
    discharge_time,
) -> Optional[WriteOperation]:
    """Build the write that closes ``record``, or None if there is nothing to close.

    Parameters:
        record: Admission record from the locator (may be None or already closed)
        actor: Staff member approving the discharge
        discharge_time: Value for dischargeDate, normally the server timestamp marker
    """
    if record is None or not record.is_open:
        return None
    return WriteOperation.update(record.path, {
        "dischargeDate": discharge_time,
        "dischargedById": actor.id,
        "dischargedByName": actor.display_name,
    })
