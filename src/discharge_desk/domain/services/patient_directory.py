"""Patient Directory Query.

Reads the patients currently waiting for a discharge decision. The query is
a plain filtered read and safe to re-run; the decision board calls it on load
and after every decision.
"""

import logging
from typing import Optional

from pydantic import ValidationError as PydanticValidationError

from discharge_desk.domain.enums import PatientStatus
from discharge_desk.domain.models import PATIENTS_COLLECTION, Patient
from discharge_desk.domain.ports import DocumentStorePort, FetchError, Result

logger = logging.getLogger(__name__)


class PatientDirectory:
    """Query service over the ``patients`` collection.

    Parameters:
        store: Injected document store
    """

    def __init__(self, store: DocumentStorePort):
        self.store = store

    def fetch_pending_discharges(self) -> Result[list[Patient]]:
        """Return every patient whose status is PendingDischarge.

        Returns:
            Result[list[Patient]]: Patients in store-native order, or a
                FetchError failure when the store cannot be read

        Note:
            Documents that do not validate as Patient are skipped and logged
            so one malformed record does not hide the rest of the ward.
        """
        query_result = self.store.query_by_field(
            PATIENTS_COLLECTION, "status", PatientStatus.PENDING_DISCHARGE.value
        )
        if not query_result.is_success():
            logger.error(f"Error fetching patients for discharge: {query_result.error}")
            return Result.failure_result(
                FetchError(
                    "Failed to fetch patient list.",
                    details={"operation": "fetch_pending_discharges", "cause": query_result.error_type},
                ),
                error_type="FetchError",
            )

        patients = []
        for snapshot in query_result.value:
            try:
                patients.append(Patient.from_snapshot(snapshot))
            except PydanticValidationError as e:
                logger.warning(
                    f"Skipping malformed patient document {snapshot.id}: "
                    f"{e.error_count()} validation error(s)"
                )
        logger.debug(f"Fetched {len(patients)} patients pending discharge")
        return Result.success_result(patients)

    def get_pending_patient(self, patient_id: str) -> Result[Optional[Patient]]:
        """Resolve one pending patient by id (None if not pending)."""
        result = self.fetch_pending_discharges()
        if not result.is_success():
            return result
        for patient in result.value:
            if patient.id == patient_id:
                return Result.success_result(patient)
        return Result.success_result(None)
