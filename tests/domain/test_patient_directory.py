"""Unit tests for the pending-discharge query."""

from unittest.mock import Mock

from conftest import patient_document
from discharge_desk.domain.enums import PatientStatus
from discharge_desk.domain.ports import DocumentStorePort, Result, StoreError, WriteOperation
from discharge_desk.domain.services import PatientDirectory


class TestFetchPendingDischarges:

    def test_returns_only_pending_patients(self, store):
        result = PatientDirectory(store).fetch_pending_discharges()

        assert result.is_success()
        assert sorted(p.id for p in result.value) == ["p1", "p2", "p3"]
        assert all(p.status is PatientStatus.PENDING_DISCHARGE for p in result.value)

    def test_idempotent(self, store):
        directory = PatientDirectory(store)
        first = directory.fetch_pending_discharges().value
        second = directory.fetch_pending_discharges().value
        assert first == second

    def test_store_failure_is_fetch_error(self):
        mock_store = Mock(spec=DocumentStorePort)
        mock_store.query_by_field.return_value = Result.failure_result(
            StoreError("connection lost", operation="query_by_field")
        )

        result = PatientDirectory(mock_store).fetch_pending_discharges()

        assert result.is_failure()
        assert result.error_type == "FetchError"
        assert result.error == "Failed to fetch patient list."

    def test_malformed_document_skipped(self, store):
        store.atomic_write([WriteOperation.set("patients/bad", {"status": "PendingDischarge", "financials": "n/a"})])

        result = PatientDirectory(store).fetch_pending_discharges()

        assert result.is_success()
        assert "bad" not in [p.id for p in result.value]
        assert len(result.value) == 3

    def test_missing_financials_skipped(self, store):
        # Unknown billing must never look like a settled account
        document = patient_document(hospital_number="H-009")
        del document["financials"]
        store.atomic_write([WriteOperation.set("patients/p9", document)])

        pending = PatientDirectory(store).fetch_pending_discharges().value

        assert "p9" not in [p.id for p in pending]
        assert PatientDirectory(store).get_pending_patient("p9").value is None


class TestGetPendingPatient:

    def test_found(self, store):
        result = PatientDirectory(store).get_pending_patient("p2")
        assert result.is_success()
        assert result.value.hospital_number == "H-002"

    def test_not_pending(self, store):
        result = PatientDirectory(store).get_pending_patient("p4")
        assert result.is_success()
        assert result.value is None
