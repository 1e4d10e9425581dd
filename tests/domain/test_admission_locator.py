"""Unit tests for the open admission record lookup and its closing write."""

from datetime import datetime, timezone
from unittest.mock import Mock

from discharge_desk.domain.models import AdmissionRecord, StaffIdentity
from discharge_desk.domain.ports import (
    SERVER_TIMESTAMP,
    DocumentStorePort,
    Result,
    StoreError,
    WriteKind,
    WriteOperation,
)
from discharge_desk.domain.services import AdmissionRecordLocator, close_admission_operation


class TestFindOpenAdmission:

    def test_latest_open_record(self, store):
        result = AdmissionRecordLocator(store).find_open_admission("p1")

        assert result.is_success()
        assert result.value.id == "a1"
        assert result.value.path == "patients/p1/admissionHistory/a1"

    def test_no_history(self, store):
        result = AdmissionRecordLocator(store).find_open_admission("p3")

        assert result.is_success()
        assert result.value is None

    def test_latest_record_closed(self, store):
        store.atomic_write([WriteOperation.update(
            "patients/p1/admissionHistory/a1",
            {"dischargeDate": datetime(2024, 5, 30, tzinfo=timezone.utc)},
        )])

        result = AdmissionRecordLocator(store).find_open_admission("p1")

        assert result.is_success()
        assert result.value is None

    def test_null_discharge_date_is_open(self, store):
        store.atomic_write([WriteOperation.update("patients/p1/admissionHistory/a1", {"dischargeDate": None})])

        result = AdmissionRecordLocator(store).find_open_admission("p1")

        assert result.is_success()
        assert result.value.id == "a1"
        assert result.value.is_open

    def test_only_latest_record_considered(self, store):
        # An older open record is ignored when the newest one is closed
        store.atomic_write([
            WriteOperation.set("patients/p1/admissionHistory/a_old", {
                "admissionDate": datetime(2022, 1, 1, tzinfo=timezone.utc),
            }),
            WriteOperation.update("patients/p1/admissionHistory/a1", {
                "dischargeDate": datetime(2024, 5, 30, tzinfo=timezone.utc),
            }),
        ])

        result = AdmissionRecordLocator(store).find_open_admission("p1")

        assert result.value is None

    def test_lookup_failure(self):
        mock_store = Mock(spec=DocumentStorePort)
        mock_store.query_ordered_limit.return_value = Result.failure_result(StoreError("timeout"))

        result = AdmissionRecordLocator(mock_store).find_open_admission("p1")

        assert result.is_failure()
        assert result.error_type == "FetchError"
        assert result.error == "Failed to locate admission record."


class TestCloseAdmissionOperation:

    def test_closes_open_record(self):
        record = AdmissionRecord(
            id="a1",
            path="patients/p1/admissionHistory/a1",
            admission_date=datetime(2024, 5, 20, tzinfo=timezone.utc),
        )
        actor = StaffIdentity(id="u7", name="Grace", surname="Hopper")

        operation = close_admission_operation(record, actor, SERVER_TIMESTAMP)

        assert operation.kind is WriteKind.UPDATE
        assert operation.path == record.path
        assert operation.data == {
            "dischargeDate": SERVER_TIMESTAMP,
            "dischargedById": "u7",
            "dischargedByName": "Grace Hopper",
        }

    def test_nothing_to_close(self):
        actor = StaffIdentity(id="u7")
        closed = AdmissionRecord(
            id="a1",
            path="patients/p1/admissionHistory/a1",
            admission_date=datetime(2024, 5, 20, tzinfo=timezone.utc),
            discharge_date=datetime(2024, 5, 28, tzinfo=timezone.utc),
        )

        assert close_admission_operation(None, actor, SERVER_TIMESTAMP) is None
        assert close_admission_operation(closed, actor, SERVER_TIMESTAMP) is None
