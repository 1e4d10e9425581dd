"""Shared fixtures for the discharge desk test suite."""

from datetime import datetime, timezone

import pytest

from discharge_desk.adapters.storage import InMemoryDocumentStore
from discharge_desk.domain.models import StaffIdentity

FIXED_NOW = datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc)


def patient_document(
    status="PendingDischarge",
    total_bill=100.0,
    amount_paid=100.0,
    balance=None,
    requester_id="u1",
    located=True,
    name="Ada",
    surname="Obi",
    hospital_number="H-001",
):
    """Build a raw patient document the way it sits in the store."""
    financials = {"totalBill": total_bill, "amountPaid": amount_paid}
    if balance is not None:
        financials["balance"] = balance
    document = {
        "name": name,
        "surname": surname,
        "hospitalNumber": hospital_number,
        "status": status,
        "financials": financials,
    }
    if located:
        document.update({
            "currentWardId": "w1",
            "currentWardName": "Ward A",
            "currentBedNumber": 4,
        })
    if requester_id is not None:
        document["dischargeRequesterId"] = requester_id
    return document


@pytest.fixture
def staff():
    return StaffIdentity(id="u7", name="Grace", surname="Hopper")


@pytest.fixture
def store():
    """Store with one eligible pending patient (p1) and an open admission.

    p2 owes money, p3 has no admission history, p4 is already admitted.
    """
    return InMemoryDocumentStore(
        {
            "patients/p1": patient_document(),
            "patients/p1/admissionHistory/a0": {
                "admissionDate": datetime(2023, 1, 1, tzinfo=timezone.utc),
                "dischargeDate": datetime(2023, 1, 9, tzinfo=timezone.utc),
                "dischargedById": "u2",
                "dischargedByName": "Old Staff",
            },
            "patients/p1/admissionHistory/a1": {
                "admissionDate": datetime(2024, 5, 20, tzinfo=timezone.utc),
            },
            "patients/p2": patient_document(
                total_bill=500.0, amount_paid=200.0, name="Ben", surname="Cole", hospital_number="H-002"
            ),
            "patients/p3": patient_document(
                requester_id=None, name="Cara", surname="Diaz", hospital_number="H-003"
            ),
            "patients/p4": patient_document(status="Admitted", name="Dan", surname="Eze", hospital_number="H-004"),
        },
        clock=lambda: FIXED_NOW,
    )
