"""Tests for the discharge-desk command line interface."""

import json

import pytest
from rich.console import Console
from typer.testing import CliRunner

from discharge_desk import cli
from discharge_desk.adapters.storage import InMemoryDocumentStore
from discharge_desk.cli import app

runner = CliRunner()

STAFF_ARGS = ["--staff-id", "u7", "--staff-name", "Grace", "--staff-surname", "Hopper"]


class UnclosableStore(InMemoryDocumentStore):
    """Keeps its documents after the CLI closes it, so tests can inspect them."""

    closed = False

    def close(self) -> None:
        self.closed = True


@pytest.fixture(autouse=True)
def quiet_cli(monkeypatch):
    monkeypatch.setattr(cli, "setup_logging", lambda **kwargs: None)
    monkeypatch.setattr(cli, "console", Console(width=200))


@pytest.fixture
def cli_store(store, monkeypatch):
    shared = UnclosableStore(store.dump())
    monkeypatch.setattr("discharge_desk.main.create_document_store", lambda store_config=None: shared)
    for name in ("WARD_STAFF_ID", "WARD_STAFF_NAME", "WARD_STAFF_SURNAME"):
        monkeypatch.delenv(name, raising=False)
    return shared


class TestPendingCommand:

    def test_lists_pending(self, cli_store):
        result = runner.invoke(app, ["pending"])

        assert result.exit_code == 0
        assert "H-001" in result.stdout
        assert "H-002" in result.stdout
        assert "H-004" not in result.stdout

    def test_empty_list(self, monkeypatch):
        monkeypatch.setattr(
            "discharge_desk.main.create_document_store", lambda store_config=None: InMemoryDocumentStore()
        )

        result = runner.invoke(app, ["pending"])

        assert result.exit_code == 0
        assert "No patients are currently pending" in result.stdout


class TestDecisionCommands:

    def test_approve(self, cli_store):
        result = runner.invoke(app, ["approve", "p1", *STAFF_ARGS])

        assert result.exit_code == 0
        assert "Patient status updated to Discharged." in result.stdout
        assert cli_store.dump()["patients/p1"]["status"] == "Discharged"
        assert cli_store.closed

    def test_approve_outstanding_balance(self, cli_store):
        result = runner.invoke(app, ["approve", "p2", *STAFF_ARGS])

        assert result.exit_code == 1
        assert "outstanding balance" in result.stdout
        assert cli_store.commit_count == 0

    def test_reject_with_reason(self, cli_store):
        result = runner.invoke(app, ["reject", "p1", "--reason", "Labs pending", *STAFF_ARGS])

        assert result.exit_code == 0
        assert cli_store.dump()["patients/p1"]["status"] == "Admitted"

    def test_reject_without_reason(self, cli_store):
        result = runner.invoke(app, ["reject", "p1", *STAFF_ARGS])

        assert result.exit_code == 1
        assert "Please provide a reason for rejection." in result.stdout
        assert cli_store.commit_count == 0

    def test_staff_from_environment(self, cli_store, monkeypatch):
        monkeypatch.setenv("WARD_STAFF_ID", "u8")
        monkeypatch.setenv("WARD_STAFF_NAME", "Linus")
        monkeypatch.setenv("WARD_STAFF_SURNAME", "Pauling")

        result = runner.invoke(app, ["approve", "p3"])

        assert result.exit_code == 0
        assert cli_store.dump()["patients/p3"]["status"] == "Discharged"

    def test_missing_staff(self, cli_store):
        result = runner.invoke(app, ["approve", "p1"])

        assert result.exit_code == 1
        assert "staff id is required" in result.stdout

    def test_not_pending(self, cli_store):
        result = runner.invoke(app, ["approve", "p4", *STAFF_ARGS])

        assert result.exit_code == 1
        assert "not pending discharge" in result.stdout


class TestSeedCommand:

    def test_seed(self, tmp_path, monkeypatch):
        seeded = UnclosableStore()
        monkeypatch.setattr("discharge_desk.main.create_document_store", lambda store_config=None: seeded)
        seed_file = tmp_path / "seed.json"
        seed_file.write_text(json.dumps({"patients": [{
            "id": "p1",
            "name": "Ada",
            "surname": "Obi",
            "hospitalNumber": "H-001",
            "status": "PendingDischarge",
            "financials": {"totalBill": 10, "amountPaid": 10},
            "admissionHistory": [{"id": "a1", "admissionDate": "2024-05-01T08:00:00Z"}],
        }]}))

        result = runner.invoke(app, ["seed", str(seed_file)])

        assert result.exit_code == 0
        assert "Wrote 2 document(s)" in result.stdout
        assert set(seeded.dump()) == {"patients/p1", "patients/p1/admissionHistory/a1"}
        assert seeded.commit_count == 1

    def test_seed_invalid(self, tmp_path, cli_store):
        seed_file = tmp_path / "seed.json"
        seed_file.write_text(json.dumps({"patients": [{"name": "No id"}]}))

        result = runner.invoke(app, ["seed", str(seed_file)])

        assert result.exit_code == 1
        assert cli_store.commit_count == 0


class TestInfoAndVersion:

    def test_version(self):
        result = runner.invoke(app, ["--version"])

        assert result.exit_code == 0
        assert "Discharge Desk v1.0.0" in result.stdout

    def test_info(self, cli_store):
        result = runner.invoke(app, ["info"])

        assert result.exit_code == 0
        assert "Version:" in result.stdout
        assert "Store:" in result.stdout
