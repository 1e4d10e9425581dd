"""Unit tests for the configuration manager, settings and seed loader."""

import json
from datetime import datetime, timezone

import pytest
from pydantic import ValidationError as PydanticValidationError

from discharge_desk.domain.ports import ValidationError, WriteKind
from discharge_desk.infrastructure.config_manager import ConfigManager, StoreConfig
from discharge_desk.infrastructure.seed_loader import build_seed_operations, load_seed_file, parse_timestamp
from discharge_desk.infrastructure.settings import Settings


class TestStoreConfig:

    def test_defaults(self):
        config = StoreConfig()
        assert config.store_type == "duckdb"
        assert config.db_path is None
        assert config.describe() == "duckdb (:memory:)"

    def test_store_type_normalized(self):
        assert StoreConfig(store_type="MEMORY").store_type == "memory"

    def test_unsupported_store_type(self):
        with pytest.raises(PydanticValidationError):
            StoreConfig(store_type="firestore")

    def test_missing_directory(self, tmp_path):
        with pytest.raises(PydanticValidationError):
            StoreConfig(db_path=str(tmp_path / "missing" / "ward.duckdb"))


class TestConfigManager:

    def test_from_environment(self, monkeypatch, tmp_path):
        monkeypatch.chdir(tmp_path)
        monkeypatch.setenv("WARD_STORE_TYPE", "memory")
        monkeypatch.delenv("WARD_DB_PATH", raising=False)

        config = ConfigManager.from_environment().get_store_config()

        assert config.store_type == "memory"
        assert config.db_path is None

    def test_from_env_file(self, monkeypatch, tmp_path):
        # load_dotenv writes os.environ directly; record the variables so teardown restores them
        for name in ("WARD_STORE_TYPE", "WARD_DB_PATH"):
            monkeypatch.setenv(name, "")
            monkeypatch.delenv(name)
        env_file = tmp_path / ".env"
        env_file.write_text(f"WARD_STORE_TYPE=duckdb\nWARD_DB_PATH={tmp_path / 'ward.duckdb'}\n")

        config = ConfigManager.from_environment(env_file=env_file).get_store_config()

        assert config.store_type == "duckdb"
        assert config.db_path == str(tmp_path / "ward.duckdb")

    def test_from_file(self, tmp_path):
        config_file = tmp_path / "config.json"
        config_file.write_text(json.dumps({"store": {"store_type": "memory"}}))

        manager = ConfigManager.from_file(str(config_file))

        assert manager.get_store_config().store_type == "memory"

    def test_from_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            ConfigManager.from_file(str(tmp_path / "absent.json"))

    def test_from_invalid_json(self, tmp_path):
        config_file = tmp_path / "config.json"
        config_file.write_text("{not json")
        with pytest.raises(ValueError):
            ConfigManager.from_file(str(config_file))


class TestSettings:

    def test_reads_environment(self, monkeypatch):
        monkeypatch.setenv("WARD_LOG_LEVEL", "DEBUG")
        monkeypatch.setenv("WARD_JSON_LOGS", "true")
        monkeypatch.setenv("WARD_APP_NAME", "Ward 7")

        settings = Settings()

        assert settings.log_level == "DEBUG"
        assert settings.json_logs is True
        assert settings.app_name == "Ward 7"

    def test_store_config_from_config_file(self, monkeypatch, tmp_path):
        config_file = tmp_path / "config.json"
        config_file.write_text(json.dumps({"store": {"store_type": "duckdb", "db_path": str(tmp_path / "ward.duckdb")}}))
        monkeypatch.setenv("WARD_CONFIG_FILE", str(config_file))
        monkeypatch.setenv("WARD_STORE_TYPE", "memory")

        store_config = Settings().store_config

        assert store_config.store_type == "duckdb"
        assert store_config.db_path == str(tmp_path / "ward.duckdb")

    def test_store_config_from_environment(self, monkeypatch, tmp_path):
        monkeypatch.chdir(tmp_path)
        monkeypatch.delenv("WARD_CONFIG_FILE", raising=False)
        monkeypatch.delenv("WARD_DB_PATH", raising=False)
        monkeypatch.setenv("WARD_STORE_TYPE", "memory")

        assert Settings().store_config.store_type == "memory"


class TestSeedLoader:

    def test_parse_timestamp(self):
        assert parse_timestamp("2024-05-01T08:00:00Z") == datetime(2024, 5, 1, 8, tzinfo=timezone.utc)
        assert parse_timestamp("2024-05-01T08:00:00") == datetime(2024, 5, 1, 8, tzinfo=timezone.utc)
        assert parse_timestamp(None) is None

    def test_build_operations(self):
        operations = build_seed_operations({"patients": [{
            "id": "p1",
            "name": "Ada",
            "status": "PendingDischarge",
            "financials": {"totalBill": 100, "amountPaid": 40},
            "admissionHistory": [{"id": "a1", "admissionDate": "2024-05-01T08:00:00Z"}, {}],
        }]})

        assert [op.path for op in operations] == [
            "patients/p1",
            "patients/p1/admissionHistory/a1",
            "patients/p1/admissionHistory/p1-adm-2",
        ]
        assert all(op.kind is WriteKind.SET for op in operations)
        assert operations[0].data["financials"] == {"totalBill": 100.0, "amountPaid": 40.0, "balance": 60.0}
        assert "admissionHistory" not in operations[0].data
        assert operations[1].data["admissionDate"] == datetime(2024, 5, 1, 8, tzinfo=timezone.utc)

    def test_missing_patient_id(self):
        with pytest.raises(ValidationError):
            build_seed_operations({"patients": [{"name": "Ada"}]})

    def test_missing_financials(self):
        with pytest.raises(ValidationError, match="no financials"):
            build_seed_operations({"patients": [{"id": "p1", "status": "PendingDischarge"}]})

    def test_missing_patients_list(self):
        with pytest.raises(ValidationError):
            build_seed_operations({"people": []})

    def test_invalid_timestamp(self):
        with pytest.raises(ValidationError, match="invalid timestamp"):
            build_seed_operations({"patients": [{
                "id": "p1",
                "financials": {"totalBill": 0, "amountPaid": 0},
                "admissionHistory": [{"admissionDate": "yesterday"}],
            }]})

    def test_load_seed_file_invalid_json(self, tmp_path):
        seed_file = tmp_path / "seed.json"
        seed_file.write_text("[")
        with pytest.raises(ValidationError):
            load_seed_file(seed_file)
