"""Configuration Manager for the Document Store.

This module loads and validates the document store configuration from the
environment or a JSON file.

Architecture:
    - Follows Hexagonal Architecture: Infrastructure layer isolated from domain
    - Type-safe configuration using Pydantic models
    - Fail-fast validation prevents runtime errors
"""

import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field, field_validator

logger = logging.getLogger(__name__)

ENV_PREFIX = "WARD_"
SUPPORTED_STORE_TYPES = ["memory", "duckdb"]


class StoreConfig(BaseModel):
    """Document store configuration model.

    Parameters:
        store_type: Backend type ('memory' or 'duckdb')
        db_path: Path to the DuckDB file, or ':memory:'
    """

    store_type: str = Field(default="duckdb", description="Store type (memory, duckdb)")
    db_path: Optional[str] = Field(None, description="Path to database file (for DuckDB)")

    @field_validator("store_type")
    @classmethod
    def validate_store_type(cls, v: str) -> str:
        """Validate store type."""
        if v.lower() not in SUPPORTED_STORE_TYPES:
            raise ValueError(f"Unsupported store type: {v}. Supported: {SUPPORTED_STORE_TYPES}")
        return v.lower()

    @field_validator("db_path")
    @classmethod
    def validate_db_path(cls, v: Optional[str]) -> Optional[str]:
        """Validate the database directory exists (the file may not exist yet)."""
        if v is None or v == ":memory:":
            return v

        db_path_obj = Path(v)
        if not db_path_obj.parent.exists():
            raise ValueError(f"Database directory does not exist: {db_path_obj.parent}")

        return str(db_path_obj)

    def describe(self) -> str:
        if self.store_type == "duckdb":
            return f"duckdb ({self.db_path or ':memory:'})"
        return self.store_type


class ConfigManager:
    """Configuration manager for the store and application settings.

    Example Usage:
        ```python
        # Load from environment variables
        config = ConfigManager.from_environment()
        store_config = config.get_store_config()

        # Load from file (WARD_CONFIG_FILE)
        config = ConfigManager.from_file("config.json")
        store_config = config.get_store_config()
        ```
    """

    def __init__(self, config_data: Dict[str, Any]):
        self._config_data = config_data
        self._store_config: Optional[StoreConfig] = None

    @classmethod
    def from_environment(cls, env_file: Optional[Path] = None) -> 'ConfigManager':
        """Load configuration from environment variables.

        Environment Variables:
            - WARD_STORE_TYPE: Store type (memory, duckdb)
            - WARD_DB_PATH: Path to database file (for DuckDB)

        A ``.env`` file in the working directory (or ``env_file``) is loaded
        first; variables already set in the environment win.

        Returns:
            ConfigManager instance
        """
        env_path = env_file or Path.cwd() / ".env"
        if env_path.exists():
            load_dotenv(env_path)
            logger.debug(f"Loaded environment variables from {env_path}")

        config_data = {
            "store": {
                "store_type": os.getenv(f"{ENV_PREFIX}STORE_TYPE", "duckdb"),
                "db_path": os.getenv(f"{ENV_PREFIX}DB_PATH"),
            }
        }

        return cls(config_data)

    @classmethod
    def from_file(cls, config_path: str) -> 'ConfigManager':
        """Load configuration from a JSON file.

        Parameters:
            config_path: Path to configuration file

        Returns:
            ConfigManager instance

        Raises:
            FileNotFoundError: If config file doesn't exist
            ValueError: If config file is invalid
        """
        config_file = Path(config_path)
        if not config_file.exists():
            raise FileNotFoundError(f"Configuration file not found: {config_path}")

        try:
            with open(config_file, 'r') as f:
                config_data = json.load(f)
        except json.JSONDecodeError as e:
            raise ValueError(f"Invalid JSON in configuration file: {str(e)}")

        if not isinstance(config_data, dict):
            raise ValueError("Configuration file must contain a JSON object")

        return cls(config_data)

    def get_store_config(self) -> StoreConfig:
        """Get the validated store configuration."""
        if self._store_config is None:
            store_data = {k: v for k, v in self._config_data.get("store", {}).items() if v is not None}
            self._store_config = StoreConfig(**store_data)

        return self._store_config


def get_store_config() -> StoreConfig:
    """Convenience function to get the store configuration from environment.

    Defaults to an in-memory DuckDB database if nothing is configured.
    """
    return ConfigManager.from_environment().get_store_config()
