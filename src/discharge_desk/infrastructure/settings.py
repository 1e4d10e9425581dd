"""Application Settings and Configuration.

This module provides application-wide settings that combine configuration
from the configuration manager with application-specific defaults.
"""

import os
from typing import Optional

from discharge_desk import __version__
from discharge_desk.infrastructure.config_manager import ENV_PREFIX, ConfigManager, StoreConfig

APP_NAME = "Discharge-Desk"
APP_VERSION = __version__


class Settings:
    """Application settings loaded from configuration manager and environment."""

    def __init__(self):
        self._store_config: Optional[StoreConfig] = None
        self._config_manager: Optional[ConfigManager] = None

        self.app_name = os.getenv(f"{ENV_PREFIX}APP_NAME", APP_NAME)
        self.log_level = os.getenv(f"{ENV_PREFIX}LOG_LEVEL", "INFO")
        self.json_logs = os.getenv(f"{ENV_PREFIX}JSON_LOGS", "false").lower() == "true"

    @property
    def config_manager(self) -> ConfigManager:
        """JSON file named by WARD_CONFIG_FILE if set, otherwise the environment."""
        if self._config_manager is None:
            config_file = os.getenv(f"{ENV_PREFIX}CONFIG_FILE")
            if config_file:
                self._config_manager = ConfigManager.from_file(config_file)
            else:
                self._config_manager = ConfigManager.from_environment()
        return self._config_manager

    @property
    def store_config(self) -> StoreConfig:
        """Store configuration, loaded lazily on first access."""
        if self._store_config is None:
            self._store_config = self.config_manager.get_store_config()
        return self._store_config


# Global settings instance
settings = Settings()
