"""Main entry point for Discharge Desk.

This module wires the configured document store and hands control to the
command-line interface.

Architecture:
    - Follows Hexagonal Architecture principles
    - The store adapter is selected from configuration and injected into the
      services; nothing in the domain imports it directly
"""

import logging
from typing import Optional

from discharge_desk.adapters.storage import DuckDBDocumentStore, InMemoryDocumentStore
from discharge_desk.domain.ports import DocumentStorePort
from discharge_desk.infrastructure.config_manager import StoreConfig, get_store_config

logger = logging.getLogger(__name__)


def create_document_store(store_config: Optional[StoreConfig] = None) -> DocumentStorePort:
    """Create the document store adapter based on configuration.

    Parameters:
        store_config: Store configuration (loaded from environment if None)

    Returns:
        DocumentStorePort: Configured store adapter instance

    Raises:
        ValueError: If store type is unsupported
    """
    store_config = store_config or get_store_config()

    if store_config.store_type == "duckdb":
        logger.info(f"Initializing DuckDB store with path: {store_config.db_path or ':memory:'}")
        return DuckDBDocumentStore(store_config=store_config)
    elif store_config.store_type == "memory":
        logger.info("Initializing in-memory store")
        return InMemoryDocumentStore()
    else:
        raise ValueError(f"Unsupported store type: {store_config.store_type}")


def main():
    from discharge_desk.cli import app
    app()


if __name__ == "__main__":
    main()
