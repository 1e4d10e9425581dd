"""Storage adapters for Discharge Desk.

This module contains document store adapters that implement the
DocumentStorePort interface.
"""

from discharge_desk.adapters.storage.duckdb_store import DuckDBDocumentStore
from discharge_desk.adapters.storage.memory_store import InMemoryDocumentStore

__all__ = ["DuckDBDocumentStore", "InMemoryDocumentStore"]
