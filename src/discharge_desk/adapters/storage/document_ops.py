"""Shared write semantics for document store adapters.

Both adapters apply operations and evaluate preconditions with these helpers
so that ``update``/``set``, the delete-field marker and the server timestamp
behave identically whatever the backing storage.
"""

import copy
from datetime import datetime
from typing import Any, Optional

from discharge_desk.domain.ports import (
    ABSENT,
    ABSENT_OR_NULL,
    DELETE_FIELD,
    SERVER_TIMESTAMP,
    FieldSentinel,
    Precondition,
    PreconditionFailedError,
    StoreError,
    WriteKind,
    WriteOperation,
)


def resolve_value(value: Any, commit_time: datetime) -> Any:
    """Replace server-timestamp markers (recursively) with ``commit_time``."""
    if value is SERVER_TIMESTAMP:
        return commit_time
    if isinstance(value, FieldSentinel):
        raise StoreError(f"Marker {value.name} is not allowed here", operation="atomic_write")
    if isinstance(value, dict):
        return {k: resolve_value(v, commit_time) for k, v in value.items() if v is not DELETE_FIELD}
    if isinstance(value, list):
        return [resolve_value(v, commit_time) for v in value]
    return copy.deepcopy(value)


def apply_operation(current: Optional[dict], operation: WriteOperation, commit_time: datetime) -> dict:
    """Return the document that results from applying ``operation`` to ``current``.

    Raises:
        StoreError: If an update targets a missing document
    """
    if operation.kind is WriteKind.SET:
        return resolve_value(operation.data, commit_time)

    if current is None:
        raise StoreError(
            f"No document to update: {operation.path}",
            operation="atomic_write",
            details={"path": operation.path},
        )
    updated = copy.deepcopy(current)
    for key, value in operation.data.items():
        if value is DELETE_FIELD:
            updated.pop(key, None)
        else:
            updated[key] = resolve_value(value, commit_time)
    return updated


def check_precondition(current: Optional[dict], precondition: Precondition) -> None:
    """Raise PreconditionFailedError unless ``precondition`` holds for ``current``."""
    details = {"path": precondition.path, "field": precondition.field}
    if current is None:
        raise PreconditionFailedError(
            f"Precondition failed, document missing: {precondition.path}",
            operation="atomic_write",
            details=details,
        )
    if precondition.expected is ABSENT:
        if precondition.field in current:
            raise PreconditionFailedError(
                f"Precondition failed, field '{precondition.field}' is present on {precondition.path}",
                operation="atomic_write",
                details=details,
            )
        return
    if precondition.expected is ABSENT_OR_NULL:
        if current.get(precondition.field) is not None:
            raise PreconditionFailedError(
                f"Precondition failed, field '{precondition.field}' is set on {precondition.path}",
                operation="atomic_write",
                details=details,
            )
        return
    if precondition.field not in current or current[precondition.field] != precondition.expected:
        raise PreconditionFailedError(
            f"Precondition failed, field '{precondition.field}' changed on {precondition.path}",
            operation="atomic_write",
            details=details,
        )


def matches_field(data: dict, field: str, equals: Any) -> bool:
    return field in data and data[field] == equals


def order_documents(rows: list, order_field: str, descending: bool, limit: int) -> list:
    """Sort ``(path, data)`` rows on ``order_field``; rows lacking it are dropped."""
    candidates = [row for row in rows if row[1].get(order_field) is not None]
    candidates.sort(key=lambda row: row[1][order_field], reverse=descending)
    if limit is not None and limit >= 0:
        candidates = candidates[:limit]
    return candidates
