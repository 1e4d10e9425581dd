"""Domain Ports - Abstract Contracts for Document Storage.

This module defines the Port interface (abstract contract) that document store
adapters must implement. Following Hexagonal Architecture, the Domain Core
defines what it needs, not how it's provided.

The discharge workflow needs exactly four capabilities from a store:
    - Read documents in a collection matching a field value
    - Read the newest N documents of a (sub)collection ordered by a field
    - Submit a set of writes as one all-or-nothing unit
    - Write-time markers for "server timestamp" and "delete this field"

Architecture:
    - Pure abstract interfaces with zero infrastructure dependencies
    - Adapters (in-memory, DuckDB) implement these ports
    - The store handle is always injected, never imported as global state
    - Failures cross the port boundary as Result objects, not exceptions
"""

import uuid
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Generic, Optional, TypeVar, Union

# Type variable for Result generic
T = TypeVar('T')


# ============================================================================
# Result Type for Success/Failure Communication
# ============================================================================

@dataclass(frozen=True)
class Result(Generic[T]):
    """Result type for communicating success or failure without exceptions.

    Services and adapters return Result objects so that callers (the decision
    board, the HTTP routes, the CLI) can turn failures into operator notices
    without wrapping every call in try/except.

    Attributes:
        success: True if the operation succeeded, False otherwise
        value: The successful result value (only present if success=True)
        error: Error message (only present if success=False)
        error_type: Type of error (ValidationError, CommitError, etc.)
        error_details: Additional error context (patient_id, operation, etc.)

    Example:
        ```python
        result = directory.fetch_pending_discharges()
        if result.is_success():
            render(result.value)
        else:
            notify(result.error)
        ```
    """

    success: bool
    value: Optional[T] = None
    error: Optional[str] = None
    error_type: Optional[str] = None
    error_details: Optional[dict] = None

    @classmethod
    def success_result(cls, value: T) -> 'Result[T]':
        """Create a successful result.

        Parameters:
            value: The successful result value

        Returns:
            Result: Success result with the value
        """
        return cls(
            success=True,
            value=value,
            error=None,
            error_type=None,
            error_details=None
        )

    @classmethod
    def failure_result(
        cls,
        error: Union[str, Exception],
        error_type: Optional[str] = None,
        error_details: Optional[dict] = None
    ) -> 'Result[T]':
        """Create a failure result.

        Parameters:
            error: Error message or exception
            error_type: Type of error (defaults to the exception class name)
            error_details: Additional context

        Returns:
            Result: Failure result with error information
        """
        error_message = str(error) if isinstance(error, Exception) else error
        error_type_name = error_type or (type(error).__name__ if isinstance(error, Exception) else "UnknownError")
        details = dict(error_details or {})
        if isinstance(error, DischargeError):
            details = {**error.details, **details}

        return cls(
            success=False,
            value=None,
            error=error_message,
            error_type=error_type_name,
            error_details=details
        )

    def is_success(self) -> bool:
        """Check if result is successful."""
        return self.success

    def is_failure(self) -> bool:
        """Check if result is a failure."""
        return not self.success


# ============================================================================
# Custom Exception Hierarchy
# ============================================================================

class DischargeError(Exception):
    """Base exception for all discharge-workflow errors.

    Attributes:
        details: Additional error context (never contains patient names)
    """

    def __init__(self, message: str, details: Optional[dict] = None):
        super().__init__(message)
        self.details = details or {}


class ValidationError(DischargeError):
    """Raised when a local precondition is not met.

    Recovered entirely client-side: no store call is made and the operator is
    prompted to correct the input.
    """
    pass


class IneligibleError(ValidationError):
    """Raised when approval is attempted for a patient who still owes money."""
    pass


class FetchError(DischargeError):
    """Raised when the directory query or admission-record lookup fails."""
    pass


class CommitError(DischargeError):
    """Raised when the atomic write fails (network, permission, store rejection)."""
    pass


class ConflictError(DischargeError):
    """Raised when another decision changed the patient first.

    Distinct from CommitError: the store was reachable and consistent, but
    the compare-and-swap precondition on the write no longer held.
    """
    pass


class StoreError(DischargeError):
    """Raised inside store adapters for connection and write failures.

    Attributes:
        operation: The store operation that failed
    """

    def __init__(self, message: str, operation: Optional[str] = None, details: Optional[dict] = None):
        super().__init__(message, details=details)
        self.operation = operation


class PreconditionFailedError(StoreError):
    """Raised by adapters when an atomic write precondition does not hold."""
    pass


# ============================================================================
# Write Model
# ============================================================================

class FieldSentinel(Enum):
    """Markers resolved by the store rather than the client.

    DELETE_FIELD removes a field from the document. SERVER_TIMESTAMP is
    replaced with the commit time. ABSENT and ABSENT_OR_NULL are only valid
    in a Precondition: the first asserts that a field does not exist, the
    second also accepts a field stored as null.
    """
    DELETE_FIELD = "delete_field"
    SERVER_TIMESTAMP = "server_timestamp"
    ABSENT = "absent"
    ABSENT_OR_NULL = "absent_or_null"


DELETE_FIELD = FieldSentinel.DELETE_FIELD
SERVER_TIMESTAMP = FieldSentinel.SERVER_TIMESTAMP
ABSENT = FieldSentinel.ABSENT
ABSENT_OR_NULL = FieldSentinel.ABSENT_OR_NULL


class WriteKind(str, Enum):
    UPDATE = "update"  # document must exist; top-level fields are merged
    SET = "set"        # document is created or fully replaced


@dataclass(frozen=True)
class WriteOperation:
    """One document change inside an atomic write.

    Attributes:
        kind: update or set
        path: Slash-separated document path, e.g. ``patients/p1``
        data: Field values; may contain DELETE_FIELD / SERVER_TIMESTAMP markers
    """
    kind: WriteKind
    path: str
    data: dict = field(default_factory=dict)

    @classmethod
    def update(cls, path: str, data: dict) -> 'WriteOperation':
        return cls(kind=WriteKind.UPDATE, path=path, data=data)

    @classmethod
    def set(cls, path: str, data: dict) -> 'WriteOperation':
        return cls(kind=WriteKind.SET, path=path, data=data)


@dataclass(frozen=True)
class Precondition:
    """Compare-and-swap guard evaluated inside the atomic write.

    The write is refused as a whole if the document at ``path`` does not
    exist, or its ``field`` does not equal ``expected``. Use ``ABSENT`` as
    the expected value to require that the field is missing, or
    ``ABSENT_OR_NULL`` to also accept an explicit null.
    """
    path: str
    field: str
    expected: Any


@dataclass(frozen=True)
class DocumentSnapshot:
    """A document read from the store."""
    id: str
    path: str
    data: dict

    def get(self, key: str, default: Any = None) -> Any:
        return self.data.get(key, default)


def document_path(*segments: str) -> str:
    """Join path segments into a document or collection path.

    Example:
        ``document_path("patients", "p1", "admissionHistory")``
        returns ``"patients/p1/admissionHistory"``.
    """
    cleaned = [str(s).strip("/") for s in segments]
    if any(not s for s in cleaned):
        raise ValueError(f"Empty path segment in {segments!r}")
    return "/".join(cleaned)


def split_document_path(path: str) -> tuple[str, str]:
    """Split a document path into (collection path, document id)."""
    parts = path.strip("/").split("/")
    if len(parts) < 2 or len(parts) % 2 != 0:
        raise ValueError(f"Not a document path: {path!r}")
    return "/".join(parts[:-1]), parts[-1]


# ============================================================================
# Store Port
# ============================================================================

class DocumentStorePort(ABC):
    """Abstract contract for document store adapters.

    Key Principles:
        - Reads return snapshots; callers never hold live references
        - ``atomic_write`` is all-or-nothing: either every operation applies
          or none do, and no reader observes a partial state
        - Preconditions are checked inside the same atomic unit as the writes
        - Failures are returned as Result.failure_result(), never raised

    Example Usage:
        ```python
        store = InMemoryDocumentStore()
        result = store.query_by_field("patients", "status", "PendingDischarge")
        if result.is_success():
            for snapshot in result.value:
                ...
        ```
    """

    @abstractmethod
    def query_by_field(self, collection: str, field: str, equals: Any) -> Result[list[DocumentSnapshot]]:
        """Return every document of ``collection`` whose ``field`` equals ``equals``.

        Parameters:
            collection: Collection path (e.g. ``patients``)
            field: Top-level field name
            equals: Value to compare with

        Returns:
            Result[list[DocumentSnapshot]]: Matches in store-native order
        """
        pass

    @abstractmethod
    def query_ordered_limit(
        self,
        collection: str,
        order_field: str,
        descending: bool = True,
        limit: int = 1
    ) -> Result[list[DocumentSnapshot]]:
        """Return up to ``limit`` documents ordered by ``order_field``.

        Documents that lack ``order_field`` are excluded.

        Parameters:
            collection: Collection or subcollection path
            order_field: Field to sort on
            descending: Newest/largest first when True
            limit: Maximum number of documents

        Returns:
            Result[list[DocumentSnapshot]]: Ordered documents
        """
        pass

    @abstractmethod
    def atomic_write(
        self,
        operations: list[WriteOperation],
        preconditions: Optional[list[Precondition]] = None
    ) -> Result[int]:
        """Apply every operation or none of them.

        Parameters:
            operations: Document changes to apply together
            preconditions: Guards checked in the same atomic unit

        Returns:
            Result[int]: Number of operations applied, or failure with
                error_type ``PreconditionFailedError`` when a guard did not
                hold and ``StoreError`` for anything else
        """
        pass

    @abstractmethod
    def get_document(self, path: str) -> Result[Optional[DocumentSnapshot]]:
        """Read a single document by path (None if it does not exist)."""
        pass

    def server_timestamp(self) -> FieldSentinel:
        """Marker replaced by the commit time when the write is applied."""
        return SERVER_TIMESTAMP

    def delete_field(self) -> FieldSentinel:
        """Marker that removes a field instead of setting it to null."""
        return DELETE_FIELD

    def new_document_id(self, collection: str) -> str:
        """Allocate an id for a document about to be created in ``collection``."""
        return uuid.uuid4().hex

    def close(self) -> None:
        """Release resources held by the adapter."""
        pass
