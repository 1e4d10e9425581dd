"""Dependency injection for dashboard API.

This module provides dependency injection functions for FastAPI. The store
and the in-flight guard are process-wide; the acting staff identity is read
per request from headers set by the (external) authentication layer.
"""

import logging
from functools import lru_cache
from typing import Annotated, Optional

from fastapi import Depends, Header, HTTPException

from discharge_desk.domain.guardrails import SubmissionGuard
from discharge_desk.domain.models import StaffIdentity
from discharge_desk.domain.ports import DocumentStorePort
from discharge_desk.main import create_document_store

logger = logging.getLogger(__name__)


@lru_cache()
def get_document_store() -> DocumentStorePort:
    """Get document store instance (cached).

    Returns:
        DocumentStorePort: Configured store adapter instance
    """
    return create_document_store()


@lru_cache()
def get_submission_guard() -> SubmissionGuard:
    """Process-wide in-flight guard shared by all requests."""
    return SubmissionGuard()


def get_acting_staff(
    x_staff_id: Annotated[Optional[str], Header()] = None,
    x_staff_name: Annotated[Optional[str], Header()] = None,
    x_staff_surname: Annotated[Optional[str], Header()] = None,
) -> StaffIdentity:
    """Acting staff member for a decision request.

    Raises:
        HTTPException: 401 when no staff identity accompanies the request
    """
    if not x_staff_id or not x_staff_id.strip():
        raise HTTPException(status_code=401, detail="Missing acting staff identity")
    return StaffIdentity(id=x_staff_id.strip(), name=x_staff_name or "", surname=x_staff_surname or "")


# Type aliases for dependency injection
StoreDep = Annotated[DocumentStorePort, Depends(get_document_store)]
GuardDep = Annotated[SubmissionGuard, Depends(get_submission_guard)]
StaffDep = Annotated[StaffIdentity, Depends(get_acting_staff)]
