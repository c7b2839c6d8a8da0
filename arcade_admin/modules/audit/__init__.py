"""Audit log: request classification, recording and queries."""

from .classifier import classify_request, extract_resource_id
from .exceptions import InvalidAuditQueryError
from .models import (
    ActionKind,
    ActorSummary,
    AuditEntry,
    AuditFilters,
    AuditPage,
    AuditStats,
    LogStatus,
    Pagination,
)
from .repository import AuditRepository

__all__ = [
    "ActionKind",
    "ActorSummary",
    "AuditEntry",
    "AuditFilters",
    "AuditPage",
    "AuditRepository",
    "AuditStats",
    "InvalidAuditQueryError",
    "LogStatus",
    "Pagination",
    "classify_request",
    "extract_resource_id",
]
