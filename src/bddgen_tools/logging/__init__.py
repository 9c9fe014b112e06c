"""Structured logging utilities."""

from .audit import (
    AuditEvent,
    JsonlAuditLogger,
    NullAuditLogger,
    build_event,
    new_run_id,
    utc_timestamp,
)

__all__ = [
    "AuditEvent",
    "JsonlAuditLogger",
    "NullAuditLogger",
    "build_event",
    "new_run_id",
    "utc_timestamp",
]
