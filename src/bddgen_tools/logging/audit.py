"""Structured JSONL audit log utilities."""

from __future__ import annotations

import json
import uuid
from dataclasses import asdict, dataclass
from datetime import UTC, datetime
from pathlib import Path


@dataclass(slots=True, frozen=True)
class AuditEvent:
    """One tool run, successful or not."""

    timestamp: str
    run_id: str
    tool: str
    ok: bool
    error: str | None
    metadata: dict[str, object]


def utc_timestamp() -> str:
    """Return an ISO-8601 UTC timestamp."""
    return datetime.now(tz=UTC).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def new_run_id() -> str:
    """Return a short random identifier for one tool run."""
    return uuid.uuid4().hex[:12]


def build_event(
    tool: str,
    run_id: str,
    *,
    ok: bool,
    error: str | None = None,
    metadata: dict[str, object] | None = None,
) -> AuditEvent:
    """Build an event stamped with the current time."""
    return AuditEvent(
        timestamp=utc_timestamp(),
        run_id=run_id,
        tool=tool,
        ok=ok,
        error=error,
        metadata=dict(metadata or {}),
    )


class JsonlAuditLogger:
    """Append-only JSONL audit logger."""

    def __init__(self, path: Path) -> None:
        self._path = path
        self._path.parent.mkdir(parents=True, exist_ok=True)

    @property
    def path(self) -> Path:
        """Return on-disk JSONL path."""
        return self._path

    def append(self, event: AuditEvent) -> None:
        """Append an event as one JSON object per line."""
        with self._path.open("a", encoding="utf-8") as handle:
            handle.write(json.dumps(asdict(event), sort_keys=True))
            handle.write("\n")


class NullAuditLogger:
    """Drop-in logger used when auditing is disabled."""

    path = None

    def append(self, event: AuditEvent) -> None:
        _ = event
