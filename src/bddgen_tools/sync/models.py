"""Typed models for synchronization runs."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

SyncAction = Literal["created", "updated", "skipped"]

ACTION_LABELS: dict[str, str] = {
    "created": "new",
    "updated": "updated",
    "skipped": "unchanged",
}


@dataclass(slots=True, frozen=True)
class FileDecision:
    """Outcome for one generated file, keyed by path relative to the tree root."""

    relative_path: str
    action: SyncAction

    def describe(self) -> str:
        return f"{self.relative_path} ({ACTION_LABELS[self.action]})"


@dataclass(slots=True, frozen=True)
class SyncSummary:
    """Aggregate counts for one synchronization run."""

    created: int
    updated: int
    skipped: int
    elapsed_ms: int
    decisions: tuple[FileDecision, ...]

    @property
    def total(self) -> int:
        return self.created + self.updated + self.skipped

    def to_metadata(self) -> dict[str, object]:
        return {
            "created": self.created,
            "updated": self.updated,
            "skipped": self.skipped,
            "elapsed_ms": self.elapsed_ms,
        }

    def summary_line(self) -> str:
        return (
            f"BDD specs: {self.created} created, {self.updated} updated, "
            f"{self.skipped} unchanged ({self.elapsed_ms}ms)"
        )


def summarize(decisions: list[FileDecision], elapsed_ms: int) -> SyncSummary:
    """Fold per-file decisions into a summary."""
    created = sum(1 for item in decisions if item.action == "created")
    updated = sum(1 for item in decisions if item.action == "updated")
    skipped = sum(1 for item in decisions if item.action == "skipped")
    return SyncSummary(
        created=created,
        updated=updated,
        skipped=skipped,
        elapsed_ms=elapsed_ms,
        decisions=tuple(decisions),
    )
