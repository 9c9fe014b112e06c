"""Removal of unused step definitions."""

from .engine import (
    DirtyWorktreeError,
    PruneResult,
    PruneSummary,
    ensure_clean_worktree,
    prune_file,
    prune_unused_steps,
)
from .report import (
    UnusedStepReport,
    UnusedStepsCommandError,
    fetch_unused_report,
    parse_unused_report,
)
from .rewrite import RemovalPlan, collapse_blank_lines, plan_removals, prune_source

__all__ = [
    "DirtyWorktreeError",
    "PruneResult",
    "PruneSummary",
    "RemovalPlan",
    "UnusedStepReport",
    "UnusedStepsCommandError",
    "collapse_blank_lines",
    "ensure_clean_worktree",
    "fetch_unused_report",
    "parse_unused_report",
    "plan_removals",
    "prune_file",
    "prune_source",
    "prune_unused_steps",
]
