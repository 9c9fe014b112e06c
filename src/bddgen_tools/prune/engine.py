"""Driver that removes reported step definitions from step files."""

from __future__ import annotations

import difflib
import subprocess
from collections.abc import Callable, Collection
from dataclasses import dataclass
from pathlib import Path

from bddgen_tools.config import ToolsConfig
from bddgen_tools.prune.report import UnusedStepReport
from bddgen_tools.prune.rewrite import prune_source
from bddgen_tools.security import PathBlockedError, resolve_under_root


class DirtyWorktreeError(Exception):
    """Raised when step files lack a clean version-control baseline to revert to."""

    def __init__(self, reason: str, hint: str) -> None:
        super().__init__(reason)
        self.reason = reason
        self.hint = hint


@dataclass(slots=True, frozen=True)
class PruneResult:
    """Outcome for one step file."""

    relative_path: str
    reported: int
    removed_count: int
    unmatched_lines: tuple[int, ...]
    changed: bool
    diff: str = ""


@dataclass(slots=True, frozen=True)
class PruneSummary:
    """Aggregate outcome of one pruning run."""

    results: tuple[PruneResult, ...]
    malformed_entries: tuple[str, ...]
    rejected_paths: tuple[str, ...]
    dry_run: bool

    @property
    def removed_total(self) -> int:
        return sum(result.removed_count for result in self.results)

    @property
    def files_changed(self) -> int:
        return sum(1 for result in self.results if result.changed)

    @property
    def unmatched_total(self) -> int:
        return sum(len(result.unmatched_lines) for result in self.results)

    @property
    def warning_count(self) -> int:
        return len(self.malformed_entries) + len(self.rejected_paths) + self.unmatched_total

    def to_metadata(self) -> dict[str, object]:
        return {
            "files": len(self.results),
            "files_changed": self.files_changed,
            "removed": self.removed_total,
            "unmatched": self.unmatched_total,
            "malformed": len(self.malformed_entries),
            "rejected": len(self.rejected_paths),
            "dry_run": self.dry_run,
        }


ResultCallback = Callable[[PruneResult], None]


def _git(repo_root: Path, args: list[str]) -> str:
    try:
        completed = subprocess.run(
            ["git", *args],
            cwd=repo_root,
            check=False,
            capture_output=True,
            text=True,
        )
    except OSError as exc:
        raise DirtyWorktreeError(
            reason=f"Could not run git: {exc}",
            hint="Install git, or pass --allow-dirty to prune without a safety net.",
        ) from exc
    if completed.returncode != 0:
        raise DirtyWorktreeError(
            reason=completed.stderr.strip() or "git command failed",
            hint="Run inside a git working tree, or pass --allow-dirty.",
        )
    return completed.stdout


def ensure_clean_worktree(repo_root: Path, steps_dir: str) -> None:
    """Refuse to rewrite step files that have uncommitted changes."""
    status = _git(repo_root, ["status", "--porcelain", "--", steps_dir])
    dirty = [line for line in status.splitlines() if line.strip()]
    if dirty:
        raise DirtyWorktreeError(
            reason=f"{len(dirty)} uncommitted change(s) under {steps_dir}.",
            hint="Commit or stash them first so pruning can be reviewed and reverted.",
        )


def prune_file(
    path: Path,
    unused_start_lines: Collection[int],
    *,
    relative_path: str,
    dry_run: bool = False,
) -> PruneResult:
    """Remove the unused blocks of one file, overwriting it unless ``dry_run``."""
    original = path.read_bytes().decode("utf-8")
    rewritten, plan = prune_source(original, unused_start_lines)
    changed = rewritten != original
    diff = ""
    if dry_run and changed:
        diff = "".join(
            difflib.unified_diff(
                original.splitlines(keepends=True),
                rewritten.splitlines(keepends=True),
                fromfile=f"a/{relative_path}",
                tofile=f"b/{relative_path}",
            )
        )
    elif changed:
        path.write_text(rewritten, encoding="utf-8", newline="")
    return PruneResult(
        relative_path=relative_path,
        reported=len(unused_start_lines),
        removed_count=len(plan.removed_blocks),
        unmatched_lines=plan.unmatched_lines,
        changed=changed,
        diff=diff,
    )


def prune_unused_steps(
    config: ToolsConfig,
    report: UnusedStepReport,
    *,
    dry_run: bool = False,
    on_result: ResultCallback | None = None,
) -> PruneSummary:
    """Prune every file named in the report, in sorted path order."""
    steps_root = config.steps_root
    results: list[PruneResult] = []
    rejected: list[str] = []
    for relative_path in report.files():
        try:
            path = resolve_under_root(steps_root, relative_path)
        except PathBlockedError:
            rejected.append(relative_path)
            continue
        result = prune_file(
            path,
            report.entries[relative_path],
            relative_path=relative_path,
            dry_run=dry_run,
        )
        if on_result is not None:
            on_result(result)
        results.append(result)
    return PruneSummary(
        results=tuple(results),
        malformed_entries=report.malformed,
        rejected_paths=tuple(rejected),
        dry_run=dry_run,
    )
