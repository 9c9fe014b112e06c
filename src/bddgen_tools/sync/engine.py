"""Content-based synchronization of a generated tree into the canonical tree."""

from __future__ import annotations

import time
from collections.abc import Callable, Sequence
from pathlib import Path

from bddgen_tools.config import ToolsConfig
from bddgen_tools.sync.generator import generate_to_scratch, remove_tree
from bddgen_tools.sync.models import FileDecision, SyncSummary, summarize

DecisionCallback = Callable[[FileDecision], None]


def list_files(root: Path) -> list[Path]:
    """Return every regular file under ``root`` in deterministic order."""
    if not root.exists():
        return []
    return sorted(
        (path for path in root.rglob("*") if path.is_file()),
        key=lambda path: path.relative_to(root).as_posix(),
    )


def copy_file(source: Path, destination: Path) -> None:
    destination.parent.mkdir(parents=True, exist_ok=True)
    destination.write_bytes(source.read_bytes())


def classify_and_copy(
    generated_file: Path,
    generated_root: Path,
    canonical_root: Path,
) -> FileDecision:
    """Copy one generated file only when it is new or its content differs."""
    relative = generated_file.relative_to(generated_root)
    relative_path = relative.as_posix()
    canonical_file = canonical_root / relative
    generated_content = generated_file.read_bytes()

    if canonical_file.exists():
        if canonical_file.read_bytes() == generated_content:
            return FileDecision(relative_path=relative_path, action="skipped")
        copy_file(generated_file, canonical_file)
        return FileDecision(relative_path=relative_path, action="updated")

    copy_file(generated_file, canonical_file)
    return FileDecision(relative_path=relative_path, action="created")


def apply_generated_tree(
    generated_root: Path,
    canonical_root: Path,
    on_decision: DecisionCallback | None = None,
) -> list[FileDecision]:
    """Apply a generated tree file by file; canonical files are never deleted."""
    decisions: list[FileDecision] = []
    for generated_file in list_files(generated_root):
        decision = classify_and_copy(generated_file, generated_root, canonical_root)
        if on_decision is not None:
            on_decision(decision)
        decisions.append(decision)
    return decisions


def synchronize(
    config: ToolsConfig,
    extra_args: Sequence[str] = (),
    *,
    verbose: bool = False,
    on_decision: DecisionCallback | None = None,
) -> SyncSummary:
    """Regenerate specs and touch only canonical files whose content changed."""
    started = time.perf_counter()
    scratch_root = config.scratch_root
    try:
        generate_to_scratch(config, extra_args, verbose=verbose)
        decisions = apply_generated_tree(scratch_root, config.canonical_root, on_decision)
    finally:
        remove_tree(scratch_root)
    elapsed_ms = int((time.perf_counter() - started) * 1000)
    return summarize(decisions, elapsed_ms)
