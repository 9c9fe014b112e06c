"""Command-line entrypoints for the synchronizer and the pruner."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from bddgen_tools.config import CliOverrides, ToolsConfig, load_effective_config
from bddgen_tools.logging import JsonlAuditLogger, NullAuditLogger, build_event, new_run_id
from bddgen_tools.prune import (
    DirtyWorktreeError,
    PruneResult,
    PruneSummary,
    UnusedStepReport,
    UnusedStepsCommandError,
    ensure_clean_worktree,
    fetch_unused_report,
    parse_unused_report,
    prune_unused_steps,
)
from bddgen_tools.security import PathBlockedError
from bddgen_tools.sync import (
    FileDecision,
    GeneratorConfigError,
    GeneratorError,
    synchronize,
)

SYNC_PROG = "bddgen-sync"
PRUNE_PROG = "bddgen-prune"

_REPORTED_ERRORS = (
    GeneratorError,
    GeneratorConfigError,
    UnusedStepsCommandError,
    DirtyWorktreeError,
    PathBlockedError,
    ValueError,
    OSError,
)


def _add_common_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("-v", "--verbose", action="store_true", help="Print per-file detail.")
    parser.add_argument("--repo-root", default=".", help="Project root. Defaults to cwd.")
    parser.add_argument("--data-dir", default=None, help="Directory for the audit log.")
    parser.add_argument(
        "--no-audit", action="store_true", help="Do not append to the JSONL audit log."
    )


def build_sync_parser() -> argparse.ArgumentParser:
    """Build parser for the synchronizer; unknown arguments go to the generator."""
    parser = argparse.ArgumentParser(
        prog=SYNC_PROG,
        description="Regenerate BDD specs, writing only files whose content changed.",
        allow_abbrev=False,
    )
    _add_common_arguments(parser)
    return parser


def build_prune_parser() -> argparse.ArgumentParser:
    """Build parser for the unused-step pruner."""
    parser = argparse.ArgumentParser(
        prog=PRUNE_PROG,
        description="Remove step definitions reported as unused.",
        allow_abbrev=False,
    )
    _add_common_arguments(parser)
    parser.add_argument(
        "--report-file",
        default=None,
        help="Read unused-step output from a file ('-' for stdin) instead of running it.",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Show what would be removed without rewriting any file.",
    )
    parser.add_argument(
        "--allow-dirty",
        action="store_true",
        help="Prune even when step files have uncommitted changes.",
    )
    return parser


def _overrides(args: argparse.Namespace) -> CliOverrides:
    return CliOverrides(
        data_dir=Path(args.data_dir).resolve() if args.data_dir is not None else None,
        audit_enabled=False if args.no_audit else None,
    )


def _audit_logger(config: ToolsConfig) -> JsonlAuditLogger | NullAuditLogger:
    if not config.audit.enabled:
        return NullAuditLogger()
    return JsonlAuditLogger(path=config.audit_log_path)


def _report_failure(prog: str, exc: Exception) -> str:
    reason = getattr(exc, "reason", None) or str(exc)
    print(f"{prog} failed: {reason}", file=sys.stderr)
    hint = getattr(exc, "hint", None)
    if hint:
        print(f"  hint: {hint}", file=sys.stderr)
    return reason


def _forwarded_args(extra: list[str]) -> list[str]:
    if extra and extra[0] == "--":
        return extra[1:]
    return extra


def sync_main(argv: list[str] | None = None) -> int:
    """Entrypoint for ``bddgen-sync``."""
    parser = build_sync_parser()
    args, extra = parser.parse_known_args(argv)
    forwarded = _forwarded_args(extra)
    try:
        config = load_effective_config(Path(args.repo_root), _overrides(args))
    except (ValueError, PathBlockedError, OSError) as exc:
        _report_failure(SYNC_PROG, exc)
        return 1

    audit = _audit_logger(config)
    run_id = new_run_id()

    def print_decision(decision: FileDecision) -> None:
        print(f"  {decision.describe()}")

    if args.verbose:
        print(f"Generating specs into {config.paths.scratch_dir}...")
    try:
        summary = synchronize(
            config,
            forwarded,
            verbose=args.verbose,
            on_decision=print_decision if args.verbose else None,
        )
    except _REPORTED_ERRORS as exc:
        reason = _report_failure(SYNC_PROG, exc)
        audit.append(
            build_event(
                SYNC_PROG,
                run_id,
                ok=False,
                error=reason,
                metadata={"forwarded_args": len(forwarded)},
            )
        )
        return 1

    print(summary.summary_line())
    audit.append(
        build_event(
            SYNC_PROG,
            run_id,
            ok=True,
            metadata={**summary.to_metadata(), "forwarded_args": len(forwarded)},
        )
    )
    return 0


def _read_report_text(config: ToolsConfig, report_file: str | None) -> str:
    if report_file is None:
        return fetch_unused_report(config)
    if report_file == "-":
        return sys.stdin.read()
    path = Path(report_file)
    if not path.is_absolute():
        path = config.repo_root / path
    return path.read_text(encoding="utf-8")


def _print_report(report: UnusedStepReport) -> None:
    if not report.entries:
        print("No unused steps reported.")
        return
    print("Unused steps by file:")
    for relative_path in report.files():
        print(f"  {relative_path}: {len(report.entries[relative_path])} steps")


def _print_warnings(summary: PruneSummary, verbose: bool) -> None:
    if summary.malformed_entries:
        print(f"warning: ignored {len(summary.malformed_entries)} malformed report entries")
        if verbose:
            for entry in summary.malformed_entries:
                print(f"  {entry}")
    for relative_path in summary.rejected_paths:
        print(f"warning: skipped {relative_path} (outside the steps directory)")
    for result in summary.results:
        for line in result.unmatched_lines:
            print(f"warning: {result.relative_path}:{line} is not a step definition start")


def prune_main(argv: list[str] | None = None) -> int:
    """Entrypoint for ``bddgen-prune``."""
    parser = build_prune_parser()
    args = parser.parse_args(argv)
    try:
        config = load_effective_config(Path(args.repo_root), _overrides(args))
    except (ValueError, PathBlockedError, OSError) as exc:
        _report_failure(PRUNE_PROG, exc)
        return 1

    audit = _audit_logger(config)
    run_id = new_run_id()
    steps_dir = config.paths.steps_dir

    def print_result(result: PruneResult) -> None:
        print(f"\nProcessing {steps_dir}/{result.relative_path}...")
        verb = "Would remove" if args.dry_run else "Removed"
        print(f"  {verb} {result.removed_count} step definitions")
        if result.diff and args.verbose:
            print(result.diff, end="")
        elif result.changed and not args.dry_run:
            print(f"  Saved {steps_dir}/{result.relative_path}")

    try:
        if not args.allow_dirty and not args.dry_run:
            ensure_clean_worktree(config.repo_root, steps_dir)
        report = parse_unused_report(_read_report_text(config, args.report_file), steps_dir)
        _print_report(report)
        summary = prune_unused_steps(
            config, report, dry_run=args.dry_run, on_result=print_result
        )
    except _REPORTED_ERRORS as exc:
        reason = _report_failure(PRUNE_PROG, exc)
        audit.append(build_event(PRUNE_PROG, run_id, ok=False, error=reason))
        return 1

    _print_warnings(summary, args.verbose)
    prefix = "Dry run: would remove" if args.dry_run else "Removed"
    print(
        f"\n{prefix} {summary.removed_total} step definitions from "
        f"{summary.files_changed} files ({summary.warning_count} warnings)"
    )
    audit.append(build_event(PRUNE_PROG, run_id, ok=True, metadata=summary.to_metadata()))
    return 0


def main(argv: list[str] | None = None) -> int:
    """Dispatch ``python -m bddgen_tools sync|prune ...``."""
    args = list(sys.argv[1:] if argv is None else argv)
    commands = {"sync": sync_main, "prune": prune_main}
    if not args or args[0] not in commands:
        print("usage: python -m bddgen_tools {sync,prune} [options]", file=sys.stderr)
        return 2
    return commands[args[0]](args[1:])


if __name__ == "__main__":
    raise SystemExit(main())
