"""Extraction of ``file:line`` entries from unused-step command output."""

from __future__ import annotations

import re
import subprocess
from dataclasses import dataclass, field

from bddgen_tools.config import ToolsConfig

_ENTRY_TAIL = r"([^:\s]+):(\d+)"


class UnusedStepsCommandError(Exception):
    """Raised when the unused-steps command fails or cannot be started."""

    def __init__(self, reason: str, hint: str) -> None:
        super().__init__(reason)
        self.reason = reason
        self.hint = hint


@dataclass(slots=True, frozen=True)
class UnusedStepReport:
    """Unused introducer lines (1-based) grouped by path relative to the steps dir."""

    entries: dict[str, frozenset[int]] = field(default_factory=dict)
    malformed: tuple[str, ...] = ()

    @property
    def total(self) -> int:
        return sum(len(lines) for lines in self.entries.values())

    def files(self) -> list[str]:
        return sorted(self.entries)


def parse_unused_report(text: str, steps_dir: str) -> UnusedStepReport:
    """Collect every ``<steps_dir>/<path>:<line>`` substring from free-form text.

    Mentions of the steps dir that do not have the ``path:line`` shape are
    kept in ``malformed`` so callers can warn about them.
    """
    prefix = steps_dir.replace("\\", "/").rstrip("/") + "/"
    prefix_re = re.compile(re.escape(prefix))
    entry_re = re.compile(re.escape(prefix) + _ENTRY_TAIL)

    grouped: dict[str, set[int]] = {}
    malformed: list[str] = []
    for mention in prefix_re.finditer(text):
        match = entry_re.match(text, mention.start())
        if match is None:
            malformed.append(_token_at(text, mention.start()))
            continue
        line_number = int(match.group(2))
        if line_number < 1:
            malformed.append(match.group(0))
            continue
        grouped.setdefault(match.group(1), set()).add(line_number)

    return UnusedStepReport(
        entries={path: frozenset(lines) for path, lines in sorted(grouped.items())},
        malformed=tuple(malformed),
    )


def fetch_unused_report(config: ToolsConfig) -> str:
    """Run the configured unused-steps command and return its standard output."""
    command = list(config.commands.unused_steps)
    try:
        completed = subprocess.run(
            command,
            cwd=config.repo_root,
            check=False,
            capture_output=True,
            text=True,
        )
    except OSError as exc:
        raise UnusedStepsCommandError(
            reason=f"Could not start '{command[0]}': {exc}",
            hint="Install the generator or set commands.unused_steps.",
        ) from exc
    if completed.returncode != 0:
        detail = (completed.stderr or "").strip()
        raise UnusedStepsCommandError(
            reason=detail or f"Unused-steps command exited with status {completed.returncode}.",
            hint="Run the command by hand, or pass --report-file with saved output.",
        )
    return completed.stdout


def _token_at(text: str, start: int) -> str:
    end = start
    while end < len(text) and not text[end].isspace():
        end += 1
    return text[start:end]
