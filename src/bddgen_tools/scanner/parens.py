"""Line-oriented paren-depth scanning for step-definition call expressions.

The scanner is deliberately narrow. It knows three quote characters and the
backslash escape, and nothing else about the source language. In particular
template-literal interpolation (``${...}``) is treated as string content, so
parens inside an interpolation are not counted. String state does not carry
over from one line to the next.
"""

from __future__ import annotations

import re
from collections.abc import Sequence
from dataclasses import dataclass

STEP_KEYWORDS = ("Given", "When", "Then")
QUOTE_CHARS = frozenset({'"', "'", "`"})
ESCAPE_CHAR = "\\"

_STEP_START_RE = re.compile(rf"^({'|'.join(STEP_KEYWORDS)})\(")


@dataclass(slots=True, frozen=True)
class ParenCounts:
    """Parens found outside string literals on one line."""

    open: int
    close: int

    @property
    def delta(self) -> int:
        return self.open - self.close


@dataclass(slots=True, frozen=True)
class StepBlock:
    """Inclusive 0-based line range of one step definition."""

    start_line: int
    end_line: int

    @property
    def report_line(self) -> int:
        """1-based introducer line, as used by unused-step reports."""
        return self.start_line + 1

    def line_indexes(self) -> range:
        return range(self.start_line, self.end_line + 1)


def count_parens(line: str) -> ParenCounts:
    """Count ``(`` and ``)`` in a line, ignoring string contents."""
    open_count = 0
    close_count = 0
    in_string: str | None = None
    escaped = False

    for char in line:
        if escaped:
            escaped = False
            continue
        if char == ESCAPE_CHAR:
            escaped = True
            continue
        if in_string is None:
            if char in QUOTE_CHARS:
                in_string = char
                continue
        else:
            if char == in_string:
                in_string = None
            continue
        if char == "(":
            open_count += 1
        elif char == ")":
            close_count += 1

    return ParenCounts(open=open_count, close=close_count)


def is_step_start(line: str) -> bool:
    """Return True when the trimmed line opens a Given/When/Then call."""
    return _STEP_START_RE.match(line.strip()) is not None


def find_block_end(lines: Sequence[str], start: int) -> int | None:
    """Return the line where paren depth first returns to zero, or None.

    Depth zero only counts once an opening paren has been seen at or after
    ``start``. None means the call never closes before the end of input.
    """
    depth = 0
    found_open_paren = False
    for index in range(start, len(lines)):
        counts = count_parens(lines[index])
        depth += counts.delta
        if counts.open > 0:
            found_open_paren = True
        if found_open_paren and depth == 0:
            return index
    return None


def locate_step_blocks(lines: Sequence[str]) -> list[StepBlock]:
    """Locate every terminated step-definition block, ordered by start line."""
    blocks: list[StepBlock] = []
    for index, line in enumerate(lines):
        if not is_step_start(line):
            continue
        end = find_block_end(lines, index)
        if end is None:
            continue
        blocks.append(StepBlock(start_line=index, end_line=end))
    return blocks
