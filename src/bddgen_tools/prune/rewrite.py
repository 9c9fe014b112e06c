"""Line-level removal of step blocks and blank-line normalization."""

from __future__ import annotations

from collections.abc import Collection, Sequence
from dataclasses import dataclass

from bddgen_tools.scanner import StepBlock, locate_step_blocks


@dataclass(slots=True, frozen=True)
class RemovalPlan:
    """Lines to drop for one file."""

    removed_indexes: frozenset[int]
    removed_blocks: tuple[StepBlock, ...]
    unmatched_lines: tuple[int, ...]


def is_blank(line: str) -> bool:
    return line.strip() == ""


def plan_removals(
    lines: Sequence[str],
    blocks: Sequence[StepBlock],
    unused_start_lines: Collection[int],
) -> RemovalPlan:
    """Mark every unused block plus one adjacent separator blank line.

    The separator is the preceding line when it is blank and still kept,
    otherwise the following line under the same condition. Taking only the
    preceding blank line would strand a blank line after a removed block that
    has none free above it, as at the top of a file, so the following line
    is the fallback here. Report lines with no block starting there are
    returned as unmatched.
    """
    removed: set[int] = set()
    removed_blocks: list[StepBlock] = []
    for block in blocks:
        if block.report_line not in unused_start_lines:
            continue
        removed_blocks.append(block)
        removed.update(block.line_indexes())
        before = block.start_line - 1
        after = block.end_line + 1
        if before >= 0 and before not in removed and is_blank(lines[before]):
            removed.add(before)
        elif after < len(lines) and after not in removed and is_blank(lines[after]):
            removed.add(after)

    located = {block.report_line for block in blocks}
    unmatched = tuple(sorted(line for line in unused_start_lines if line not in located))
    return RemovalPlan(
        removed_indexes=frozenset(removed),
        removed_blocks=tuple(removed_blocks),
        unmatched_lines=unmatched,
    )


def collapse_blank_lines(lines: Sequence[str]) -> list[str]:
    """Reduce every run of consecutive blank lines to a single blank line."""
    cleaned: list[str] = []
    previous_blank = False
    for line in lines:
        blank = is_blank(line)
        if blank and previous_blank:
            continue
        cleaned.append(line)
        previous_blank = blank
    return cleaned


def split_source(text: str) -> tuple[list[str], bool]:
    """Split text on ``\\n`` into lines, returning them with a trailing-newline flag.

    A ``\\r`` before the newline stays on its line, so report line numbers
    match editors for LF, CRLF and mixed files alike.
    """
    if not text:
        return [], False
    ends_with_newline = text.endswith("\n")
    body = text[:-1] if ends_with_newline else text
    return body.split("\n"), ends_with_newline


def join_source(lines: Sequence[str], ends_with_newline: bool) -> str:
    if not lines:
        return ""
    text = "\n".join(lines)
    return text + "\n" if ends_with_newline else text


def prune_source(text: str, unused_start_lines: Collection[int]) -> tuple[str, RemovalPlan]:
    """Return ``text`` without the unused step blocks, plus the plan applied."""
    lines, ends_with_newline = split_source(text)
    blocks = locate_step_blocks(lines)
    plan = plan_removals(lines, blocks, unused_start_lines)
    if not plan.removed_blocks:
        return text, plan
    kept = [line for index, line in enumerate(lines) if index not in plan.removed_indexes]
    kept = collapse_blank_lines(kept)
    if kept and not ends_with_newline and len(lines) - 1 in plan.removed_indexes:
        # The new last line lost its newline; drop the orphaned carriage return.
        kept[-1] = kept[-1].removesuffix("\r")
    return join_source(kept, ends_with_newline), plan
