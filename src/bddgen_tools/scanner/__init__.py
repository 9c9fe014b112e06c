"""Step-definition block scanning."""

from .parens import (
    STEP_KEYWORDS,
    ParenCounts,
    StepBlock,
    count_parens,
    find_block_end,
    is_step_start,
    locate_step_blocks,
)

__all__ = [
    "STEP_KEYWORDS",
    "ParenCounts",
    "StepBlock",
    "count_parens",
    "find_block_end",
    "is_step_start",
    "locate_step_blocks",
]
