from __future__ import annotations

from bddgen_tools.prune import collapse_blank_lines, plan_removals, prune_source
from bddgen_tools.scanner import locate_step_blocks

SCENARIO = 'Given("a", async () => {\n  doThing("(not a paren)");\n});\n\nGiven("b", async () => {});\n'


def test_removes_reported_block_and_its_separator() -> None:
    rewritten, plan = prune_source(SCENARIO, {1})
    assert rewritten == 'Given("b", async () => {});\n'
    assert len(plan.removed_blocks) == 1
    assert plan.unmatched_lines == ()


def test_removing_last_block_consumes_preceding_blank_line() -> None:
    rewritten, _ = prune_source(SCENARIO, {5})
    assert rewritten == 'Given("a", async () => {\n  doThing("(not a paren)");\n});\n'


def test_removing_every_block_leaves_only_header() -> None:
    text = "\n".join(
        [
            "import { Given } from './fixtures';",
            "",
            'Given("a", () => {});',
            "",
            'When("b", () => {',
            "  go();",
            "});",
            "",
            'Then("c", () => {});',
            "",
        ]
    )
    rewritten, plan = prune_source(text, {3, 5, 9})
    assert len(plan.removed_blocks) == 3
    assert rewritten == "import { Given } from './fixtures';\n"


def test_adjacent_removed_blocks_keep_single_separator_between_survivors() -> None:
    text = "\n".join(
        [
            'Given("keep-1", () => {});',
            "",
            'Given("drop-1", () => {});',
            "",
            'Given("drop-2", () => {});',
            "",
            'Given("keep-2", () => {});',
            "",
        ]
    )
    rewritten, _ = prune_source(text, {3, 5})
    assert rewritten == 'Given("keep-1", () => {});\n\nGiven("keep-2", () => {});\n'


def test_adjacent_blocks_without_blank_lines_between() -> None:
    text = 'Given("a", () => {});\nGiven("b", () => {});\nGiven("c", () => {});\n'
    rewritten, _ = prune_source(text, {2})
    assert rewritten == 'Given("a", () => {});\nGiven("c", () => {});\n'


def test_unmatched_report_lines_are_returned_and_nothing_changes() -> None:
    rewritten, plan = prune_source(SCENARIO, {2, 40})
    assert rewritten == SCENARIO
    assert plan.removed_blocks == ()
    assert plan.unmatched_lines == (2, 40)


def test_unchanged_file_keeps_existing_blank_runs() -> None:
    text = 'Given("a", () => {});\n\n\n\nGiven("b", () => {});\n'
    rewritten, _ = prune_source(text, set())
    assert rewritten == text


def test_blank_runs_elsewhere_are_collapsed_after_removal() -> None:
    text = 'const x = 1;\n\n\n\nGiven("a", () => {});\n\nGiven("b", () => {});\n'
    rewritten, _ = prune_source(text, {7})
    assert rewritten == 'const x = 1;\n\nGiven("a", () => {});\n'


def test_crlf_and_missing_trailing_newline_are_preserved() -> None:
    text = 'Given("a", () => {});\r\n\r\nGiven("b", () => {});'
    rewritten, _ = prune_source(text, {1})
    assert rewritten == 'Given("b", () => {});'

    crlf = 'Given("a", () => {\r\n});\r\n\r\nGiven("b", () => {});\r\n'
    rewritten, _ = prune_source(crlf, {4})
    assert rewritten == 'Given("a", () => {\r\n});\r\n'


def test_mixed_line_endings_keep_line_numbers_and_unreported_blocks() -> None:
    rewritten, plan = prune_source('Given("a", () => {});\nGiven("b", () => {});\r\n', {1})
    assert rewritten == 'Given("b", () => {});\r\n'
    assert plan.unmatched_lines == ()

    text = 'const x = 1;\r\nGiven("a", () => {});\nGiven("b", () => {});\n'
    rewritten, plan = prune_source(text, {3})
    assert plan.unmatched_lines == ()
    assert rewritten == 'const x = 1;\r\nGiven("a", () => {});\n'


def test_orphaned_carriage_return_is_dropped_without_trailing_newline() -> None:
    rewritten, _ = prune_source('const x = 1;\r\nGiven("a", () => {});', {2})
    assert rewritten == "const x = 1;"


def test_plan_only_marks_reported_blocks() -> None:
    lines = SCENARIO.split("\n")
    blocks = locate_step_blocks(lines)
    plan = plan_removals(lines, blocks, {1})
    assert plan.removed_indexes == frozenset({0, 1, 2, 3})


def test_collapse_blank_lines_treats_whitespace_only_as_blank() -> None:
    assert collapse_blank_lines(["a", "", "  ", "\t", "b", "", "c"]) == ["a", "", "b", "", "c"]
    assert collapse_blank_lines(["", "", "a"]) == ["", "a"]
    assert collapse_blank_lines([]) == []
