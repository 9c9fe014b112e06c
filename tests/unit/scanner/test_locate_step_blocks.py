from __future__ import annotations

from bddgen_tools.scanner import StepBlock, find_block_end, locate_step_blocks


def _lines(text: str) -> list[str]:
    return text.split("\n")


def test_single_line_steps() -> None:
    lines = _lines('Given("a", async () => {});\nWhen("b", async () => {});')
    assert locate_step_blocks(lines) == [
        StepBlock(start_line=0, end_line=0),
        StepBlock(start_line=1, end_line=1),
    ]


def test_multi_line_body_with_nested_calls() -> None:
    lines = _lines(
        "\n".join(
            [
                "import { Given } from './fixtures';",
                "",
                'Given("I open {string}", async ({ page }, path) => {',
                "  await page.goto(buildUrl(path, { query: encode(path) }));",
                "  await expect(page.locator('main')).toBeVisible();",
                "});",
                "",
                'Then("done", async () => {});',
            ]
        )
    )
    assert locate_step_blocks(lines) == [
        StepBlock(start_line=2, end_line=5),
        StepBlock(start_line=7, end_line=7),
    ]


def test_parens_inside_strings_do_not_end_block_early() -> None:
    lines = [
        'When("user types (", async ({ page }) => {',
        "  await page.fill('#q', ')))');",
        '  await page.fill("#r", "say \\")\\" now");',
        "  await run(`)`);",
        "});",
    ]
    assert locate_step_blocks(lines) == [StepBlock(start_line=0, end_line=4)]


def test_indented_introducer_is_a_block_start() -> None:
    lines = ["  Then(", "    'x',", "    () => {},", "  );"]
    assert locate_step_blocks(lines) == [StepBlock(start_line=0, end_line=3)]


def test_unterminated_block_is_not_located() -> None:
    lines = ['Given("a", async () => {', "  doThing();"]
    assert find_block_end(lines, 0) is None
    assert locate_step_blocks(lines) == []


def test_depth_zero_before_any_open_paren_does_not_end_block() -> None:
    lines = ["Given(", "  'a',", "  fn", ")"]
    assert find_block_end(lines, 0) == 3
    # A start line whose parens are all inside a string keeps scanning.
    assert find_block_end(['"(" +', "call(", ")"], 0) == 2


def test_step_block_report_line_is_one_based() -> None:
    block = StepBlock(start_line=4, end_line=6)
    assert block.report_line == 5
    assert list(block.line_indexes()) == [4, 5, 6]


def test_empty_input() -> None:
    assert locate_step_blocks([]) == []
