"""Tests for example block splitting and language inference."""

from __future__ import annotations

import pytest

from bridgedoc.grammar import infer_language, split_examples
from bridgedoc.grammar.examples import fence_language


@pytest.mark.parametrize(
    ("line", "expected"),
    [
        (">>> double(2)", "python"),
        ("def area(self) -> float:", "python"),
        ("from demo import shapes", "python"),
        ("let x = 1;", "rust"),
        ("fn area(&self) -> f64 {", "rust"),
        ("assert_eq!(double(2), 4);", "rust"),
        ("use demo::shapes::Widget;", "rust"),
        ("use it like this", "text"),
        ("x = compute()", "text"),
        ("", "text"),
    ],
)
def test_infer_language_scores_first_line(line: str, expected: str) -> None:
    assert infer_language(line) == expected


def test_infer_language_skips_leading_blank_lines() -> None:
    assert infer_language("\n\n   \nlet y = 2;\n") == "rust"


@pytest.mark.parametrize(
    ("tag", "expected"),
    [
        ("rust", "rust"),
        ("rust,no_run", "rust"),
        ("ignore", "rust"),
        ("py", "python"),
        ("python3", "python"),
        ("bash", "bash"),
        ("", None),
    ],
)
def test_fence_language(tag: str, expected) -> None:
    assert fence_language(tag) == expected


def test_fenced_blocks_are_kept_whole() -> None:
    blocks = split_examples(["```python", "x = 1", "", "y = 2", "```"])

    assert len(blocks) == 1
    assert blocks[0].text == "x = 1\n\ny = 2"
    assert blocks[0].language == "python"


def test_paragraphs_become_separate_blocks() -> None:
    blocks = split_examples([">>> f()", "1", "", "let z = f();"])

    assert [block.language for block in blocks] == ["python", "rust"]
    assert blocks[0].text == ">>> f()\n1"


def test_unterminated_fence_runs_to_the_end() -> None:
    blocks = split_examples(["```", "let a = 1;"])

    assert len(blocks) == 1
    assert blocks[0].text == "let a = 1;"
    assert blocks[0].language == "rust"
