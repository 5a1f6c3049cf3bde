"""Example block extraction and language inference."""

from __future__ import annotations

import re
import textwrap
from typing import List, Optional, Sequence

from ..models import PYTHON, RUST, ExampleBlock

NEUTRAL = "text"

_PYTHON_PATTERNS = (
    (re.compile(r"^>>>"), 3),
    (re.compile(r"^(?:async\s+)?def\s"), 2),
    (re.compile(r"^class\s"), 2),
    (re.compile(r"^(?:import\s|from\s+\S+\s+import\s)"), 2),
    (re.compile(r"\bself\b"), 1),
    (re.compile(r":$"), 1),
    (re.compile(r"\b(?:None|True|False)\b"), 1),
)

_RUST_PATTERNS = (
    (re.compile(r"\bfn\s"), 2),
    (re.compile(r"\blet\s"), 2),
    (re.compile(r"^use\s+\w+::"), 2),
    (re.compile(r"^(?:pub\s+)?(?:struct|enum|impl|trait|mod)\s"), 2),
    (re.compile(r"\w!\("), 2),
    (re.compile(r"->"), 1),
    (re.compile(r"::"), 1),
    (re.compile(r";$"), 1),
    (re.compile(r"&(?:mut\s|self\b)"), 1),
)

_FENCE_ALIASES = {
    "py": PYTHON,
    "python": PYTHON,
    "python3": PYTHON,
    "pycon": PYTHON,
    "rs": RUST,
    "rust": RUST,
    # rustdoc fence attributes imply Rust code
    "no_run": RUST,
    "ignore": RUST,
    "should_panic": RUST,
    "compile_fail": RUST,
    "edition2018": RUST,
    "edition2021": RUST,
    "text": NEUTRAL,
    "txt": NEUTRAL,
}


def infer_language(text: str) -> str:
    """Guess the language of a code block from its first non-blank line."""
    first = next((line.strip() for line in text.splitlines() if line.strip()), "")
    if not first:
        return NEUTRAL
    python_score = sum(weight for pattern, weight in _PYTHON_PATTERNS if pattern.search(first))
    rust_score = sum(weight for pattern, weight in _RUST_PATTERNS if pattern.search(first))
    if python_score > rust_score:
        return PYTHON
    if rust_score > python_score:
        return RUST
    return NEUTRAL


def fence_language(tag: str) -> Optional[str]:
    cleaned = tag.strip().lower()
    if not cleaned:
        return None
    first = cleaned.split(",")[0].strip()
    return _FENCE_ALIASES.get(first, first)


def split_examples(lines: Sequence[str]) -> List[ExampleBlock]:
    """Split an Examples section body into fenced or paragraph code blocks."""
    body = textwrap.dedent("\n".join(lines)).splitlines()
    blocks: List[ExampleBlock] = []
    paragraph: List[str] = []

    def _flush() -> None:
        if paragraph:
            text = "\n".join(paragraph).rstrip()
            blocks.append(ExampleBlock(text=text, language=infer_language(text)))
            paragraph.clear()

    index = 0
    while index < len(body):
        line = body[index]
        stripped = line.strip()
        if stripped.startswith("```"):
            _flush()
            tag = stripped[3:]
            fenced: List[str] = []
            index += 1
            while index < len(body) and not body[index].strip().startswith("```"):
                fenced.append(body[index])
                index += 1
            index += 1  # closing fence, or past the end when unterminated
            text = textwrap.dedent("\n".join(fenced)).strip("\n")
            language = fence_language(tag) or infer_language(text)
            blocks.append(ExampleBlock(text=text, language=language))
            continue
        if not stripped:
            _flush()
        else:
            paragraph.append(line)
        index += 1
    _flush()
    return blocks


__all__ = ["NEUTRAL", "fence_language", "infer_language", "split_examples"]
