"""Section header recognition and dialect detection."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Optional, Sequence

from ..models import LABELED, PLAIN, UNDERLINED

# Sections with a structured body.
SECTION_KEYS = {
    "args": "params",
    "arguments": "params",
    "parameters": "params",
    "params": "params",
    "returns": "returns",
    "return": "returns",
    "raises": "raises",
    "exceptions": "raises",
    "example": "examples",
    "examples": "examples",
}

# Sections that only delimit other sections; their bodies are kept as text.
BOUNDARY_TITLES = {
    "attributes": "Attributes",
    "note": "Note",
    "notes": "Notes",
    "yields": "Yields",
    "yield": "Yields",
    "warnings": "Warnings",
    "warning": "Warning",
    "see also": "See Also",
    "references": "References",
}

_LABELED = re.compile(r"^(?P<indent>[ \t]*)(?P<key>[A-Za-z]+(?: [A-Za-z]+)?):(?P<rest>.*)$")
_DASHES = re.compile(r"^-+$")


@dataclass
class Header:
    """A recognized section header line."""

    key: str
    title: str
    indent: int
    rest: str = ""

    @property
    def structured(self) -> bool:
        return self.key in ("params", "returns", "raises", "examples")


def indent_of(line: str) -> int:
    return len(line) - len(line.lstrip())


def _lookup(word: str) -> Optional[tuple[str, str]]:
    lowered = word.strip().lower()
    if lowered in SECTION_KEYS:
        return SECTION_KEYS[lowered], word.strip()
    if lowered in BOUNDARY_TITLES:
        return "extra", BOUNDARY_TITLES[lowered]
    return None


def labeled_header(line: str) -> Optional[Header]:
    """Match ``Keyword:`` with optional inline text after the colon."""
    match = _LABELED.match(line)
    if not match:
        return None
    found = _lookup(match.group("key"))
    if found is None:
        return None
    key, title = found
    return Header(
        key=key,
        title=title,
        indent=len(match.group("indent").expandtabs()),
        rest=match.group("rest").strip(),
    )


def underlined_header(lines: Sequence[str], index: int) -> Optional[Header]:
    """Match a bare keyword followed by a dash line at least as long as it."""
    if index + 1 >= len(lines):
        return None
    word = lines[index].strip()
    underline = lines[index + 1].strip()
    if not word or not _DASHES.match(underline) or len(underline) < len(word):
        return None
    found = _lookup(word)
    if found is None:
        return None
    key, title = found
    return Header(key=key, title=title, indent=indent_of(lines[index]))


def detect_dialect(lines: Sequence[str]) -> str:
    """Return the convention of the first structured section marker, else plain."""
    for index, line in enumerate(lines):
        header = underlined_header(lines, index)
        if header is not None and header.structured:
            return UNDERLINED
        header = labeled_header(line)
        if header is not None and header.structured:
            return LABELED
    return PLAIN


__all__ = [
    "BOUNDARY_TITLES",
    "Header",
    "SECTION_KEYS",
    "detect_dialect",
    "indent_of",
    "labeled_header",
    "underlined_header",
]
