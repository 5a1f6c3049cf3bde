"""Markdown-header grammar used by native doc comments."""

from __future__ import annotations

import re
from typing import List, Optional, Sequence, Tuple

from ..models import STRUCTURAL, DocSection, ParamDoc, ParsedDocstring, RaisesDoc, ReturnDoc
from .examples import split_examples
from .sections import split_intro

_HEADER = re.compile(r"^(?P<level>#{1,3})\s+(?P<title>.+?)\s*#*\s*$")
_BULLET = re.compile(r"^\s*[*+-]\s+(?P<rest>.*)$")
_BACKTICK_ENTRY = re.compile(r"^`(?P<name>[^`]+)`\s*(?:[-:—]\s*)?(?P<desc>.*)$")
_DASH_ENTRY = re.compile(r"^(?P<name>\S+)\s+[-—]\s+(?P<desc>.*)$")
_COLON_ENTRY = re.compile(r"^(?P<name>[^\s:]+)\s*:\s*(?P<desc>.*)$")

_SECTIONS = {
    "arguments": "params",
    "args": "params",
    "parameters": "params",
    "params": "params",
    "returns": "returns",
    "return": "returns",
    "errors": "errors",
    "error": "errors",
    "panics": "panics",
    "panic": "panics",
    "safety": "safety",
    "examples": "examples",
    "example": "examples",
}

_DEFAULT_NAMES = {"errors": "Error", "panics": "Panic"}

Section = Tuple[str, List[str]]


def _is_fence(line: str) -> bool:
    return line.strip().startswith("```")


def split_sections(lines: Sequence[str]) -> Tuple[List[str], List[Section]]:
    """Split lines at markdown headers, ignoring ``#`` lines inside code fences."""
    intro: List[str] = []
    sections: List[Section] = []
    in_fence = False
    for line in lines:
        if _is_fence(line):
            in_fence = not in_fence
        match = None if in_fence or _is_fence(line) else _HEADER.match(line.strip())
        if match:
            sections.append((match.group("title").strip(), []))
        elif sections:
            sections[-1][1].append(line)
        else:
            intro.append(line)
    return intro, sections


def _bullet_entry(text: str) -> Tuple[Optional[str], str]:
    for pattern in (_BACKTICK_ENTRY, _DASH_ENTRY, _COLON_ENTRY):
        match = pattern.match(text)
        if match:
            return match.group("name").strip("`"), match.group("desc").strip()
    return None, text.strip()


def _bullets(lines: Sequence[str]) -> List[Tuple[Optional[str], str]]:
    """Collect bullet entries; non-bullet paragraphs become unnamed entries."""
    entries: List[Tuple[Optional[str], str]] = []
    open_entry = False
    for line in lines:
        if not line.strip():
            open_entry = False
            continue
        bullet = _BULLET.match(line)
        if bullet:
            entries.append(_bullet_entry(bullet.group("rest")))
            open_entry = True
        elif open_entry and entries:
            name, desc = entries[-1]
            entries[-1] = (name, f"{desc} {line.strip()}".strip())
        else:
            entries.append((None, line.strip()))
            open_entry = True
    return entries


def _params(lines: Sequence[str]) -> List[ParamDoc]:
    params: List[ParamDoc] = []
    for name, desc in _bullets(lines):
        if name is None:
            if params:
                params[-1].description = f"{params[-1].description} {desc}".strip()
            continue
        params.append(ParamDoc(name=name, description=desc))
    return params


def _conditions(lines: Sequence[str], kind: str) -> List[RaisesDoc]:
    default = _DEFAULT_NAMES[kind]
    conditions: List[RaisesDoc] = []
    for name, desc in _bullets(lines):
        conditions.append(RaisesDoc(name=name or default, kind=kind, description=desc))
    return conditions


def _text(lines: Sequence[str]) -> str:
    return "\n".join(line.rstrip() for line in lines).strip("\n")


def parse_structural(lines: Sequence[str], original: str) -> ParsedDocstring:
    result = ParsedDocstring(dialect=STRUCTURAL, original_text=original)
    intro, sections = split_sections(lines)
    result.summary, description = split_intro(intro)
    result.description = "\n\n".join(description)

    for title, body in sections:
        key = _SECTIONS.get(title.lower())
        if key == "params":
            result.params.extend(_params(body))
        elif key == "returns":
            text = " ".join(line.strip() for line in body if line.strip())
            if text and result.returns is None:
                result.returns = ReturnDoc(description=text)
        elif key in ("errors", "panics"):
            result.raises.extend(_conditions(body, key))
        elif key == "examples":
            result.examples.extend(split_examples(body))
        elif key == "safety":
            result.extra_sections.append(DocSection(title="Safety", body=_text(body)))
        else:
            result.extra_sections.append(DocSection(title=title, body=_text(body)))
    return result


__all__ = ["parse_structural", "split_sections"]
