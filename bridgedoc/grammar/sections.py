"""Parsers for the free-text docstring conventions.

Two conventions are understood here: labeled sections (``Args:`` followed by
indented entries) and underlined sections (``Parameters`` followed by a line
of dashes).  Both share the intro and entry helpers below.
"""

from __future__ import annotations

import re
import textwrap
from typing import List, Optional, Sequence, Tuple

from ..models import LABELED, UNDERLINED, DocSection, ParamDoc, ParsedDocstring, RaisesDoc, ReturnDoc
from .detect import Header, indent_of, labeled_header, underlined_header
from .examples import split_examples

_PARAM_TYPED = re.compile(r"^(?P<name>\*{0,2}[\w.]+)\s*\((?P<type>[^)]*)\)\s*:\s*(?P<desc>.*)$")
_PARAM_PLAIN = re.compile(r"^(?P<name>\*{0,2}[\w.]+):\s*(?P<desc>.*)$")
_PARAM_SPACED = re.compile(r"^(?P<name>\*{0,2}[\w., ]+?)\s+:\s*(?P<type>.*)$")
_TYPE_TOKEN = re.compile(r"^(?P<type>[^:—]+?)\s*(?::|\s—)\s*(?P<desc>.*)$")
_RAISES_ENTRY = re.compile(r"^(?P<name>[\w.]+)\s*:\s*(?P<desc>.*)$")

Entry = Tuple[str, List[str]]


def split_intro(lines: Sequence[str]) -> Tuple[str, List[str]]:
    """Return the summary paragraph and the remaining description paragraphs."""
    paragraphs = _paragraphs(lines)
    if not paragraphs:
        return "", []
    summary = " ".join(line.strip() for line in paragraphs[0])
    rest = ["\n".join(line.strip() for line in paragraph) for paragraph in paragraphs[1:]]
    return summary, rest


def _paragraphs(lines: Sequence[str]) -> List[List[str]]:
    paragraphs: List[List[str]] = []
    current: List[str] = []
    for line in lines:
        if line.strip():
            current.append(line)
        elif current:
            paragraphs.append(current)
            current = []
    if current:
        paragraphs.append(current)
    return paragraphs


def split_type_token(text: str) -> Tuple[Optional[str], str]:
    """Split a leading ``type:`` or ``type —`` token from return prose.

    The token only counts as a type when it has no spaces or carries a
    bracketed generic such as ``Dict[str, int]``.
    """
    match = _TYPE_TOKEN.match(text.strip())
    if match:
        candidate = match.group("type").strip()
        if candidate and (" " not in candidate or "[" in candidate):
            return candidate, match.group("desc").strip()
    return None, text.strip()


def group_entries(lines: Sequence[str], inline: str = "") -> List[Entry]:
    """Group section lines into entry heads plus their deeper continuation lines."""
    entries: List[Entry] = []
    if inline.strip():
        entries.append((inline.strip(), []))
    base: Optional[int] = None
    for line in lines:
        if not line.strip():
            continue
        indent = indent_of(line)
        if base is None:
            base = indent
        if indent <= base or not entries:
            entries.append((line.strip(), []))
        else:
            entries[-1][1].append(line.strip())
    return entries


def _join(head: str, continuation: Sequence[str]) -> str:
    return " ".join(part for part in (head, *continuation) if part).strip()


def _section_text(lines: Sequence[str], inline: str = "") -> str:
    body = textwrap.dedent("\n".join(lines)).strip("\n")
    if inline:
        return f"{inline}\n{body}".strip() if body else inline
    return body


# ----------------------------------------------------------------------
# Labeled convention


def labeled_params(lines: Sequence[str], inline: str = "") -> List[ParamDoc]:
    params: List[ParamDoc] = []
    for head, continuation in group_entries(lines, inline):
        typed = _PARAM_TYPED.match(head)
        if typed:
            params.append(
                ParamDoc(
                    name=typed.group("name"),
                    type=typed.group("type").strip() or None,
                    description=_join(typed.group("desc"), continuation),
                )
            )
            continue
        plain = _PARAM_PLAIN.match(head)
        if plain:
            params.append(
                ParamDoc(name=plain.group("name"), description=_join(plain.group("desc"), continuation))
            )
            continue
        if params:
            previous = params[-1]
            previous.description = _join(previous.description, [head, *continuation])
        else:
            params.append(ParamDoc(name=head, description=_join("", continuation)))
    return params


def parse_returns(lines: Sequence[str], inline: str = "") -> Optional[ReturnDoc]:
    text = _join(inline.strip(), [line.strip() for line in lines if line.strip()])
    if not text:
        return None
    type_name, description = split_type_token(text)
    return ReturnDoc(type=type_name, description=description)


def labeled_raises(lines: Sequence[str], inline: str = "") -> List[RaisesDoc]:
    raises: List[RaisesDoc] = []
    for head, continuation in group_entries(lines, inline):
        match = _RAISES_ENTRY.match(head)
        if match:
            raises.append(
                RaisesDoc(name=match.group("name"), description=_join(match.group("desc"), continuation))
            )
        else:
            raises.append(RaisesDoc(name=head, description=_join("", continuation)))
    return raises


def parse_labeled(lines: Sequence[str], original: str) -> ParsedDocstring:
    result = ParsedDocstring(dialect=LABELED, original_text=original)
    index = 0
    intro: List[str] = []
    while index < len(lines) and labeled_header(lines[index]) is None:
        intro.append(lines[index])
        index += 1
    result.summary, description = split_intro(intro)

    while index < len(lines):
        header = labeled_header(lines[index])
        if header is None:
            # Prose after a section ended; it belongs to the description.
            stray: List[str] = []
            while index < len(lines) and labeled_header(lines[index]) is None:
                stray.append(lines[index])
                index += 1
            description.extend("\n".join(line.strip() for line in paragraph) for paragraph in _paragraphs(stray))
            continue
        body: List[str] = []
        index += 1
        while index < len(lines) and (not lines[index].strip() or indent_of(lines[index]) > header.indent):
            body.append(lines[index])
            index += 1
        _apply(result, header, body, header.rest)

    result.description = "\n\n".join(description)
    return result


# ----------------------------------------------------------------------
# Underlined convention


def underlined_params(lines: Sequence[str]) -> List[ParamDoc]:
    params: List[ParamDoc] = []
    for head, continuation in group_entries(lines):
        typed = _PARAM_TYPED.match(head)
        if typed:
            params.append(
                ParamDoc(
                    name=typed.group("name"),
                    type=typed.group("type").strip() or None,
                    description=_join(typed.group("desc"), continuation),
                )
            )
            continue
        spaced = _PARAM_SPACED.match(head)
        if spaced:
            params.append(
                ParamDoc(
                    name=spaced.group("name").strip(),
                    type=spaced.group("type").strip() or None,
                    description=_join("", continuation),
                )
            )
            continue
        plain = _PARAM_PLAIN.match(head)
        if plain:
            params.append(
                ParamDoc(name=plain.group("name"), description=_join(plain.group("desc"), continuation))
            )
            continue
        params.append(ParamDoc(name=head, description=_join("", continuation)))
    return params


def underlined_returns(lines: Sequence[str]) -> Optional[ReturnDoc]:
    entries = group_entries(lines)
    if not entries:
        return None
    head, continuation = entries[0]
    if continuation:
        spaced = _PARAM_SPACED.match(head)
        type_name = spaced.group("type").strip() if spaced else head
        trailing = [_join(h, c) for h, c in entries[1:]]
        return ReturnDoc(type=type_name or None, description=_join("", [*continuation, *trailing]))
    return parse_returns(lines)


def underlined_raises(lines: Sequence[str]) -> List[RaisesDoc]:
    raises: List[RaisesDoc] = []
    for head, continuation in group_entries(lines):
        match = _RAISES_ENTRY.match(head)
        if match:
            raises.append(
                RaisesDoc(name=match.group("name"), description=_join(match.group("desc"), continuation))
            )
        else:
            raises.append(RaisesDoc(name=head, description=_join("", continuation)))
    return raises


def parse_underlined(lines: Sequence[str], original: str) -> ParsedDocstring:
    result = ParsedDocstring(dialect=UNDERLINED, original_text=original)
    index = 0
    intro: List[str] = []
    while index < len(lines) and underlined_header(lines, index) is None:
        intro.append(lines[index])
        index += 1
    result.summary, description = split_intro(intro)
    result.description = "\n\n".join(description)

    while index < len(lines):
        header = underlined_header(lines, index)
        index += 2  # keyword and dash line
        body: List[str] = []
        while index < len(lines) and underlined_header(lines, index) is None:
            body.append(lines[index])
            index += 1
        _apply(result, header, body)
    return result


def _apply(result: ParsedDocstring, header: Optional[Header], body: Sequence[str], inline: str = "") -> None:
    if header is None:
        return
    underlined = result.dialect == UNDERLINED
    if header.key == "params":
        result.params.extend(underlined_params(body) if underlined else labeled_params(body, inline))
    elif header.key == "returns":
        returns = underlined_returns(body) if underlined else parse_returns(body, inline)
        if returns is not None and result.returns is None:
            result.returns = returns
    elif header.key == "raises":
        result.raises.extend(underlined_raises(body) if underlined else labeled_raises(body, inline))
    elif header.key == "examples":
        lines = ([inline] if inline else []) + list(body)
        result.examples.extend(split_examples(lines))
    else:
        result.extra_sections.append(DocSection(title=header.title, body=_section_text(body, inline)))


__all__ = [
    "group_entries",
    "parse_labeled",
    "parse_returns",
    "parse_underlined",
    "split_intro",
    "split_type_token",
]
