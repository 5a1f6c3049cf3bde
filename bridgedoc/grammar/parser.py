"""Entry point of the docstring grammar."""

from __future__ import annotations

import inspect
import textwrap
from typing import List, Optional

from ..logging import get_logger
from ..models import DIALECTS, LABELED, PLAIN, STRUCTURAL, UNDERLINED, ParsedDocstring
from .detect import detect_dialect, indent_of, labeled_header
from .sections import parse_labeled, parse_underlined, split_intro
from .structural import parse_structural

logger = get_logger("grammar")


def parse_plain(lines, original: str) -> ParsedDocstring:
    summary, description = split_intro(lines)
    return ParsedDocstring(
        summary=summary,
        description="\n\n".join(description),
        dialect=PLAIN,
        original_text=original,
    )


def _normalize(text: str) -> List[str]:
    """Strip docstring indentation.

    Docstrings usually start on the quote line, so the first line is ignored
    when measuring the margin.  A text opening with a section header keeps
    its relative indentation instead, since the header owns the lines below,
    unless a later header sits at the margin of the remaining lines.
    """
    expanded = text.expandtabs()
    first, _, rest = expanded.lstrip("\n").partition("\n")
    if labeled_header(first) is not None and not _header_at_margin(rest.splitlines()):
        return textwrap.dedent(expanded).strip("\n").splitlines()
    return inspect.cleandoc(expanded).splitlines()


def _header_at_margin(lines: List[str]) -> bool:
    filled = [line for line in lines if line.strip()]
    if not filled:
        return False
    margin = min(indent_of(line) for line in filled)
    return any(indent_of(line) == margin and labeled_header(line) is not None for line in filled)


_PARSERS = {
    LABELED: parse_labeled,
    UNDERLINED: parse_underlined,
    STRUCTURAL: parse_structural,
    PLAIN: parse_plain,
}


def parse_docstring(raw: Optional[str], dialect_hint: Optional[str] = None) -> ParsedDocstring:
    """Parse a doc comment into a :class:`ParsedDocstring`.

    The function never raises.  Without a usable hint the dialect is
    detected from the first structured section marker; text without any
    marker is parsed as plain prose.  ``original_text`` always carries the
    input verbatim, so ``parse_docstring(p.original_text, p.dialect)``
    reproduces ``p``.
    """
    original = raw or ""
    if not original.strip():
        return ParsedDocstring(dialect=PLAIN, original_text=original)

    lines = _normalize(original)
    dialect = dialect_hint if dialect_hint in DIALECTS else detect_dialect(lines)
    try:
        return _PARSERS[dialect](lines, original)
    except Exception as exc:  # pragma: no cover - defensive guard
        logger.debug("Falling back to plain docstring parsing: %s", exc)
        return parse_plain(lines, original)


__all__ = ["parse_docstring", "parse_plain"]
