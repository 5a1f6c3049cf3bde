"""Tests for the markdown-header grammar of native doc comments."""

from __future__ import annotations

from bridgedoc.grammar import parse_docstring
from bridgedoc.models import STRUCTURAL, DocSection, ParamDoc, RaisesDoc, ReturnDoc

NATIVE_DOC = """Computes the area.

More details.

# Arguments

* `width` - The width.
* `height` - The height.

# Returns

The computed area.

# Errors

Returns an error if the width is negative.

# Panics

* `overflow` - When the result overflows.

# Safety

Caller must ensure the pointer is valid.

# Examples

```
# use demo::area;
let a = area(2.0, 3.0);
```
"""


def test_structural_sections_are_parsed() -> None:
    parsed = parse_docstring(NATIVE_DOC, STRUCTURAL)

    assert parsed.dialect == STRUCTURAL
    assert parsed.summary == "Computes the area."
    assert parsed.description == "More details."
    assert parsed.params == [
        ParamDoc(name="width", description="The width."),
        ParamDoc(name="height", description="The height."),
    ]
    assert parsed.returns == ReturnDoc(description="The computed area.")
    assert parsed.raises == [
        RaisesDoc(name="Error", kind="errors", description="Returns an error if the width is negative."),
        RaisesDoc(name="overflow", kind="panics", description="When the result overflows."),
    ]
    assert parsed.extra_sections == [
        DocSection(title="Safety", body="Caller must ensure the pointer is valid."),
    ]
    assert len(parsed.examples) == 1
    assert parsed.examples[0].language == "rust"
    assert parsed.examples[0].text == "# use demo::area;\nlet a = area(2.0, 3.0);"


def test_parameter_bullet_variants() -> None:
    raw = "# Arguments\n\n- `a`: first\n* b - second\n- c: third"
    parsed = parse_docstring(raw, STRUCTURAL)

    assert parsed.params == [
        ParamDoc(name="a", description="first"),
        ParamDoc(name="b", description="second"),
        ParamDoc(name="c", description="third"),
    ]


def test_bullet_descriptions_continue_on_following_lines() -> None:
    raw = "# Arguments\n\n* `path` - Where to write\n  the output file."
    parsed = parse_docstring(raw, STRUCTURAL)

    assert parsed.params == [ParamDoc(name="path", description="Where to write the output file.")]


def test_hash_lines_inside_code_fences_are_not_headers() -> None:
    raw = "Summary.\n\n```\n# not a header\n```"
    parsed = parse_docstring(raw, STRUCTURAL)

    assert parsed.extra_sections == []
    assert parsed.description == "```\n# not a header\n```"


def test_unknown_headers_are_kept_as_extra_sections() -> None:
    parsed = parse_docstring("Summary.\n\n## Notes\n\nSomething to know.", STRUCTURAL)

    assert parsed.extra_sections == [DocSection(title="Notes", body="Something to know.")]


def test_structural_parse_is_stable() -> None:
    parsed = parse_docstring(NATIVE_DOC, STRUCTURAL)

    assert parse_docstring(parsed.original_text, parsed.dialect) == parsed
