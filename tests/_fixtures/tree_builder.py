"""Helper utilities for constructing raw parse documents and models in tests."""

from __future__ import annotations

import json
import textwrap
from pathlib import Path
from typing import Any, Dict, List, Mapping, Sequence

from bridgedoc.models import (
    PYTHON,
    RUST,
    SOURCE_BINDING,
    SOURCE_RUST,
    Item,
    Module,
    SourceSpan,
)
from bridgedoc.paths import projector_for


class TreeBuilder:
    """Writes raw JSON documents and a .bridgedoc.yml into a throwaway project."""

    def __init__(self, tmp_path: Path) -> None:
        self.root = tmp_path / "project"
        self.root.mkdir()

    def write_raw(self, language: str, modules: Sequence[Mapping[str, Any]]) -> Path:
        """Write ``{"modules": [...]}`` to ``build/<language>.json``."""
        path = self.root / "build" / f"{language}.json"
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps({"modules": list(modules)}, indent=2), encoding="utf-8")
        return path

    def write_config(self, content: str) -> Path:
        path = self.root / ".bridgedoc.yml"
        path.write_text(textwrap.dedent(content).lstrip("\n"), encoding="utf-8")
        return path

    def path(self) -> Path:
        """Return the project root path."""
        return self.root


def rust_module(path: Sequence[str], *items: Item, file: str = "") -> Module:
    return Module(
        path=tuple(path),
        language=RUST,
        source_type=SOURCE_RUST,
        file=file or "src/" + "/".join(path[1:] or ("lib",)) + ".rs",
        items=list(items),
    )


def python_module(path: Sequence[str], *items: Item, source_type: str = SOURCE_BINDING) -> Module:
    return Module(
        path=tuple(path),
        language=PYTHON,
        source_type=source_type,
        file="python/" + "/".join(path) + ".py",
        items=list(items),
    )


def span(file: str, start: int, end: int) -> SourceSpan:
    return SourceSpan(file=file, line_start=start, line_end=end)


def projectors() -> Dict[str, Any]:
    return {RUST: projector_for(RUST), PYTHON: projector_for(PYTHON)}


def demo_raw_modules() -> Dict[str, List[Dict[str, Any]]]:
    """A small crate ``engine`` exposed as the Python package ``demo``."""
    rust = [
        {
            "file": "src/lib.rs",
            "doc": "Geometry engine.",
            "line_start": 1,
            "line_end": 40,
            "items": [
                {
                    "kind": "function",
                    "name": "version",
                    "binding": {"name": None, "module": None, "signature": None},
                    "doc": "Return the engine version.",
                    "return_type": "&'static str",
                    "line_start": 5,
                    "line_end": 8,
                },
            ],
        },
        {
            "file": "src/shapes.rs",
            "doc": "Shapes exposed to Python.",
            "line_start": 1,
            "line_end": 80,
            "items": [
                {
                    "kind": "struct",
                    "name": "RustWidget",
                    "binding": {"name": "Widget", "module": "demo.shapes"},
                    "doc": "A widget.\n\n# Examples\n\n```\nlet w = RustWidget::new(2.0);\n```",
                    "fields": [{"name": "size", "type": "f64", "visibility": "private"}],
                    "line_start": 3,
                    "line_end": 10,
                },
                {
                    "kind": "impl",
                    "target": "RustWidget",
                    "binding": {},
                    "methods": [
                        {
                            "name": "area",
                            "doc": "Compute the area.\n\n# Errors\n\n* `ValueError` - negative size",
                            "params": [{"name": "&self"}],
                            "return_type": "PyResult<f64>",
                            "line_start": 14,
                            "line_end": 20,
                        },
                        {
                            "name": "grow_by",
                            "binding": {"name": "grow"},
                            "params": [{"name": "&mut self"}, {"name": "amount", "type": "f64"}],
                            "line_start": 22,
                            "line_end": 26,
                        },
                    ],
                    "line_start": 12,
                    "line_end": 30,
                },
            ],
        },
    ]
    python = [
        {
            "file": "python/demo/__init__.py",
            "doc": "Demo package.",
            "source_type": "python",
            "items": [],
        },
        {
            "file": "python/demo/shapes.pyi",
            "doc": "Shape bindings.",
            "source_type": "binding",
            "items": [
                {
                    "kind": "class",
                    "name": "Widget",
                    "doc": "A widget.\n\nArgs:\n    size (float): Edge length.\n",
                    "methods": [
                        {
                            "name": "area",
                            "doc": "Compute the area.\n\nReturns:\n    float: The area.\n",
                            "params": [{"name": "self"}],
                            "return_type": "float",
                        }
                    ],
                }
            ],
        },
    ]
    return {"rust": rust, "python": python}


DEMO_CONFIG = """
project:
  name: demo
  version: "0.1.0"
rust:
  root_name: engine
  raw: build/rust.json
python:
  root_name: demo
  raw: build/python.json
"""


__all__ = [
    "DEMO_CONFIG",
    "TreeBuilder",
    "demo_raw_modules",
    "projectors",
    "python_module",
    "rust_module",
    "span",
]
