"""Tests for Rust to Python type translation."""

from __future__ import annotations

import pytest

from bridgedoc.crossref import rust_type_to_python
from bridgedoc.crossref.types import split_pair, split_top_level


@pytest.mark.parametrize(
    ("rust_type", "expected"),
    [
        ("i32", "int"),
        ("u64", "int"),
        ("f64", "float"),
        ("bool", "bool"),
        ("String", "str"),
        ("&str", "str"),
        ("&'static str", "str"),
        ("()", "None"),
        ("Vec<String>", "List[str]"),
        ("Option<i64>", "Optional[int]"),
        ("HashSet<u8>", "Set[int]"),
        ("HashMap<String, i32>", "Dict[str, int]"),
        ("BTreeMap<String, Vec<f32>>", "Dict[str, List[float]]"),
        ("(i32, String)", "Tuple[int, str]"),
        ("&[u8]", "bytes"),
        ("Vec<u8>", "List[int]"),
        ("&[f64]", "List[float]"),
        ("PyResult<()>", "None"),
        ("PyResult<Vec<HashMap<String, PyObject>>>", "List[Dict[str, Any]]"),
        ("Py<PyDict>", "dict"),
        ("Bound<'py, PyAny>", "Any"),
        ("&Bound<'_, PyList>", "list"),
        ("pyo3::types::PyString", "str"),
        ("Result<Vec<u8>, MyError>", "List[int]"),
        ("&mut Widget", "Widget"),
        ("Box<Widget>", "Widget"),
        ("std::path::PathBuf", "PathBuf"),
        ("Widget", "Widget"),
    ],
)
def test_rust_type_to_python(rust_type: str, expected: str) -> None:
    assert rust_type_to_python(rust_type) == expected


@pytest.mark.parametrize("rust_type", ["Python<'_>", "Python<'py>", "", None])
def test_interpreter_tokens_translate_to_empty(rust_type) -> None:
    assert rust_type_to_python(rust_type) == ""


def test_split_top_level_respects_nesting() -> None:
    assert split_top_level("String, HashMap<u8, u16>, (i32, i64)") == [
        "String",
        "HashMap<u8, u16>",
        "(i32, i64)",
    ]
    assert split_pair("String") is None
    assert split_pair("K, Vec<V>") == ("K", "Vec<V>")
