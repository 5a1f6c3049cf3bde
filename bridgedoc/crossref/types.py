"""Translation of Rust type strings into Python type hints."""

from __future__ import annotations

import re
from typing import List, Optional, Tuple

_PYO3_TYPES = {
    "PyString": "str",
    "PyList": "list",
    "PyDict": "dict",
    "PyTuple": "tuple",
    "PySet": "set",
    "PyFrozenSet": "frozenset",
    "PyBytes": "bytes",
    "PyByteArray": "bytearray",
    "PyInt": "int",
    "PyLong": "int",
    "PyFloat": "float",
    "PyBool": "bool",
    "PyNone": "None",
    "PyModule": "ModuleType",
    "PyType": "type",
    "PyObject": "Any",
    "PyAny": "Any",
}

_PRIMITIVES = {
    **{name: "int" for name in ("i8", "i16", "i32", "i64", "i128", "isize")},
    **{name: "int" for name in ("u8", "u16", "u32", "u64", "u128", "usize")},
    "f32": "float",
    "f64": "float",
    "bool": "bool",
    "char": "str",
    "str": "str",
    "String": "str",
    "&str": "str",
    "&String": "str",
    "()": "None",
    "Self": "Self",
}

# (prefix, python container); the inner type is translated recursively
_SINGLE_WRAPPERS = (
    ("Vec<", "List"),
    ("Option<", "Optional"),
    ("HashSet<", "Set"),
    ("BTreeSet<", "Set"),
)

_TRANSPARENT_WRAPPERS = ("PyResult<", "Py<", "Box<", "Arc<", "Rc<")

_LIFETIME = re.compile(r"'[A-Za-z_]\w*\s*,?")


def split_top_level(text: str) -> List[str]:
    """Split on commas that are not nested inside brackets."""
    parts: List[str] = []
    depth = 0
    start = 0
    for index, char in enumerate(text):
        if char in "<([":
            depth += 1
        elif char in ">)]":
            depth -= 1
        elif char == "," and depth == 0:
            parts.append(text[start:index].strip())
            start = index + 1
    last = text[start:].strip()
    if last:
        parts.append(last)
    return parts


def split_pair(text: str) -> Optional[Tuple[str, str]]:
    parts = split_top_level(text)
    if len(parts) < 2:
        return None
    return parts[0], ",".join(parts[1:])


def rust_type_to_python(rust_type: Optional[str]) -> str:
    """Return the Python type hint for ``rust_type``.

    ``Python<'_>`` tokens translate to ``""`` so callers can drop the
    parameter; unknown types are returned unchanged.

    >>> rust_type_to_python("PyResult<Vec<HashMap<String, PyObject>>>")
    'List[Dict[str, Any]]'
    """
    if not rust_type:
        return ""
    return _translate("".join(_LIFETIME.sub("", rust_type).split()))


def _translate(text: str) -> str:
    if text.startswith("(") and text.endswith(")"):
        inner = text[1:-1]
        if not inner:
            return "None"
        return "Tuple[" + ", ".join(_translate(part) for part in split_top_level(inner)) + "]"

    if text.startswith("[") and text.endswith("]"):
        inner = text[1:-1]
        if inner == "u8":
            return "bytes"
        return f"List[{_translate(inner)}]"

    base = text.rsplit("::", 1)[-1]
    if base in _PYO3_TYPES:
        return _PYO3_TYPES[base]
    if text in _PRIMITIVES:
        return _PRIMITIVES[text]

    if text.endswith(">"):
        for prefix, container in _SINGLE_WRAPPERS:
            if text.startswith(prefix):
                return f"{container}[{_translate(text[len(prefix):-1])}]"
        for prefix in ("HashMap<", "BTreeMap<"):
            if text.startswith(prefix):
                pair = split_pair(text[len(prefix):-1])
                if pair is None:
                    return "Dict[str, Any]"
                return f"Dict[{_translate(pair[0])}, {_translate(pair[1])}]"
        for prefix in _TRANSPARENT_WRAPPERS:
            if text.startswith(prefix):
                return _translate(text[len(prefix):-1])
        if text.startswith("Bound<"):
            inner = text[len("Bound<"):-1]
            if "," in inner:
                inner = inner.split(",", 1)[1]
            return _translate(inner)
        if text.startswith("Result<"):
            inner = text[len("Result<"):-1]
            pair = split_pair(inner)
            return _translate(pair[0] if pair else inner)

    if text.startswith("&mut"):
        return _translate(text[len("&mut"):])
    if text.startswith("&"):
        return _translate(text[1:])
    if text.startswith("Python<"):
        return ""
    if "::" in text:
        last = text.rsplit("::", 1)[-1]
        return _translate(last)
    return text


__all__ = ["rust_type_to_python", "split_pair", "split_top_level"]
