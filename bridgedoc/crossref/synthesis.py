"""Placeholder Python declarations for bindings without an authored counterpart."""

from __future__ import annotations

import copy
from typing import List, Sequence

from ..models import PYTHON, SOURCE_BINDING, Class, DocBlock, Enum, Function, Module, Param, Struct
from .types import rust_type_to_python

# Receiver and interpreter-token parameters never reach Python callers.
_DROPPED_PARAMS = {"self", "&self", "&mut self", "mut self", "py"}


def _copy_doc(doc: DocBlock) -> DocBlock:
    return copy.deepcopy(doc)


def convert_params(params: Sequence[Param]) -> List[Param]:
    converted: List[Param] = []
    for param in params:
        if param.name in _DROPPED_PARAMS:
            continue
        hint = rust_type_to_python(param.type) if param.type else None
        if hint == "":
            continue
        converted.append(Param(name=param.name, type=hint, default=param.default))
    return converted


def synthesize_function(native: Function, name: str) -> Function:
    """Build a Python function mirroring ``native`` under its exposed ``name``."""
    return_type = rust_type_to_python(native.return_type) if native.return_type else None
    return Function(
        name=name,
        doc=_copy_doc(native.doc),
        span=copy.deepcopy(native.span),
        synthesized=True,
        params=convert_params(native.params),
        return_type=return_type or None,
        is_async=native.is_async,
    )


def synthesize_class(native: Struct | Enum, name: str) -> Class:
    return Class(
        name=name,
        doc=_copy_doc(native.doc),
        span=copy.deepcopy(native.span),
        synthesized=True,
    )


def synthesize_module(path: Sequence[str], native: Module) -> Module:
    """Create an empty binding module at ``path`` seeded from the native module's doc."""
    return Module(
        path=tuple(path),
        language=PYTHON,
        source_type=SOURCE_BINDING,
        doc=_copy_doc(native.doc),
        span=copy.deepcopy(native.span),
        synthesized=True,
    )


__all__ = ["convert_params", "synthesize_class", "synthesize_function", "synthesize_module"]
