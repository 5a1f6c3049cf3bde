"""Docstring grammar: dialect detection and section parsing."""

from .detect import detect_dialect
from .examples import infer_language, split_examples
from .parser import parse_docstring

__all__ = ["detect_dialect", "infer_language", "parse_docstring", "split_examples"]
