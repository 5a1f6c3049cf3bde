"""Cross-reference resolution between native bindings and Python declarations."""

from .resolver import CrossReferenceResolver, ResolutionResult
from .types import rust_type_to_python

__all__ = ["CrossReferenceResolver", "ResolutionResult", "rust_type_to_python"]
