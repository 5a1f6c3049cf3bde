"""bridgedoc: unified documentation model for Rust crates exposed to Python."""

from .crossref import CrossReferenceResolver, ResolutionResult
from .grammar import parse_docstring
from .models import DocModel
from .paths import ModulePathProjector, project, to_exposed_path
from .pipeline import BuildResult, ModelBuilder

__version__ = "0.1.0"

__all__ = [
    "BuildResult",
    "CrossReferenceResolver",
    "DocModel",
    "ModelBuilder",
    "ModulePathProjector",
    "ResolutionResult",
    "__version__",
    "parse_docstring",
    "project",
    "to_exposed_path",
]
