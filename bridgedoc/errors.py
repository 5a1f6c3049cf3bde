"""Error taxonomy shared across bridgedoc components."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, List, Sequence

if TYPE_CHECKING:  # pragma: no cover - typing aid
    from .models import SourceSpan


class BridgeDocError(RuntimeError):
    """Base class for fatal bridgedoc errors."""


class ConfigurationError(BridgeDocError):
    """Raised for configuration problems detected before any parsing."""


class ConfigError(ConfigurationError):
    """Raised when the configuration file cannot be parsed."""


class MissingRootNameError(ConfigurationError):
    """Raised when a source tree has no declared root name."""

    def __init__(self, language: str) -> None:
        super().__init__(f"no root name declared for the {language} source tree")
        self.language = language


class AmbiguousRootError(ConfigurationError):
    """Raised when a root marker and a directory index both sit at the top level."""

    def __init__(self, language: str, root_file: str, index_file: str) -> None:
        super().__init__(
            f"ambiguous {language} root: both '{root_file}' and '{index_file}' "
            "claim the top-level module"
        )
        self.language = language
        self.root_file = root_file
        self.index_file = index_file


class RawInputError(BridgeDocError):
    """Raised when a raw parse document is not valid JSON or has the wrong shape."""


class ModelError(BridgeDocError):
    """Raised when the documentation model is built or used incorrectly."""


class DuplicateModuleError(ModelError):
    """Raised when two files project to the same canonical module path."""

    def __init__(self, language: str, path: str, first_file: str, second_file: str) -> None:
        super().__init__(
            f"{language} module '{path}' is defined by both '{first_file}' and '{second_file}'"
        )
        self.language = language
        self.path = path
        self.files = [first_file, second_file]


class FrozenModelError(ModelError):
    """Raised on any attempt to mutate a frozen model."""


class ResolutionError(BridgeDocError):
    """Raised when cross-reference resolution cannot produce a consistent graph."""


@dataclass
class IdentityCollision:
    """Two binding items claiming the same external identity."""

    container: str
    name: str
    first: "SourceSpan"
    second: "SourceSpan"

    def describe(self) -> str:
        return (
            f"{self.container}.{self.name} is claimed by {self.first.describe()} "
            f"and {self.second.describe()}"
        )


class DuplicateIdentityError(ResolutionError):
    """Raised when binding items collide on (container, name)."""

    def __init__(self, collisions: Sequence[IdentityCollision]) -> None:
        self.collisions: List[IdentityCollision] = list(collisions)
        details = "; ".join(collision.describe() for collision in self.collisions)
        super().__init__(f"duplicate external identity: {details}")


__all__ = [
    "AmbiguousRootError",
    "BridgeDocError",
    "ConfigError",
    "ConfigurationError",
    "DuplicateIdentityError",
    "DuplicateModuleError",
    "FrozenModelError",
    "IdentityCollision",
    "MissingRootNameError",
    "ModelError",
    "RawInputError",
    "ResolutionError",
]
