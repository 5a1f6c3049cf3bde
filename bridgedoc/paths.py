"""Projection of source file paths onto canonical module paths.

The projector is the single place where file paths become module paths and
module paths become display strings or page addresses.  The pipeline, the
cross-reference resolver and any renderer receive the same projector
instances instead of re-deriving paths on their own.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import PurePath, PurePosixPath
from typing import Dict, Iterable, Optional, Sequence, Tuple

from .errors import AmbiguousRootError, MissingRootNameError
from .models import PYTHON, RUST, ItemRef

_ANCHOR_CLEANUP = re.compile(r"[^a-z0-9_-]+")

SourceRoot = Tuple[str, ...]


@dataclass(frozen=True)
class PathConvention:
    """Filename conventions of one language's module system.

    ``source_dirs`` lists conventional source-root prefixes, longest first.
    ``merges_package_dir`` drops a leading directory named like the root,
    which is how Python package directories sit under their source root.
    """

    language: str
    extension: str
    separator: str
    root_markers: Tuple[str, ...]
    index_marker: str
    source_dirs: Tuple[SourceRoot, ...]
    merges_package_dir: bool = False


RUST_CONVENTION = PathConvention(
    language=RUST,
    extension=".rs",
    separator="::",
    root_markers=("lib", "main"),
    index_marker="mod",
    source_dirs=(("rust", "src"), ("src",), ("rust",)),
)

PYTHON_CONVENTION = PathConvention(
    language=PYTHON,
    extension=".py",
    separator=".",
    root_markers=(),
    index_marker="__init__",
    source_dirs=(("python", "src"), ("python",), ("src",)),
    merges_package_dir=True,
)

CONVENTIONS: Dict[str, PathConvention] = {
    RUST: RUST_CONVENTION,
    PYTHON: PYTHON_CONVENTION,
}


class ModulePathProjector:
    """Maps file paths of one language to canonical module path segments."""

    def __init__(self, convention: PathConvention) -> None:
        self.convention = convention

    @property
    def language(self) -> str:
        return self.convention.language

    def project(
        self,
        file_path: str | PurePath,
        root_name: str,
        source_root: Optional[SourceRoot] = None,
    ) -> Tuple[str, ...]:
        """Return the canonical module path of ``file_path`` under ``root_name``.

        The function is total: any path yields a segment tuple.  Root marker
        files project to ``(root_name,)`` at any depth, directory-index files
        stand for their enclosing directory, and every other file appends its
        directories and stem to the root name.  ``source_root`` is the prefix
        found by :func:`find_source_root` for the whole tree; without it the
        longest conventional prefix of each file is stripped.
        """
        parts = self._relative_parts(file_path, source_root)
        if not parts:
            return (root_name,)

        stem = _strip_extension(parts[-1], self.convention.extension)
        directories = list(parts[:-1])

        if stem in self.convention.root_markers:
            return (root_name,)

        if self.convention.merges_package_dir and directories and directories[0] == root_name:
            directories = directories[1:]

        if stem == self.convention.index_marker:
            return (root_name, *directories)
        return (root_name, *directories, stem)

    def display(self, segments: Sequence[str]) -> str:
        return self.convention.separator.join(segments)

    def split(self, display_path: str) -> Tuple[str, ...]:
        """Inverse of :meth:`display`."""
        return tuple(part for part in display_path.split(self.convention.separator) if part)

    def page_address(self, ref: ItemRef) -> str:
        """Return the page address of the module holding ``ref`` plus an item anchor."""
        address = "/".join((self.language, *ref.module)) + ".md"
        if not ref.member:
            return address
        anchor = _ANCHOR_CLEANUP.sub("-", "-".join(ref.member).lower()).strip("-")
        return f"{address}#{anchor}"

    def is_top_level(self, file_path: str | PurePath, source_root: Optional[SourceRoot] = None) -> bool:
        return len(self._relative_parts(file_path, source_root)) == 1

    def _relative_parts(
        self, file_path: str | PurePath, source_root: Optional[SourceRoot] = None
    ) -> Tuple[str, ...]:
        parts = _parts(file_path)
        prefixes = (source_root,) if source_root is not None else self.convention.source_dirs
        for prefix in prefixes:
            if prefix and len(parts) > len(prefix) and parts[: len(prefix)] == prefix:
                return parts[len(prefix):]
        return parts


def _parts(file_path: str | PurePath) -> Tuple[str, ...]:
    return tuple(
        part
        for part in PurePosixPath(str(file_path).replace("\\", "/")).parts
        if part not in ("", ".", "/")
    )


def _strip_extension(name: str, extension: str) -> str:
    if name.endswith(extension):
        return name[: -len(extension)]
    return PurePosixPath(name).stem


def projector_for(language: str) -> ModulePathProjector:
    return ModulePathProjector(CONVENTIONS[language])


def project(file_path: str | PurePath, declared_root_name: str, language: str = RUST) -> Tuple[str, ...]:
    """Convenience wrapper around :meth:`ModulePathProjector.project`."""
    return projector_for(language).project(file_path, declared_root_name)


def to_exposed_path(native_path: Sequence[str], exposed_root: str) -> Tuple[str, ...]:
    """Translate a Rust module path into Python module space.

    The crate segment is replaced by the Python package name, so
    ``("engine", "shapes")`` under package ``demo`` becomes ``("demo", "shapes")``.
    """
    if not native_path:
        return (exposed_root,)
    return (exposed_root, *native_path[1:])


def find_source_root(files: Iterable[str | PurePath], convention: PathConvention) -> SourceRoot:
    """Return the first conventional source prefix that holds files of the tree.

    An empty tuple means the files sit directly under the tree root.
    """
    all_parts = [_parts(file_path) for file_path in files]
    for prefix in convention.source_dirs:
        if any(len(parts) > len(prefix) and parts[: len(prefix)] == prefix for parts in all_parts):
            return prefix
    return ()


def require_root_name(root_name: Optional[str], language: str) -> str:
    if root_name is None or not str(root_name).strip():
        raise MissingRootNameError(language)
    return str(root_name).strip()


def check_root(
    files: Iterable[str | PurePath],
    projector: ModulePathProjector,
    source_root: Optional[SourceRoot] = None,
) -> None:
    """Raise AmbiguousRootError when a root marker and a directory index share the top level."""
    convention = projector.convention
    root_file: Optional[str] = None
    index_file: Optional[str] = None
    for file_path in files:
        if not projector.is_top_level(file_path, source_root):
            continue
        name = PurePosixPath(str(file_path).replace("\\", "/")).name
        stem = _strip_extension(name, convention.extension)
        if stem in convention.root_markers and root_file is None:
            root_file = str(file_path)
        elif stem == convention.index_marker and index_file is None:
            index_file = str(file_path)
    if root_file is not None and index_file is not None:
        raise AmbiguousRootError(convention.language, root_file, index_file)


__all__ = [
    "CONVENTIONS",
    "ModulePathProjector",
    "PYTHON_CONVENTION",
    "PathConvention",
    "RUST_CONVENTION",
    "SourceRoot",
    "check_root",
    "find_source_root",
    "project",
    "projector_for",
    "require_root_name",
    "to_exposed_path",
]
