"""Model building pipeline: projection, docstring parsing, resolution, freezing."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from pathlib import Path
from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from .config import BridgeDocConfig, LinkConfig
from .crossref import CrossReferenceResolver
from .errors import DuplicateModuleError, RawInputError
from .grammar import parse_docstring
from .logging import get_logger
from .models import (
    PYTHON,
    RUST,
    SOURCE_BINDING,
    SOURCE_PYTHON,
    SOURCE_RUST,
    STRUCTURAL,
    DocBlock,
    DocModel,
    Item,
    Module,
    ProjectMetadata,
    ResolutionWarning,
    SourceSpan,
)
from .paths import ModulePathProjector, check_root, find_source_root, projector_for, require_root_name
from .serialization import MODEL_FORMAT_VERSION, RawModule, load_raw_modules
from .stores import ModelCache, fingerprint


@dataclass
class BuildResult:
    """Frozen model plus the non-fatal warnings collected while building it."""

    model: DocModel
    warnings: List[ResolutionWarning] = field(default_factory=list)
    cached: bool = False


class ModelBuilder:
    """Builds a frozen :class:`DocModel` from raw parse output.

    Stages run in a fixed order: root checks, path projection with uniqueness
    checks, docstring parsing, cross-reference resolution, freezing.  Any
    configuration or uniqueness problem raises before a model exists.
    """

    def __init__(self, projectors: Optional[Mapping[str, ModulePathProjector]] = None) -> None:
        self.projectors: Dict[str, ModulePathProjector] = (
            dict(projectors) if projectors is not None else {lang: projector_for(lang) for lang in (RUST, PYTHON)}
        )
        self.logger = get_logger("pipeline")

    def build(self, config: BridgeDocConfig, *, use_cache: bool = True) -> BuildResult:
        """Build the model described by ``config``, reusing a cached model when inputs match."""
        if config.rust.raw is not None:
            require_root_name(config.rust.root_name, RUST)
        if config.python.raw is not None:
            require_root_name(config.python.root_name, PYTHON)

        cache = self._load_cache(config) if use_cache else None
        key = config.project_name
        digest = fingerprint(
            str(MODEL_FORMAT_VERSION),
            config.source_text,
            _raw_bytes(config.rust.raw, RUST),
            _raw_bytes(config.python.raw, PYTHON),
        )
        if cache is not None:
            cached = cache.get(key, fingerprint=digest)
            if cached is not None:
                model, warnings = cached
                self.logger.info("Reusing cached model for %s", key)
                return BuildResult(model=model, warnings=warnings, cached=True)

        rust_raw = load_raw_modules(config.rust.raw, RUST) if config.rust.raw else []
        python_raw = load_raw_modules(config.python.raw, PYTHON) if config.python.raw else []
        result = self.build_from_raw(
            rust_raw,
            python_raw,
            project=ProjectMetadata(name=key, version=config.project.version),
            rust_root=config.rust.root_name,
            python_root=config.python.root_name,
            overrides=config.python.modules,
            links=config.links,
        )

        if cache is not None:
            cache.store(key, fingerprint=digest, model=result.model, warnings=result.warnings)
            cache.prune([key])
            cache.persist()
        return result

    def build_from_raw(
        self,
        rust_raw: Sequence[RawModule],
        python_raw: Sequence[RawModule],
        *,
        project: ProjectMetadata,
        rust_root: Optional[str],
        python_root: Optional[str],
        overrides: Optional[Mapping[str, str]] = None,
        links: Sequence[LinkConfig] = (),
    ) -> BuildResult:
        """Run every stage on already-loaded raw modules."""
        if rust_raw:
            rust_root = require_root_name(rust_root, RUST)
        if python_raw:
            python_root = require_root_name(python_root, PYTHON)
        rust_source = self._check_tree(rust_raw, RUST)
        python_source = self._check_tree(python_raw, PYTHON)
        exposed_root = python_root or rust_root or project.name

        rust_modules = self._project_modules(rust_raw, RUST, rust_root or "", rust_source, {})
        python_modules = self._project_modules(
            python_raw, PYTHON, python_root or "", python_source, overrides or {}
        )
        self.logger.info(
            "Projected %d Rust and %d Python modules", len(rust_modules), len(python_modules)
        )

        for module in rust_modules:
            _parse_docs(module, STRUCTURAL)
        for module in python_modules:
            _parse_docs(module, None)

        resolver = CrossReferenceResolver(self.projectors, exposed_root)
        resolution = resolver.resolve(rust_modules, python_modules, links)
        for warning in resolution.warnings:
            self.logger.warning("%s: %s", warning.code, warning.message)

        if project.generated_at is None:
            project.generated_at = datetime.now(UTC).isoformat().replace("+00:00", "Z")
        model = DocModel(
            metadata=project,
            rust_modules=rust_modules,
            python_modules=python_modules,
            cross_refs=resolution.cross_refs,
        ).freeze()
        self.logger.info(
            "Built model with %d cross references and %d warnings",
            len(model.cross_refs),
            len(resolution.warnings),
        )
        return BuildResult(model=model, warnings=resolution.warnings)

    # ------------------------------------------------------------------
    # Internal helpers

    def _project_modules(
        self,
        raw_modules: Sequence[RawModule],
        language: str,
        root_name: str,
        source_root: Tuple[str, ...],
        overrides: Mapping[str, str],
    ) -> List[Module]:
        projector = self.projectors[language]
        claimed: Dict[Tuple[str, ...], str] = {}
        modules: List[Module] = []
        for raw in raw_modules:
            path = projector.project(raw.file, root_name, source_root)
            display = projector.display(path)
            if path in claimed:
                raise DuplicateModuleError(language, display, claimed[path], raw.file)
            claimed[path] = raw.file
            source_type = _source_type(language, raw.source_type, overrides.get(display))
            self.logger.debug("Projected %s -> %s (%s)", raw.file, display, source_type)
            modules.append(
                Module(
                    path=path,
                    language=language,
                    source_type=source_type,
                    file=raw.file,
                    doc=DocBlock(raw=raw.doc),
                    items=list(raw.items),
                    span=SourceSpan(file=raw.file, line_start=raw.line_start, line_end=raw.line_end),
                )
            )
        return modules

    def _check_tree(self, raw_modules: Sequence[RawModule], language: str) -> Tuple[str, ...]:
        """Locate the source root of one tree and check its top-level files."""
        projector = self.projectors[language]
        files = [module.file for module in raw_modules]
        source_root = find_source_root(files, projector.convention)
        if files:
            self.logger.debug("Source root for %s: %s", language, "/".join(source_root) or ".")
            check_root(files, projector, source_root)
        return source_root

    def _load_cache(self, config: BridgeDocConfig) -> Optional[ModelCache]:
        if not config.cache.enabled or config.cache.path is None:
            return None
        return ModelCache(config.cache.path)


def _source_type(language: str, declared: Optional[str], override: Optional[str]) -> str:
    if language == RUST:
        return SOURCE_RUST
    if override is not None:
        return override
    if declared in (SOURCE_PYTHON, SOURCE_BINDING):
        return declared
    return SOURCE_PYTHON


def _parse_docs(module: Module, dialect: Optional[str]) -> None:
    _parse_block(module.doc, dialect)
    for item in _walk(module.items):
        _parse_block(item.doc, dialect)


def _walk(items: Iterable[Item]) -> Iterable[Item]:
    for item in items:
        yield item
        if item.kind in ("class", "trait", "impl"):
            yield from _walk(item.methods)
        if item.kind == "class":
            yield from _walk(item.attributes)


def _parse_block(doc: DocBlock, dialect: Optional[str]) -> None:
    if doc.raw is not None and doc.parsed is None:
        doc.parsed = parse_docstring(doc.raw, dialect)


def _raw_bytes(path: Optional[Path], language: str) -> bytes:
    if path is None:
        return b""
    try:
        return path.read_bytes()
    except FileNotFoundError as exc:
        raise RawInputError(f"raw {language} input not found: {path}") from exc
    except OSError as exc:
        raise RawInputError(f"unable to read raw {language} input {path}: {exc}") from exc


__all__ = ["BuildResult", "ModelBuilder"]
