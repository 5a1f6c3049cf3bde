"""Configuration loading for bridgedoc (.bridgedoc.yml)."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from .errors import ConfigError
from .models import BINDING, CROSSREF_KINDS, SOURCE_TYPES

CONFIG_FILENAME = ".bridgedoc.yml"
DEFAULT_CACHE_PATH = ".bridgedoc/model_cache.json"


@dataclass
class ProjectConfig:
    """Project identity shown in generated documentation."""

    name: Optional[str] = None
    version: Optional[str] = None


@dataclass
class TreeConfig:
    """One language's source tree: declared root name and raw parse output."""

    root_name: Optional[str] = None
    raw: Optional[Path] = None
    modules: Dict[str, str] = field(default_factory=dict)


@dataclass
class LinkConfig:
    """A manually declared cross reference between display paths."""

    rust: str
    python: str
    kind: str = BINDING


@dataclass
class CacheConfig:
    path: Optional[Path] = None
    enabled: bool = True


@dataclass
class BridgeDocConfig:
    """Represents the settings defined in .bridgedoc.yml."""

    root: Path
    project: ProjectConfig = field(default_factory=ProjectConfig)
    rust: TreeConfig = field(default_factory=TreeConfig)
    python: TreeConfig = field(default_factory=TreeConfig)
    links: List[LinkConfig] = field(default_factory=list)
    cache: CacheConfig = field(default_factory=CacheConfig)
    source_text: str = ""

    @property
    def project_name(self) -> str:
        return self.project.name or self.rust.root_name or self.python.root_name or self.root.name


def load_config(config_path: Path) -> BridgeDocConfig:
    """Load configuration from disk; a missing file yields defaults."""
    config_file = _resolve_config_path(config_path)
    root = config_file.parent.resolve()

    if not config_file.exists():
        return BridgeDocConfig(root=root, cache=CacheConfig(path=root / DEFAULT_CACHE_PATH))

    text = config_file.read_text(encoding="utf-8")
    data = _read_config(config_file, text)
    if not isinstance(data, dict):
        raise ConfigError(f"{CONFIG_FILENAME} must contain a mapping at the root")

    project_data = _as_dict(data.get("project"))
    project = ProjectConfig(
        name=_as_str(project_data.get("name")),
        version=_as_str(project_data.get("version")),
    )

    rust = _tree_config(root, _as_dict(data.get("rust")), "rust")
    python = _tree_config(root, _as_dict(data.get("python")), "python")
    if rust.modules:
        raise ConfigError("rust.modules is not supported; source types apply to Python modules")

    links = [_link_config(entry, position) for position, entry in enumerate(_as_list(data.get("links")))]

    cache_data = _as_dict(data.get("cache"))
    cache_path = _as_str(cache_data.get("path")) or DEFAULT_CACHE_PATH
    enabled = _as_bool(cache_data.get("enabled"))
    cache = CacheConfig(path=root / cache_path, enabled=True if enabled is None else enabled)

    return BridgeDocConfig(
        root=root,
        project=project,
        rust=rust,
        python=python,
        links=links,
        cache=cache,
        source_text=text,
    )


def _tree_config(root: Path, data: Dict[str, Any], section: str) -> TreeConfig:
    raw = _as_str(data.get("raw"))
    overrides: Dict[str, str] = {}
    for module, source_type in _as_dict(data.get("modules")).items():
        value = _as_str(source_type)
        if value not in SOURCE_TYPES:
            raise ConfigError(
                f"{section}.modules.{module}: source type must be one of "
                f"{', '.join(SOURCE_TYPES)}, got {source_type!r}"
            )
        overrides[str(module)] = value
    return TreeConfig(
        root_name=_as_str(data.get("root_name")),
        raw=root / raw if raw else None,
        modules=overrides,
    )


def _link_config(entry: Any, position: int) -> LinkConfig:
    data = _as_dict(entry)
    rust = _as_str(data.get("rust"))
    python = _as_str(data.get("python"))
    if not rust or not python:
        raise ConfigError(f"links[{position}] needs both 'rust' and 'python' paths")
    kind = _as_str(data.get("kind")) or BINDING
    if kind not in CROSSREF_KINDS:
        raise ConfigError(
            f"links[{position}]: kind must be one of {', '.join(CROSSREF_KINDS)}, got {kind!r}"
        )
    return LinkConfig(rust=rust, python=python, kind=kind)


def _resolve_config_path(config_path: Path) -> Path:
    config_path = config_path.expanduser()
    if config_path.is_dir():
        return (config_path / CONFIG_FILENAME).resolve()
    if config_path.name != CONFIG_FILENAME:
        return (config_path.parent / CONFIG_FILENAME).resolve()
    return config_path.resolve()


def _read_config(path: Path, text: str) -> Any:
    if not text.strip():
        return {}
    try:
        loaded = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse {path.name}: {exc}") from exc
    return {} if loaded is None else loaded


def _as_dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _as_list(value: Any) -> List[Any]:
    return value if isinstance(value, list) else []


def _as_str(value: Any) -> Optional[str]:
    return str(value) if isinstance(value, (str, int, float, bool)) else None


def _as_bool(value: Any) -> Optional[bool]:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in {"true", "yes", "1"}:
            return True
        if lowered in {"false", "no", "0"}:
            return False
    return None


__all__ = [
    "BridgeDocConfig",
    "CONFIG_FILENAME",
    "CacheConfig",
    "LinkConfig",
    "ProjectConfig",
    "TreeConfig",
    "load_config",
]
