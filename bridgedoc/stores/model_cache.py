"""Persistent cache for built documentation models."""

from __future__ import annotations

from datetime import UTC, datetime
import hashlib
import json
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from ..errors import ModelError
from ..logging import get_logger
from ..models import DocModel, ResolutionWarning
from ..serialization import model_from_dict, model_to_dict, warnings_from_list, warnings_to_list

_CACHE_VERSION = 1

logger = get_logger("stores.model_cache")


def fingerprint(*parts: bytes | str) -> str:
    """Return a stable digest of the raw inputs and configuration that shape a model."""
    digest = hashlib.sha256()
    for part in parts:
        data = part.encode("utf-8") if isinstance(part, str) else part
        digest.update(len(data).to_bytes(8, "big"))
        digest.update(data)
    return digest.hexdigest()


class ModelCache:
    """Stores serialized models keyed by project name and input fingerprint."""

    def __init__(self, path: Path | None) -> None:
        self._path = path
        self._entries: Dict[str, Dict[str, object]] = {}
        self._dirty = False
        if self._path is not None:
            self._load(self._path)

    def get(
        self, key: str, *, fingerprint: str
    ) -> Optional[Tuple[DocModel, List[ResolutionWarning]]]:
        entry = self._entries.get(key)
        if not entry:
            return None
        if entry.get("fingerprint") != fingerprint:
            return None
        model_payload = entry.get("model")
        warnings_payload = entry.get("warnings", [])
        if not isinstance(model_payload, dict) or not isinstance(warnings_payload, list):
            return None
        try:
            model = model_from_dict(model_payload)
            warnings = warnings_from_list(warnings_payload)
        except (ModelError, KeyError, TypeError, ValueError) as exc:
            logger.debug("Discarding unreadable cache entry %s: %s", key, exc)
            return None
        return model.freeze(), warnings

    def store(
        self,
        key: str,
        *,
        fingerprint: str,
        model: DocModel,
        warnings: Sequence[ResolutionWarning] = (),
    ) -> None:
        self._entries[key] = {
            "fingerprint": fingerprint,
            "model": model_to_dict(model),
            "warnings": warnings_to_list(warnings),
            "updated_at": datetime.now(UTC).isoformat().replace("+00:00", "Z"),
        }
        self._dirty = True

    def prune(self, keys_to_keep: Iterable[str]) -> None:
        """Drop every entry whose key is not in ``keys_to_keep``."""
        keep = set(keys_to_keep)
        removed = [key for key in self._entries if key not in keep]
        if removed:
            for key in removed:
                self._entries.pop(key, None)
            self._dirty = True

    def persist(self) -> None:
        if not self._dirty or self._path is None:
            return
        payload = {
            "version": _CACHE_VERSION,
            "entries": self._entries,
        }
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._path.write_text(
            json.dumps(payload, indent=2, sort_keys=True), encoding="utf-8"
        )
        self._dirty = False

    # ------------------------------------------------------------------
    # Internal helpers

    def _load(self, path: Path) -> None:
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            return
        except (OSError, json.JSONDecodeError) as exc:
            logger.debug("Ignoring unreadable model cache %s: %s", path, exc)
            return
        if not isinstance(data, dict) or data.get("version") != _CACHE_VERSION:
            return
        entries = data.get("entries")
        if not isinstance(entries, dict):
            return
        valid_entries: Dict[str, Dict[str, object]] = {}
        for key, raw in entries.items():
            if not isinstance(key, str) or not isinstance(raw, dict):
                continue
            if "fingerprint" not in raw or "model" not in raw:
                continue
            valid_entries[key] = raw
        self._entries = valid_entries
        self._dirty = False


__all__ = ["ModelCache", "fingerprint"]
