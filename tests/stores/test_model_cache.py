"""Tests for the model cache store."""

from __future__ import annotations

from pathlib import Path

from bridgedoc.models import DocModel, ProjectMetadata, ResolutionWarning, SourceSpan
from bridgedoc.stores import ModelCache, fingerprint
from tests._fixtures.tree_builder import python_module, rust_module


def _model(name: str = "demo") -> DocModel:
    return DocModel(
        metadata=ProjectMetadata(name=name, version="1.0"),
        rust_modules=[rust_module(("engine",))],
        python_modules=[python_module(("demo",))],
    )


def test_model_cache_round_trip(tmp_path: Path) -> None:
    cache_path = tmp_path / "cache.json"
    cache = ModelCache(cache_path)
    warning = ResolutionWarning(code="synthesized", message="made up", spans=[SourceSpan("src/lib.rs", 1, 2)])
    cache.store("demo", fingerprint="fp-abc", model=_model(), warnings=[warning])
    cache.persist()

    loaded = ModelCache(cache_path)
    reuse = loaded.get("demo", fingerprint="fp-abc")

    assert reuse is not None
    model, warnings = reuse
    assert model.frozen
    assert model == _model().freeze()
    assert warnings == [warning]


def test_model_cache_invalidates_on_fingerprint_change(tmp_path: Path) -> None:
    cache = ModelCache(tmp_path / "cache.json")
    cache.store("demo", fingerprint="fp", model=_model())

    assert cache.get("demo", fingerprint="fp") is not None
    assert cache.get("demo", fingerprint="fp-changed") is None
    assert cache.get("other", fingerprint="fp") is None


def test_model_cache_prune_removes_unused(tmp_path: Path) -> None:
    cache = ModelCache(tmp_path / "cache.json")
    cache.store("a", fingerprint="fp", model=_model("a"))
    cache.store("b", fingerprint="fp", model=_model("b"))

    cache.prune(["a"])
    cache.persist()

    reloaded = ModelCache(tmp_path / "cache.json")
    assert reloaded.get("a", fingerprint="fp") is not None
    assert reloaded.get("b", fingerprint="fp") is None


def test_model_cache_ignores_corrupt_files(tmp_path: Path) -> None:
    cache_path = tmp_path / "cache.json"
    cache_path.write_text("{not json", encoding="utf-8")

    cache = ModelCache(cache_path)

    assert cache.get("demo", fingerprint="fp") is None


def test_model_cache_discards_unreadable_entries(tmp_path: Path) -> None:
    cache_path = tmp_path / "cache.json"
    cache_path.write_text(
        '{"version": 1, "entries": {"demo": {"fingerprint": "fp", "model": {"version": 99}}}}',
        encoding="utf-8",
    )

    assert ModelCache(cache_path).get("demo", fingerprint="fp") is None


def test_fingerprint_separates_parts() -> None:
    assert fingerprint("ab", "c") != fingerprint("a", "bc")
    assert fingerprint("ab", b"c") == fingerprint(b"ab", "c")
