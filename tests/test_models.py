"""Tests for bridgedoc.models."""

from __future__ import annotations

import pytest

from bridgedoc.errors import FrozenModelError
from bridgedoc.grammar import parse_docstring
from bridgedoc.models import (
    PYTHON,
    RUST,
    BindingMetadata,
    Class,
    DocBlock,
    DocModel,
    Function,
    Impl,
    ItemRef,
    ProjectMetadata,
    Struct,
    Variable,
)
from tests._fixtures.tree_builder import python_module, rust_module


def _widget_model() -> DocModel:
    rust = rust_module(
        ("engine", "shapes"),
        Struct(name="Widget", binding=BindingMetadata(), doc=DocBlock(raw="A widget.", parsed=parse_docstring("A widget."))),
        Impl(name="Widget", target="Widget", binding=BindingMetadata(), methods=[Function(name="area")]),
    )
    python = python_module(
        ("demo", "shapes"),
        Class(name="Widget", methods=[Function(name="area")], attributes=[Variable(name="size")]),
    )
    return DocModel(metadata=ProjectMetadata(name="demo"), rust_modules=[rust], python_modules=[python])


def test_item_kinds_are_tags() -> None:
    assert Struct(name="S").kind == "struct"
    assert Impl(name="S", target="S").kind == "impl"
    assert Class(name="C").kind == "class"
    assert Function(name="f").kind == "function"
    assert Variable(name="v").kind == "variable"


def test_find_item_reaches_methods_through_impl_blocks() -> None:
    model = _widget_model()

    area = model.find_item(ItemRef(RUST, ("engine", "shapes"), ("Widget", "area")))
    widget = model.find_item(ItemRef(RUST, ("engine", "shapes"), ("Widget",)))

    assert isinstance(area, Function) and area.name == "area"
    assert widget is not None and widget.kind == "struct"
    assert model.find_item(ItemRef(RUST, ("engine", "shapes"), ("Missing",))) is None
    assert model.find_item(ItemRef(RUST, ("engine", "nowhere"), ("Widget",))) is None


def test_find_item_reaches_class_attributes() -> None:
    model = _widget_model()

    size = model.find_item(ItemRef(PYTHON, ("demo", "shapes"), ("Widget", "size")))

    assert size is not None and size.kind == "variable"


def test_iter_items_lists_members_and_skips_impl_blocks() -> None:
    model = _widget_model()

    refs = [ref.member for ref, _ in model.iter_items(RUST)]

    assert refs == [("Widget",), ("Widget", "area")]


def test_module_find_ignores_impl_blocks() -> None:
    module = rust_module(("engine",), Impl(name="Widget", target="Widget"))

    assert module.find("Widget") is None
    assert len(module.impls_for("Widget")) == 1


def test_counterpart_of_reads_the_item_link() -> None:
    model = _widget_model()
    rust_ref = ItemRef(RUST, ("engine", "shapes"), ("Widget",))
    python_ref = ItemRef(PYTHON, ("demo", "shapes"), ("Widget",))
    model.find_item(rust_ref).counterpart = python_ref
    model.find_item(python_ref).counterpart = rust_ref

    assert model.counterpart_of(rust_ref) == python_ref
    assert model.counterpart_of(python_ref) == rust_ref


def test_freeze_rejects_mutation_everywhere() -> None:
    model = _widget_model().freeze()

    assert model.frozen
    module = model.rust_modules[0]
    assert isinstance(model.rust_modules, tuple)
    assert isinstance(module.items, tuple)

    with pytest.raises(FrozenModelError):
        model.cross_refs = []
    with pytest.raises(FrozenModelError):
        module.items[0].name = "Renamed"
    with pytest.raises(FrozenModelError):
        module.items[0].doc.parsed.summary = "changed"
    with pytest.raises(FrozenModelError):
        model.metadata.version = "2.0"


def test_freeze_is_idempotent() -> None:
    model = _widget_model()

    assert model.freeze() is model
    assert model.freeze() is model


def test_modules_rejects_unknown_language() -> None:
    with pytest.raises(ValueError):
        _widget_model().modules("go")
