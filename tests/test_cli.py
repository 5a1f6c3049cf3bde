"""CLI behaviour tests."""

from __future__ import annotations

import json

import pytest

from bridgedoc.cli import _build_parser, main
from tests._fixtures.tree_builder import DEMO_CONFIG, TreeBuilder, demo_raw_modules


def _demo_tree(tree_builder: TreeBuilder) -> None:
    raw = demo_raw_modules()
    tree_builder.write_raw("rust", raw["rust"])
    tree_builder.write_raw("python", raw["python"])
    tree_builder.write_config(DEMO_CONFIG)


def test_cli_accepts_verbose_before_command() -> None:
    parser = _build_parser()
    args = parser.parse_args(["--verbose", "build"])
    assert args.verbose is True
    assert args.command == "build"
    assert args.path == "."


def test_cli_accepts_verbose_after_command() -> None:
    parser = _build_parser()
    args = parser.parse_args(["check", "--verbose"])
    assert args.verbose is True
    assert args.command == "check"


def test_cli_accepts_build_flags() -> None:
    parser = _build_parser()
    args = parser.parse_args(["build", "project", "-o", "out.json", "--no-cache"])
    assert args.path == "project"
    assert args.output == "out.json"
    assert args.no_cache is True


def test_build_writes_the_model(tree_builder: TreeBuilder, capsys) -> None:
    _demo_tree(tree_builder)
    output = tree_builder.path() / "out" / "model.json"

    main(["build", str(tree_builder.path()), "--output", str(output)])

    payload = json.loads(output.read_text(encoding="utf-8"))
    assert payload["version"] == 1
    assert payload["metadata"]["name"] == "demo"
    assert len(payload["cross_refs"]) == 4
    assert [warning["code"] for warning in payload["warnings"]] == ["synthesized", "synthesized"]

    captured = capsys.readouterr().out
    assert "warning[synthesized]" in captured
    assert "Model written to" in captured


def test_build_reports_cached_models(tree_builder: TreeBuilder, capsys) -> None:
    _demo_tree(tree_builder)

    main(["build", str(tree_builder.path())])
    main(["build", str(tree_builder.path())])

    assert (tree_builder.path() / "bridgedoc-model.json").exists()
    lines = capsys.readouterr().out.splitlines()
    assert lines[-1].endswith("(cached)")


def test_check_prints_counts(tree_builder: TreeBuilder, capsys) -> None:
    _demo_tree(tree_builder)

    main(["check", str(tree_builder.path())])

    captured = capsys.readouterr().out
    assert "2 Rust modules, 2 Python modules, 4 cross references, 2 warnings" in captured
    assert not (tree_builder.path() / "bridgedoc-model.json").exists()


def test_check_fails_on_identity_collision(tree_builder: TreeBuilder, capsys) -> None:
    raw = demo_raw_modules()
    raw["rust"][0]["items"].append(
        {"kind": "struct", "name": "Twin", "binding": {"name": "Widget", "module": "demo.shapes"}}
    )
    tree_builder.write_raw("rust", raw["rust"])
    tree_builder.write_raw("python", raw["python"])
    tree_builder.write_config(DEMO_CONFIG)

    with pytest.raises(SystemExit) as excinfo:
        main(["check", str(tree_builder.path())])

    assert excinfo.value.code == 1
    assert "duplicate external identity" in capsys.readouterr().err


def test_build_fails_on_configuration_errors(tree_builder: TreeBuilder, capsys) -> None:
    tree_builder.write_config("links:\n  - rust: engine::f\n")

    with pytest.raises(SystemExit) as excinfo:
        main(["build", str(tree_builder.path())])

    assert excinfo.value.code == 1
    assert "bridgedoc build failed" in capsys.readouterr().err
