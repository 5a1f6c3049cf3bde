"""CLI entrypoints for bridgedoc commands."""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import Sequence

from .config import load_config
from .errors import BridgeDocError, DuplicateIdentityError
from .logging import configure_logging
from .models import ResolutionWarning
from .pipeline import ModelBuilder
from .serialization import model_to_dict, warnings_to_list

DEFAULT_OUTPUT = "bridgedoc-model.json"


def _add_verbose_option(
    parser: argparse.ArgumentParser, *, suppress_default: bool = False
) -> None:
    kwargs: dict[str, object] = {
        "action": "store_true",
        "help": "Increase log verbosity for troubleshooting.",
    }
    if suppress_default:
        kwargs["default"] = argparse.SUPPRESS
    else:
        kwargs["default"] = False
    parser.add_argument(
        "-v",
        "--verbose",
        **kwargs,
    )


def _add_path_argument(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "path",
        nargs="?",
        default=".",
        help="Project directory or .bridgedoc.yml file (defaults to current directory).",
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="bridgedoc",
        description="Build a unified Rust/Python documentation model from raw parse output.",
    )
    _add_verbose_option(parser)
    subparsers = parser.add_subparsers(dest="command", required=True)

    build_parser = subparsers.add_parser(
        "build",
        help="Build the documentation model and write it as JSON.",
    )
    _add_verbose_option(build_parser, suppress_default=True)
    _add_path_argument(build_parser)
    build_parser.add_argument(
        "--output",
        "-o",
        default=None,
        help=f"Where to write the serialized model (defaults to {DEFAULT_OUTPUT} in the project root).",
    )
    build_parser.add_argument(
        "--no-cache",
        action="store_true",
        help="Ignore and do not update the model cache.",
    )

    check_parser = subparsers.add_parser(
        "check",
        help="Build the model without writing anything and report warnings.",
    )
    _add_verbose_option(check_parser, suppress_default=True)
    _add_path_argument(check_parser)

    return parser


def main(argv: list[str] | None = None) -> None:
    """CLI entrypoint for bridgedoc commands."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    configure_logging(verbose=bool(args.verbose))

    builder = ModelBuilder()
    try:
        config = load_config(Path(args.path))
        if args.command == "build":
            result = builder.build(config, use_cache=not bool(getattr(args, "no_cache", False)))
        elif args.command == "check":
            result = builder.build(config, use_cache=False)
        else:  # pragma: no cover - argparse enforces choices
            parser.exit(1, "Unknown command\n")
    except DuplicateIdentityError as exc:
        details = "\n".join(f"  {collision.describe()}" for collision in exc.collisions)
        parser.exit(1, f"bridgedoc {args.command} failed: duplicate external identity\n{details}\n")
    except BridgeDocError as exc:
        parser.exit(1, f"bridgedoc {args.command} failed: {exc}\nRun with --verbose for more details.\n")

    _print_warnings(result.warnings)

    if args.command == "build":
        output = Path(args.output) if args.output else config.root / DEFAULT_OUTPUT
        payload = model_to_dict(result.model)
        payload["warnings"] = warnings_to_list(result.warnings)
        output.parent.mkdir(parents=True, exist_ok=True)
        output.write_text(json.dumps(payload, indent=2, sort_keys=True), encoding="utf-8")
        suffix = " (cached)" if result.cached else ""
        print(f"Model written to {_relativize(output)}{suffix}")
    else:
        model = result.model
        print(
            f"{len(model.rust_modules)} Rust modules, {len(model.python_modules)} Python modules, "
            f"{len(model.cross_refs)} cross references, {len(result.warnings)} warnings"
        )


def _print_warnings(warnings: Sequence[ResolutionWarning]) -> None:
    for warning in warnings:
        location = f" ({warning.spans[0].describe()})" if warning.spans else ""
        print(f"warning[{warning.code}]: {warning.message}{location}")


def _relativize(path: Path) -> str:
    try:
        return str(path.resolve().relative_to(Path.cwd()))
    except ValueError:
        return str(path)


if __name__ == "__main__":
    main(sys.argv[1:])
