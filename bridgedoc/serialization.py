"""JSON conversion of the documentation model and loading of raw parse output."""

from __future__ import annotations

from dataclasses import dataclass, field, fields, is_dataclass
import json
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Sequence

from .errors import ModelError, RawInputError
from .models import (
    ITEM_KINDS,
    LANGUAGES,
    PLAIN,
    PUBLIC,
    BindingMetadata,
    CrossRef,
    DocBlock,
    DocModel,
    DocSection,
    ExampleBlock,
    Field,
    Item,
    ItemRef,
    Module,
    Param,
    ParamDoc,
    ParsedDocstring,
    ProjectMetadata,
    RaisesDoc,
    ResolutionWarning,
    ReturnDoc,
    SourceSpan,
    Variant,
)

MODEL_FORMAT_VERSION = 1


@dataclass
class RawModule:
    """One module entry of a raw parse document, before path projection."""

    file: str
    items: List[Item] = field(default_factory=list)
    doc: Optional[str] = None
    source_type: Optional[str] = None
    line_start: int = 0
    line_end: int = 0


# ----------------------------------------------------------------------
# Model -> plain data


def to_plain(value: Any) -> Any:
    """Convert model dataclasses into JSON-ready dicts and lists.

    Items gain their ``kind`` tag; tuples left behind by freezing become lists.
    """
    if is_dataclass(value) and not isinstance(value, type):
        data = {attr.name: to_plain(getattr(value, attr.name)) for attr in fields(value)}
        kind = getattr(type(value), "kind", "")
        if kind and "kind" not in data:
            data["kind"] = kind
        return data
    if isinstance(value, (list, tuple)):
        return [to_plain(entry) for entry in value]
    return value


def model_to_dict(model: DocModel) -> Dict[str, Any]:
    payload = to_plain(model)
    payload["version"] = MODEL_FORMAT_VERSION
    return payload


def warnings_to_list(warnings: Sequence[ResolutionWarning]) -> List[Dict[str, Any]]:
    return [to_plain(warning) for warning in warnings]


# ----------------------------------------------------------------------
# Plain data -> model


def model_from_dict(payload: Mapping[str, Any]) -> DocModel:
    """Rebuild an (unfrozen) :class:`DocModel` from :func:`model_to_dict` output."""
    if not isinstance(payload, Mapping):
        raise ModelError("serialized model must be a JSON object")
    version = payload.get("version", MODEL_FORMAT_VERSION)
    if version != MODEL_FORMAT_VERSION:
        raise ModelError(f"unsupported model format version {version!r}")
    metadata = payload.get("metadata") or {}
    return DocModel(
        metadata=ProjectMetadata(
            name=str(metadata.get("name", "")),
            version=metadata.get("version"),
            generated_at=metadata.get("generated_at"),
        ),
        rust_modules=[_module_from_dict(entry) for entry in payload.get("rust_modules", [])],
        python_modules=[_module_from_dict(entry) for entry in payload.get("python_modules", [])],
        cross_refs=[_cross_ref_from_dict(entry) for entry in payload.get("cross_refs", [])],
    )


def warnings_from_list(payload: Sequence[Mapping[str, Any]]) -> List[ResolutionWarning]:
    return [
        ResolutionWarning(
            code=str(entry["code"]),
            message=str(entry.get("message", "")),
            spans=[span_from_dict(span) for span in entry.get("spans", [])],
        )
        for entry in payload
    ]


def _module_from_dict(data: Mapping[str, Any]) -> Module:
    language = data.get("language")
    if language not in LANGUAGES:
        raise ModelError(f"unknown module language {language!r}")
    return Module(
        path=tuple(data.get("path", ())),
        language=language,
        source_type=data.get("source_type", language),
        file=data.get("file", ""),
        doc=doc_from_value(data.get("doc")),
        items=[item_from_dict(entry, language) for entry in data.get("items", [])],
        span=span_from_dict(data.get("span")),
        synthesized=bool(data.get("synthesized", False)),
    )


def _cross_ref_from_dict(data: Mapping[str, Any]) -> CrossRef:
    return CrossRef(
        rust=ref_from_dict(data["rust"]),
        python=ref_from_dict(data["python"]),
        kind=data.get("kind", "binding"),
    )


def ref_from_dict(data: Optional[Mapping[str, Any]]) -> Optional[ItemRef]:
    if not data:
        return None
    return ItemRef(
        language=data["language"],
        module=tuple(data.get("module", ())),
        member=tuple(data.get("member", ())),
    )


def span_from_dict(data: Optional[Mapping[str, Any]], file: str = "") -> SourceSpan:
    if not data:
        return SourceSpan(file=file)
    return SourceSpan(
        file=data.get("file", file),
        line_start=int(data.get("line_start", 0)),
        line_end=int(data.get("line_end", 0)),
    )


def _binding_from_dict(data: Optional[Mapping[str, Any]]) -> Optional[BindingMetadata]:
    if data is None:
        return None
    return BindingMetadata(
        name=data.get("name"),
        module=data.get("module"),
        signature=data.get("signature"),
    )


def doc_from_value(value: Any) -> DocBlock:
    """Accept raw doc text, ``None`` or a serialized doc block."""
    if value is None or isinstance(value, str):
        return DocBlock(raw=value)
    parsed = value.get("parsed")
    return DocBlock(
        raw=value.get("raw"),
        parsed=_parsed_from_dict(parsed) if parsed is not None else None,
    )


def _parsed_from_dict(data: Mapping[str, Any]) -> ParsedDocstring:
    returns = data.get("returns")
    return ParsedDocstring(
        summary=data.get("summary", ""),
        description=data.get("description", ""),
        params=[ParamDoc(**entry) for entry in data.get("params", [])],
        returns=ReturnDoc(**returns) if returns is not None else None,
        raises=[RaisesDoc(**entry) for entry in data.get("raises", [])],
        examples=[ExampleBlock(**entry) for entry in data.get("examples", [])],
        extra_sections=[DocSection(**entry) for entry in data.get("extra_sections", [])],
        dialect=data.get("dialect", PLAIN),
        original_text=data.get("original_text", ""),
    )


_COMMON_FIELDS = ("name", "visibility", "binding", "doc", "span", "synthesized", "counterpart")


def item_from_dict(data: Mapping[str, Any], language: str, file: str = "") -> Item:
    """Build an item of ``language`` from its dict form, dispatching on ``kind``."""
    kind = data.get("kind")
    item_cls = ITEM_KINDS[language].get(kind)
    if item_cls is None:
        raise ModelError(f"unknown {language} item kind {kind!r}")
    if "name" not in data:
        if kind != "impl" or "target" not in data:
            raise ModelError(f"{language} {kind} item without a name")
        data = {**data, "name": data["target"]}

    span = data.get("span")
    if span is None and ("line_start" in data or "line_end" in data):
        span = {"line_start": data.get("line_start", 0), "line_end": data.get("line_end", 0)}

    kwargs: Dict[str, Any] = {
        "name": data["name"],
        "visibility": data.get("visibility", PUBLIC),
        "binding": _binding_from_dict(data.get("binding")),
        "doc": doc_from_value(data.get("doc")),
        "span": span_from_dict(span, file),
        "synthesized": bool(data.get("synthesized", False)),
        "counterpart": ref_from_dict(data.get("counterpart")),
    }
    for attr in fields(item_cls):
        if attr.name in _COMMON_FIELDS or attr.name not in data:
            continue
        kwargs[attr.name] = _member_value(attr.name, data[attr.name], language, file)
    return item_cls(**kwargs)


def _member_value(name: str, value: Any, language: str, file: str) -> Any:
    if name == "params":
        return [Param(**entry) for entry in value]
    if name == "fields":
        return [Field(**entry) for entry in value]
    if name == "variants":
        return [Variant(**entry) for entry in value]
    if name == "methods":
        return [item_from_dict({"kind": "function", **entry}, language, file) for entry in value]
    if name == "attributes":
        return [item_from_dict({"kind": "variable", **entry}, language, file) for entry in value]
    if name in ("bases", "decorators"):
        return list(value)
    return value


# ----------------------------------------------------------------------
# Raw parse documents


def load_raw_modules(source: Path | Mapping[str, Any], language: str) -> List[RawModule]:
    """Read a raw parse document (``{"modules": [...]}``) for ``language``."""
    if isinstance(source, Path):
        try:
            payload = json.loads(source.read_text(encoding="utf-8"))
        except FileNotFoundError as exc:
            raise RawInputError(f"raw {language} input not found: {source}") from exc
        except (OSError, json.JSONDecodeError) as exc:
            raise RawInputError(f"unable to read raw {language} input {source}: {exc}") from exc
    else:
        payload = source

    if not isinstance(payload, Mapping) or not isinstance(payload.get("modules"), list):
        raise RawInputError(f"raw {language} input must be an object with a 'modules' list")

    modules: List[RawModule] = []
    for entry in payload["modules"]:
        if not isinstance(entry, Mapping) or not isinstance(entry.get("file"), str):
            raise RawInputError(f"raw {language} module entries need a 'file' string")
        file = entry["file"]
        try:
            items = [item_from_dict(item, language, file) for item in entry.get("items", [])]
        except (ModelError, TypeError) as exc:
            raise RawInputError(f"invalid item in {file}: {exc}") from exc
        modules.append(
            RawModule(
                file=file,
                items=items,
                doc=entry.get("doc"),
                source_type=entry.get("source_type"),
                line_start=int(entry.get("line_start", 0)),
                line_end=int(entry.get("line_end", 0)),
            )
        )
    return modules


__all__ = [
    "MODEL_FORMAT_VERSION",
    "RawModule",
    "doc_from_value",
    "item_from_dict",
    "load_raw_modules",
    "model_from_dict",
    "model_to_dict",
    "to_plain",
    "warnings_from_list",
    "warnings_to_list",
]
