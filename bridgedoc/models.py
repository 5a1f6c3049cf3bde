"""Core documentation model shared across bridgedoc components.

Items are a closed tagged union per language: every item class carries a
``kind`` tag and consumers dispatch on that tag.  The model is built once
per run, mutated only by the cross-reference resolver, and then frozen.
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from typing import ClassVar, Dict, Iterator, List, Optional, Sequence, Tuple, Union

from .errors import FrozenModelError

# Languages
RUST = "rust"
PYTHON = "python"
LANGUAGES = (RUST, PYTHON)

# Module source types
SOURCE_RUST = "rust"
SOURCE_PYTHON = "python"
SOURCE_BINDING = "binding"
SOURCE_TYPES = (SOURCE_RUST, SOURCE_PYTHON, SOURCE_BINDING)

# Visibility tiers
PUBLIC = "public"
CRATE = "crate"
SUPER = "super"
PRIVATE = "private"
VISIBILITIES = (PUBLIC, CRATE, SUPER, PRIVATE)

# Cross-reference kinds
BINDING = "binding"
WRAPS = "wraps"
DELEGATES = "delegates"
CROSSREF_KINDS = (BINDING, WRAPS, DELEGATES)

# Docstring dialects
LABELED = "labeled"
UNDERLINED = "underlined"
STRUCTURAL = "structural"
PLAIN = "plain"
DIALECTS = (LABELED, UNDERLINED, STRUCTURAL, PLAIN)

# Resolution warning codes
AMBIGUOUS_TARGET = "ambiguous_target"
UNRESOLVED_METHOD = "unresolved_method"
DANGLING_CROSSREF = "dangling_crossref"
SYNTHESIZED = "synthesized"


class _Node:
    """Mixin that rejects attribute assignment once frozen."""

    _frozen: ClassVar[bool] = False

    def __setattr__(self, name: str, value: object) -> None:
        if self._frozen:
            raise FrozenModelError(
                f"cannot set '{name}' on frozen {type(self).__name__}"
            )
        object.__setattr__(self, name, value)

    def _freeze(self) -> None:
        for attr in fields(self):  # type: ignore[arg-type]
            value = getattr(self, attr.name)
            if isinstance(value, list):
                value = tuple(value)
                object.__setattr__(self, attr.name, value)
            children = value if isinstance(value, tuple) else (value,)
            for child in children:
                if isinstance(child, _Node):
                    child._freeze()
        object.__setattr__(self, "_frozen", True)


@dataclass
class SourceSpan(_Node):
    """File and line range an item or module was read from."""

    file: str = ""
    line_start: int = 0
    line_end: int = 0

    def describe(self) -> str:
        return f"{self.file}:{self.line_start}-{self.line_end}"


@dataclass
class BindingMetadata(_Node):
    """Explicit cross-language exposure of a native declaration."""

    name: Optional[str] = None
    module: Optional[str] = None
    signature: Optional[str] = None


# ----------------------------------------------------------------------
# Parsed docstrings


@dataclass
class ParamDoc(_Node):
    name: str
    type: Optional[str] = None
    description: str = ""


@dataclass
class ReturnDoc(_Node):
    type: Optional[str] = None
    description: str = ""


@dataclass
class RaisesDoc(_Node):
    """A documented exception, error or panic condition."""

    name: str
    kind: str = "raises"
    description: str = ""


@dataclass
class ExampleBlock(_Node):
    text: str
    language: str = "text"


@dataclass
class DocSection(_Node):
    """A recognized section kept as free text (Notes, Safety, ...)."""

    title: str
    body: str = ""


@dataclass
class ParsedDocstring(_Node):
    """Structured view of a doc comment; ``original_text`` is never discarded."""

    summary: str = ""
    description: str = ""
    params: List[ParamDoc] = field(default_factory=list)
    returns: Optional[ReturnDoc] = None
    raises: List[RaisesDoc] = field(default_factory=list)
    examples: List[ExampleBlock] = field(default_factory=list)
    extra_sections: List[DocSection] = field(default_factory=list)
    dialect: str = PLAIN
    original_text: str = ""

    def is_empty(self) -> bool:
        return not (
            self.summary
            or self.description
            or self.params
            or self.returns
            or self.raises
            or self.examples
            or self.extra_sections
        )


@dataclass
class DocBlock(_Node):
    """Raw doc comment text plus its parsed form once the grammar ran."""

    raw: Optional[str] = None
    parsed: Optional[ParsedDocstring] = None


# ----------------------------------------------------------------------
# Items


@dataclass(frozen=True)
class ItemRef:
    """Language-qualified address of an item: module segments plus member segments."""

    language: str
    module: Tuple[str, ...]
    member: Tuple[str, ...]

    @property
    def segments(self) -> Tuple[str, ...]:
        return self.module + self.member


@dataclass
class Param(_Node):
    name: str
    type: Optional[str] = None
    default: Optional[str] = None


@dataclass
class Field(_Node):
    name: str
    type: Optional[str] = None
    visibility: str = PUBLIC
    doc: Optional[str] = None


@dataclass
class Variant(_Node):
    """A named variant of a sum type with an optional payload description."""

    name: str
    payload: Optional[str] = None
    doc: Optional[str] = None


@dataclass
class _Item(_Node):
    name: str
    visibility: str = PUBLIC
    binding: Optional[BindingMetadata] = None
    doc: DocBlock = field(default_factory=DocBlock)
    span: SourceSpan = field(default_factory=SourceSpan)
    synthesized: bool = False
    counterpart: Optional[ItemRef] = None

    kind: ClassVar[str] = ""

    @property
    def is_binding(self) -> bool:
        return self.binding is not None


@dataclass
class Function(_Item):
    """A callable: free function, method or associated function."""

    params: List[Param] = field(default_factory=list)
    return_type: Optional[str] = None
    is_async: bool = False
    is_unsafe: bool = False
    is_const: bool = False
    is_staticmethod: bool = False
    is_classmethod: bool = False
    is_property: bool = False
    decorators: List[str] = field(default_factory=list)

    kind: ClassVar[str] = "function"


@dataclass
class Struct(_Item):
    generics: Optional[str] = None
    fields: List[Field] = field(default_factory=list)

    kind: ClassVar[str] = "struct"


@dataclass
class Enum(_Item):
    generics: Optional[str] = None
    variants: List[Variant] = field(default_factory=list)

    kind: ClassVar[str] = "enum"


@dataclass
class Trait(_Item):
    bounds: Optional[str] = None
    methods: List[Function] = field(default_factory=list)

    kind: ClassVar[str] = "trait"


@dataclass
class Impl(_Item):
    """An impl block; ``binding`` is set when it exports its methods."""

    target: str = ""
    trait_name: Optional[str] = None
    methods: List[Function] = field(default_factory=list)

    kind: ClassVar[str] = "impl"


@dataclass
class Const(_Item):
    type: Optional[str] = None
    value: Optional[str] = None

    kind: ClassVar[str] = "const"


@dataclass
class Variable(_Item):
    type: Optional[str] = None
    value: Optional[str] = None

    kind: ClassVar[str] = "variable"


@dataclass
class Class(_Item):
    bases: List[str] = field(default_factory=list)
    methods: List[Function] = field(default_factory=list)
    attributes: List[Variable] = field(default_factory=list)
    decorators: List[str] = field(default_factory=list)

    kind: ClassVar[str] = "class"


RustItem = Union[Struct, Enum, Function, Trait, Impl, Const]
PythonItem = Union[Class, Function, Variable]
Item = Union[Struct, Enum, Function, Trait, Impl, Const, Class, Variable]

ITEM_KINDS: Dict[str, Dict[str, type]] = {
    RUST: {
        "struct": Struct,
        "enum": Enum,
        "function": Function,
        "trait": Trait,
        "impl": Impl,
        "const": Const,
    },
    PYTHON: {
        "class": Class,
        "function": Function,
        "variable": Variable,
    },
}


# ----------------------------------------------------------------------
# Modules and the top-level model


@dataclass
class Module(_Node):
    """One source file projected onto its canonical module path."""

    path: Tuple[str, ...]
    language: str
    source_type: str
    file: str = ""
    doc: DocBlock = field(default_factory=DocBlock)
    items: List[Item] = field(default_factory=list)
    span: SourceSpan = field(default_factory=SourceSpan)
    synthesized: bool = False

    def find(self, name: str) -> Optional[Item]:
        """Return the first named declaration (impl blocks excluded)."""
        for item in self.items:
            if item.kind != "impl" and item.name == name:
                return item
        return None

    def impls_for(self, target: str) -> List[Impl]:
        return [item for item in self.items if item.kind == "impl" and item.target == target]


@dataclass(frozen=True)
class CrossRef:
    """A resolved link between a Rust item and a Python item."""

    rust: ItemRef
    python: ItemRef
    kind: str = BINDING


@dataclass
class ResolutionWarning:
    """Non-fatal problem surfaced to rendering and CI."""

    code: str
    message: str
    spans: List[SourceSpan] = field(default_factory=list)


@dataclass
class ProjectMetadata(_Node):
    name: str
    version: Optional[str] = None
    generated_at: Optional[str] = None


@dataclass
class DocModel(_Node):
    """All modules of both languages plus the resolved cross references."""

    metadata: ProjectMetadata
    rust_modules: List[Module] = field(default_factory=list)
    python_modules: List[Module] = field(default_factory=list)
    cross_refs: List[CrossRef] = field(default_factory=list)

    @property
    def frozen(self) -> bool:
        return self._frozen

    def freeze(self) -> "DocModel":
        """Freeze the model in place; later mutation raises FrozenModelError."""
        if not self._frozen:
            self._freeze()
        return self

    def modules(self, language: str) -> Sequence[Module]:
        if language == RUST:
            return self.rust_modules
        if language == PYTHON:
            return self.python_modules
        raise ValueError(f"unknown language '{language}'")

    def find_module(self, language: str, path: Sequence[str]) -> Optional[Module]:
        wanted = tuple(path)
        for module in self.modules(language):
            if module.path == wanted:
                return module
        return None

    def find_item(self, ref: ItemRef) -> Optional[Item]:
        module = self.find_module(ref.language, ref.module)
        if module is None or not ref.member:
            return None
        return find_member(module, ref.member)

    def counterpart_of(self, ref: ItemRef) -> Optional[ItemRef]:
        item = self.find_item(ref)
        return item.counterpart if item is not None else None

    def iter_items(self, language: str) -> Iterator[Tuple[ItemRef, Item]]:
        """Yield every addressable item, including methods, with its reference."""
        for module in self.modules(language):
            for member, item in iter_members(module):
                yield ItemRef(language, module.path, member), item


def find_member(module: Module, member: Sequence[str]) -> Optional[Item]:
    """Resolve a member path such as ``("Widget", "area")`` inside a module."""
    head = module.find(member[0])
    if head is None or len(member) == 1:
        return head
    if len(member) != 2:
        return None
    name = member[1]
    for method in _methods_of(module, head):
        if method.name == name:
            return method
    if head.kind == "class":
        for attribute in head.attributes:
            if attribute.name == name:
                return attribute
    return None


def iter_members(module: Module) -> Iterator[Tuple[Tuple[str, ...], Item]]:
    for item in module.items:
        if item.kind == "impl":
            continue
        yield (item.name,), item
        for method in _methods_of(module, item):
            yield (item.name, method.name), method


def _methods_of(module: Module, item: Item) -> List[Function]:
    if item.kind in ("class", "trait"):
        return list(item.methods)
    if item.kind in ("struct", "enum"):
        methods: List[Function] = []
        for block in module.impls_for(item.name):
            methods.extend(block.methods)
        return methods
    return []


__all__ = [
    "BindingMetadata",
    "Class",
    "Const",
    "CrossRef",
    "DocBlock",
    "DocModel",
    "DocSection",
    "Enum",
    "ExampleBlock",
    "Field",
    "Function",
    "ITEM_KINDS",
    "Impl",
    "Item",
    "ItemRef",
    "Module",
    "Param",
    "ParamDoc",
    "ParsedDocstring",
    "ProjectMetadata",
    "PythonItem",
    "RaisesDoc",
    "ResolutionWarning",
    "ReturnDoc",
    "RustItem",
    "SourceSpan",
    "Struct",
    "Trait",
    "Variable",
    "Variant",
    "find_member",
    "iter_members",
]
