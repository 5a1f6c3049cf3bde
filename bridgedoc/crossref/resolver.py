"""Cross-reference resolution between native bindings and Python declarations.

Resolution runs in a fixed order over the inputs so that the same model always
produces the same cross references and warnings:

1. collect exposing items (class, function and method bindings) and reject
   identity collisions;
2. build the exposed ``(container, name)`` index from binding modules;
3. match classes and functions; an authored declaration at the exact
   exposed path always wins, and placeholders are synthesized only when
   nothing authored exists;
4. match methods of exporting impl blocks inside their resolved class;
5. validate manual links.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Dict, List, Mapping, MutableSequence, Optional, Sequence, Tuple

from ..errors import DuplicateIdentityError, IdentityCollision, ModelError
from ..logging import get_logger
from ..models import (
    AMBIGUOUS_TARGET,
    BINDING,
    DANGLING_CROSSREF,
    PYTHON,
    RUST,
    SOURCE_BINDING,
    SYNTHESIZED,
    UNRESOLVED_METHOD,
    CrossRef,
    Function,
    Impl,
    Item,
    ItemRef,
    Module,
    ResolutionWarning,
    find_member,
)
from ..paths import ModulePathProjector, to_exposed_path
from .synthesis import synthesize_class, synthesize_function, synthesize_module

if TYPE_CHECKING:  # pragma: no cover - typing aid
    from ..config import LinkConfig

logger = get_logger("crossref")

_CLASS_KINDS = ("struct", "enum")

Entry = Tuple[Module, Item]


@dataclass
class ResolutionResult:
    cross_refs: List[CrossRef] = field(default_factory=list)
    warnings: List[ResolutionWarning] = field(default_factory=list)


@dataclass
class _Exposure:
    """A native item that claims an identity on the Python side."""

    item: Item
    module: Module
    container: str
    identity: str
    exposed_path: Tuple[str, ...]
    explicit: bool = False

    @property
    def claim(self) -> str:
        """Collision key of the container: the full module path when the binding names one."""
        return ".".join(self.exposed_path) if self.explicit else self.container

    @property
    def ref(self) -> ItemRef:
        return ItemRef(RUST, self.module.path, (self.item.name,))


@dataclass
class _ExposedIndex:
    """``(container, name)`` lookup over binding modules, built once per resolve call."""

    entries: Dict[Tuple[str, str], List[Entry]] = field(default_factory=dict)

    @classmethod
    def build(cls, python_modules: Sequence[Module]) -> "_ExposedIndex":
        index = cls()
        for module in python_modules:
            if module.source_type != SOURCE_BINDING:
                continue
            for item in module.items:
                if item.kind == "impl":
                    continue
                index.add(module, item)
        return index

    def add(self, module: Module, item: Item) -> None:
        self.entries.setdefault((module.path[-1], item.name), []).append((module, item))

    def candidates(self, container: str, name: str) -> List[Entry]:
        return self.entries.get((container, name), [])


class CrossReferenceResolver:
    """Links binding items to their Python counterparts.

    The resolver receives the same projectors the builder used for module
    paths, so display strings and exposed paths agree everywhere.
    """

    def __init__(self, projectors: Mapping[str, ModulePathProjector], python_root: str) -> None:
        self.projectors = projectors
        self.python_root = python_root

    # ------------------------------------------------------------------
    # Public API

    def resolve(
        self,
        rust_modules: Sequence[Module],
        python_modules: MutableSequence[Module],
        manual_refs: Sequence["LinkConfig"] = (),
    ) -> ResolutionResult:
        """Resolve cross references, setting ``counterpart`` on matched items.

        Synthesized modules are appended to ``python_modules``.  Raises
        :class:`DuplicateIdentityError` before touching any item when two
        bindings claim the same external identity.
        """
        result = ResolutionResult()
        exposures = self._collect_exposures(rust_modules)
        self._check_collisions(rust_modules, exposures)

        index = _ExposedIndex.build(python_modules)
        for exposure in exposures:
            self._resolve_exposure(exposure, index, python_modules, result)

        for module in rust_modules:
            for block in module.items:
                if block.kind == "impl" and block.binding is not None:
                    self._resolve_methods(module, block, python_modules, result)

        for link in manual_refs:
            self._resolve_manual(link, rust_modules, python_modules, result)

        logger.debug(
            "Resolved %d cross references with %d warnings",
            len(result.cross_refs),
            len(result.warnings),
        )
        return result

    # ------------------------------------------------------------------
    # Exposures and collisions

    def _collect_exposures(self, rust_modules: Sequence[Module]) -> List[_Exposure]:
        exposures: List[_Exposure] = []
        for module in rust_modules:
            for item in module.items:
                if item.binding is None or item.kind not in (*_CLASS_KINDS, "function"):
                    continue
                exposures.append(self._exposure(module, item))
        return exposures

    def _exposure(self, module: Module, item: Item) -> _Exposure:
        binding = item.binding
        declared = tuple(part for part in (binding.module or "").split(".") if part) if binding else ()
        if not declared:
            exposed_path = to_exposed_path(module.path, self.python_root)
        elif declared[0] != self.python_root:
            exposed_path = (self.python_root, *declared)
        else:
            exposed_path = declared
        identity = (binding.name if binding is not None else None) or item.name
        return _Exposure(
            item=item,
            module=module,
            container=exposed_path[-1],
            identity=identity,
            exposed_path=exposed_path,
            explicit=bool(declared),
        )

    def _check_collisions(self, rust_modules: Sequence[Module], exposures: Sequence[_Exposure]) -> None:
        seen: Dict[Tuple[str, str], Item] = {}
        collisions: List[IdentityCollision] = []

        def _claim(container: str, name: str, item: Item) -> None:
            key = (container, name)
            first = seen.get(key)
            if first is None:
                seen[key] = item
            else:
                collisions.append(IdentityCollision(container, name, first.span, item.span))

        for exposure in exposures:
            _claim(exposure.claim, exposure.identity, exposure.item)

        classes = {(id(e.module), e.item.name): e for e in exposures if e.item.kind in _CLASS_KINDS}
        for module in rust_modules:
            for block in module.items:
                if block.kind != "impl" or block.binding is None:
                    continue
                owner = classes.get((id(module), block.target))
                if owner is None:
                    continue
                for method in block.methods:
                    _claim(f"{owner.claim}.{owner.identity}", _method_identity(method), method)

        if collisions:
            raise DuplicateIdentityError(collisions)

    # ------------------------------------------------------------------
    # Classes and functions

    def _resolve_exposure(
        self,
        exposure: _Exposure,
        index: _ExposedIndex,
        python_modules: MutableSequence[Module],
        result: ResolutionResult,
    ) -> None:
        candidates = index.candidates(exposure.container, exposure.identity)
        if len(candidates) > 1:
            exact = [entry for entry in candidates if entry[0].path == exposure.exposed_path]
            if len(exact) != 1:
                self._warn(
                    result,
                    AMBIGUOUS_TARGET,
                    f"{self._rust_display(exposure.ref)} matches {len(candidates)} Python "
                    f"declarations named {exposure.container}.{exposure.identity}",
                    [exposure.item.span, *(item.span for _, item in candidates)],
                )
                return
            candidates = exact

        if candidates:
            module, item = candidates[0]
        else:
            authored = _authored_at(python_modules, exposure.exposed_path, exposure.identity)
            if authored is not None:
                module, item = authored
            else:
                module, item = self._synthesize(exposure, python_modules, result)
            index.add(module, item)

        self._link(exposure.ref, exposure.item, ItemRef(PYTHON, module.path, (item.name,)), item, result)

    def _synthesize(
        self,
        exposure: _Exposure,
        python_modules: MutableSequence[Module],
        result: ResolutionResult,
    ) -> Entry:
        module = self._target_module(exposure, python_modules, result)
        native = exposure.item
        if native.kind == "function":
            item: Item = synthesize_function(native, exposure.identity)
        else:
            item = synthesize_class(native, exposure.identity)
        module.items.append(item)
        self._warn(
            result,
            SYNTHESIZED,
            f"synthesized Python {item.kind} {self._python_display(module.path, (item.name,))} "
            f"for {self._rust_display(exposure.ref)}",
            [native.span],
        )
        return module, item

    def _target_module(
        self,
        exposure: _Exposure,
        python_modules: MutableSequence[Module],
        result: ResolutionResult,
    ) -> Module:
        for module in python_modules:
            if module.path == exposure.exposed_path:
                return module
        same_container = [
            module
            for module in python_modules
            if module.source_type == SOURCE_BINDING and module.path[-1] == exposure.container
        ]
        if len(same_container) == 1:
            return same_container[0]

        module = synthesize_module(exposure.exposed_path, exposure.module)
        python_modules.append(module)
        self._warn(
            result,
            SYNTHESIZED,
            f"synthesized Python module {self._python_display(module.path)} "
            f"for {self.projectors[RUST].display(exposure.module.path)}",
            [exposure.module.span],
        )
        return module

    # ------------------------------------------------------------------
    # Methods

    def _resolve_methods(
        self,
        module: Module,
        block: Impl,
        python_modules: Sequence[Module],
        result: ResolutionResult,
    ) -> None:
        owner = module.find(block.target)
        python_ref = owner.counterpart if owner is not None and owner.binding is not None else None
        python_module = _module_at(python_modules, python_ref.module) if python_ref else None
        python_class = python_module.find(python_ref.member[0]) if python_module and python_ref else None

        if python_class is None or python_class.kind != "class":
            for method in block.methods:
                self._warn(
                    result,
                    UNRESOLVED_METHOD,
                    f"method {block.target}.{method.name} is exported but {block.target} "
                    "has no resolved class binding",
                    [method.span],
                )
            return

        for method in block.methods:
            identity = _method_identity(method)
            target = next((candidate for candidate in python_class.methods if candidate.name == identity), None)
            if target is None:
                target = synthesize_function(method, identity)
                python_class.methods.append(target)
                self._warn(
                    result,
                    SYNTHESIZED,
                    f"synthesized Python method {self._python_display(python_module.path, (python_class.name, identity))} "
                    f"for {block.target}.{method.name}",
                    [method.span],
                )
            self._link(
                ItemRef(RUST, module.path, (block.target, method.name)),
                method,
                ItemRef(PYTHON, python_module.path, (python_class.name, target.name)),
                target,
                result,
            )

    # ------------------------------------------------------------------
    # Manual links

    def _resolve_manual(
        self,
        link: "LinkConfig",
        rust_modules: Sequence[Module],
        python_modules: Sequence[Module],
        result: ResolutionResult,
    ) -> None:
        rust_ref = _locate(RUST, self.projectors[RUST].split(link.rust), rust_modules)
        python_ref = _locate(PYTHON, self.projectors[PYTHON].split(link.python), python_modules)
        if rust_ref is None or python_ref is None:
            missing = link.rust if rust_ref is None else link.python
            self._warn(
                result,
                DANGLING_CROSSREF,
                f"link {link.rust} -> {link.python} ({link.kind}) points at missing item {missing}",
                [],
            )
            return
        cross_ref = CrossRef(rust=rust_ref, python=python_ref, kind=link.kind)
        if cross_ref in result.cross_refs:
            return
        if link.kind == BINDING:
            rust_item = _item_at(rust_modules, rust_ref)
            python_item = _item_at(python_modules, python_ref)
            if rust_item.counterpart is None and python_item.counterpart is None:
                rust_item.counterpart = python_ref
                python_item.counterpart = rust_ref
        result.cross_refs.append(cross_ref)

    # ------------------------------------------------------------------
    # Helpers

    def _link(
        self,
        rust_ref: ItemRef,
        rust_item: Item,
        python_ref: ItemRef,
        python_item: Item,
        result: ResolutionResult,
    ) -> None:
        rust_item.counterpart = python_ref
        python_item.counterpart = rust_ref
        result.cross_refs.append(CrossRef(rust=rust_ref, python=python_ref, kind=BINDING))

    def _warn(self, result: ResolutionResult, code: str, message: str, spans: Sequence) -> None:
        result.warnings.append(ResolutionWarning(code=code, message=message, spans=list(spans)))

    def _rust_display(self, ref: ItemRef) -> str:
        return self.projectors[RUST].display(ref.segments)

    def _python_display(self, module_path: Sequence[str], member: Sequence[str] = ()) -> str:
        return self.projectors[PYTHON].display((*module_path, *member))


def _method_identity(method: Function) -> str:
    if method.binding is not None and method.binding.name:
        return method.binding.name
    return method.name


def _module_at(modules: Sequence[Module], path: Sequence[str]) -> Optional[Module]:
    wanted = tuple(path)
    return next((module for module in modules if module.path == wanted), None)


def _authored_at(modules: Sequence[Module], path: Sequence[str], name: str) -> Optional[Entry]:
    """Return an authored declaration at the exact exposed path, in a module of any source type."""
    module = _module_at(modules, path)
    item = module.find(name) if module is not None else None
    if item is None or item.synthesized:
        return None
    return module, item


def _item_at(modules: Sequence[Module], ref: ItemRef) -> Item:
    module = _module_at(modules, ref.module)
    item = find_member(module, ref.member) if module is not None else None
    if item is None:
        raise ModelError(f"no {ref.language} item at {'.'.join(ref.segments)}")
    return item


def _locate(language: str, segments: Sequence[str], modules: Sequence[Module]) -> Optional[ItemRef]:
    """Split ``segments`` into the longest existing module path plus a member path."""
    for cut in range(len(segments) - 1, 0, -1):
        module = _module_at(modules, segments[:cut])
        if module is None:
            continue
        member = tuple(segments[cut:])
        if find_member(module, member) is not None:
            return ItemRef(language, module.path, member)
    return None


__all__ = ["CrossReferenceResolver", "ResolutionResult"]
