"""Narrow module-graph and chunk-graph views consumed by id assignment.

Example:
    >>> a, b = Module("/app/src/index.js"), Module("/app/src/util.js")
    >>> compilation = Compilation(context="/app", modules=[a, b])
    >>> compilation.module_graph.add_dependency(a, b)
    >>> compilation.module_graph.assign_pre_order_indices([a])
    >>> compilation.module_graph.get_pre_order_index(b)
    1
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Iterable, Optional

from .exceptions import UnknownModuleError
from .hooks import CompilationHooks


@dataclass(frozen=True)
class Module:
    """One compiled unit in the build graph.

    Attributes:
        identifier: Unique absolute identity; final tie-break when ordering.
        needs_id: False for modules that are never emitted.
        lib_ident: Optional library-relative identity preferred by naming.
    """

    identifier: str
    needs_id: bool = True
    lib_ident: Optional[str] = None


class ModuleGraph:
    """Dependency edges and pre-order discovery ranks."""

    def __init__(self) -> None:
        self._modules: dict[str, Module] = {}
        self._dependencies: dict[str, list[str]] = {}
        self._pre_order: dict[str, int] = {}

    def add_module(self, module: Module) -> None:
        if module.identifier not in self._modules:
            self._modules[module.identifier] = module
            self._dependencies[module.identifier] = []

    def _require(self, module: Module, operation: str) -> str:
        if module.identifier not in self._modules:
            raise UnknownModuleError(module.identifier, operation)
        return module.identifier

    def add_dependency(self, origin: Module, target: Module) -> None:
        """Record that `origin` imports `target`; edge order is preserved."""
        source = self._require(origin, "add dependency")
        dest = self._require(target, "add dependency")
        if dest not in self._dependencies[source]:
            self._dependencies[source].append(dest)

    def dependencies_of(self, module: Module) -> list[Module]:
        key = self._require(module, "list dependencies")
        return [self._modules[item] for item in self._dependencies[key]]

    def set_pre_order_index(self, module: Module, index: int) -> None:
        self._pre_order[self._require(module, "set pre-order index")] = index

    def get_pre_order_index(self, module: Module) -> Optional[int]:
        return self._pre_order.get(module.identifier)

    def assign_pre_order_indices(self, entries: Iterable[Module]) -> None:
        """Rank modules in depth-first discovery order starting from `entries`.

        Modules unreachable from every entry keep no rank.
        """
        self._pre_order.clear()
        counter = 0
        for entry in entries:
            stack = [self._require(entry, "walk from entry")]
            while stack:
                current = stack.pop()
                if current in self._pre_order:
                    continue
                self._pre_order[current] = counter
                counter += 1
                # Reverse so the first declared dependency is popped first.
                for child in reversed(self._dependencies[current]):
                    if child not in self._pre_order:
                        stack.append(child)


class ChunkGraph:
    """Chunk membership and assigned ids per module."""

    def __init__(self) -> None:
        self._chunks: dict[str, set[str]] = {}
        self._ids: dict[str, str] = {}

    def connect_chunk_and_module(self, chunk: str, module: Module) -> None:
        self._chunks.setdefault(module.identifier, set()).add(chunk)

    def get_number_of_module_chunks(self, module: Module) -> int:
        return len(self._chunks.get(module.identifier, ()))

    def get_module_id(self, module: Module) -> Optional[str]:
        return self._ids.get(module.identifier)

    def set_module_id(self, module: Module, module_id: str) -> None:
        self._ids[module.identifier] = str(module_id)


class Compilation:
    """Context object for one build: modules, graphs, and reserved ids."""

    def __init__(
        self,
        *,
        context: str,
        modules: Iterable[Module] = (),
        reserved_ids: Iterable[str] = (),
    ):
        self.context = context
        self.hooks = CompilationHooks()
        self.module_graph = ModuleGraph()
        self.chunk_graph = ChunkGraph()
        self.used_module_ids: set[str] = {str(item) for item in reserved_ids}
        self.modules: list[Module] = []
        self._by_identifier: dict[str, Module] = {}
        for module in modules:
            self.add_module(module)

    def add_module(self, module: Module) -> Module:
        """Register `module`; an already-registered identifier returns the existing module."""
        existing = self._by_identifier.get(module.identifier)
        if existing is not None:
            return existing
        self._by_identifier[module.identifier] = module
        self.modules.append(module)
        self.module_graph.add_module(module)
        return module

    def get_module(self, identifier: str) -> Optional[Module]:
        return self._by_identifier.get(identifier)

    def get_used_module_ids(self) -> set[str]:
        """Return reserved ids plus every id already set on a module."""
        used = set(self.used_module_ids)
        for module in self.modules:
            module_id = self.chunk_graph.get_module_id(module)
            if module_id is not None:
                used.add(str(module_id))
        return used

    def module_id_map(self) -> dict[str, str]:
        """Return `{identifier: id}` for every module that has an id."""
        mapping: dict[str, str] = {}
        for module in self.modules:
            module_id = self.chunk_graph.get_module_id(module)
            if module_id is not None:
                mapping[module.identifier] = module_id
        return mapping


def compare_modules_by_pre_order_index_or_identifier(
    module_graph: ModuleGraph,
) -> Callable[[Module], tuple[int, int, str]]:
    """Return a sort key: ranked modules first by rank, then by identifier."""

    def key(module: Module) -> tuple[int, int, str]:
        index = module_graph.get_pre_order_index(module)
        if index is None:
            return (1, 0, module.identifier)
        return (0, index, module.identifier)

    return key
