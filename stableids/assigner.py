"""Hashed module id assignment with deterministic collision growth.

Every module that needs an id, sits in at least one chunk, and has no id yet
receives the shortest prefix of its name digest that is not already in use.
Prefixes start at ``hash_digest_length`` characters and grow one character at
a time on collision. Modules are processed in pre-order rank, then identifier
order, so the module that loses a collision is the same in every build.

Example:
    >>> from stableids.graph import Compilation, Module
    >>> module = Module("/app/src/index.js")
    >>> compilation = Compilation(context="/app", modules=[module])
    >>> compilation.chunk_graph.connect_chunk_and_module("main", module)
    >>> ids = assign_module_ids(compilation.modules, compilation, IdOptions())
    >>> len(ids["/app/src/index.js"])
    4
"""

from __future__ import annotations

from typing import Callable, Iterable, Optional

from loguru import logger

from .exceptions import IdSpaceExhaustedError
from .graph import Compilation, Module, compare_modules_by_pre_order_index_or_identifier
from .hashing import create_digest, encode_digest
from .naming import short_module_name
from .options import IdOptions

StableNameFn = Callable[[Module, str, Optional[str]], Optional[str]]


def select_modules(modules: Iterable[Module], compilation: Compilation) -> list[Module]:
    """Return modules that need an id, sit in a chunk, and have none yet, in processing order."""
    chunk_graph = compilation.chunk_graph
    selected = [
        module
        for module in modules
        if module.needs_id
        and chunk_graph.get_number_of_module_chunks(module) > 0
        and chunk_graph.get_module_id(module) is None
    ]
    selected.sort(key=compare_modules_by_pre_order_index_or_identifier(compilation.module_graph))
    return selected


def _stable_name(
    name_of: StableNameFn,
    module: Module,
    context: str,
    root: Optional[str],
) -> str:
    try:
        name = name_of(module, context, root)
    except Exception as exc:  # noqa: BLE001
        logger.warning(
            "stable name for {} failed ({}: {}); hashing empty name",
            module.identifier,
            type(exc).__name__,
            exc,
        )
        return ""
    return name or ""


def shortest_free_prefix(digest: str, used_ids: set[str], start_length: int) -> Optional[str]:
    """Return the shortest prefix of `digest`, at least `start_length` long, not in `used_ids`.

    Returns None when every prefix up to the full digest is taken.

    Example:
        >>> shortest_free_prefix("AbCdEFGH", {"AbCd"}, 4)
        'AbCdE'
    """
    length = start_length
    candidate = digest[:length]
    while candidate in used_ids:
        if length >= len(digest):
            return None
        length += 1
        candidate = digest[:length]
    return candidate


class HashedIdAssigner:
    """Runs one id-assignment pass over a compilation."""

    def __init__(
        self,
        options: Optional[IdOptions] = None,
        *,
        name_of: Optional[StableNameFn] = None,
    ):
        self.options = options or IdOptions()
        self.name_of: StableNameFn = name_of or short_module_name

    def digest_for(self, name: str) -> str:
        """Return the full encoded digest for a stable name."""
        raw = create_digest(self.options.hash_function, name)
        return encode_digest(raw, self.options.hash_digest)

    def assign(
        self,
        modules: Iterable[Module],
        compilation: Compilation,
        *,
        context: Optional[str] = None,
        root: Optional[str] = None,
    ) -> dict[str, str]:
        """Assign ids to every eligible module and return `{identifier: id}` for new ids.

        `options.context` wins over `context`, which wins over the compilation's own.

        Raises:
            IdSpaceExhaustedError: If every prefix of a module's digest is taken.
        """
        options = self.options
        context = options.resolve_context(context or compilation.context)
        used_ids = compilation.get_used_module_ids()
        ordered = select_modules(modules, compilation)
        logger.debug(
            "assigning ids to {} module(s) with {}/{}/{} ({} id(s) reserved)",
            len(ordered),
            options.hash_function,
            options.hash_digest,
            options.hash_digest_length,
            len(used_ids),
        )

        assigned: dict[str, str] = {}
        for module in ordered:
            name = _stable_name(self.name_of, module, context, root)
            digest = self.digest_for(name)
            module_id = shortest_free_prefix(digest, used_ids, options.hash_digest_length)
            if module_id is None:
                raise IdSpaceExhaustedError(
                    module.identifier, digest, options.hash_function, options.hash_digest
                )
            if len(module_id) > options.hash_digest_length:
                logger.debug(
                    "id collision for {} ({!r}); grew to {!r}",
                    module.identifier,
                    digest[: options.hash_digest_length],
                    module_id,
                )
            compilation.chunk_graph.set_module_id(module, module_id)
            used_ids.add(module_id)
            assigned[module.identifier] = module_id

        logger.info("assigned {} hashed module id(s)", len(assigned))
        return assigned


def assign_module_ids(
    modules: Iterable[Module],
    compilation: Compilation,
    options: Optional[IdOptions] = None,
    *,
    name_of: Optional[StableNameFn] = None,
    context: Optional[str] = None,
    root: Optional[str] = None,
) -> dict[str, str]:
    """Functional wrapper around `HashedIdAssigner.assign`."""
    assigner = HashedIdAssigner(options, name_of=name_of)
    return assigner.assign(modules, compilation, context=context, root=root)
