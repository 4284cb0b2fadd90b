"""Stable public API for hashed module id assignment."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Iterable, Mapping, Optional, Union

from .assigner import HashedIdAssigner, StableNameFn
from .exceptions import UnknownModuleError
from .graph import Compilation, Module
from .manifest import apply_records, assignment_digest, load_manifest, load_records
from .naming import clear_name_cache
from .options import IdOptions

OptionsLike = Union[IdOptions, Mapping[str, Any], None]


@dataclass(frozen=True)
class AssignmentResult:
    """Outcome envelope for one assignment pass."""

    module_ids: Mapping[str, str]
    assigned: Mapping[str, str]
    restored: int
    options: Mapping[str, Any] = field(default_factory=dict)

    @property
    def digest(self) -> str:
        return assignment_digest(self.module_ids)

    def to_dict(self) -> dict[str, Any]:
        return {
            "ok": True,
            "module_ids": dict(self.module_ids),
            "assigned": dict(self.assigned),
            "restored": self.restored,
            "options": dict(self.options),
            "digest": self.digest,
        }


def resolve_options(options: OptionsLike) -> IdOptions:
    """Return `options` as validated `IdOptions`."""
    if isinstance(options, IdOptions):
        return options
    return IdOptions.from_mapping(options)


def create_compilation(
    context: str,
    modules: Iterable[Module],
    *,
    chunks: Optional[Mapping[str, Iterable[str]]] = None,
    reserved_ids: Iterable[str] = (),
) -> Compilation:
    """Create a compilation; `chunks` maps chunk names to member identifiers.

    Raises:
        UnknownModuleError: If a chunk lists an identifier not in `modules`.
    """
    compilation = Compilation(context=context, modules=modules, reserved_ids=reserved_ids)
    for chunk_name, members in (chunks or {}).items():
        for identifier in members:
            module = compilation.get_module(identifier)
            if module is None:
                raise UnknownModuleError(identifier, f"connect to chunk '{chunk_name}'")
            compilation.chunk_graph.connect_chunk_and_module(chunk_name, module)
    return compilation


def compute_module_id(name: str, *, options: OptionsLike = None) -> str:
    """Return the collision-free id a name would get against an empty used-id set."""
    resolved = resolve_options(options)
    digest = HashedIdAssigner(resolved).digest_for(name)
    return digest[: resolved.hash_digest_length]


def assign_ids(
    compilation: Compilation,
    *,
    options: OptionsLike = None,
    name_of: Optional[StableNameFn] = None,
    records: Optional[Mapping[str, str]] = None,
) -> AssignmentResult:
    """Restore recorded ids, then assign hashed ids to the remaining eligible modules."""
    resolved = resolve_options(options)
    restored = apply_records(compilation, records) if records else 0
    try:
        assigned = HashedIdAssigner(resolved, name_of=name_of).assign(compilation.modules, compilation)
    finally:
        clear_name_cache("")
    return AssignmentResult(
        module_ids=compilation.module_id_map(),
        assigned=assigned,
        restored=restored,
        options=resolved.to_mapping(),
    )


def assign_from_manifest(
    manifest: Union[str, Path],
    *,
    options: OptionsLike = None,
    records: Union[str, Path, None] = None,
) -> tuple[Compilation, AssignmentResult]:
    """Load a manifest (and optional records file) and run one assignment pass."""
    compilation = load_manifest(manifest)
    prior = load_records(records) if records is not None else None
    return compilation, assign_ids(compilation, options=options, records=prior)


__all__ = [
    "AssignmentResult",
    "assign_from_manifest",
    "assign_ids",
    "compute_module_id",
    "create_compilation",
    "resolve_options",
]
