"""stableids package exports."""

from .api import (
    AssignmentResult,
    assign_from_manifest,
    assign_ids,
    compute_module_id,
    create_compilation,
    resolve_options,
)
from .assigner import HashedIdAssigner, assign_module_ids, select_modules
from .exceptions import (
    IdSpaceExhaustedError,
    ManifestValidationError,
    OptionsValidationError,
    StableIdError,
    UnknownModuleError,
)
from .graph import ChunkGraph, Compilation, Module, ModuleGraph
from .naming import contextify, short_module_name
from .options import IdOptions
from .plugin import Compiler, ConstantHashedIdsPlugin

__all__ = [
    "Module",
    "ModuleGraph",
    "ChunkGraph",
    "Compilation",
    "Compiler",
    "ConstantHashedIdsPlugin",
    "IdOptions",
    "HashedIdAssigner",
    "assign_module_ids",
    "select_modules",
    "contextify",
    "short_module_name",
    "StableIdError",
    "OptionsValidationError",
    "ManifestValidationError",
    "IdSpaceExhaustedError",
    "UnknownModuleError",
    "AssignmentResult",
    "assign_from_manifest",
    "assign_ids",
    "compute_module_id",
    "create_compilation",
    "resolve_options",
]
