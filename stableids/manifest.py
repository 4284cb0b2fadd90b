"""Module graph manifests and persisted id records.

A manifest is a JSON description of one compilation: its context, reserved
ids, entry modules and modules with their chunks, dependencies and any
pre-existing id. Records carry assigned ids from one build to the next.

Example:
    >>> compilation = load_manifest('{"context": "/app", "modules": [{"identifier": "/app/a.js", "chunks": ["main"]}]}')
    >>> compilation.chunk_graph.get_number_of_module_chunks(compilation.modules[0])
    1
"""

from __future__ import annotations

import hashlib
import json
from importlib import resources
from pathlib import Path
from typing import Any, Mapping, Optional, Union, cast

import jsonschema
from loguru import logger

from .exceptions import ManifestValidationError
from .graph import Compilation, Module

SCHEMA_PACKAGE = "stableids.schemas"
MANIFEST_SCHEMA_FILENAME = "manifest.schema.json"
RECORDS_SCHEMA_FILENAME = "records.schema.json"
RECORDS_VERSION = 1

Source = Union[str, Path]


def _load_schema(filename: str) -> dict[str, Any]:
    resource = resources.files(SCHEMA_PACKAGE).joinpath(filename)
    return cast(dict[str, Any], json.loads(resource.read_text(encoding="utf-8")))


def canonical_json(payload: Mapping[str, Any]) -> str:
    """Return canonical JSON (sorted keys, compact separators).

    Example:
        >>> canonical_json({"b": 1, "a": 2})
        '{"a":2,"b":1}'
    """
    return json.dumps(payload, sort_keys=True, separators=(",", ":"), ensure_ascii=True)


def assignment_digest(mapping: Mapping[str, str]) -> str:
    """Compute SHA-256 over the canonical `{identifier: id}` mapping.

    Example:
        >>> len(assignment_digest({"/app/a.js": "AbCd"}))
        64
    """
    return hashlib.sha256(canonical_json(dict(mapping)).encode("utf-8")).hexdigest()


def _read_json(source: Source, code: str) -> Any:
    if isinstance(source, Path):
        label: Optional[str] = str(source)
        try:
            text = source.read_text(encoding="utf-8")
        except OSError as exc:
            raise ManifestValidationError(code, f"Cannot read file: {exc.strerror}", path=label) from exc
    else:
        text, label = source, None
    try:
        return json.loads(text)
    except json.JSONDecodeError as exc:
        raise ManifestValidationError(code, f"Invalid JSON: {exc.msg}", path=label) from exc


def _validate(payload: Any, filename: str, code: str) -> None:
    validator = jsonschema.Draft7Validator(_load_schema(filename))
    errors = sorted(
        validator.iter_errors(payload),
        key=lambda item: [str(part) for part in item.absolute_path],
    )
    if errors:
        first = errors[0]
        location = ".".join(str(part) for part in first.absolute_path) or None
        raise ManifestValidationError(code, first.message, path=location)


def build_compilation(payload: Mapping[str, Any]) -> Compilation:
    """Build a `Compilation` from an already-validated manifest mapping."""
    compilation = Compilation(
        context=str(payload["context"]),
        reserved_ids=[str(item) for item in payload.get("reserved_ids", [])],
    )
    raw_modules = list(payload.get("modules", []))
    for raw in raw_modules:
        identifier = raw["identifier"]
        if compilation.get_module(identifier) is not None:
            raise ManifestValidationError(
                "MAN_DUPLICATE", f"Duplicate module identifier '{identifier}'.", path="modules"
            )
        module = compilation.add_module(
            Module(
                identifier=identifier,
                needs_id=bool(raw.get("needs_id", True)),
                lib_ident=raw.get("lib_ident"),
            )
        )
        for chunk in raw.get("chunks", []):
            compilation.chunk_graph.connect_chunk_and_module(chunk, module)
        if raw.get("id") is not None:
            compilation.chunk_graph.set_module_id(module, str(raw["id"]))

    def resolve(identifier: str, where: str) -> Module:
        module = compilation.get_module(identifier)
        if module is None:
            raise ManifestValidationError(
                "MAN_REFERENCE", f"Unknown module reference '{identifier}'.", path=where
            )
        return module

    for raw in raw_modules:
        origin = resolve(raw["identifier"], "modules")
        for target in raw.get("dependencies", []):
            compilation.module_graph.add_dependency(origin, resolve(target, "modules.dependencies"))

    entries = [resolve(item, "entries") for item in payload.get("entries", [])]
    if entries:
        compilation.module_graph.assign_pre_order_indices(entries)
    for raw in raw_modules:
        if raw.get("pre_order_index") is not None:
            compilation.module_graph.set_pre_order_index(
                resolve(raw["identifier"], "modules"), int(raw["pre_order_index"])
            )
    return compilation


def load_manifest(source: Source) -> Compilation:
    """Load, validate, and build a compilation from manifest JSON text or a `Path`.

    Raises:
        ManifestValidationError: On invalid JSON, schema violations, duplicate
            identifiers, or dangling module references.
    """
    payload = _read_json(source, "MAN_JSON")
    _validate(payload, MANIFEST_SCHEMA_FILENAME, "MAN_SCHEMA")
    compilation = build_compilation(payload)
    logger.debug(
        "loaded manifest with {} module(s), {} reserved id(s)",
        len(compilation.modules),
        len(compilation.used_module_ids),
    )
    return compilation


def load_records(source: Source) -> dict[str, str]:
    """Load a records document and return its `{identifier: id}` mapping."""
    payload = _read_json(source, "REC_JSON")
    _validate(payload, RECORDS_SCHEMA_FILENAME, "REC_SCHEMA")
    return {str(key): str(value) for key, value in payload["modules"].items()}


def apply_records(compilation: Compilation, records: Mapping[str, str]) -> int:
    """Reserve every recorded id and restore ids for eligible modules that have none.

    A recorded id already held by another module, or claimed by an earlier
    record (in identifier order), is not restored; that module is hashed.

    Returns the number of modules whose id was restored.
    """
    restored = 0
    used = compilation.get_used_module_ids()
    chunk_graph = compilation.chunk_graph
    for identifier in sorted(records):
        module = compilation.get_module(identifier)
        if module is None or not module.needs_id:
            continue
        if chunk_graph.get_number_of_module_chunks(module) == 0 or chunk_graph.get_module_id(module) is not None:
            continue
        module_id = str(records[identifier])
        if module_id in used:
            logger.warning("recorded id {!r} for {} is already in use; not restored", module_id, identifier)
            continue
        chunk_graph.set_module_id(module, module_id)
        used.add(module_id)
        restored += 1
    compilation.used_module_ids.update(str(value) for value in records.values())
    return restored


def records_payload(compilation: Compilation, options: Optional[Mapping[str, Any]] = None) -> dict[str, Any]:
    payload: dict[str, Any] = {
        "records_version": RECORDS_VERSION,
        "modules": compilation.module_id_map(),
    }
    if options is not None:
        payload["options"] = dict(options)
    return payload


def write_records(
    path: Source,
    compilation: Compilation,
    options: Optional[Mapping[str, Any]] = None,
) -> Path:
    """Write canonical records JSON for every module with an id."""
    target = Path(path)
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_text(canonical_json(records_payload(compilation, options)) + "\n", encoding="utf-8")
    return target
