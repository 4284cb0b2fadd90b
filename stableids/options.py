"""Validated, immutable options for hashed module id assignment.

Example:
    >>> opts = IdOptions.from_mapping({"hashDigestLength": 6})
    >>> (opts.hash_function, opts.hash_digest, opts.hash_digest_length)
    ('md5', 'base64', 6)
"""

from __future__ import annotations

import json
from importlib import resources
from typing import Any, Literal, Mapping, Optional, cast

import jsonschema
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .exceptions import OptionsValidationError
from .hashing import is_supported_algorithm

SCHEMA_PACKAGE = "stableids.schemas"
OPTIONS_SCHEMA_FILENAME = "options.schema.json"

DEFAULT_HASH_FUNCTION = "md5"
DEFAULT_HASH_DIGEST = "base64"
DEFAULT_HASH_DIGEST_LENGTH = 4


def load_options_schema() -> dict[str, Any]:
    """Load the packaged options schema document."""
    resource = resources.files(SCHEMA_PACKAGE).joinpath(OPTIONS_SCHEMA_FILENAME)
    return cast(dict[str, Any], json.loads(resource.read_text(encoding="utf-8")))


def _error_path(parts: Any) -> str | None:
    joined = ".".join(str(part) for part in parts)
    return joined or None


def validate_options(raw: Mapping[str, Any]) -> None:
    """Validate a raw camelCase options mapping against the packaged schema.

    Raises:
        OptionsValidationError: On the first schema violation, ordered by path.
    """
    if not isinstance(raw, Mapping):
        raise OptionsValidationError("OPT_TYPE", "Options must be a mapping.")
    validator = jsonschema.Draft7Validator(load_options_schema())
    errors = sorted(
        validator.iter_errors(dict(raw)),
        key=lambda item: [str(part) for part in item.absolute_path],
    )
    if errors:
        first = errors[0]
        raise OptionsValidationError(
            "OPT_SCHEMA",
            f"Invalid options: {first.message}",
            path=_error_path(first.absolute_path),
        )


class IdOptions(BaseModel):
    """Configuration for one id-assignment pass.

    Parameters:
        context: Base directory for short module names; `None` means the compiler context.
        hash_function: Fixed-length `hashlib` algorithm name.
        hash_digest: Digest text encoding.
        hash_digest_length: Starting id length, at least 1.
    """

    model_config = ConfigDict(frozen=True, extra="forbid", populate_by_name=True)

    context: Optional[str] = None
    hash_function: str = Field(default=DEFAULT_HASH_FUNCTION, alias="hashFunction")
    hash_digest: Literal["hex", "base64", "base64url", "base32"] = Field(
        default=DEFAULT_HASH_DIGEST, alias="hashDigest"
    )
    hash_digest_length: int = Field(default=DEFAULT_HASH_DIGEST_LENGTH, ge=1, alias="hashDigestLength")

    @field_validator("hash_function")
    @classmethod
    def _validate_hash_function(cls, value: str) -> str:
        name = value.strip().lower()
        if not is_supported_algorithm(name):
            raise ValueError(f"Unsupported or unavailable hash function '{value}'.")
        return name

    @classmethod
    def from_mapping(cls, raw: Optional[Mapping[str, Any]] = None) -> "IdOptions":
        """Validate camelCase options and build an immutable `IdOptions`.

        Raises:
            OptionsValidationError: If the mapping violates the schema or names
                a hash function this interpreter cannot build.
        """
        raw = {} if raw is None else raw
        validate_options(raw)
        resolved = dict(raw)
        try:
            return cls.model_validate(resolved)
        except ValidationError as exc:
            first = exc.errors()[0]
            raise OptionsValidationError(
                "OPT_VALUE",
                f"Invalid options: {first['msg']}",
                path=_error_path(first.get("loc", ())),
            ) from exc

    def resolve_context(self, default: str) -> str:
        """Return the configured context, falling back to `default`."""
        return self.context if self.context else default

    def to_mapping(self) -> dict[str, Any]:
        """Return the camelCase mapping form used in records and logs."""
        return self.model_dump(by_alias=True)
