"""Structured errors raised while validating options or assigning module ids."""

import json
from typing import Any, Optional


class StableIdError(Exception):
    """Base exception for all stableids failures."""

    def __init__(self, message: str, error_type: str, details: dict):
        super().__init__(message)
        self.error_type = error_type
        self.details = details

    def to_payload(self) -> str:
        """
        Serialize the error into structured JSON for CLI and tooling output.
        """
        payload = {
            "status": "failed",
            "error_type": self.error_type,
            "message": str(self),
            "details": self.details,
        }
        return json.dumps(payload, indent=2, sort_keys=True)


class OptionsValidationError(StableIdError):
    """Raised when plugin options fail schema or semantic validation."""

    def __init__(self, code: str, message: str, path: Optional[str] = None):
        super().__init__(
            message=message,
            error_type="OptionsValidationError",
            details={"code": code, "path": path},
        )
        self.code = code
        self.path = path


class ManifestValidationError(StableIdError):
    """Raised when a module graph manifest or records file is malformed."""

    def __init__(self, code: str, message: str, path: Optional[str] = None):
        super().__init__(
            message=message,
            error_type="ManifestValidationError",
            details={"code": code, "path": path},
        )
        self.code = code
        self.path = path


class IdSpaceExhaustedError(StableIdError):
    """Raised when every prefix of a full digest is already claimed."""

    def __init__(self, identifier: str, digest: str, hash_function: str, hash_digest: str):
        super().__init__(
            message=(
                f"Cannot assign an id to '{identifier}': every prefix of digest "
                f"'{digest}' ({hash_function}/{hash_digest}) is already in use."
            ),
            error_type="IdSpaceExhaustedError",
            details={
                "module": identifier,
                "digest": digest,
                "hash_function": hash_function,
                "hash_digest": hash_digest,
                "max_length": len(digest),
            },
        )


class UnknownModuleError(StableIdError):
    """Raised when a graph operation references an unregistered module."""

    def __init__(self, identifier: Any, operation: str):
        super().__init__(
            message=f"Module '{identifier}' is not registered; cannot {operation}.",
            error_type="UnknownModuleError",
            details={"module": str(identifier), "operation": operation},
        )
