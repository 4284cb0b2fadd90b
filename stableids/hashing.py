"""Hash and digest-encoding primitives used to derive module ids.

Example:
    >>> encode_digest(create_digest("md5", ""), "hex")
    'd41d8cd98f00b204e9800998ecf8427e'
"""

from __future__ import annotations

import base64
import hashlib

SUPPORTED_DIGESTS = ("hex", "base64", "base64url", "base32")
VARIABLE_LENGTH_ALGORITHMS = {"shake_128", "shake_256"}


def is_supported_algorithm(algorithm: str) -> bool:
    """Return True when `hashlib` can build a fixed-length hash named `algorithm`."""
    name = algorithm.strip().lower()
    if name in VARIABLE_LENGTH_ALGORITHMS:
        return False
    try:
        hashlib.new(name)
    except (ValueError, TypeError):
        return False
    return True


def create_digest(algorithm: str, data: str | bytes) -> bytes:
    """Hash `data` with `algorithm` and return the raw digest bytes.

    Example:
        >>> len(create_digest("md5", "a/b.js"))
        16
    """
    payload = data.encode("utf-8") if isinstance(data, str) else bytes(data)
    hasher = hashlib.new(algorithm.strip().lower())
    hasher.update(payload)
    return hasher.digest()


def encode_digest(raw: bytes, encoding: str) -> str:
    """Encode a raw digest as text.

    Example:
        >>> encode_digest(create_digest("md5", ""), "base64")
        '1B2M2Y8AsgTpgAmY7PhCfg=='
    """
    if encoding == "hex":
        return raw.hex()
    if encoding == "base64":
        return base64.b64encode(raw).decode("ascii")
    if encoding == "base64url":
        return base64.urlsafe_b64encode(raw).decode("ascii")
    if encoding == "base32":
        return base64.b32encode(raw).decode("ascii")
    raise ValueError(f"Unsupported digest encoding '{encoding}'.")


def digest_size(algorithm: str, encoding: str) -> int:
    """Return the length of an encoded digest for `algorithm`."""
    return len(encode_digest(create_digest(algorithm, b""), encoding))
