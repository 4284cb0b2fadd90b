from __future__ import annotations

import pytest
from pydantic import ValidationError

from stableids import IdOptions, OptionsValidationError
from stableids.hashing import create_digest, digest_size, encode_digest, is_supported_algorithm
from stableids.options import load_options_schema


def test_defaults() -> None:
    options = IdOptions.from_mapping(None)
    assert options.to_mapping() == {
        "context": None,
        "hashFunction": "md5",
        "hashDigest": "base64",
        "hashDigestLength": 4,
    }
    assert options.resolve_context("/build") == "/build"


def test_camel_case_mapping_is_accepted() -> None:
    options = IdOptions.from_mapping(
        {"context": "/src", "hashFunction": "SHA256", "hashDigest": "hex", "hashDigestLength": 6}
    )
    assert options.hash_function == "sha256"
    assert options.hash_digest == "hex"
    assert options.hash_digest_length == 6
    assert options.resolve_context("/build") == "/src"


@pytest.mark.parametrize(
    ("raw", "code", "path"),
    [
        ({"hashDigestLength": 0}, "OPT_SCHEMA", "hashDigestLength"),
        ({"hashDigestLength": "4"}, "OPT_SCHEMA", "hashDigestLength"),
        ({"hashDigestLength": True}, "OPT_SCHEMA", "hashDigestLength"),
        ({"hashDigest": "latin1"}, "OPT_SCHEMA", "hashDigest"),
        ({"hashFunction": ""}, "OPT_SCHEMA", "hashFunction"),
        ({"unknown": 1}, "OPT_SCHEMA", None),
        ({"hashFunction": "not-a-hash"}, "OPT_VALUE", "hashFunction"),
        ({"hashFunction": "shake_128"}, "OPT_VALUE", "hashFunction"),
    ],
)
def test_invalid_options_are_rejected(raw: dict, code: str, path) -> None:
    with pytest.raises(OptionsValidationError) as exc_info:
        IdOptions.from_mapping(raw)
    assert exc_info.value.code == code
    assert exc_info.value.path == path
    assert '"error_type": "OptionsValidationError"' in exc_info.value.to_payload()


def test_non_mapping_options_are_rejected() -> None:
    with pytest.raises(OptionsValidationError):
        IdOptions.from_mapping(["hashDigestLength", 4])  # type: ignore[arg-type]


def test_options_are_frozen() -> None:
    options = IdOptions()
    with pytest.raises(ValidationError):
        options.hash_digest_length = 8  # type: ignore[misc]


def test_schema_resource_lists_every_option() -> None:
    assert set(load_options_schema()["properties"]) == {
        "context",
        "hashFunction",
        "hashDigest",
        "hashDigestLength",
    }


def test_digest_encodings() -> None:
    raw = create_digest("md5", "")
    assert encode_digest(raw, "hex") == "d41d8cd98f00b204e9800998ecf8427e"
    assert encode_digest(raw, "base64") == "1B2M2Y8AsgTpgAmY7PhCfg=="
    assert encode_digest(raw, "base64url") == "1B2M2Y8AsgTpgAmY7PhCfg=="
    assert digest_size("md5", "hex") == 32
    assert digest_size("sha256", "base64") == 44
    assert create_digest("md5", b"abc") == create_digest("md5", "abc")
    with pytest.raises(ValueError):
        encode_digest(raw, "latin1")


def test_algorithm_support() -> None:
    assert is_supported_algorithm("md5")
    assert is_supported_algorithm(" SHA1 ")
    assert not is_supported_algorithm("shake_256")
    assert not is_supported_algorithm("md17")
