"""stableids command line interface."""

from __future__ import annotations

import argparse
import json
from pathlib import Path
from typing import Any

from .api import assign_from_manifest
from .exceptions import StableIdError
from .hashing import SUPPORTED_DIGESTS
from .log import setup_logging
from .manifest import write_records


def _options_from_args(args: argparse.Namespace) -> dict[str, Any]:
    options: dict[str, Any] = {}
    if args.context is not None:
        options["context"] = args.context
    if args.hash_function is not None:
        options["hashFunction"] = args.hash_function
    if args.hash_digest is not None:
        options["hashDigest"] = args.hash_digest
    if args.hash_digest_length is not None:
        options["hashDigestLength"] = args.hash_digest_length
    return options


def _print_output(payload: dict[str, Any], *, as_json: bool) -> None:
    if as_json:
        print(json.dumps(payload, sort_keys=True))
        return

    if "ok" in payload:
        print(f"ok: {payload['ok']}")
    module_ids = payload.get("module_ids")
    if isinstance(module_ids, dict):
        for identifier in sorted(module_ids):
            print(f"{module_ids[identifier]}\t{identifier}")
    if "assigned" in payload:
        print(f"assigned: {len(payload['assigned'])}")
    if payload.get("restored"):
        print(f"restored: {payload['restored']}")
    if "digest" in payload:
        print(f"digest: {payload['digest']}")
    if "records_path" in payload:
        print(f"records: {payload['records_path']}")

    errors = payload.get("errors")
    if isinstance(errors, list) and errors:
        print("errors:")
        for item in errors:
            code = item.get("code") or item.get("error_type", "<unknown>")
            message = item.get("message", "")
            path = item.get("path")
            if path:
                print(f"  - {code} ({path}): {message}")
            else:
                print(f"  - {code}: {message}")


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="stableids")
    parser.add_argument("--log-level", help="Log level (default: $STABLEIDS_LOG_LEVEL or WARNING)")
    subparsers = parser.add_subparsers(dest="command", required=True)

    assign_parser = subparsers.add_parser("assign", help="Assign hashed ids to a module graph manifest")
    assign_parser.add_argument("--manifest", required=True, help="Path to module graph manifest JSON")
    assign_parser.add_argument("--context", help="Base directory for short module names")
    assign_parser.add_argument("--hash-function", help="hashlib algorithm name (default: md5)")
    assign_parser.add_argument(
        "--hash-digest", choices=list(SUPPORTED_DIGESTS), help="Digest encoding (default: base64)"
    )
    assign_parser.add_argument("--hash-digest-length", type=int, help="Starting id length (default: 4)")
    assign_parser.add_argument("--records-in", help="Records JSON from a previous build")
    assign_parser.add_argument("--records-out", help="Write records JSON for the next build")
    assign_parser.add_argument("--json", action="store_true", help="Emit JSON output")

    return parser


def _run(args: argparse.Namespace) -> int:
    if args.command != "assign":
        raise StableIdError(
            f"Unsupported command: {args.command}",
            error_type="UsageError",
            details={"command": args.command},
        )

    compilation, result = assign_from_manifest(
        Path(args.manifest),
        options=_options_from_args(args),
        records=Path(args.records_in) if args.records_in else None,
    )
    payload = result.to_dict()
    if args.records_out:
        records_path = write_records(args.records_out, compilation, result.options)
        payload["records_path"] = str(records_path)
    _print_output(payload, as_json=bool(args.json))
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)
    setup_logging(args.log_level, force=True)
    try:
        return _run(args)
    except StableIdError as exc:
        error = {"error_type": exc.error_type, "message": str(exc)}
        error.update({key: value for key, value in exc.details.items() if key in {"code", "path"}})
        payload = {"ok": False, "errors": [error]}
        _print_output(payload, as_json=bool(getattr(args, "json", False)))
        return 2


if __name__ == "__main__":
    raise SystemExit(main())
