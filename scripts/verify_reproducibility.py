"""Verify module id assignment is identical across runs with different hash seeds."""

from __future__ import annotations

import json
import os
import subprocess
import sys
from pathlib import Path


ROOT = Path(__file__).resolve().parents[1]
MANIFEST = ROOT / "examples" / "webapp_manifest.json"
HASH_SEEDS = ("0", "1", "random")


def _run_once(manifest: Path, seed: str) -> dict:
    env = dict(os.environ)
    env["PYTHONHASHSEED"] = seed
    env["PYTHONPATH"] = os.pathsep.join(filter(None, [str(ROOT), env.get("PYTHONPATH")]))
    result = subprocess.run(
        [sys.executable, "-m", "stableids.cli", "assign", "--manifest", str(manifest), "--json"],
        cwd=str(ROOT),
        env=env,
        capture_output=True,
        text=True,
        check=False,
    )
    if result.returncode != 0:
        raise RuntimeError(result.stdout + result.stderr)
    return json.loads(result.stdout)


def main(argv: list[str] | None = None) -> int:
    args = sys.argv[1:] if argv is None else argv
    manifest = Path(args[0]) if args else MANIFEST
    if not manifest.exists():
        print(f"Determinism check unavailable: manifest '{manifest}' does not exist.")
        return 1

    digests = []
    for seed in HASH_SEEDS:
        payload = _run_once(manifest, seed)
        digests.append(payload["digest"])

    if len(set(digests)) != 1:
        print(f"Module ids are not deterministic across hash seeds: {digests}")
        return 1

    print(f"Determinism check passed: digest {digests[0]} identical across {len(HASH_SEEDS)} runs.")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
