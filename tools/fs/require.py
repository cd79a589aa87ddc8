from __future__ import annotations

from typing import Any

from ._path import expand_user_path, require_str


def run(args: dict[str, Any], dry_run: bool) -> dict[str, Any]:
    """
    Assert that files exist under a root, in order. Stops at the first missing
    one (read-only; under dry-run a missing file is reported, not raised).
    args:
      - root: string
      - files: array of relative paths (non-empty)
    """
    root = expand_user_path(require_str(args, "root", "fs.require"))
    files = args.get("files")
    if not isinstance(files, list) or not files or any((not isinstance(f, str) or not f) for f in files):
        raise ValueError("fs.require: 'files' must be a non-empty array of strings")

    for rel in files:
        if not (root / rel).is_file():
            if dry_run:
                return {"root": str(root), "missing": rel, "dry_run": True}
            raise FileNotFoundError(f"{rel} not found in repository")
    return {"root": str(root), "files": list(files), "missing": None, "dry_run": dry_run}
