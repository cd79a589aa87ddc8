from __future__ import annotations

import shutil
from typing import Any

from ._path import expand_user_path, require_str


def run(args: dict[str, Any], dry_run: bool) -> dict[str, Any]:
    """
    ResetDirectory: delete a directory tree if it exists so the next step
    starts from a clean path. The directory itself is not recreated.
    args:
      - path: string
    """
    path = expand_user_path(require_str(args, "path", "fs.reset_dir"))
    if path.exists() and not path.is_dir():
        raise NotADirectoryError(f"fs.reset_dir: not a directory: {path}")

    if dry_run:
        return {
            "path": str(path),
            "would_delete": path.exists(),
            "dry_run": True,
            "expected_effects": [
                {"kind": "fs_delete", "summary": f"Delete directory tree {path}", "resources": [str(path)]}
            ],
        }

    existed = path.exists()
    if existed:
        shutil.rmtree(path)
    return {"path": str(path), "deleted": existed, "dry_run": False}
