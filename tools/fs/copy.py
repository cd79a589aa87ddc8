from __future__ import annotations

import shutil
from typing import Any

from ._path import expand_user_path, require_str


def run(args: dict[str, Any], dry_run: bool) -> dict[str, Any]:
    """
    Copy a single file, overwriting the destination.
    args:
      - from: string
      - to: string
    """
    src = expand_user_path(require_str(args, "from", "fs.copy"))
    dst = expand_user_path(require_str(args, "to", "fs.copy"))

    if dry_run:
        return {
            "from": str(src),
            "to": str(dst),
            "dry_run": True,
            "expected_effects": [
                {"kind": "fs_copy", "summary": f"Copy {src} -> {dst}", "resources": [str(src), str(dst)]}
            ],
        }

    if not src.is_file():
        raise FileNotFoundError(f"fs.copy: source file not found: {src}")
    shutil.copyfile(src, dst)
    return {"from": str(src), "to": str(dst), "bytes": dst.stat().st_size, "dry_run": False}
