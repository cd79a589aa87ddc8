from __future__ import annotations

import os
import shutil
from typing import Any

from ._path import expand_user_path, require_str


def run(args: dict[str, Any], dry_run: bool) -> dict[str, Any]:
    """
    Change ownership of a path, optionally recursively (like `chown -R`).
    args:
      - path: string
      - owner: "user" or "user:group"
      - recursive: bool (default true)
    """
    path = expand_user_path(require_str(args, "path", "fs.chown"))
    owner = require_str(args, "owner", "fs.chown")
    user, _, group = owner.partition(":")
    group = group or user
    recursive = bool(args.get("recursive", True))

    if dry_run:
        return {
            "path": str(path),
            "dry_run": True,
            "expected_effects": [
                {"kind": "fs_chown", "summary": f"Change owner of {path} to {user}:{group}", "resources": [str(path)]}
            ],
        }

    count = 1
    shutil.chown(path, user=user, group=group)
    if recursive and path.is_dir():
        for dirpath, dirnames, filenames in os.walk(path):
            for name in dirnames + filenames:
                p = os.path.join(dirpath, name)
                if os.path.islink(p):
                    continue
                shutil.chown(p, user=user, group=group)
                count += 1
    return {"path": str(path), "owner": f"{user}:{group}", "changed": count, "dry_run": False}
