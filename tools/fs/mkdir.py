from __future__ import annotations

from typing import Any

from ._path import expand_user_path, require_str


def run(args: dict[str, Any], dry_run: bool) -> dict[str, Any]:
    """
    Create a directory (like `mkdir -p`).
    args:
      - path: string
    """
    path = expand_user_path(require_str(args, "path", "fs.mkdir"))

    if dry_run:
        return {
            "path": str(path),
            "would_create": not path.exists(),
            "dry_run": True,
            "expected_effects": [
                {"kind": "fs_mkdir", "summary": f"Create directory {path}", "resources": [str(path)]}
            ],
        }

    before = path.exists()
    path.mkdir(parents=True, exist_ok=True)
    return {"path": str(path), "created": not before, "dry_run": False}
