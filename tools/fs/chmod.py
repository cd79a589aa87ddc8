from __future__ import annotations

from typing import Any

from ._path import expand_user_path, require_str


def run(args: dict[str, Any], dry_run: bool) -> dict[str, Any]:
    """
    Add permission bits to a path (like `chmod +x`).
    args:
      - path: string
      - add: integer mask, e.g. 0o111
    """
    path = expand_user_path(require_str(args, "path", "fs.chmod"))
    add = args.get("add")
    if not isinstance(add, int) or isinstance(add, bool) or add <= 0 or add > 0o7777:
        raise ValueError("fs.chmod: 'add' must be a positive permission mask")

    if dry_run:
        return {
            "path": str(path),
            "dry_run": True,
            "expected_effects": [
                {"kind": "fs_chmod", "summary": f"Add mode {oct(add)} to {path}", "resources": [str(path)]}
            ],
        }

    mode = path.stat().st_mode & 0o7777
    path.chmod(mode | add)
    return {"path": str(path), "mode": oct(mode | add), "dry_run": False}
