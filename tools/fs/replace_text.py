from __future__ import annotations

from typing import Any

from ._path import expand_user_path, require_str


def run(args: dict[str, Any], dry_run: bool) -> dict[str, Any]:
    """
    Replace every literal occurrence of `old` with `new` in a file.

    Works on raw bytes so encoding and line endings are preserved; zero matches
    is not an error.
    args:
      - path: string
      - old: string (non-empty)
      - new: string
    """
    path = expand_user_path(require_str(args, "path", "fs.replace_text"))
    old = require_str(args, "old", "fs.replace_text")
    new = args.get("new")
    if not isinstance(new, str):
        raise ValueError("fs.replace_text: 'new' must be a string")

    if dry_run:
        return {
            "path": str(path),
            "dry_run": True,
            "expected_effects": [
                {"kind": "fs_edit", "summary": f"Replace '{old}' with '{new}' in {path}", "resources": [str(path)]}
            ],
        }

    raw = path.read_bytes()
    old_b = old.encode("utf-8")
    count = raw.count(old_b)
    if count:
        path.write_bytes(raw.replace(old_b, new.encode("utf-8")))
    return {"path": str(path), "replacements": count, "dry_run": False}
