from __future__ import annotations

from typing import Any

from ._path import expand_user_path, require_str


def run(args: dict[str, Any], dry_run: bool) -> dict[str, Any]:
    """
    Write a text file, fully overwriting it, then apply a mode.
    args:
      - path: string
      - content: string
      - mode: integer (default 0o644)
    """
    path = expand_user_path(require_str(args, "path", "fs.write_file"))
    content = args.get("content")
    if not isinstance(content, str):
        raise ValueError("fs.write_file: 'content' must be a string")
    mode = args.get("mode", 0o644)
    if not isinstance(mode, int) or isinstance(mode, bool) or mode < 0 or mode > 0o7777:
        raise ValueError("fs.write_file: 'mode' must be an integer permission mask")

    if dry_run:
        return {
            "path": str(path),
            "dry_run": True,
            "expected_effects": [
                {"kind": "fs_write", "summary": f"Write {path} (mode {oct(mode)})", "resources": [str(path)]}
            ],
        }

    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")
    path.chmod(mode)
    return {"path": str(path), "bytes": len(content.encode("utf-8")), "mode": oct(mode), "dry_run": False}
