from __future__ import annotations

import os
from pathlib import Path
from typing import Any

from ._path import require_str


def run(args: dict[str, Any], dry_run: bool) -> dict[str, Any]:
    """
    Point `link` at `target`, replacing whatever is at `link` (like `ln -sf`).
    args:
      - target: string
      - link: string
    """
    # Neither side is resolved: resolving would follow an existing alias.
    target = Path(os.path.expanduser(require_str(args, "target", "fs.symlink")))
    link = Path(os.path.expanduser(require_str(args, "link", "fs.symlink")))

    if dry_run:
        return {
            "target": str(target),
            "link": str(link),
            "dry_run": True,
            "expected_effects": [
                {"kind": "fs_symlink", "summary": f"Link {link} -> {target}", "resources": [str(link)]}
            ],
        }

    if link.is_symlink() or link.exists():
        if link.is_dir() and not link.is_symlink():
            raise IsADirectoryError(f"fs.symlink: refusing to replace directory: {link}")
        link.unlink()
    link.parent.mkdir(parents=True, exist_ok=True)
    link.symlink_to(target)
    return {"target": str(target), "link": str(link), "dry_run": False}
