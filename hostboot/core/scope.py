from __future__ import annotations

import os
from pathlib import Path
from typing import Iterable, List


def _normalize_path(p: str) -> Path:
    # Expand env + ~ then resolve to an absolute path.
    return Path(os.path.expandvars(os.path.expanduser(p))).resolve()


def normalize_roots(fs_roots: Iterable[str]) -> List[Path]:
    roots: List[Path] = []
    for r in fs_roots:
        if not isinstance(r, str) or not r:
            continue
        roots.append(_normalize_path(r))
    return roots


def is_within_any_root(path_str: str, roots: List[Path]) -> bool:
    p = _normalize_path(path_str)
    for root in roots:
        if p == root or root in p.parents:
            return True
    return False


def is_protected_path(path_str: str) -> bool:
    """
    Paths no destructive tool may ever target: the filesystem root, top-level
    directories such as /home or /opt, and the invoking user's home.
    """
    p = _normalize_path(path_str)
    if len(p.parts) <= 2:
        return True
    return p == Path.home().resolve()
