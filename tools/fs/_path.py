from __future__ import annotations

import os
from pathlib import Path
from typing import Any


def expand_user_path(p: str) -> Path:
    # Expand ~ and environment vars, then make absolute.
    return Path(os.path.expandvars(os.path.expanduser(p))).resolve()


def require_str(args: dict[str, Any], key: str, tool_id: str) -> str:
    value = args.get(key)
    if not isinstance(value, str) or not value:
        raise ValueError(f"{tool_id}: '{key}' must be a non-empty string")
    return value
