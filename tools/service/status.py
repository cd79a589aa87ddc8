from __future__ import annotations

import subprocess
from typing import Any, Dict, List


def run(args: Dict[str, Any], dry_run: bool) -> Dict[str, Any]:
    """
    Ask the service manager whether a unit is active (read-only).

    An inactive unit raises, so the step's on_error policy decides what happens.
    args:
      - unit: string
      - sudo: bool (default false)
    """
    unit = args.get("unit")
    if not isinstance(unit, str) or not unit:
        raise ValueError("service.is_active: 'unit' must be a non-empty string")

    argv: List[str] = ["systemctl", "is-active", "--quiet", unit]
    if args.get("sudo"):
        argv.insert(0, "sudo")

    if dry_run:
        return {"unit": unit, "dry_run": True, "expected_effects": []}

    try:
        proc = subprocess.run(argv, capture_output=True, text=True, check=False)
    except FileNotFoundError as e:
        raise RuntimeError(f"service manager not available: {argv[0]}") from e
    if proc.returncode != 0:
        raise RuntimeError(f"{unit} is not active")
    return {"unit": unit, "active": True, "dry_run": False}
