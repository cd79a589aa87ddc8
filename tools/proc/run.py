from __future__ import annotations

import os
import shlex
import subprocess
from typing import Any, Dict, List, Optional

_MAX_OUTPUT = 65536


def _tail(text: str) -> str:
    # Keep outputs bounded; package managers are chatty.
    if len(text) > _MAX_OUTPUT:
        return text[-_MAX_OUTPUT:]
    return text


def run(args: Dict[str, Any], dry_run: bool) -> Dict[str, Any]:
    """
    Run one command from an argv list (never through a shell).

    args:
      - argv: array of strings (non-empty)
      - cwd: string (optional)
      - env: object string->string, overlaid on the current environment (optional)
      - timeout_s: number (optional)
    """
    argv = args.get("argv")
    if not isinstance(argv, list) or not argv or any((not isinstance(a, str) or not a) for a in argv):
        raise ValueError("proc.run: 'argv' must be a non-empty array of non-empty strings")

    cwd = args.get("cwd")
    if cwd is not None and (not isinstance(cwd, str) or not cwd):
        raise ValueError("proc.run: 'cwd' must be a non-empty string when provided")

    env_overlay = args.get("env") or {}
    if not isinstance(env_overlay, dict) or any((not isinstance(k, str) or not isinstance(v, str)) for k, v in env_overlay.items()):
        raise ValueError("proc.run: 'env' must be an object of string->string when provided")

    timeout_s = args.get("timeout_s")
    if timeout_s is not None and (not isinstance(timeout_s, (int, float)) or timeout_s <= 0):
        timeout_s = None

    command = shlex.join(argv)
    if dry_run:
        return {
            "argv": list(argv),
            "dry_run": True,
            "expected_effects": [{"kind": "proc_run", "summary": f"Run: {command}", "resources": [argv[0]]}],
        }

    env: Optional[Dict[str, str]] = None
    if env_overlay:
        env = dict(os.environ)
        env.update(env_overlay)

    try:
        proc = subprocess.run(
            argv,
            cwd=cwd,
            env=env,
            capture_output=True,
            text=True,
            timeout=timeout_s,
            check=False,
        )
    except FileNotFoundError as e:
        raise RuntimeError(f"command not found: {argv[0]}") from e

    stdout = _tail(proc.stdout or "")
    stderr = _tail(proc.stderr or "")
    if proc.returncode != 0:
        detail = stderr.strip().splitlines()[-1] if stderr.strip() else ""
        msg = f"command failed with exit code {proc.returncode}: {command}"
        if detail:
            msg += f" ({detail})"
        raise RuntimeError(msg)

    return {"argv": list(argv), "returncode": proc.returncode, "stdout": stdout, "stderr": stderr, "dry_run": False}
