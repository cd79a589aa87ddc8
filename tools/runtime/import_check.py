from __future__ import annotations

import subprocess
from typing import Any, Dict


def run(args: Dict[str, Any], dry_run: bool) -> Dict[str, Any]:
    """
    Import smoke test: run each import statement in a fresh interpreter.

    Stops at the first statement that fails and names it in the error.
    args:
      - python: string (interpreter to use)
      - cwd: string (so the application's own modules are importable)
      - imports: array of statements, e.g. "from strands import Agent"
    """
    python = args.get("python")
    if not isinstance(python, str) or not python:
        raise ValueError("python.import_check: 'python' must be a non-empty string")
    cwd = args.get("cwd")
    if cwd is not None and (not isinstance(cwd, str) or not cwd):
        raise ValueError("python.import_check: 'cwd' must be a non-empty string when provided")
    imports = args.get("imports")
    if not isinstance(imports, list) or any((not isinstance(s, str) or not s.strip()) for s in imports):
        raise ValueError("python.import_check: 'imports' must be an array of statements")

    if dry_run:
        return {
            "imports": list(imports),
            "dry_run": True,
            "expected_effects": [
                {"kind": "proc_run", "summary": f"Import-check {len(imports)} statement(s) with {python}", "resources": [python]}
            ],
        }

    for stmt in imports:
        proc = subprocess.run([python, "-c", stmt], cwd=cwd, capture_output=True, text=True, check=False)
        if proc.returncode != 0:
            lines = (proc.stderr or "").strip().splitlines()
            reason = lines[-1] if lines else f"exit code {proc.returncode}"
            raise ImportError(f"Failed to import required modules: `{stmt}`: {reason}")
    return {"imports": list(imports), "ok": True, "dry_run": False}
