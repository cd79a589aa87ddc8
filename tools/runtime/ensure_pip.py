from __future__ import annotations

import tempfile
from pathlib import Path
from typing import Any, Dict

from tools.net.http import run as download
from tools.proc.run import run as proc_run


def run(args: Dict[str, Any], dry_run: bool) -> Dict[str, Any]:
    """
    Make sure a pip exists for a specific interpreter.

    If `pip` already exists this is a no-op; otherwise get-pip.py is
    downloaded and run with `python` (optionally with --user).
    args:
      - python: string (versioned interpreter, e.g. /usr/bin/python3.13)
      - pip: string (expected pip path, e.g. /usr/bin/pip3.13)
      - bootstrap_url: string
      - user: bool (default false)
    """
    python = args.get("python")
    pip = args.get("pip")
    url = args.get("bootstrap_url")
    for key, value in (("python", python), ("pip", pip), ("bootstrap_url", url)):
        if not isinstance(value, str) or not value:
            raise ValueError(f"python.ensure_pip: '{key}' must be a non-empty string")
    user = bool(args.get("user", False))

    present = Path(pip).exists()
    if dry_run:
        effects = []
        if not present:
            effects.append({"kind": "net_http", "summary": f"Download {url}", "resources": [url]})
            effects.append({"kind": "proc_run", "summary": f"Run get-pip.py with {python}", "resources": [python]})
        return {"pip": pip, "present": present, "dry_run": True, "expected_effects": effects}

    if present:
        return {"pip": pip, "present": True, "bootstrapped": False, "dry_run": False}

    with tempfile.TemporaryDirectory(prefix="hostboot-getpip-") as td:
        script = str(Path(td) / "get-pip.py")
        download({"url": url, "dest": script}, False)
        argv = [python, script]
        if user:
            argv.append("--user")
        out = proc_run({"argv": argv}, False)
    return {"pip": pip, "present": False, "bootstrapped": True, "stdout": out.get("stdout", ""), "dry_run": False}
