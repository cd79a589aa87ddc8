from __future__ import annotations

import urllib.request
from typing import Any, Dict

from tools.fs._path import expand_user_path


def run(args: Dict[str, Any], dry_run: bool) -> Dict[str, Any]:
    """
    Download a URL to a local file (network side effects).

    Args schema (see bootstrap_tools):
      - url: string (http/https)
      - dest: string
      - timeout_s: number
    """
    url = args.get("url")
    if not isinstance(url, str) or not url:
        raise ValueError("net.download: 'url' must be a non-empty string")
    if not url.startswith(("http://", "https://")):
        raise ValueError("net.download: only http(s) URLs are supported")
    dest_raw = args.get("dest")
    if not isinstance(dest_raw, str) or not dest_raw:
        raise ValueError("net.download: 'dest' must be a non-empty string")
    dest = expand_user_path(dest_raw)

    timeout_s = args.get("timeout_s", 60)
    if not isinstance(timeout_s, (int, float)) or timeout_s <= 0:
        timeout_s = 60

    if dry_run:
        summary = f"HTTP GET {url} -> {dest}"
        return {"dry_run": True, "expected_effects": [{"kind": "net_http", "summary": summary, "resources": [url, str(dest)]}]}

    req = urllib.request.Request(url=url, method="GET")
    with urllib.request.urlopen(req, timeout=float(timeout_s)) as resp:  # noqa: S310
        raw = resp.read()
        status = int(getattr(resp, "status", 0) or 0)
    dest.parent.mkdir(parents=True, exist_ok=True)
    dest.write_bytes(raw)
    return {"dry_run": False, "status": status, "dest": str(dest), "bytes": len(raw)}
