from __future__ import annotations

import copy
import shutil
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

import yaml

from hostboot.metadata import INSTANCE_ID_PATH, REGION_PATH, TOKEN_PATH, Fetch
from hostboot.registry.tool_registry import ToolRegistry
from hostboot.resources import default_profile_path


class FakeHost:
    """
    Deterministic stand-in for the host side of a run, for tests/examples.

    Replaces the tools that need root, a package manager, git, systemd or the
    network. Filesystem tools stay real, so runs against a temporary directory
    leave real files behind. `git clone` copies `source_tree` into place.
    """

    def __init__(
        self,
        source_tree: Path,
        *,
        service_active: bool = True,
        fail_commands: Optional[Dict[str, str]] = None,
        failing_import: Optional[str] = None,
    ) -> None:
        self.source_tree = source_tree
        self.service_active = service_active
        # argv substring -> stderr line; first match fails the command
        self.fail_commands = dict(fail_commands or {})
        self.failing_import = failing_import
        self.commands: List[List[str]] = []
        self.tool_calls: List[str] = []

    def install(self, registry: ToolRegistry) -> ToolRegistry:
        registry.replace_impl("proc.run", self._proc_run)
        registry.replace_impl("python.ensure_pip", self._ensure_pip)
        registry.replace_impl("python.import_check", self._import_check)
        registry.replace_impl("service.is_active", self._service_is_active)
        registry.replace_impl("fs.chown", self._chown)
        return registry

    def ran(self, *fragment: str) -> bool:
        n = len(fragment)
        return any(tuple(argv[i : i + n]) == fragment for argv in self.commands for i in range(len(argv) - n + 1))

    def _proc_run(self, args: Dict[str, Any], dry_run: bool) -> Dict[str, Any]:
        argv = list(args["argv"])
        self.tool_calls.append("proc.run")
        if dry_run:
            return {"argv": argv, "dry_run": True, "expected_effects": [{"kind": "proc_run", "summary": " ".join(argv)}]}
        self.commands.append(argv)
        command = " ".join(argv)
        for fragment, reason in self.fail_commands.items():
            if fragment in command:
                raise RuntimeError(f"command failed with exit code 1: {command} ({reason})")
        stdout = ""
        if "clone" in argv:
            shutil.copytree(self.source_tree, argv[-1])
        elif argv[-1] == "--version":
            stdout = "Python 3.13.0" if "python" in argv[0] else "pip 25.0 from /usr/lib/python3.13/site-packages/pip (python 3.13)"
        return {"argv": argv, "returncode": 0, "stdout": stdout, "stderr": "", "dry_run": False}

    def _ensure_pip(self, args: Dict[str, Any], dry_run: bool) -> Dict[str, Any]:
        self.tool_calls.append("python.ensure_pip")
        return {"pip": args["pip"], "present": True, "dry_run": dry_run}

    def _import_check(self, args: Dict[str, Any], dry_run: bool) -> Dict[str, Any]:
        self.tool_calls.append("python.import_check")
        if not dry_run and self.failing_import in args["imports"]:
            raise ImportError(f"Failed to import required modules: `{self.failing_import}`: No module named 'x'")
        return {"imports": list(args["imports"]), "ok": True, "dry_run": dry_run}

    def _service_is_active(self, args: Dict[str, Any], dry_run: bool) -> Dict[str, Any]:
        self.tool_calls.append("service.is_active")
        if not dry_run and not self.service_active:
            raise RuntimeError(f"{args['unit']} is not active")
        return {"unit": args["unit"], "active": True, "dry_run": dry_run}

    def _chown(self, args: Dict[str, Any], dry_run: bool) -> Dict[str, Any]:
        self.tool_calls.append("fs.chown")
        return {"path": args["path"], "owner": args["owner"], "dry_run": dry_run}


def metadata_fetch(*, region: Optional[str], instance_id: Optional[str], token: Optional[str] = "tok") -> Fetch:
    """
    Fake metadata service. A None value makes that lookup fail with OSError;
    requests carrying a wrong token are refused.
    """
    calls: List[Dict[str, Any]] = []

    def fetch(method: str, url: str, headers: Dict[str, str], timeout_s: float) -> str:
        calls.append({"method": method, "url": url, "headers": dict(headers)})
        if url.endswith(TOKEN_PATH):
            if token is None:
                raise OSError("token endpoint unavailable")
            return token
        if token is not None and headers.get("X-aws-ec2-metadata-token") != token:
            raise OSError("401 Unauthorized")
        if url.endswith(REGION_PATH):
            if region is None:
                raise OSError("region unavailable")
            return region
        if url.endswith(INSTANCE_ID_PATH):
            if instance_id is None:
                raise OSError("instance-id unavailable")
            return instance_id
        raise OSError(f"unexpected metadata path: {url}")

    fetch.calls = calls  # type: ignore[attr-defined]
    return fetch


def profile_dict(root: Path, *, required_files: Optional[Sequence[str]] = None) -> Dict[str, Any]:
    """
    The packaged default profile with every host path moved under `root`.
    """
    raw = yaml.safe_load(default_profile_path().read_text(encoding="utf-8"))
    raw = copy.deepcopy(raw)
    bin_dir = root / "bin"
    raw["app"]["target_dir"] = str(root / "home" / "ec2-user" / "agentic-ai-app")
    if required_files is not None:
        raw["app"]["required_files"] = list(required_files)
    raw["host"]["use_sudo"] = False
    raw["runtime"]["python"] = str(bin_dir / "python3.13")
    raw["runtime"]["pip"] = str(bin_dir / "pip3.13")
    raw["runtime"]["aliases"] = [
        {"link": str(bin_dir / "python"), "target": str(bin_dir / "python3.13")},
        {"link": str(bin_dir / "pip"), "target": str(bin_dir / "pip3.13")},
    ]
    raw["agent"]["config_path"] = str(root / "opt" / "aws" / "amazon-cloudwatch-agent" / "etc" / "amazon-cloudwatch-agent.json")
    raw["logging"] = {"log_file": str(root / "var" / "log" / "app-setup.log")}
    return raw


def write_profile(root: Path, raw: Optional[Dict[str, Any]] = None) -> Path:
    path = root / "profile.yml"
    path.write_text(yaml.safe_dump(raw if raw is not None else profile_dict(root), sort_keys=False), encoding="utf-8")
    return path


def write_source_tree(root: Path, *, placeholder: str = "i-06ba0de6XXXXXX", omit: Sequence[str] = ()) -> Path:
    """
    A minimal application checkout with the files the default profile requires.
    """
    src = root / "upstream"
    src.mkdir(parents=True, exist_ok=True)
    files = {
        "app.py": "print('hello')\n",
        "metrics_utils.py": "def save_metrics(*_args):\n    return None\n",
        "CW-AgentConfig.json": (
            "{\n"
            '  "logs": {"logs_collected": {"files": {"collect_list": [\n'
            f'    {{"log_group_name": "strands-agent-logs", "log_stream_name": "{placeholder}-app"}},\n'
            f'    {{"log_group_name": "strands-agent-metrics", "log_stream_name": "{placeholder}"}}\n'
            "  ]}}}\n"
            "}\n"
        ),
    }
    for name, content in files.items():
        if name in omit:
            continue
        (src / name).write_text(content, encoding="utf-8")
    return src
