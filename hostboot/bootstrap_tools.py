from __future__ import annotations

from typing import Any, Dict

from hostboot.registry.tool_registry import ToolRegistry
from tools.fs.chmod import run as fs_chmod
from tools.fs.chown import run as fs_chown
from tools.fs.copy import run as fs_copy
from tools.fs.mkdir import run as fs_mkdir
from tools.fs.replace_text import run as fs_replace_text
from tools.fs.require import run as fs_require
from tools.fs.reset_dir import run as fs_reset_dir
from tools.fs.symlink import run as fs_symlink
from tools.fs.write_file import run as fs_write_file
from tools.net.http import run as net_download
from tools.proc.run import run as proc_run
from tools.runtime.ensure_pip import run as python_ensure_pip
from tools.runtime.import_check import run as python_import_check
from tools.service.status import run as service_is_active


_STR = {"type": "string", "minLength": 1}
_STR_LIST = {"type": "array", "items": _STR}


def _obj(properties: Dict[str, Any], required: list) -> Dict[str, Any]:
    return {"type": "object", "additionalProperties": False, "properties": properties, "required": required}


def build_tool_registry() -> ToolRegistry:
    """
    Register the built-in deterministic provisioning tools.
    """
    reg = ToolRegistry()

    def reg_tool(tool_id: str, title: str, side_effects: str, destructive: bool, args_schema: Dict[str, Any], impl):
        reg.register(
            {
                "tool_id": tool_id,
                "version": "0.1.0",
                "title": title,
                "side_effects": side_effects,
                "destructive": destructive,
                "supports_dry_run": True,
                "args_schema": args_schema,
            },
            impl,
        )

    reg_tool("fs.reset_dir", "Delete a directory tree (ResetDirectory)", "filesystem", True, _obj({"path": _STR}, ["path"]), fs_reset_dir)
    reg_tool("fs.mkdir", "Create a directory", "filesystem", False, _obj({"path": _STR}, ["path"]), fs_mkdir)
    reg_tool("fs.copy", "Copy a file", "filesystem", False, _obj({"from": _STR, "to": _STR}, ["from", "to"]), fs_copy)
    reg_tool(
        "fs.replace_text",
        "Replace a literal token in a file",
        "filesystem",
        False,
        _obj({"path": _STR, "old": _STR, "new": {"type": "string"}}, ["path", "old", "new"]),
        fs_replace_text,
    )
    reg_tool(
        "fs.require",
        "Require files under a root",
        "none",
        False,
        _obj({"root": _STR, "files": {"type": "array", "items": _STR, "minItems": 1}}, ["root", "files"]),
        fs_require,
    )
    reg_tool("fs.symlink", "Force-create a symlink", "filesystem", False, _obj({"target": _STR, "link": _STR}, ["target", "link"]), fs_symlink)
    reg_tool(
        "fs.write_file",
        "Write a text file",
        "filesystem",
        False,
        _obj({"path": _STR, "content": {"type": "string"}, "mode": {"type": "integer", "minimum": 0}}, ["path", "content"]),
        fs_write_file,
    )
    reg_tool(
        "fs.chmod",
        "Add permission bits",
        "filesystem",
        False,
        _obj({"path": _STR, "add": {"type": "integer", "minimum": 1}}, ["path", "add"]),
        fs_chmod,
    )
    reg_tool(
        "fs.chown",
        "Change ownership",
        "filesystem",
        False,
        _obj({"path": _STR, "owner": _STR, "recursive": {"type": "boolean"}}, ["path", "owner"]),
        fs_chown,
    )
    reg_tool(
        "proc.run",
        "Run a command (argv, no shell)",
        "process",
        False,
        _obj(
            {
                "argv": {"type": "array", "items": _STR, "minItems": 1},
                "cwd": _STR,
                "env": {"type": "object", "additionalProperties": {"type": "string"}},
                "timeout_s": {"type": "number", "exclusiveMinimum": 0},
            },
            ["argv"],
        ),
        proc_run,
    )
    reg_tool(
        "net.download",
        "Download a URL to a file",
        "network",
        False,
        _obj({"url": _STR, "dest": _STR, "timeout_s": {"type": "number", "exclusiveMinimum": 0}}, ["url", "dest"]),
        net_download,
    )
    reg_tool(
        "python.ensure_pip",
        "Bootstrap pip when missing",
        "network",
        False,
        _obj({"python": _STR, "pip": _STR, "bootstrap_url": _STR, "user": {"type": "boolean"}}, ["python", "pip", "bootstrap_url"]),
        python_ensure_pip,
    )
    reg_tool(
        "python.import_check",
        "Import smoke test",
        "process",
        False,
        _obj({"python": _STR, "cwd": _STR, "imports": _STR_LIST}, ["python", "imports"]),
        python_import_check,
    )
    reg_tool(
        "service.is_active",
        "Check a service is active",
        "none",
        False,
        _obj({"unit": _STR, "sudo": {"type": "boolean"}}, ["unit"]),
        service_is_active,
    )

    return reg
