from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from .errors import PolicyDenied
from .scope import is_protected_path, is_within_any_root, normalize_roots
from ..registry.tool_registry import ToolRegistry


@dataclass(frozen=True)
class PolicyResult:
    decision: str  # allow|deny
    reason_codes: List[str]
    summary: Optional[str] = None


class PolicyEngine:
    """
    Gate a plan before any step runs.

    Enforced invariants:
    - explicit scope required
    - every tool must exist in the registry
    - destructive tools only inside scope.fs_roots and never on a protected path
    - network tools only when scope.allow_network
    """

    def __init__(self, tool_registry: ToolRegistry):
        self._tools = tool_registry

    def evaluate(self, plan: Dict[str, Any]) -> PolicyResult:
        scope = plan.get("scope")
        if not isinstance(scope, dict) or not isinstance(scope.get("fs_roots"), list) or len(scope["fs_roots"]) < 1:
            return PolicyResult(decision="deny", reason_codes=["scope.missing"], summary="Explicit scope is required")

        roots = normalize_roots(scope.get("fs_roots", []))
        if len(roots) < 1:
            return PolicyResult(decision="deny", reason_codes=["scope.invalid"], summary="Scope fs_roots must be valid paths")
        allow_network = bool(scope.get("allow_network", False))

        steps = plan.get("steps")
        if not isinstance(steps, list) or len(steps) < 1:
            return PolicyResult(decision="deny", reason_codes=["plan.steps_missing"], summary="Plan must have steps")

        for step in steps:
            tool_call = step.get("tool") if isinstance(step, dict) else None
            if not isinstance(tool_call, dict):
                return PolicyResult(decision="deny", reason_codes=["plan.tool_missing"], summary="Step.tool is required")
            tool_id = tool_call.get("tool_id")
            args = tool_call.get("args") if isinstance(tool_call.get("args"), dict) else {}

            tool_def = self._tools.get(tool_id) if isinstance(tool_id, str) else None
            if tool_def is None:
                return PolicyResult(decision="deny", reason_codes=["tool.unknown"], summary=f"Unknown tool: {tool_id}")

            if tool_def.get("side_effects") == "network" and not allow_network:
                return PolicyResult(
                    decision="deny",
                    reason_codes=["network.not_allowed"],
                    summary=f"Network tool {tool_id} requires scope.allow_network",
                )

            if tool_def.get("destructive"):
                path = args.get("path")
                if not isinstance(path, str) or not path:
                    return PolicyResult(decision="deny", reason_codes=["destructive.path_missing"], summary=f"{tool_id} requires a path")
                if is_protected_path(path):
                    return PolicyResult(
                        decision="deny",
                        reason_codes=["destructive.protected_path"],
                        summary=f"Refusing {tool_id} on protected path: {path}",
                    )
                if not is_within_any_root(path, roots):
                    return PolicyResult(
                        decision="deny",
                        reason_codes=["destructive.out_of_scope"],
                        summary=f"{tool_id} path is outside scope: {path}",
                    )

        return PolicyResult(decision="allow", reason_codes=[])

    def require_allow(self, result: PolicyResult) -> None:
        if result.decision != "allow":
            raise PolicyDenied(
                code="policy.denied",
                message=result.summary or "Denied by policy",
                data={"reasons": result.reason_codes},
            )
