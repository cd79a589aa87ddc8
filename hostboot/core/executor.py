from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import jsonschema

from .errors import StepFailed, ToolNotFound, ValidationError
from .runtime_context import RuntimeContext
from ..registry.tool_registry import ToolRegistry
from ..trace.run_log import RunLog
from ..trace.trace_emitter import TraceEmitter


@dataclass(frozen=True)
class StepResult:
    step_id: str
    phase: str
    tool_id: str
    status: str  # ok|warned
    output: Dict[str, Any] = field(default_factory=dict)
    error: Optional[str] = None


def _output_text(out: Dict[str, Any]) -> str:
    # `python --version` historically wrote to stderr; take whichever is set.
    text = str(out.get("stdout") or "").strip() or str(out.get("stderr") or "").strip()
    return text.splitlines()[0] if text else ""


class Executor:
    """
    Runs a validated plan step-by-step via deterministic tools, in order.

    on_error=abort: the failure is logged and raised as StepFailed; later steps
    never run. on_error=warn: the failure is logged as a warning and the run
    continues.
    """

    def __init__(self, tool_registry: ToolRegistry, trace: TraceEmitter, log: RunLog):
        self._tools = tool_registry
        self._trace = trace
        self._log = log

    def execute(self, ctx: RuntimeContext, plan: Dict[str, Any]) -> List[StepResult]:
        plan_id = plan.get("plan_id")
        results: List[StepResult] = []
        for step in plan.get("steps", []):
            results.append(self._run_step(ctx, plan_id, step))
        return results

    def _run_step(self, ctx: RuntimeContext, plan_id: Optional[str], step: Dict[str, Any]) -> StepResult:
        step_id = step["step_id"]
        phase = step["phase"]
        tool_id = step["tool"]["tool_id"]
        args = step["tool"]["args"]
        on_error = step.get("on_error", "abort")

        tool_def = self._tools.get(tool_id)
        if tool_def is None:
            raise ToolNotFound(code="tool.unknown", message=f"Unknown tool: {tool_id}", data={"tool_id": tool_id})

        try:
            jsonschema.Draft202012Validator(tool_def.get("args_schema", {})).validate(args)
        except jsonschema.ValidationError as e:
            self._trace.emit(
                "error",
                plan_id=plan_id,
                phase=phase,
                step_id=step_id,
                message="Tool args validation failed",
                data={"tool_id": tool_id, "error": e.message},
            )
            raise ValidationError(
                code="tool.args_invalid",
                message=f"Invalid args for {tool_id} in step {step_id}: {e.message}",
                data={"tool_id": tool_id, "step_id": step_id},
            ) from e

        if not step.get("log_output"):
            self._log.info(step["title"])
        self._trace.emit(
            "step_started",
            plan_id=plan_id,
            phase=phase,
            step_id=step_id,
            message=step["title"],
            data={"tool_id": tool_id, "dry_run": ctx.dry_run},
        )

        try:
            out = self._tools.call(tool_id, args, dry_run=ctx.dry_run)
        except Exception as e:  # noqa: BLE001
            if on_error == "warn":
                self._log.warning(step.get("failure_message") or str(e))
                self._trace.emit(
                    "step_warned",
                    plan_id=plan_id,
                    phase=phase,
                    step_id=step_id,
                    message=str(e),
                    data={"tool_id": tool_id},
                )
                return StepResult(step_id=step_id, phase=phase, tool_id=tool_id, status="warned", error=str(e))

            self._log.error(str(e))
            self._trace.emit(
                "error",
                plan_id=plan_id,
                phase=phase,
                step_id=step_id,
                message=str(e),
                data={"tool_id": tool_id, "error": repr(e)},
            )
            raise StepFailed(
                code="step.failed",
                message=str(e),
                data={"step_id": step_id, "phase": phase, "tool_id": tool_id},
            ) from e

        if ctx.dry_run:
            for effect in out.get("expected_effects", []):
                self._log.info(f"[dry-run] {effect.get('summary')}")
        elif step.get("log_output"):
            self._log.info(f"{step['title']}: {_output_text(out)}")
        if step.get("success_message") and not ctx.dry_run:
            self._log.info(step["success_message"])

        self._trace.emit(
            "step_finished",
            plan_id=plan_id,
            phase=phase,
            step_id=step_id,
            message="Step finished",
            data={"tool_id": tool_id, "ok": True},
        )
        return StepResult(step_id=step_id, phase=phase, tool_id=tool_id, status="ok", output=out)
