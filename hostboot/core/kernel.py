from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Any, Dict, List, Optional

from hostboot.contract_store import default_contracts
from hostboot.metadata import Fetch, MetadataResolver
from hostboot.planner import ProvisioningPlanner
from hostboot.registry.tool_registry import ToolRegistry
from hostboot.trace.run_log import RunLog
from hostboot.trace.trace_emitter import TraceEmitter
from hostboot.trace.trace_store import TraceStore

from .errors import ValidationError
from .executor import Executor, StepResult
from .policy_engine import PolicyEngine
from .runtime_context import ProvisioningContext, RuntimeContext

if TYPE_CHECKING:
    from hostboot.profile import Profile


@dataclass(frozen=True)
class ProvisionResult:
    context: ProvisioningContext
    plan_id: str
    steps: List[StepResult]

    @property
    def warnings(self) -> List[StepResult]:
        return [s for s in self.steps if s.status == "warned"]


class Kernel:
    """
    Provisioning orchestration: Metadata -> Plan -> Contract -> Policy -> Execute.

    Hard rules:
    - plan-first: the host is only changed by executing a validated Plan.
    - deterministic tools only (commands are argv lists, never shell strings).
    - every step is logged and traced.
    """

    def __init__(self, tool_registry: ToolRegistry, *, metadata_fetch: Optional[Fetch] = None):
        self._tools = tool_registry
        self._metadata_fetch = metadata_fetch

    def _trace(self, ctx: RuntimeContext) -> TraceEmitter:
        store = TraceStore(ctx.trace_path) if ctx.trace_path is not None else None
        return TraceEmitter(store=store, run_id=ctx.run_id)

    def resolve_context(
        self,
        profile: Profile,
        log: RunLog,
        *,
        repository_url: Optional[str] = None,
        target_dir: Optional[Path] = None,
        region: Optional[str] = None,
        instance_id: Optional[str] = None,
    ) -> ProvisioningContext:
        """
        Build the ProvisioningContext, asking the metadata service only for
        what was not given explicitly.
        """
        ctx = ProvisioningContext(
            repository_url=repository_url or profile.app.default_repository_url,
            target_dir=target_dir or profile.app.target_dir,
            region=region or profile.metadata.default_region,
            instance_id=instance_id,
        )
        if region and instance_id:
            log.info(f"Using AWS region: {region}")
            return ctx

        resolver = MetadataResolver(
            profile.metadata.endpoint,
            default_region=profile.metadata.default_region,
            token_ttl_seconds=profile.metadata.token_ttl_seconds,
            timeout_s=profile.metadata.timeout_s,
            fetch=self._metadata_fetch,
        )
        identity = resolver.resolve(log, region=region, instance_id=instance_id)
        return ctx.with_identity(region=identity.region, instance_id=identity.instance_id)

    def build_plan(self, ctx: RuntimeContext, profile: Profile, pctx: ProvisioningContext) -> Dict[str, Any]:
        return ProvisioningPlanner(profile).plan(pctx, verify_imports=ctx.verify_imports)

    def run_plan(self, ctx: RuntimeContext, plan: Dict[str, Any], log: RunLog) -> List[StepResult]:
        trace = self._trace(ctx)
        plan_id = plan.get("plan_id") if isinstance(plan.get("plan_id"), str) else None

        plan_errors = default_contracts().validate("plan.schema.json", plan)
        if plan_errors:
            trace.emit("error", plan_id=plan_id, message="Plan schema validation failed", data={"errors": plan_errors})
            raise ValidationError(
                code="plan.schema_invalid",
                message="Plan does not validate against plan.schema.json",
                data={"errors": plan_errors},
            )
        trace.emit("plan_generated", plan_id=plan_id, message="Plan ready for execution", data={"steps": len(plan["steps"])})

        policy_engine = PolicyEngine(self._tools)
        result = policy_engine.evaluate(plan)
        trace.emit(
            "policy_decision",
            plan_id=plan_id,
            policy={"decision": result.decision, "reason_codes": result.reason_codes, "summary": result.summary},
        )
        policy_engine.require_allow(result)

        executor = Executor(self._tools, trace, log)
        results = executor.execute(ctx, plan)
        trace.emit("run_finished", plan_id=plan_id, message="Run finished", data={"ok": True, "dry_run": ctx.dry_run})
        return results

    def provision(
        self,
        ctx: RuntimeContext,
        profile: Profile,
        log: RunLog,
        *,
        repository_url: Optional[str] = None,
        target_dir: Optional[Path] = None,
        region: Optional[str] = None,
        instance_id: Optional[str] = None,
    ) -> ProvisionResult:
        self._trace(ctx).emit("run_started", message="Provisioning started", data={"dry_run": ctx.dry_run})
        log.info("Starting application setup..." if not ctx.dry_run else "Starting application setup (dry run)...")

        pctx = self.resolve_context(
            profile,
            log,
            repository_url=repository_url,
            target_dir=target_dir,
            region=region,
            instance_id=instance_id,
        )
        plan = self.build_plan(ctx, profile, pctx)
        steps = self.run_plan(ctx, plan, log)

        launcher = pctx.target_dir / profile.launcher.filename
        log.info("Setup completed! Application code copied and CloudWatch Agent configured.")
        log.info("Application Signals traces and metrics will be collected by CloudWatch Agent")
        log.info("Use the following commands to manage the application:")
        log.info(f"  - Start application manually: cd {pctx.target_dir} && ./{launcher.name}")
        log.info(f"  - View CloudWatch Agent logs: sudo journalctl -u {profile.agent.service} -f")
        return ProvisionResult(context=pctx, plan_id=plan["plan_id"], steps=steps)
