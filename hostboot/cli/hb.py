from __future__ import annotations

import argparse
import json
import sys
import uuid
from pathlib import Path
from typing import Optional

from hostboot.bootstrap_tools import build_tool_registry
from hostboot.contract_store import default_contracts
from hostboot.core.errors import HostbootError, StepFailed
from hostboot.core.kernel import Kernel
from hostboot.core.runtime_context import RuntimeContext
from hostboot.launcher import render_launcher
from hostboot.profile import Profile, load_profile, profile_summary
from hostboot.trace.run_log import RunLog
from hostboot.trace.trace_store import TraceStore


def _format_cli_error(e: Exception) -> str:
    """
    Print-friendly error formatting for CLI commands.
    - Always includes code/message (via __str__) when it's a HostbootError
    - Includes structured `data` payload when present (e.g. schema errors)
    """
    if isinstance(e, HostbootError) and isinstance(e.data, dict) and e.data:
        return str(e) + "\n" + json.dumps(e.data, ensure_ascii=False, indent=2)
    return str(e)


def _load_profile_arg(args: argparse.Namespace) -> Profile:
    return load_profile(Path(args.profile).expanduser() if args.profile else None)


def _log_path(args: argparse.Namespace, profile: Profile) -> Optional[Path]:
    if getattr(args, "no_log_file", False):
        return None
    if getattr(args, "log_file", None):
        return Path(args.log_file).expanduser()
    return profile.log_file


def _runtime_context(args: argparse.Namespace, profile: Profile, *, dry_run: bool) -> RuntimeContext:
    return RuntimeContext(
        run_id=args.run_id or f"run_{uuid.uuid4().hex[:12]}",
        dry_run=dry_run,
        log_path=_log_path(args, profile),
        trace_path=Path(args.trace).expanduser() if args.trace else None,
        verify_imports=not bool(getattr(args, "skip_import_check", False)),
    )


def cmd_provision(args: argparse.Namespace) -> int:
    profile = _load_profile_arg(args)
    ctx = _runtime_context(args, profile, dry_run=bool(args.dry_run))
    log = RunLog(path=ctx.log_path)
    kernel = Kernel(build_tool_registry())

    try:
        kernel.provision(
            ctx,
            profile,
            log,
            repository_url=args.repository_url,
            target_dir=Path(args.target_dir).expanduser() if args.target_dir else None,
            region=args.region,
            instance_id=args.instance_id,
        )
    except StepFailed:
        # The executor already logged the ERROR line naming the cause.
        return 1
    except HostbootError as e:
        log.error(str(e))
        return 1

    print("Setup completed successfully!" + (f" Check {ctx.log_path} for detailed logs." if ctx.log_path else ""))
    target = Path(args.target_dir).expanduser() if args.target_dir else profile.app.target_dir
    print(f"To run the application manually, use: cd {target} && ./{profile.launcher.filename}")
    print("Application Signals data will be available in CloudWatch console under Application Signals section.")
    return 0


def cmd_plan(args: argparse.Namespace) -> int:
    profile = _load_profile_arg(args)
    ctx = _runtime_context(args, profile, dry_run=True)
    # Planning never writes the run log; progress goes to stderr.
    log = RunLog(path=None, stream=sys.stderr)
    kernel = Kernel(build_tool_registry())
    pctx = kernel.resolve_context(
        profile,
        log,
        repository_url=args.repository_url,
        target_dir=Path(args.target_dir).expanduser() if args.target_dir else None,
        region=args.region,
        instance_id=args.instance_id,
    )
    plan = kernel.build_plan(ctx, profile, pctx)
    print(json.dumps(plan, ensure_ascii=False, indent=2))
    return 0


def cmd_render_launcher(args: argparse.Namespace) -> int:
    profile = _load_profile_arg(args)
    target = Path(args.target_dir).expanduser() if args.target_dir else profile.app.target_dir
    sys.stdout.write(render_launcher(target_dir=target, env=profile.launcher.env, command=profile.launcher.command))
    return 0


def cmd_check_profile(args: argparse.Namespace) -> int:
    schema_errors = default_contracts().check_schemas()
    if schema_errors:
        print("Schema validation failed:")
        for name, err in schema_errors:
            print("- {}: {}".format(name, err))
        return 1

    profile = _load_profile_arg(args)
    for line in profile_summary(profile):
        print(line)
    print("Profile OK")
    return 0


def cmd_list_tools(args: argparse.Namespace) -> int:
    tool_defs = build_tool_registry().list_tools()
    if args.json:
        print(json.dumps(tool_defs, ensure_ascii=False, indent=2))
    else:
        for t in tool_defs:
            flag = " (destructive)" if t.get("destructive") else ""
            print("{tool_id} - {title}{flag}".format(tool_id=t.get("tool_id"), title=t.get("title"), flag=flag))
    return 0


def cmd_show_trace(args: argparse.Namespace) -> int:
    events = list(TraceStore(Path(args.trace)).iter_events())

    if args.event_type:
        events = [e for e in events if e.get("event_type") == args.event_type]

    if args.tail is not None and args.tail >= 0:
        events = events[-args.tail :] if args.tail else []

    for e in events:
        print(json.dumps(e, ensure_ascii=False, indent=2 if args.pretty else None))
    return 0


def _add_context_args(p: argparse.ArgumentParser) -> None:
    p.add_argument("repository_url", nargs="?", help="Application repository URL (default: profile's default_repository_url)")
    p.add_argument("--profile", help="Provisioning profile YAML (default: packaged default profile)")
    p.add_argument("--target-dir", help="Override the application target directory")
    p.add_argument("--region", help="Use this region instead of asking the metadata service")
    p.add_argument("--instance-id", help="Use this instance ID instead of asking the metadata service")
    p.add_argument("--skip-import-check", action="store_true", help="Skip the import smoke test after installing dependencies")
    p.add_argument("--trace", help="Trace output path (jsonl)")
    p.add_argument("--run-id", help="Run ID for trace correlation")


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(prog="hostboot", description="Deterministic single-host application bootstrap")
    sub = parser.add_subparsers(dest="cmd", required=True)

    p_prov = sub.add_parser("provision", help="Provision this host: packages, checkout, dependencies, agent, launcher")
    _add_context_args(p_prov)
    p_prov.add_argument("--log-file", help="Append progress lines here (default: profile logging.log_file)")
    p_prov.add_argument("--no-log-file", action="store_true", help="Only echo progress to the terminal")
    p_prov.add_argument("--dry-run", action="store_true", help="Report expected effects without changing the host")
    p_prov.set_defaults(func=cmd_provision)

    p_plan = sub.add_parser("plan", help="Print the provisioning plan as JSON (no execution)")
    _add_context_args(p_plan)
    p_plan.set_defaults(func=cmd_plan)

    p_launcher = sub.add_parser("render-launcher", help="Print the generated launcher script")
    p_launcher.add_argument("--profile", help="Provisioning profile YAML")
    p_launcher.add_argument("--target-dir", help="Override the application target directory")
    p_launcher.set_defaults(func=cmd_render_launcher)

    p_check = sub.add_parser("check-profile", help="Validate a provisioning profile")
    p_check.add_argument("--profile", help="Provisioning profile YAML")
    p_check.set_defaults(func=cmd_check_profile)

    p_list_tools = sub.add_parser("list-tools", help="List registered deterministic tools")
    p_list_tools.add_argument("--json", action="store_true", help="Output JSON")
    p_list_tools.set_defaults(func=cmd_list_tools)

    p_show_trace = sub.add_parser("show-trace", help="Show trace events from a JSONL file")
    p_show_trace.add_argument("--trace", required=True, help="Trace file path (jsonl)")
    p_show_trace.add_argument("--event-type", help="Only show this event type")
    p_show_trace.add_argument("--tail", type=int, help="Only show the last N events")
    p_show_trace.add_argument("--pretty", action="store_true", help="Indent JSON output")
    p_show_trace.set_defaults(func=cmd_show_trace)

    ns = parser.parse_args(argv)
    try:
        return int(ns.func(ns))
    except Exception as e:  # noqa: BLE001
        print(_format_cli_error(e), file=sys.stderr)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
