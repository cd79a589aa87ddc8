from __future__ import annotations

from typing import TYPE_CHECKING, Any, Dict, List, Optional

from hostboot.core.runtime_context import ProvisioningContext
from hostboot.launcher import LAUNCHER_MODE, render_launcher

if TYPE_CHECKING:
    from hostboot.profile import Profile


def _step(
    step_id: str,
    title: str,
    phase: str,
    tool_id: str,
    args: Dict[str, Any],
    *,
    on_error: str = "abort",
    log_output: bool = False,
    success_message: Optional[str] = None,
    failure_message: Optional[str] = None,
) -> Dict[str, Any]:
    step: Dict[str, Any] = {
        "step_id": step_id,
        "title": title,
        "phase": phase,
        "on_error": on_error,
        "tool": {"tool_id": tool_id, "args": args},
    }
    if log_output:
        step["log_output"] = True
    if success_message is not None:
        step["success_message"] = success_message
    if failure_message is not None:
        step["failure_message"] = failure_message
    return step


class ProvisioningPlanner:
    """
    Deterministic planner: (Profile, ProvisioningContext) -> Plan.

    Phase order is fixed: packages, source, verify, dependencies, agent_config,
    agent, permissions, launcher. Nothing that reads fetched content is planned
    before the verify phase.
    """

    def __init__(self, profile: Profile):
        self._profile = profile

    def _privileged(self, argv: List[str]) -> List[str]:
        if self._profile.host.use_sudo:
            return ["sudo", *argv]
        return argv

    def plan(self, ctx: ProvisioningContext, *, verify_imports: bool = True) -> Dict[str, Any]:
        steps: List[Dict[str, Any]] = []
        steps.extend(self._package_steps())
        steps.extend(self._source_steps(ctx))
        steps.extend(self._verify_steps(ctx))
        steps.extend(self._dependency_steps(ctx, verify_imports=verify_imports))
        steps.extend(self._agent_config_steps(ctx))
        steps.extend(self._agent_steps())
        steps.extend(self._permission_steps(ctx))
        steps.extend(self._launcher_steps(ctx))
        return {
            "plan_id": f"provision_{self._profile.app.name}",
            "context": ctx.to_dict(),
            "scope": {"fs_roots": [str(ctx.target_dir)], "allow_network": True},
            "steps": steps,
        }

    def _package_steps(self) -> List[Dict[str, Any]]:
        host = self._profile.host
        runtime = self._profile.runtime
        pm = host.package_manager
        steps: List[Dict[str, Any]] = []

        if host.update_packages:
            steps.append(
                _step("packages.update", "Updating system packages...", "packages", "proc.run", {"argv": self._privileged([pm, "update", "-y"])})
            )
        packages = list(runtime.packages) + [p for p in host.os_packages if p not in runtime.packages]
        if packages:
            steps.append(
                _step(
                    "packages.install",
                    f"Installing {', '.join(packages)}...",
                    "packages",
                    "proc.run",
                    {"argv": self._privileged([pm, "install", "-y", *packages])},
                )
            )
        if runtime.pip_bootstrap_url:
            steps.append(
                _step(
                    "packages.ensure_pip",
                    "Ensuring pip is available for the runtime...",
                    "packages",
                    "python.ensure_pip",
                    {
                        "python": runtime.python,
                        "pip": runtime.pip,
                        "bootstrap_url": runtime.pip_bootstrap_url,
                        "user": runtime.pip_bootstrap_user,
                    },
                )
            )
        for i, (link, target) in enumerate(runtime.aliases, start=1):
            steps.append(
                _step(f"packages.alias.{i}", f"Creating symbolic link {link} -> {target}", "packages", "fs.symlink", {"link": link, "target": target})
            )
        steps.append(
            _step("packages.python_version", "Python version", "packages", "proc.run", {"argv": [runtime.python_command, "--version"]}, log_output=True)
        )
        steps.append(
            _step("packages.pip_version", "Pip version", "packages", "proc.run", {"argv": [runtime.pip_command, "--version"]}, log_output=True)
        )
        return steps

    def _source_steps(self, ctx: ProvisioningContext) -> List[Dict[str, Any]]:
        target = str(ctx.target_dir)
        return [
            _step("source.reset", "Removing previous checkout...", "source", "fs.reset_dir", {"path": target}),
            _step(
                "source.clone",
                "Cloning application repository...",
                "source",
                "proc.run",
                {"argv": ["git", "clone", ctx.repository_url, target]},
            ),
        ]

    def _verify_steps(self, ctx: ProvisioningContext) -> List[Dict[str, Any]]:
        return [
            _step(
                "verify.required_files",
                "Verifying application files...",
                "verify",
                "fs.require",
                {"root": str(ctx.target_dir), "files": list(self._profile.app.required_files)},
                success_message="All required application files found",
            )
        ]

    def _dependency_steps(self, ctx: ProvisioningContext, *, verify_imports: bool) -> List[Dict[str, Any]]:
        deps = self._profile.dependencies
        pip = self._profile.runtime.pip_command
        steps: List[Dict[str, Any]] = []
        if deps.upgrade_pip:
            steps.append(
                _step("dependencies.upgrade_pip", "Upgrading pip...", "dependencies", "proc.run", {"argv": [pip, "install", "--upgrade", "pip"]})
            )
        for i, package in enumerate(deps.packages, start=1):
            steps.append(
                _step(f"dependencies.install.{i}", f"Installing {package}...", "dependencies", "proc.run", {"argv": [pip, "install", package]})
            )
        if verify_imports and deps.verify_imports:
            steps.append(
                _step(
                    "dependencies.import_check",
                    "Testing all required Python imports...",
                    "dependencies",
                    "python.import_check",
                    {"python": self._profile.runtime.python_command, "cwd": str(ctx.target_dir), "imports": list(deps.verify_imports)},
                    success_message="All imports successful",
                )
            )
        return steps

    def _agent_config_steps(self, ctx: ProvisioningContext) -> List[Dict[str, Any]]:
        agent = self._profile.agent
        config_path = str(agent.config_path)
        steps = [
            _step("agent_config.mkdir", "Setting up CloudWatch Agent...", "agent_config", "fs.mkdir", {"path": str(agent.config_path.parent)}),
            _step(
                "agent_config.copy",
                "Copying CloudWatch Agent configuration...",
                "agent_config",
                "fs.copy",
                {"from": str(ctx.target_dir / agent.template), "to": config_path},
            ),
        ]
        # Substitution only ever touches the installed copy.
        if ctx.instance_id:
            steps.append(
                _step(
                    "agent_config.substitute",
                    "Writing instance ID into agent configuration...",
                    "agent_config",
                    "fs.replace_text",
                    {"path": config_path, "old": agent.placeholder, "new": ctx.instance_id},
                    success_message=f"CloudWatch Agent configuration updated with instance ID: {ctx.instance_id}",
                )
            )
        return steps

    def _agent_steps(self) -> List[Dict[str, Any]]:
        agent = self._profile.agent
        argv = self._privileged([agent.ctl, "-a", "fetch-config", "-m", agent.mode, "-s", "-c", f"file:{agent.config_path}"])
        return [
            _step(
                "agent.start",
                "Starting CloudWatch Agent...",
                "agent",
                "proc.run",
                {"argv": argv},
                on_error="warn",
                failure_message="CloudWatch Agent fetch-config failed",
            ),
            _step(
                "agent.status",
                "Checking CloudWatch Agent status...",
                "agent",
                "service.is_active",
                {"unit": agent.service, "sudo": self._profile.host.use_sudo},
                on_error="warn",
                success_message="CloudWatch Agent is running",
                failure_message="CloudWatch Agent failed to start",
            ),
        ]

    def _permission_steps(self, ctx: ProvisioningContext) -> List[Dict[str, Any]]:
        app = self._profile.app
        steps: List[Dict[str, Any]] = []
        if app.owner:
            steps.append(
                _step(
                    "permissions.owner",
                    f"Setting owner of application files to {app.owner}...",
                    "permissions",
                    "fs.chown",
                    {"path": str(ctx.target_dir), "owner": app.owner, "recursive": True},
                )
            )
        steps.append(
            _step(
                "permissions.entrypoint",
                f"Marking {app.entrypoint} executable...",
                "permissions",
                "fs.chmod",
                {"path": str(ctx.target_dir / app.entrypoint), "add": 0o111},
            )
        )
        return steps

    def _launcher_steps(self, ctx: ProvisioningContext) -> List[Dict[str, Any]]:
        launcher = self._profile.launcher
        path = ctx.target_dir / launcher.filename
        content = render_launcher(target_dir=ctx.target_dir, env=launcher.env, command=launcher.command)
        return [
            _step(
                "launcher.write",
                "Creating manual startup script...",
                "launcher",
                "fs.write_file",
                {"path": str(path), "content": content, "mode": LAUNCHER_MODE},
                success_message=f"Startup script written to {path}",
            )
        ]
