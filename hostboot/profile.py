from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import yaml

from hostboot.contract_store import default_contracts
from hostboot.core.errors import ValidationError
from hostboot.resources import default_profile_path


@dataclass(frozen=True)
class AppProfile:
    name: str
    default_repository_url: str
    target_dir: Path
    entrypoint: str
    required_files: Tuple[str, ...]
    owner: Optional[str] = None


@dataclass(frozen=True)
class HostProfile:
    package_manager: str
    update_packages: bool = True
    use_sudo: bool = False
    os_packages: Tuple[str, ...] = ()


@dataclass(frozen=True)
class RuntimeProfile:
    python: str
    pip: str
    packages: Tuple[str, ...]
    python_command: str = "python"
    pip_command: str = "pip"
    # (link, target) pairs, applied in order
    aliases: Tuple[Tuple[str, str], ...] = ()
    pip_bootstrap_url: Optional[str] = None
    # get-pip.py --user
    pip_bootstrap_user: bool = False


@dataclass(frozen=True)
class DependencyProfile:
    packages: Tuple[str, ...]
    upgrade_pip: bool = True
    verify_imports: Tuple[str, ...] = ()


@dataclass(frozen=True)
class MetadataProfile:
    endpoint: str
    default_region: str
    token_ttl_seconds: int = 21600
    timeout_s: float = 2.0


@dataclass(frozen=True)
class AgentProfile:
    template: str
    config_path: Path
    placeholder: str
    ctl: str
    service: str
    mode: str = "ec2"


@dataclass(frozen=True)
class LauncherProfile:
    command: Tuple[str, ...]
    # ordered (name, value) pairs
    env: Tuple[Tuple[str, str], ...]
    filename: str = "start-app.sh"


@dataclass(frozen=True)
class Profile:
    """
    Everything host- and application-specific about a provisioning run.
    """

    app: AppProfile
    host: HostProfile
    runtime: RuntimeProfile
    dependencies: DependencyProfile
    metadata: MetadataProfile
    agent: AgentProfile
    launcher: LauncherProfile
    log_file: Optional[Path] = None
    source: Optional[Path] = field(default=None, compare=False)


def _expand(p: str) -> Path:
    return Path(p).expanduser()


def profile_from_dict(raw: Dict[str, Any], *, source: Optional[Path] = None) -> Profile:
    errors = default_contracts().validate("profile.schema.json", raw)
    if errors:
        raise ValidationError(
            code="profile.invalid",
            message="Profile does not validate against profile.schema.json",
            data={"source": str(source) if source else None, "errors": errors},
        )

    app = raw["app"]
    host = raw["host"]
    runtime = raw["runtime"]
    deps = raw["dependencies"]
    meta = raw["metadata"]
    agent = raw["agent"]
    launcher = raw["launcher"]
    log_file = (raw.get("logging") or {}).get("log_file")

    return Profile(
        app=AppProfile(
            name=app["name"],
            default_repository_url=app["default_repository_url"],
            target_dir=_expand(app["target_dir"]),
            entrypoint=app["entrypoint"],
            required_files=tuple(app["required_files"]),
            owner=app.get("owner"),
        ),
        host=HostProfile(
            package_manager=host["package_manager"],
            update_packages=bool(host.get("update_packages", True)),
            use_sudo=bool(host.get("use_sudo", False)),
            os_packages=tuple(host.get("os_packages") or ()),
        ),
        runtime=RuntimeProfile(
            python=runtime["python"],
            pip=runtime["pip"],
            packages=tuple(runtime["packages"]),
            python_command=runtime.get("python_command", "python"),
            pip_command=runtime.get("pip_command", "pip"),
            aliases=tuple((a["link"], a["target"]) for a in runtime.get("aliases") or ()),
            pip_bootstrap_url=runtime.get("pip_bootstrap_url"),
            pip_bootstrap_user=bool(runtime.get("pip_bootstrap_user", False)),
        ),
        dependencies=DependencyProfile(
            packages=tuple(deps["packages"]),
            upgrade_pip=bool(deps.get("upgrade_pip", True)),
            verify_imports=tuple(deps.get("verify_imports") or ()),
        ),
        metadata=MetadataProfile(
            endpoint=meta["endpoint"].rstrip("/"),
            default_region=meta["default_region"],
            token_ttl_seconds=int(meta.get("token_ttl_seconds", 21600)),
            timeout_s=float(meta.get("timeout_s", 2.0)),
        ),
        agent=AgentProfile(
            template=agent["template"],
            config_path=_expand(agent["config_path"]),
            placeholder=agent["placeholder"],
            ctl=agent["ctl"],
            service=agent["service"],
            mode=agent.get("mode", "ec2"),
        ),
        launcher=LauncherProfile(
            command=tuple(launcher["command"]),
            env=tuple((str(k), str(v)) for k, v in launcher["env"].items()),
            filename=launcher.get("filename", "start-app.sh"),
        ),
        log_file=_expand(log_file) if isinstance(log_file, str) and log_file else None,
        source=source,
    )


def load_profile(path: Optional[Path] = None) -> Profile:
    """
    Load and validate a YAML profile; with no path, the packaged default.
    """
    p = path if path is not None else default_profile_path()
    if not p.exists():
        raise ValidationError(code="profile.not_found", message=f"Profile not found: {p}")
    try:
        raw = yaml.safe_load(p.read_text(encoding="utf-8"))
    except yaml.YAMLError as e:
        raise ValidationError(code="profile.invalid", message=f"Profile is not valid YAML: {p}") from e
    if not isinstance(raw, dict):
        raise ValidationError(code="profile.invalid", message="Profile must be a mapping")
    return profile_from_dict(raw, source=p)


def profile_summary(profile: Profile) -> List[str]:
    return [
        f"app: {profile.app.name} -> {profile.app.target_dir}",
        f"runtime: {profile.runtime.python} ({len(profile.runtime.packages)} package(s))",
        f"dependencies: {len(profile.dependencies.packages)} package(s), {len(profile.dependencies.verify_imports)} import check(s)",
        f"agent config: {profile.agent.config_path}",
        f"launcher: {profile.app.target_dir / profile.launcher.filename}",
    ]
