from __future__ import annotations

from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any


@dataclass(frozen=True)
class RuntimeContext:
    """
    How a provisioning run executes (not what it provisions).

    Hard rules:
    - Steps run strictly in plan order, one at a time.
    - dry_run never touches the host; tools only report expected effects.
    """

    run_id: str
    dry_run: bool = False
    log_path: Path | None = None
    trace_path: Path | None = None
    verify_imports: bool = True


@dataclass(frozen=True)
class ProvisioningContext:
    """
    What is being provisioned. Built once after metadata resolution and
    threaded through planning unchanged.
    """

    repository_url: str
    target_dir: Path
    region: str
    instance_id: str | None = None

    def with_identity(self, *, region: str, instance_id: str | None) -> "ProvisioningContext":
        return replace(self, region=region, instance_id=instance_id)

    def to_dict(self) -> dict[str, Any]:
        return {
            "repository_url": self.repository_url,
            "target_dir": str(self.target_dir),
            "region": self.region,
            "instance_id": self.instance_id,
        }
