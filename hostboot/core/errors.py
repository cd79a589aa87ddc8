from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class HostbootError(Exception):
    code: str
    message: str
    data: dict[str, Any] | None = None

    def __str__(self) -> str:
        return f"{self.code}: {self.message}"


class ValidationError(HostbootError):
    pass


class PolicyDenied(HostbootError):
    pass


class ToolNotFound(HostbootError):
    pass


class StepFailed(HostbootError):
    """A step with on_error=abort failed; the run stops here."""
