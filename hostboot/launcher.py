from __future__ import annotations

import re
import shlex
from pathlib import Path
from typing import Iterable, List, Tuple

from hostboot.core.errors import ValidationError


_ENV_KEY_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")

LAUNCHER_MODE = 0o755


def render_launcher(*, target_dir: Path, env: Iterable[Tuple[str, str]], command: Iterable[str]) -> str:
    """
    Render the wrapper script that starts the application.

    The script changes into target_dir, exports each env entry once (in the
    given order) and then execs the command, so the application replaces the
    shell process.
    """
    seen = set()
    exports: List[str] = []
    for key, value in env:
        if not _ENV_KEY_RE.match(key):
            raise ValidationError(code="launcher.invalid", message=f"Invalid environment variable name: {key}")
        if key in seen:
            raise ValidationError(code="launcher.invalid", message=f"Duplicate environment variable: {key}")
        seen.add(key)
        exports.append(f"export {key}={shlex.quote(value)}")

    argv = list(command)
    if not argv:
        raise ValidationError(code="launcher.invalid", message="Launcher command must not be empty")

    lines = [
        "#!/bin/bash",
        f"cd {shlex.quote(str(target_dir))}",
        "",
        "# Environment for Application Signals with CloudWatch Agent",
        *exports,
        "",
        "# Start the application",
        f"exec {shlex.join(argv)}",
    ]
    return "\n".join(lines) + "\n"
