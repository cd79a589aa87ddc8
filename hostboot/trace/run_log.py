from __future__ import annotations

import sys
from datetime import datetime
from pathlib import Path
from typing import Callable, List, Optional, TextIO


Clock = Callable[[], datetime]


class RunLog:
    """
    Human-readable progress log for one provisioning run.

    Every line is `YYYY-MM-DD HH:MM:SS - <message>`, appended to the log file
    (when configured) and echoed to the stream. Sinks are injected so tests can
    capture output without touching /var/log.
    """

    def __init__(self, path: Optional[Path] = None, stream: Optional[TextIO] = None, clock: Optional[Clock] = None):
        self._path = path
        self._stream = stream if stream is not None else sys.stdout
        self._clock = clock or datetime.now
        self._lines: List[str] = []

    @property
    def lines(self) -> List[str]:
        return list(self._lines)

    def log(self, message: str) -> None:
        line = "{} - {}".format(self._clock().strftime("%Y-%m-%d %H:%M:%S"), message)
        self._lines.append(line)
        if self._path is not None:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            with self._path.open("a", encoding="utf-8") as f:
                f.write(line + "\n")
        print(line, file=self._stream, flush=True)

    def info(self, message: str) -> None:
        self.log(message)

    def warning(self, message: str) -> None:
        self.log(f"Warning: {message}")

    def error(self, message: str) -> None:
        self.log(f"ERROR: {message}")
