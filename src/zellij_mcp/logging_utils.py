"""Append-only JSON log of every zellij invocation."""

from __future__ import annotations

import json
import os
import threading
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List


@dataclass(slots=True)
class LogRecord:
    """One subprocess call made against a zellij session."""

    session: str
    args: List[str]
    status: str
    exit_code: int = 0
    stdout: str = ""
    stderr: str = ""
    duration_ms: float = 0.0
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    metadata: Dict[str, Any] = field(default_factory=dict)

    def to_json(self) -> str:
        payload: Dict[str, Any] = {
            "timestamp": self.timestamp.isoformat(),
            "session": self.session,
            "args": self.args,
            "status": self.status,
            "exit_code": self.exit_code,
            "stdout": self.stdout,
            "stderr": self.stderr,
            "duration_ms": round(self.duration_ms, 3),
            "metadata": self.metadata,
        }
        return json.dumps(payload, ensure_ascii=False)


class StructuredLogWriter:
    """Appends one JSON line per zellij call and rolls the file by size.

    The current size is tracked in memory, so each log file should have a
    single writer. Backups are named ``<log>.1`` (newest) to ``<log>.N``.
    """

    def __init__(
        self, log_path: Path, *, max_bytes: int = 5_000_000, backups: int = 3
    ) -> None:
        self.log_path = log_path
        self.max_bytes = max_bytes
        self.backups = backups
        self._lock = threading.Lock()
        self.log_path.parent.mkdir(parents=True, exist_ok=True)
        self._size = log_path.stat().st_size if log_path.exists() else 0

    def backup_path(self, index: int) -> Path:
        return self.log_path.with_name(f"{self.log_path.name}.{index}")

    def append(self, record: LogRecord) -> None:
        line = (record.to_json() + "\n").encode("utf-8")
        with self._lock:
            # A record larger than max_bytes still gets a file of its own.
            if self._size and self._size + len(line) > self.max_bytes:
                self._roll()
            with self.log_path.open("ab") as fh:
                fh.write(line)
            self._size += len(line)

    def _roll(self) -> None:
        if self.log_path.exists():
            if self.backups < 1:
                self.log_path.unlink()
            else:
                for index in range(self.backups, 1, -1):
                    newer = self.backup_path(index - 1)
                    if newer.exists():
                        os.replace(newer, self.backup_path(index))
                os.replace(self.log_path, self.backup_path(1))
        self._size = 0


__all__ = ["StructuredLogWriter", "LogRecord"]
