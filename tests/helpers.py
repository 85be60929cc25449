"""Fake subprocess plumbing shared by the test modules."""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Callable, List, Optional

BINARY = Path("/opt/zellij/bin/zellij")


class FakeProcess:
    """Stands in for ``asyncio.subprocess.Process``."""

    def __init__(
        self,
        stdout: str = "",
        stderr: str = "",
        returncode: int = 0,
        *,
        hang: bool = False,
    ) -> None:
        self._stdout = stdout.encode("utf-8")
        self._stderr = stderr.encode("utf-8")
        self._final_returncode = returncode
        self.returncode: Optional[int] = None
        self.hang = hang
        self.killed = False

    async def communicate(self) -> tuple[bytes, bytes]:
        if self.hang:
            await asyncio.sleep(3600)
        self.returncode = self._final_returncode
        return self._stdout, self._stderr

    def kill(self) -> None:
        self.killed = True
        self.returncode = -9

    async def wait(self) -> int:
        assert self.returncode is not None
        return self.returncode


class FakeZellij:
    """Records every spawn and answers with scripted processes."""

    def __init__(self) -> None:
        self.calls: List[List[str]] = []
        self.processes: List[FakeProcess] = []
        self.responder: Callable[[List[str]], FakeProcess] = lambda args: FakeProcess()

    def respond(
        self, stdout: str = "", stderr: str = "", returncode: int = 0, *, hang: bool = False
    ) -> None:
        self.responder = lambda args: FakeProcess(stdout, stderr, returncode, hang=hang)

    async def __call__(self, *command: str, stdout=None, stderr=None) -> FakeProcess:
        self.calls.append(list(command))
        process = self.responder(list(command[1:]))
        self.processes.append(process)
        return process

    @property
    def args(self) -> List[List[str]]:
        """Arguments of each call, without the binary path."""
        return [call[1:] for call in self.calls]
