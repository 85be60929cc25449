"""Run the zellij CLI against a named session."""

from __future__ import annotations

import asyncio
import contextlib
import logging
import shlex
import time
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Sequence

from .logging_utils import LogRecord, StructuredLogWriter

DEFAULT_SESSION = "zellij-mcp"
DEFAULT_TIMEOUT = 10.0
POST_ACTION_DELAY = 0.06
DEFAULT_BINARY = Path(__file__).resolve().parent / "bin" / "zellij"

LOGGER = logging.getLogger(__name__)


class ZellijError(RuntimeError):
    """Base class for failures talking to zellij."""


class CommandTimeoutError(ZellijError):
    """Raised when a zellij process is killed for exceeding its timeout."""

    def __init__(self, timeout: float, command: Sequence[str]) -> None:
        self.timeout = timeout
        self.command = list(command)
        super().__init__(
            f"zellij command timed out after {timeout}s: "
            f"zellij {' '.join(self.command)}"
        )


class ActionError(ZellijError):
    """Raised by the checked variants when zellij exits non-zero."""

    def __init__(self, message: str, *, verb: str, exit_code: int, detail: str) -> None:
        self.verb = verb
        self.exit_code = exit_code
        self.detail = detail
        super().__init__(message)


class SpawnError(ZellijError):
    """Raised when the zellij binary cannot be started at all."""


@dataclass(frozen=True, slots=True)
class CommandOptions:
    session: Optional[str] = None
    timeout: Optional[float] = None
    raw: bool = False


@dataclass(slots=True)
class CommandResult:
    stdout: str
    stderr: str
    exit_code: int


def _normalize_exit_code(returncode: Optional[int]) -> int:
    # Negative codes mean the child died from a signal and has no exit status.
    if returncode is None or returncode < 0:
        return 1
    return returncode


def _failure_detail(result: CommandResult) -> str:
    return result.stderr or result.stdout or "unknown error"


class ZellijRunner:
    """Executes zellij commands, injecting ``--session`` unless told not to.

    Each call spawns exactly one process and never retries. Non-zero exits
    come back as :class:`CommandResult` values; only the ``*_or_throw``
    variants turn them into :class:`ActionError`. A process that outlives its
    timeout is killed and reported as :class:`CommandTimeoutError`.
    """

    def __init__(
        self,
        *,
        binary: Optional[Path] = None,
        session: Optional[str] = None,
        timeout: float = DEFAULT_TIMEOUT,
        post_action_delay: float = POST_ACTION_DELAY,
        log_writer: Optional[StructuredLogWriter] = None,
    ) -> None:
        self.binary = Path(binary) if binary is not None else DEFAULT_BINARY
        self.session = session
        self.timeout = timeout
        self.post_action_delay = post_action_delay
        self.log_writer = log_writer

    def resolve_session(self, options: Optional[CommandOptions] = None) -> str:
        if options is not None and options.session is not None:
            return options.session
        if self.session is not None:
            return self.session
        return DEFAULT_SESSION

    def build_args(
        self, args: Sequence[str], options: Optional[CommandOptions] = None
    ) -> List[str]:
        if options is not None and options.raw:
            return list(args)
        return ["--session", self.resolve_session(options), *args]

    async def execute(
        self, args: Sequence[str], options: Optional[CommandOptions] = None
    ) -> CommandResult:
        options = options or CommandOptions()
        timeout = options.timeout if options.timeout is not None else self.timeout
        final_args = self.build_args(args, options)
        session = "" if options.raw else self.resolve_session(options)
        command = [str(self.binary), *final_args]
        LOGGER.debug("Running %s", " ".join(shlex.quote(part) for part in command))

        started = time.monotonic()
        try:
            process = await asyncio.create_subprocess_exec(
                *command,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as exc:
            raise SpawnError(f"Unable to start zellij at {self.binary}: {exc}") from exc

        try:
            stdout_bytes, stderr_bytes = await asyncio.wait_for(
                process.communicate(), timeout
            )
        except asyncio.TimeoutError:
            with contextlib.suppress(ProcessLookupError):
                process.kill()
            await process.wait()
            LOGGER.warning(
                "zellij %s timed out after %ss", " ".join(final_args), timeout
            )
            self._record(session, final_args, "timeout", 1, "", "", started)
            raise CommandTimeoutError(timeout, final_args) from None

        result = CommandResult(
            stdout=stdout_bytes.decode("utf-8", errors="backslashreplace").rstrip(),
            stderr=stderr_bytes.decode("utf-8", errors="backslashreplace").rstrip(),
            exit_code=_normalize_exit_code(process.returncode),
        )
        if result.exit_code != 0:
            LOGGER.debug(
                "zellij %s exited %d: %s",
                " ".join(final_args),
                result.exit_code,
                result.stderr,
            )
        self._record(
            session,
            final_args,
            "ok" if result.exit_code == 0 else "failed",
            result.exit_code,
            result.stdout,
            result.stderr,
            started,
        )
        return result

    async def action(
        self, args: Sequence[str], options: Optional[CommandOptions] = None
    ) -> CommandResult:
        """Run ``zellij --session <name> action <args...>``."""
        return await self.execute(["action", *args], options)

    async def action_or_throw(
        self, args: Sequence[str], options: Optional[CommandOptions] = None
    ) -> str:
        """Run an action and return its stdout, raising on non-zero exit.

        The CLI exits once the server has received the message, not once it
        has applied it, so a short delay follows every successful action to
        keep dependent commands ordered.
        """
        result = await self.action(args, options)
        verb = args[0] if args else ""
        if result.exit_code != 0:
            detail = _failure_detail(result)
            raise ActionError(
                f"zellij action {verb} failed (exit {result.exit_code}): {detail}",
                verb=verb,
                exit_code=result.exit_code,
                detail=detail,
            )
        await asyncio.sleep(self.post_action_delay)
        return result.stdout

    async def raw(
        self, args: Sequence[str], options: Optional[CommandOptions] = None
    ) -> CommandResult:
        """Run a top-level command such as ``list-sessions`` without ``--session``."""
        return await self.execute(args, _force_raw(options))

    async def raw_or_throw(
        self, args: Sequence[str], options: Optional[CommandOptions] = None
    ) -> str:
        result = await self.raw(args, options)
        verb = args[0] if args else ""
        if result.exit_code != 0:
            detail = _failure_detail(result)
            raise ActionError(
                f"zellij {verb} failed (exit {result.exit_code}): {detail}",
                verb=verb,
                exit_code=result.exit_code,
                detail=detail,
            )
        return result.stdout

    def _record(
        self,
        session: str,
        args: List[str],
        status: str,
        exit_code: int,
        stdout: str,
        stderr: str,
        started: float,
    ) -> None:
        if self.log_writer is None:
            return
        self.log_writer.append(
            LogRecord(
                session=session,
                args=args,
                status=status,
                exit_code=exit_code,
                stdout=stdout,
                stderr=stderr,
                duration_ms=(time.monotonic() - started) * 1000,
            )
        )


def _force_raw(options: Optional[CommandOptions]) -> CommandOptions:
    if options is None:
        return CommandOptions(raw=True)
    return CommandOptions(session=options.session, timeout=options.timeout, raw=True)


__all__ = [
    "ActionError",
    "CommandOptions",
    "CommandResult",
    "CommandTimeoutError",
    "DEFAULT_SESSION",
    "DEFAULT_TIMEOUT",
    "SpawnError",
    "ZellijError",
    "ZellijRunner",
]
