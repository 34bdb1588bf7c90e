"""Run one external process with streamed stdin and captured output.

The executor spawns the executable directly, without a shell. It does not
validate or sanitize ``command`` or ``arguments``; callers must only pass
input they trust.
"""

from __future__ import annotations

import asyncio
import codecs
import logging
import os
import shlex
import signal
from collections.abc import Coroutine, Sequence
from dataclasses import dataclass
from enum import Enum
from typing import Any

from shellpipe.config.settings import PipingSettings, get_settings
from shellpipe.runtime.platform import is_windows

logger = logging.getLogger(__name__)

# Seconds to keep draining pipes after a kill before giving up on them.
KILL_DRAIN_TIMEOUT_SECONDS = 2.0
POWERSHELL_ESCAPE_CHAR = "`"


class ProcessOutcome(str, Enum):
    """How a process run ended. The three cases are mutually exclusive."""

    STARTUP_ERROR = "startup_error"
    KILLED = "killed"
    COMPLETED = "completed"


@dataclass(frozen=True, slots=True)
class ProcessResult:
    """Captured result of an external process run.

    ``exit_code`` is only meaningful for completed runs; killed runs and
    startup errors carry -1.
    """

    exit_code: int
    stdout: str
    stderr: str
    was_killed: bool
    error: str | None = None

    @property
    def outcome(self) -> ProcessOutcome:
        if self.error is not None:
            return ProcessOutcome.STARTUP_ERROR
        if self.was_killed:
            return ProcessOutcome.KILLED
        return ProcessOutcome.COMPLETED

    @property
    def is_success(self) -> bool:
        """Exit code 0, not killed, and started without error."""
        return self.exit_code == 0 and not self.was_killed and self.error is None

    @classmethod
    def success(cls, stdout: str, stderr: str = "") -> ProcessResult:
        return cls(exit_code=0, stdout=stdout, stderr=stderr, was_killed=False)

    @classmethod
    def failed(cls, exit_code: int, stdout: str, stderr: str) -> ProcessResult:
        return cls(exit_code=exit_code, stdout=stdout, stderr=stderr, was_killed=False)

    @classmethod
    def killed(cls, stdout: str = "", stderr: str = "") -> ProcessResult:
        return cls(exit_code=-1, stdout=stdout, stderr=stderr, was_killed=True)

    @classmethod
    def startup_error(cls, error: str) -> ProcessResult:
        return cls(exit_code=-1, stdout="", stderr="", was_killed=False, error=error)


def split_arguments(arguments: str | Sequence[str] | None) -> list[str]:
    """Turn an argument string into argv entries.

    Strings follow POSIX shell quoting. On Windows the lexer uses the
    PowerShell backtick as its escape character, matching
    ``escape_for_shell_argument``. Sequences are used as-is.
    """
    if arguments is None:
        return []
    if not isinstance(arguments, str):
        return [str(argument) for argument in arguments]

    lexer = shlex.shlex(arguments, posix=True)
    lexer.whitespace_split = True
    lexer.commenters = ""
    if is_windows():
        lexer.escape = POWERSHELL_ESCAPE_CHAR
    return list(lexer)


class ExternalProcessExecutor:
    """Spawns a process and pumps stdin, stdout and stderr concurrently.

    Draining only one output pipe while the child fills the other can block
    both sides forever, so the stdin writer, both readers and the exit wait
    always run together.
    """

    def __init__(self, *, settings: PipingSettings | None = None) -> None:
        self._settings = settings or get_settings()

    async def execute(
        self,
        command: str,
        arguments: str | Sequence[str] | None = None,
        stdin_content: str | None = None,
        cancel_event: asyncio.Event | None = None,
    ) -> ProcessResult:
        """Run ``command`` and return its captured output.

        Setting ``cancel_event`` kills the whole process tree and yields a
        killed result carrying whatever output was read so far. If the
        calling task is cancelled instead, the tree is killed and the
        cancellation propagates.
        """
        if cancel_event is not None and cancel_event.is_set():
            logger.debug("Cancelled before starting %s", command)
            return ProcessResult.killed()

        try:
            argv = [command, *split_arguments(arguments)]
            process = await asyncio.create_subprocess_exec(
                *argv,
                stdin=asyncio.subprocess.PIPE,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
                start_new_session=not is_windows(),
            )
        except (OSError, ValueError) as e:
            reason = getattr(e, "strerror", None) or str(e)
            logger.warning("Failed to start %r: %s", command, reason)
            return ProcessResult.startup_error(f"Failed to start '{command}': {reason}")

        logger.debug("Started pid %s: %s", process.pid, shlex.join(argv))
        stdout_chunks: list[str] = []
        stderr_chunks: list[str] = []

        pumps: list[Coroutine[Any, Any, object]] = [
            self._read_stream(process.stdout, stdout_chunks),
            self._read_stream(process.stderr, stderr_chunks),
            process.wait(),
        ]
        if stdin_content is not None:
            pumps.append(self._write_stdin(process, stdin_content))
        elif process.stdin is not None:
            process.stdin.close()

        pump_tasks = [asyncio.ensure_future(pump) for pump in pumps]
        io_future = asyncio.gather(*pump_tasks)
        watcher = (
            asyncio.ensure_future(cancel_event.wait())
            if cancel_event is not None
            else None
        )

        try:
            waiters = {io_future} if watcher is None else {io_future, watcher}
            await asyncio.wait(waiters, return_when=asyncio.FIRST_COMPLETED)

            if not io_future.done():
                logger.info("Cancellation requested, killing pid %s", process.pid)
                await self._kill_process_tree(process)
                await self._finish_after_kill(process, io_future)
                return ProcessResult.killed(
                    "".join(stdout_chunks), "".join(stderr_chunks)
                )

            io_future.result()
        except BaseException as e:
            # Caller cancellation or a failing pump: the tree must not outlive us.
            logger.info(
                "Aborting pid %s after %s, killing it", process.pid, type(e).__name__
            )
            await self._kill_process_tree(process)
            for task in pump_tasks:
                task.cancel()
            await self._reap(process)
            raise
        finally:
            if watcher is not None and not watcher.done():
                watcher.cancel()

        exit_code = process.returncode if process.returncode is not None else -1
        logger.debug("pid %s exited with code %s", process.pid, exit_code)
        return ProcessResult(
            exit_code=exit_code,
            stdout="".join(stdout_chunks),
            stderr="".join(stderr_chunks),
            was_killed=False,
        )

    async def _write_stdin(
        self, process: asyncio.subprocess.Process, content: str
    ) -> None:
        stdin = process.stdin
        if stdin is None:
            return
        try:
            stdin.write(content.encode(self._settings.encoding))
            await stdin.drain()
            stdin.close()
            await stdin.wait_closed()
        except (BrokenPipeError, ConnectionResetError):
            # The child stopped reading early (e.g. `head -1`); not an error.
            logger.debug("pid %s closed stdin before all input was written", process.pid)
        finally:
            if not stdin.is_closing():
                stdin.close()

    async def _read_stream(
        self, stream: asyncio.StreamReader | None, chunks: list[str]
    ) -> None:
        if stream is None:
            return
        decoder = codecs.getincrementaldecoder(self._settings.encoding)(
            errors="replace"
        )
        while True:
            data = await stream.read(self._settings.read_chunk_size)
            if not data:
                break
            chunks.append(decoder.decode(data))
        tail = decoder.decode(b"", final=True)
        if tail:
            chunks.append(tail)

    async def _kill_process_tree(self, process: asyncio.subprocess.Process) -> None:
        """Force-kill the process and everything it spawned."""
        if is_windows():
            if process.returncode is not None:
                return
            try:
                killer = await asyncio.create_subprocess_exec(
                    "taskkill",
                    "/T",
                    "/F",
                    "/PID",
                    str(process.pid),
                    stdout=asyncio.subprocess.DEVNULL,
                    stderr=asyncio.subprocess.DEVNULL,
                )
                await killer.wait()
                return
            except OSError as e:
                logger.warning("taskkill failed for pid %s: %s", process.pid, e)
        else:
            # The child leads its own session, so its pid is the group id.
            try:
                os.killpg(process.pid, signal.SIGKILL)
                return
            except ProcessLookupError:
                return
            except PermissionError as e:
                logger.warning("killpg failed for pid %s: %s", process.pid, e)

        try:
            process.kill()
        except ProcessLookupError:
            pass

    async def _finish_after_kill(
        self,
        process: asyncio.subprocess.Process,
        io_future: asyncio.Future[list[object]],
    ) -> None:
        """Collect output still buffered in the pipes once the tree is dead."""
        try:
            await asyncio.wait_for(
                asyncio.shield(io_future), timeout=KILL_DRAIN_TIMEOUT_SECONDS
            )
        except TimeoutError:
            logger.warning(
                "Pipes of pid %s still open after kill; dropping them", process.pid
            )
            io_future.cancel()
        except (BrokenPipeError, ConnectionResetError):
            pass
        if process.returncode is None:
            await process.wait()

    async def _reap(self, process: asyncio.subprocess.Process) -> None:
        """Wait briefly for a killed process so its transport is released."""
        if process.returncode is not None:
            return
        try:
            await asyncio.wait_for(process.wait(), timeout=KILL_DRAIN_TIMEOUT_SECONDS)
        except TimeoutError:
            logger.warning("pid %s did not exit after kill", process.pid)
