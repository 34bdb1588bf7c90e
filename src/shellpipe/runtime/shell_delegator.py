"""Run chains of external commands by handing them to the system shell.

``jq . | grep foo | head -5`` becomes ``/bin/sh -c "jq . | grep foo | head -5"``
on Unix and ``pwsh -Command "..."`` on Windows. The shell does the
inter-process plumbing; this module only builds and escapes the expression.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Sequence

from shellpipe.runtime.platform import (
    ExecutableResolver,
    get_default_shell,
    is_windows,
)
from shellpipe.runtime.process_executor import ExternalProcessExecutor, ProcessResult
from shellpipe.runtime.shell_escaper import (
    build_pipeline_command,
    escape_for_shell_argument,
)

logger = logging.getLogger(__name__)

NO_COMMANDS_ERROR = "No commands provided for shell delegation"
SINGLE_COMMAND_ERROR = (
    "Shell delegation requires at least 2 commands. "
    "Use ExternalProcessExecutor for single commands."
)


class ShellDelegator:
    """Executes two or more piped external commands through the default shell."""

    def __init__(
        self,
        process_executor: ExternalProcessExecutor,
        *,
        shell_resolver: ExecutableResolver | None = None,
    ) -> None:
        """Initialize the delegator.

        Args:
            process_executor: Runs the shell process itself.
            shell_resolver: Locates a preferred shell binary by name. Defaults
                to scanning PATH; tests substitute a fake.
        """
        if process_executor is None:
            raise ValueError("process_executor is required")
        self._process_executor = process_executor
        self._shell_resolver = shell_resolver

    def build_shell_invocation(self, external_commands: Sequence[str]) -> tuple[str, str]:
        """Return the shell path and its argument string for a command chain.

        The platform and PATH are consulted on every call.
        """
        pipeline_command = build_pipeline_command(external_commands)
        shell = get_default_shell(self._shell_resolver)
        escaped = escape_for_shell_argument(pipeline_command, windows=is_windows())
        return shell.path, f"{shell.command_flag} {escaped}"

    async def execute(
        self,
        external_commands: Sequence[str],
        stdin_content: str | None = None,
        cancel_event: asyncio.Event | None = None,
    ) -> ProcessResult:
        """Pipe ``stdin_content`` through the chained commands."""
        if external_commands is None:
            raise ValueError("external_commands is required")
        if len(external_commands) == 0:
            return ProcessResult.startup_error(NO_COMMANDS_ERROR)
        if len(external_commands) == 1:
            return ProcessResult.startup_error(SINGLE_COMMAND_ERROR)

        shell_path, shell_arguments = self.build_shell_invocation(external_commands)
        logger.debug(
            "Delegating %d-stage pipeline to %s", len(external_commands), shell_path
        )
        return await self._process_executor.execute(
            command=shell_path,
            arguments=shell_arguments,
            stdin_content=stdin_content,
            cancel_event=cancel_event,
        )
