"""Run an internal command and pipe its output through external processes.

Only one shape is supported: exactly one internal command followed by one or
more external commands (``internal | ext1 | ext2``). A single external
command is spawned directly; longer chains are handed to the system shell.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass

from shellpipe.output.writer import CaptureOutputWriter, OutputWriter
from shellpipe.pipeline.command_parser import parse_command
from shellpipe.pipeline.models import (
    CommandOutcome,
    ParsedPipeline,
    PipelineExecutionResult,
    PipelineSegment,
)
from shellpipe.pipeline.state import PipelineRun, PipelineState
from shellpipe.runtime.process_executor import (
    ExternalProcessExecutor,
    ProcessOutcome,
    ProcessResult,
)
from shellpipe.runtime.shell_delegator import ShellDelegator

logger = logging.getLogger(__name__)

InternalCommandExecutor = Callable[
    [str, OutputWriter, asyncio.Event], Awaitable[CommandOutcome]
]


@dataclass(frozen=True, slots=True)
class DirectProcess:
    """A single external command, spawned without a shell."""

    command: str
    arguments: str | None


@dataclass(frozen=True, slots=True)
class ShellChain:
    """Two or more external commands, delegated to the system shell."""

    commands: tuple[str, ...]


ExternalStage = DirectProcess | ShellChain


class EmptyExternalCommandError(ValueError):
    """An external segment contains no command text."""


def plan_external_stage(segments: Sequence[PipelineSegment]) -> ExternalStage:
    """Choose how to run the external segments.

    Raises:
        EmptyExternalCommandError: A segment is blank.
        ValueError: There are no segments.
    """
    if not segments:
        raise ValueError("Pipeline has no external commands")

    if len(segments) == 1:
        command, arguments = parse_command(segments[0].content)
        if not command:
            raise EmptyExternalCommandError("External command is empty")
        return DirectProcess(command=command, arguments=arguments)

    for position, segment in enumerate(segments, start=1):
        if not segment.content.strip():
            raise EmptyExternalCommandError(
                f"External command at position {position} is empty"
            )
    return ShellChain(commands=tuple(segment.content.strip() for segment in segments))


class PipelineExecutor:
    """Orchestrates internal capture, external execution and result mapping."""

    def __init__(
        self,
        process_executor: ExternalProcessExecutor,
        shell_delegator: ShellDelegator | None = None,
    ) -> None:
        if process_executor is None:
            raise ValueError("process_executor is required")
        self._process_executor = process_executor
        self._shell_delegator = shell_delegator or ShellDelegator(process_executor)

    async def execute(
        self,
        pipeline: ParsedPipeline,
        internal_executor: InternalCommandExecutor,
        cancel_event: asyncio.Event | None = None,
        *,
        run: PipelineRun | None = None,
    ) -> PipelineExecutionResult:
        """Execute ``pipeline`` and return a caller-facing result.

        Args:
            pipeline: Parsed segments; the first is the internal command.
            internal_executor: Runs the internal command text, writing its
                output to the given writer.
            cancel_event: Set to abort. Cancellation is reported as a
                cancelled result, never raised.
            run: Optional state tracker, for callers that want to observe
                the state sequence.
        """
        if pipeline is None:
            raise ValueError("pipeline is required")
        if internal_executor is None:
            raise ValueError("internal_executor is required")

        run = run or PipelineRun()
        cancel_event = cancel_event or asyncio.Event()

        if not pipeline.is_valid:
            run.transition(PipelineState.VALIDATION_FAILED)
            return PipelineExecutionResult.failed(pipeline.error or "Invalid pipeline")
        internal = pipeline.internal_command
        if internal is None or not pipeline.has_external_commands:
            run.transition(PipelineState.VALIDATION_FAILED)
            return PipelineExecutionResult.failed("Pipeline has no external commands")
        try:
            stage = plan_external_stage(pipeline.external_commands)
        except ValueError as e:
            run.transition(PipelineState.VALIDATION_FAILED)
            return PipelineExecutionResult.failed(str(e))

        run.transition(PipelineState.RUNNING_INTERNAL)
        capture = CaptureOutputWriter()
        try:
            outcome = await internal_executor(internal.content, capture, cancel_event)
        except asyncio.CancelledError:
            task = asyncio.current_task()
            if task is not None and task.cancelling():
                raise
            return self._cancelled_during_internal(run, capture)

        if cancel_event.is_set():
            return self._cancelled_during_internal(run, capture)
        if not outcome.success:
            run.transition(PipelineState.INTERNAL_FAILED)
            logger.info("Internal command failed: %s", outcome.message)
            return PipelineExecutionResult.internal_command_failed(
                outcome.message or "Internal command failed"
            )

        # Written once by the internal command, read-only from here on.
        captured_output = capture.get_output()

        run.transition(PipelineState.RUNNING_EXTERNAL)
        process_result = await self._run_external(stage, captured_output, cancel_event)
        return self._map_process_result(run, stage, process_result)

    async def _run_external(
        self,
        stage: ExternalStage,
        stdin_content: str,
        cancel_event: asyncio.Event,
    ) -> ProcessResult:
        if isinstance(stage, DirectProcess):
            logger.debug("Running external command directly: %s", stage.command)
            return await self._process_executor.execute(
                command=stage.command,
                arguments=stage.arguments,
                stdin_content=stdin_content,
                cancel_event=cancel_event,
            )
        logger.debug("Running %d external commands via shell", len(stage.commands))
        return await self._shell_delegator.execute(
            list(stage.commands),
            stdin_content=stdin_content,
            cancel_event=cancel_event,
        )

    def _map_process_result(
        self,
        run: PipelineRun,
        stage: ExternalStage,
        result: ProcessResult,
    ) -> PipelineExecutionResult:
        outcome = result.outcome
        if outcome is ProcessOutcome.STARTUP_ERROR:
            run.transition(PipelineState.STARTUP_ERROR)
            return PipelineExecutionResult.failed(_startup_hint(stage, result.error))

        if outcome is ProcessOutcome.KILLED:
            run.transition(PipelineState.KILLED)
            return PipelineExecutionResult.cancelled(
                partial_output=result.stdout,
                partial_error_output=result.stderr,
            )

        run.transition(PipelineState.COMPLETED)
        return PipelineExecutionResult.succeeded(
            output=result.stdout,
            error_output=result.stderr,
            exit_code=result.exit_code,
        )

    def _cancelled_during_internal(
        self, run: PipelineRun, capture: CaptureOutputWriter
    ) -> PipelineExecutionResult:
        run.transition(PipelineState.CANCELLED)
        logger.info("Pipeline cancelled during internal command")
        return PipelineExecutionResult.cancelled(
            partial_output=capture.get_output() or None
        )


def _startup_hint(stage: ExternalStage, error: str | None) -> str:
    if isinstance(stage, DirectProcess):
        return (
            f"Failed to execute '{stage.command}': {error}. "
            f"Is '{stage.command}' installed and in your PATH?"
        )
    return (
        f"Failed to execute pipeline: {error}. "
        "Check that all commands in the pipeline are installed and in your PATH."
    )
