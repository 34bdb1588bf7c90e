"""Value types passed into and out of the pipeline executor."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from enum import Enum

CANCELLED_MESSAGE = "Pipeline cancelled"


@dataclass(frozen=True, slots=True)
class PipelineSegment:
    """One command in a piped chain.

    Attributes:
        content: The raw, trimmed command text.
        index: Zero-based position in the pipeline.
        is_first: Whether this is the internal command.
        is_last: Whether this is the final command.
    """

    content: str
    index: int
    is_first: bool
    is_last: bool


@dataclass(frozen=True, slots=True)
class ParsedPipeline:
    """Segments produced by the pipeline parser, with validation status."""

    segments: tuple[PipelineSegment, ...]
    is_valid: bool
    error: str | None = None

    @classmethod
    def success(cls, segments: Iterable[PipelineSegment]) -> ParsedPipeline:
        return cls(segments=tuple(segments), is_valid=True)

    @classmethod
    def failure(cls, error: str) -> ParsedPipeline:
        return cls(segments=(), is_valid=False, error=error)

    @classmethod
    def from_commands(cls, commands: Sequence[str]) -> ParsedPipeline:
        """Build a valid pipeline from already-split command texts."""
        last = len(commands) - 1
        return cls.success(
            PipelineSegment(
                content=command,
                index=index,
                is_first=index == 0,
                is_last=index == last,
            )
            for index, command in enumerate(commands)
        )

    @property
    def has_external_commands(self) -> bool:
        return len(self.segments) > 1

    @property
    def internal_command(self) -> PipelineSegment | None:
        return self.segments[0] if self.segments else None

    @property
    def external_commands(self) -> tuple[PipelineSegment, ...]:
        return self.segments[1:]


@dataclass(frozen=True, slots=True)
class CommandOutcome:
    """What an internal command reports back to the pipeline."""

    success: bool
    message: str | None = None

    @classmethod
    def ok(cls, message: str | None = None) -> CommandOutcome:
        return cls(success=True, message=message)

    @classmethod
    def error(cls, message: str) -> CommandOutcome:
        return cls(success=False, message=message)


class PipelineStatus(str, Enum):
    """Terminal state of a pipeline run."""

    SUCCEEDED = "succeeded"
    FAILED = "failed"
    INTERNAL_COMMAND_FAILED = "internal_command_failed"
    CANCELLED = "cancelled"


@dataclass(frozen=True, slots=True)
class PipelineExecutionResult:
    """Outcome of running an internal command piped into external processes.

    A nonzero ``external_exit_code`` is still a successful run: filters such
    as ``grep`` use it to report "no match".
    """

    success: bool
    status: PipelineStatus
    output: str | None = None
    error_output: str | None = None
    external_exit_code: int | None = None
    error: str | None = None

    @classmethod
    def succeeded(
        cls, output: str | None, error_output: str | None, exit_code: int
    ) -> PipelineExecutionResult:
        return cls(
            success=True,
            status=PipelineStatus.SUCCEEDED,
            output=output,
            error_output=error_output,
            external_exit_code=exit_code,
        )

    @classmethod
    def failed(cls, error: str) -> PipelineExecutionResult:
        return cls(success=False, status=PipelineStatus.FAILED, error=error)

    @classmethod
    def internal_command_failed(cls, error: str) -> PipelineExecutionResult:
        return cls(
            success=False,
            status=PipelineStatus.INTERNAL_COMMAND_FAILED,
            error=error,
        )

    @classmethod
    def cancelled(
        cls,
        partial_output: str | None = None,
        partial_error_output: str | None = None,
    ) -> PipelineExecutionResult:
        return cls(
            success=False,
            status=PipelineStatus.CANCELLED,
            output=partial_output,
            error_output=partial_error_output,
            error=CANCELLED_MESSAGE,
        )

    @property
    def has_nonzero_exit_code(self) -> bool:
        return self.external_exit_code is not None and self.external_exit_code != 0

    @property
    def has_error_output(self) -> bool:
        return bool(self.error_output)

    @property
    def was_cancelled(self) -> bool:
        return self.status is PipelineStatus.CANCELLED
