"""Console display of pipeline results."""

from __future__ import annotations

from rich.console import Console
from rich.text import Text

from shellpipe.pipeline.models import PipelineExecutionResult

EXIT_SUCCESS = 0
EXIT_FAILURE = 1
EXIT_CANCELLED = 130

ERROR_STYLE = "red"
WARNING_STYLE = "yellow"


def render_pipeline_result(
    result: PipelineExecutionResult,
    console: Console,
    *,
    error_console: Console | None = None,
    quiet: bool = False,
) -> int:
    """Print a pipeline result and return a process exit code.

    Standard output is written verbatim. Standard error is shown in the
    error colour and a nonzero external exit code as a warning; neither
    suppresses the other.
    """
    err = error_console or console

    if result.was_cancelled:
        _write_verbatim(console, result.output)
        _write_error_output(err, result.error_output)
        err.print(Text("Pipeline cancelled.", style=WARNING_STYLE))
        return EXIT_CANCELLED

    if not result.success:
        err.print(
            Text(result.error or "Pipeline execution failed", style=ERROR_STYLE),
            soft_wrap=True,
        )
        return EXIT_FAILURE

    _write_verbatim(console, result.output)
    _write_error_output(err, result.error_output)
    if result.has_nonzero_exit_code and not quiet:
        err.print(
            Text(
                f"Process exited with code {result.external_exit_code}",
                style=WARNING_STYLE,
            )
        )
    return EXIT_SUCCESS


def _write_verbatim(console: Console, text: str | None) -> None:
    if text:
        console.out(text, end="", highlight=False)


def _write_error_output(console: Console, text: str | None) -> None:
    if text:
        console.print(Text(text, style=ERROR_STYLE), end="", soft_wrap=True)
