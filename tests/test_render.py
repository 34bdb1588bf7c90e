"""Tests for console rendering of pipeline results."""

from __future__ import annotations

import io

from rich.console import Console

from shellpipe.output.render import (
    EXIT_CANCELLED,
    EXIT_FAILURE,
    EXIT_SUCCESS,
    render_pipeline_result,
)
from shellpipe.pipeline.models import PipelineExecutionResult


def _consoles() -> tuple[Console, io.StringIO, Console, io.StringIO]:
    out_buffer = io.StringIO()
    err_buffer = io.StringIO()
    out = Console(file=out_buffer, color_system=None, width=80)
    err = Console(file=err_buffer, color_system=None, width=80)
    return out, out_buffer, err, err_buffer


def test_success_writes_output_verbatim() -> None:
    out, out_buffer, err, err_buffer = _consoles()
    result = PipelineExecutionResult.succeeded("[b]a[/b]\n", "", exit_code=0)

    code = render_pipeline_result(result, out, error_console=err)

    assert code == EXIT_SUCCESS
    assert out_buffer.getvalue() == "[b]a[/b]\n"
    assert err_buffer.getvalue() == ""


def test_nonzero_exit_shows_warning_and_stderr() -> None:
    out, out_buffer, err, err_buffer = _consoles()
    result = PipelineExecutionResult.succeeded("", "ls: cannot access\n", exit_code=2)

    code = render_pipeline_result(result, out, error_console=err)

    assert code == EXIT_SUCCESS
    assert err_buffer.getvalue() == (
        "ls: cannot access\nProcess exited with code 2\n"
    )


def test_quiet_hides_exit_code_warning() -> None:
    out, _, err, err_buffer = _consoles()
    result = PipelineExecutionResult.succeeded("", "", exit_code=1)

    render_pipeline_result(result, out, error_console=err, quiet=True)

    assert err_buffer.getvalue() == ""


def test_failure_prints_error() -> None:
    out, out_buffer, err, err_buffer = _consoles()
    result = PipelineExecutionResult.failed("Failed to execute 'x': missing")

    code = render_pipeline_result(result, out, error_console=err)

    assert code == EXIT_FAILURE
    assert out_buffer.getvalue() == ""
    assert "Failed to execute 'x'" in err_buffer.getvalue()


def test_cancelled_prints_partial_output() -> None:
    out, out_buffer, err, err_buffer = _consoles()
    result = PipelineExecutionResult.cancelled("partial\n", "warn\n")

    code = render_pipeline_result(result, out, error_console=err)

    assert code == EXIT_CANCELLED
    assert out_buffer.getvalue() == "partial\n"
    assert err_buffer.getvalue() == "warn\nPipeline cancelled.\n"


def test_single_console_receives_everything() -> None:
    out, out_buffer, _, _ = _consoles()
    result = PipelineExecutionResult.internal_command_failed("bad")

    render_pipeline_result(result, out)

    assert out_buffer.getvalue() == "bad\n"
