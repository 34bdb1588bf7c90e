"""Tests for shell escaping helpers."""

from __future__ import annotations

import pytest

from shellpipe.runtime import shell_escaper
from shellpipe.runtime.process_executor import split_arguments
from shellpipe.runtime.shell_escaper import (
    build_pipeline_command,
    escape,
    escape_for_powershell,
    escape_for_shell_argument,
    escape_for_unix_shell,
)


class TestEscapeForUnixShell:
    """Single-quote escaping for /bin/sh."""

    def test_plain_text_is_wrapped(self) -> None:
        assert escape_for_unix_shell("hello") == "'hello'"

    def test_empty_string(self) -> None:
        assert escape_for_unix_shell("") == "''"

    def test_embedded_single_quote(self) -> None:
        assert escape_for_unix_shell("it's") == "'it'\\''s'"

    def test_special_characters_stay_literal(self) -> None:
        assert escape_for_unix_shell("$HOME `id` | rm") == "'$HOME `id` | rm'"


class TestEscapeForPowerShell:
    """Single-quote escaping for PowerShell."""

    def test_plain_text_is_wrapped(self) -> None:
        assert escape_for_powershell("hello") == "'hello'"

    def test_empty_string(self) -> None:
        assert escape_for_powershell("") == "''"

    def test_embedded_single_quote_is_doubled(self) -> None:
        assert escape_for_powershell("it's") == "'it''s'"

    def test_multiple_quotes(self) -> None:
        assert escape_for_powershell("'a' 'b'") == "'''a'' ''b'''"


def test_escape_dispatches_on_platform(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(shell_escaper, "is_windows", lambda: True)
    assert escape("it's") == "'it''s'"

    monkeypatch.setattr(shell_escaper, "is_windows", lambda: False)
    assert escape("it's") == "'it'\\''s'"


class TestEscapeForShellArgumentUnix:
    """Double-quote escaping of pipeline expressions for sh -c."""

    def test_no_special_characters_only_adds_quotes(self) -> None:
        assert escape_for_shell_argument("cat | head -2", windows=False) == (
            '"cat | head -2"'
        )

    def test_backslash_escaped_before_dollar(self) -> None:
        # A backslash introduced for `$` must not be doubled again.
        assert escape_for_shell_argument("a\\$b", windows=False) == '"a\\\\\\$b"'

    def test_double_quote(self) -> None:
        assert escape_for_shell_argument('grep "x"', windows=False) == (
            '"grep \\"x\\""'
        )

    def test_command_substitution_is_neutralized(self) -> None:
        assert escape_for_shell_argument("echo `id` $(id)", windows=False) == (
            '"echo \\`id\\` \\$(id)"'
        )

    def test_newlines(self) -> None:
        assert escape_for_shell_argument("a\nb\rc", windows=False) == '"a\\nb\\rc"'

    def test_single_quotes_untouched(self) -> None:
        assert escape_for_shell_argument("grep 'a b'", windows=False) == (
            "\"grep 'a b'\""
        )

    @pytest.mark.parametrize(
        "expression",
        [
            "cat | head -2",
            'jq -r ".name" | grep test',
            "grep 'a b' | sort -r",
            "sed 's/\\\\/x/' | tr a b",
        ],
    )
    def test_argument_lexer_recovers_expression(
        self, monkeypatch: pytest.MonkeyPatch, expression: str
    ) -> None:
        monkeypatch.setattr("shellpipe.runtime.process_executor.is_windows", lambda: False)
        escaped = escape_for_shell_argument(expression, windows=False)
        assert split_arguments(f"-c {escaped}") == ["-c", expression]

    def test_expansion_characters_reach_shell_escaped(
        self, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """The shell sees \\$ and \\` and so expands neither."""
        monkeypatch.setattr("shellpipe.runtime.process_executor.is_windows", lambda: False)
        escaped = escape_for_shell_argument("echo $HOME `id`", windows=False)

        assert split_arguments(f"-c {escaped}") == ["-c", "echo \\$HOME \\`id\\`"]


class TestEscapeForShellArgumentWindows:
    """Double-quote escaping of pipeline expressions for pwsh -Command."""

    def test_no_special_characters_only_adds_quotes(self) -> None:
        assert escape_for_shell_argument("cat | head", windows=True) == '"cat | head"'

    def test_backtick_escaped_first(self) -> None:
        assert escape_for_shell_argument('`"', windows=True) == '"```""'

    def test_whitespace_controls(self) -> None:
        assert escape_for_shell_argument("a\r\n\tb", windows=True) == '"a`r`n`tb"'

    def test_dollar_is_not_escaped(self) -> None:
        assert escape_for_shell_argument("$x", windows=True) == '"$x"'

    def test_argument_lexer_recovers_quotes(
        self, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setattr("shellpipe.runtime.process_executor.is_windows", lambda: True)
        escaped = escape_for_shell_argument('Select-String "a b" | Sort', windows=True)
        assert split_arguments(f"-Command {escaped}") == [
            "-Command",
            'Select-String "a b" | Sort',
        ]


class TestBuildPipelineCommand:
    """Joining raw commands with pipes."""

    def test_empty(self) -> None:
        assert build_pipeline_command([]) == ""

    def test_single_command_unchanged(self) -> None:
        assert build_pipeline_command(["jq ."]) == "jq ."

    def test_joins_with_pipes(self) -> None:
        assert build_pipeline_command(["jq .", "grep foo", "head -5"]) == (
            "jq . | grep foo | head -5"
        )

    def test_segments_are_not_escaped(self) -> None:
        assert build_pipeline_command(["grep '$x'", 'sed "s/a/b/"']) == (
            "grep '$x' | sed \"s/a/b/\""
        )
