"""Tests for splitting a command into executable and arguments."""

import pytest

from shellpipe.pipeline.command_parser import parse_command


@pytest.mark.parametrize(
    ("text", "expected"),
    [
        ("jq .", ("jq", ".")),
        ("cat", ("cat", None)),
        ("  head   -2  ", ("head", "-2")),
        ('grep -i "hello world"', ("grep", '-i "hello world"')),
        ("jq -r '.items[] | .name'", ("jq", "-r '.items[] | .name'")),
        ("sort\t-r", ("sort", "-r")),
        ("", ("", None)),
        ("   ", ("", None)),
        (None, ("", None)),
    ],
)
def test_parse_command(text: str | None, expected: tuple[str, str | None]) -> None:
    assert parse_command(text) == expected


def test_quoted_executable_keeps_its_spaces() -> None:
    """Whitespace inside quotes does not end the command name."""
    assert parse_command('"my tool" --flag') == ('"my tool"', "--flag")


def test_unterminated_quote_is_one_word() -> None:
    assert parse_command("'abc def") == ("'abc def", None)


def test_arguments_are_not_unquoted() -> None:
    _, arguments = parse_command("sed 's/a/b/'   'x'")
    assert arguments == "'s/a/b/'   'x'"
