"""Platform-specific escaping for strings handed to a system shell.

Two strategies are provided:

- Single-quote escaping (``escape_for_unix_shell``, ``escape_for_powershell``)
  makes every character literal. Use it for individual arguments.
- Double-quote escaping (``escape_for_shell_argument``) wraps a whole pipeline
  expression for a shell's ``-c``/``-Command`` flag. The shell still sees the
  ``|`` operators, but characters able to break out of the quoting are
  neutralized.

All input is treated as untrusted.
"""

from __future__ import annotations

from collections.abc import Sequence

from shellpipe.runtime.platform import is_windows

PIPE_SEPARATOR = " | "

# Replacement order matters: the escape character itself goes first so the
# escapes introduced by later replacements are not escaped again.
_UNIX_DOUBLE_QUOTE_ESCAPES: tuple[tuple[str, str], ...] = (
    ("\\", "\\\\"),
    ('"', '\\"'),
    ("$", "\\$"),
    ("`", "\\`"),
    ("\n", "\\n"),
    ("\r", "\\r"),
)
_POWERSHELL_DOUBLE_QUOTE_ESCAPES: tuple[tuple[str, str], ...] = (
    ("`", "``"),
    ('"', '`"'),
    ("\r", "`r"),
    ("\n", "`n"),
    ("\t", "`t"),
)


def escape(text: str) -> str:
    """Escape ``text`` as a literal argument for the current platform's shell."""
    if is_windows():
        return escape_for_powershell(text)
    return escape_for_unix_shell(text)


def escape_for_unix_shell(text: str) -> str:
    """Wrap ``text`` in single quotes for ``/bin/sh``.

    Embedded single quotes become ``'\\''``: close the quote, emit an escaped
    quote, reopen.
    """
    if not text:
        return "''"
    return "'" + text.replace("'", "'\\''") + "'"


def escape_for_powershell(text: str) -> str:
    """Wrap ``text`` in a PowerShell literal string; ``'`` is doubled."""
    if not text:
        return "''"
    return "'" + text.replace("'", "''") + "'"


def escape_for_shell_argument(text: str, *, windows: bool | None = None) -> str:
    """Wrap a pipeline expression in double quotes for ``-c`` / ``-Command``.

    Unix escapes backslash, double quote, dollar, backtick, LF and CR.
    PowerShell escapes backtick, double quote, CR, LF and tab using its
    backtick escape character.

    On Unix the shell receives each dollar and backtick still preceded by a
    backslash, so shell variables and command substitution are never usable
    inside chained stages; a stage such as ``awk '{print $1}'`` sees a
    literal backslash before the dollar.
    """
    use_windows = is_windows() if windows is None else windows
    table = (
        _POWERSHELL_DOUBLE_QUOTE_ESCAPES if use_windows else _UNIX_DOUBLE_QUOTE_ESCAPES
    )
    escaped = text
    for needle, replacement in table:
        escaped = escaped.replace(needle, replacement)
    return f'"{escaped}"'


def build_pipeline_command(commands: Sequence[str]) -> str:
    """Join raw command strings with ``|``.

    Segments are not escaped here; escaping applies to the joined whole so
    the shell still sees the pipe operators.
    """
    if not commands:
        return ""
    if len(commands) == 1:
        return commands[0]
    return PIPE_SEPARATOR.join(commands)
