"""Split a single external command into executable and argument text."""

from __future__ import annotations

QUOTE_CHARS = "\"'"


def parse_command(command_text: str | None) -> tuple[str, str | None]:
    """Split ``command_text`` at the first whitespace outside quotes.

    Everything after the separator is returned as-is (left-trimmed) so that
    quoting is left to argument tokenization.

        >>> parse_command("jq .")
        ('jq', '.')
        >>> parse_command("grep -i \\"hello world\\"")
        ('grep', '-i "hello world"')
        >>> parse_command("  ")
        ('', None)
    """
    if command_text is None or not command_text.strip():
        return "", None

    trimmed = command_text.strip()
    quote_char: str | None = None
    split_at = -1

    for index, char in enumerate(trimmed):
        if quote_char is not None:
            if char == quote_char:
                quote_char = None
            continue
        if char in QUOTE_CHARS:
            quote_char = char
            continue
        if char.isspace():
            split_at = index
            break

    if split_at == -1:
        return trimmed, None

    command = trimmed[:split_at]
    arguments = trimmed[split_at + 1 :].lstrip()
    return command, arguments or None
