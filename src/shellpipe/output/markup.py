"""Console markup removal for text leaving the terminal."""

from __future__ import annotations

from rich.errors import MarkupError
from rich.markup import escape
from rich.text import Text

__all__ = ["escape", "strip_markup"]


def strip_markup(text: str) -> str:
    """Return ``text`` with console markup tags removed.

    ``[bold]x[/bold]`` becomes ``x`` and ``\\[`` becomes a literal bracket.
    Brackets that are not tags (JSON arrays, ``[1, 2]``) are kept. Text that
    is not valid markup, such as a stray closing tag, is returned unchanged.
    """
    if not text or "[" not in text:
        return text
    try:
        return Text.from_markup(text, emoji=False).plain
    except MarkupError:
        return text
