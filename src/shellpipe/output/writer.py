"""Output sinks that internal commands write to.

Commands write through the ``OutputWriter`` protocol so the same command can
print to the console, be captured for piping, or stream into a process.
"""

from __future__ import annotations

import io
from types import TracebackType
from typing import BinaryIO, Protocol, runtime_checkable

from rich.console import Console

from shellpipe.output.markup import strip_markup

# Width used when flattening renderables (tables, panels) to plain text.
PLAIN_RENDER_WIDTH = 120


@runtime_checkable
class OutputWriter(Protocol):
    """Destination for command output."""

    @property
    def supports_formatting(self) -> bool:
        """Whether markup and renderables are shown styled."""
        ...

    def write_line(self, text: str = "") -> None: ...

    def write(self, text: str) -> None: ...

    def write_renderable(self, renderable: object) -> None: ...

    def write_raw(self, data: bytes) -> None: ...

    def flush(self) -> None: ...


def render_plain(renderable: object) -> str:
    """Render a rich renderable (or any object) to uncoloured text."""
    if renderable is None:
        return ""
    if isinstance(renderable, str):
        return strip_markup(renderable) + "\n"
    buffer = io.StringIO()
    console = Console(
        file=buffer,
        color_system=None,
        force_terminal=False,
        width=PLAIN_RENDER_WIDTH,
        emoji=False,
        highlight=False,
    )
    console.print(renderable)
    return buffer.getvalue()


class CaptureOutputWriter:
    """Collects output in memory, with markup stripped.

    Used to capture an internal command's output before it is piped to an
    external process.
    """

    def __init__(self) -> None:
        self._parts: list[str] = []

    @property
    def supports_formatting(self) -> bool:
        return False

    def write_line(self, text: str = "") -> None:
        self._parts.append(strip_markup(text) + "\n")

    def write(self, text: str) -> None:
        self._parts.append(strip_markup(text))

    def write_renderable(self, renderable: object) -> None:
        self._parts.append(render_plain(renderable))

    def write_raw(self, data: bytes) -> None:
        self._parts.append(bytes(data).decode("utf-8", errors="replace"))

    def flush(self) -> None:
        return None

    def get_output(self) -> str:
        return "".join(self._parts)

    def get_output_bytes(self) -> bytes:
        return self.get_output().encode("utf-8")

    def clear(self) -> None:
        self._parts.clear()


class StreamOutputWriter:
    """Writes UTF-8 text (no BOM) and raw bytes to a binary stream.

    Text is buffered; ``write_raw`` flushes it first so bytes land in the
    stream in the same order the calls were made.
    """

    def __init__(self, stream: BinaryIO, *, owns_stream: bool = False) -> None:
        if stream is None:
            raise ValueError("stream is required")
        self._stream = stream
        self._owns_stream = owns_stream
        self._closed = False
        self._text = io.TextIOWrapper(
            stream,  # type: ignore[arg-type]
            encoding="utf-8",
            newline="\n",
            write_through=False,
        )

    @property
    def supports_formatting(self) -> bool:
        return False

    def write_line(self, text: str = "") -> None:
        self._ensure_open()
        self._text.write(strip_markup(text) + "\n")

    def write(self, text: str) -> None:
        self._ensure_open()
        self._text.write(strip_markup(text))

    def write_renderable(self, renderable: object) -> None:
        self._ensure_open()
        if renderable is None:
            return
        self._text.write(render_plain(renderable))

    def write_raw(self, data: bytes) -> None:
        self._ensure_open()
        self._text.flush()
        self._stream.write(data)

    def flush(self) -> None:
        self._ensure_open()
        self._text.flush()
        self._stream.flush()

    def close(self) -> None:
        if self._closed:
            return
        self._text.flush()
        if self._owns_stream:
            self._text.close()
        else:
            self._text.detach()
        self._closed = True

    def __enter__(self) -> StreamOutputWriter:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()

    def _ensure_open(self) -> None:
        if self._closed:
            raise ValueError("StreamOutputWriter is closed")
