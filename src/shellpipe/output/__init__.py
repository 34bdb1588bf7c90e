"""Output sinks and result display."""

from shellpipe.output.markup import strip_markup
from shellpipe.output.writer import (
    CaptureOutputWriter,
    OutputWriter,
    StreamOutputWriter,
)

__all__ = [
    "CaptureOutputWriter",
    "OutputWriter",
    "StreamOutputWriter",
    "strip_markup",
]
