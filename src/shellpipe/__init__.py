"""Pipe internal command output through external processes."""

__version__ = "0.1.0"
