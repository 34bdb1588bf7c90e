"""Process-level primitives: platform shells, escaping, spawning, delegation."""

from shellpipe.runtime.platform import ShellSpec, get_default_shell
from shellpipe.runtime.process_executor import (
    ExternalProcessExecutor,
    ProcessOutcome,
    ProcessResult,
)
from shellpipe.runtime.shell_delegator import ShellDelegator

__all__ = [
    "ExternalProcessExecutor",
    "ProcessOutcome",
    "ProcessResult",
    "ShellDelegator",
    "ShellSpec",
    "get_default_shell",
]
