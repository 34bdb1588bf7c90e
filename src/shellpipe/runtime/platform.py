"""Platform detection and default shell resolution for shell delegation."""

from __future__ import annotations

import os
import sys
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path

# Resolves an executable name to a full path, or None when not found.
ExecutableResolver = Callable[[str], str | None]

UNIX_SHELL = "/bin/sh"
UNIX_SHELL_FLAG = "-c"
POWERSHELL_FLAG = "-Command"
# Windows PowerShell ships with every supported Windows release.
LEGACY_POWERSHELL = "powershell"
PREFERRED_POWERSHELL_NAMES = ("pwsh.exe", "pwsh")


@dataclass(frozen=True, slots=True)
class ShellSpec:
    """A shell executable and the flag that makes it run a command string."""

    path: str
    command_flag: str


def is_windows() -> bool:
    return sys.platform == "win32"


def is_linux() -> bool:
    return sys.platform.startswith("linux")


def is_macos() -> bool:
    return sys.platform == "darwin"


def is_unix() -> bool:
    """Linux or macOS."""
    return is_linux() or is_macos()


def find_executable_in_path(
    executable_name: str, path_env: str | None = None
) -> str | None:
    """Scan each PATH entry for ``executable_name``.

    PATH is read on every call so changes to the environment are picked up
    without restarting.
    """
    search_path = os.environ.get("PATH", "") if path_env is None else path_env
    if not search_path:
        return None

    for directory in search_path.split(os.pathsep):
        if not directory:
            continue
        candidate = Path(directory) / executable_name
        if candidate.is_file():
            return str(candidate)
    return None


def get_default_shell(resolver: ExecutableResolver | None = None) -> ShellSpec:
    """Return the shell used to run delegated pipelines.

    Unix always uses ``/bin/sh -c``. Windows prefers PowerShell 7 (``pwsh``)
    when it is on PATH and falls back to Windows PowerShell.
    """
    if not is_windows():
        return ShellSpec(UNIX_SHELL, UNIX_SHELL_FLAG)

    find = resolver or find_executable_in_path
    for name in PREFERRED_POWERSHELL_NAMES:
        found = find(name)
        if found is not None:
            return ShellSpec(found, POWERSHELL_FLAG)
    return ShellSpec(LEGACY_POWERSHELL, POWERSHELL_FLAG)
