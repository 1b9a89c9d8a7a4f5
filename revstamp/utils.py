"""
Utility functions for revstamp.

Contains the machine and path helpers shared by the VCS providers and the
revision formatter.
"""

import os
import platform
import shutil
from typing import Optional


def get_machine_name() -> str:
    """Return the network name of this machine."""
    return platform.node()


def find_executable(name: str) -> Optional[str]:
    """
    Find an executable on the PATH.

    Args:
        name: Executable name without extension (e.g. 'git')

    Returns:
        str: Full path to the executable, or None if not found
    """
    return shutil.which(name)


def get_exact_path(path: str) -> str:
    """
    Determine the path with the casing actually used on disk.

    On case-insensitive filesystems a directory can be reached with any
    casing, but some tools (svn) only work with the stored spelling.

    Args:
        path: The path to check

    Returns:
        str: The on-disk spelling if the path exists, otherwise ``path`` unchanged
    """
    if not os.path.exists(path):
        return path

    full_path = os.path.abspath(path)
    drive, rest = os.path.splitdrive(full_path)
    parts = [part for part in rest.replace('\\', '/').split('/') if part]

    exact = drive.upper() + os.sep if drive else os.sep
    for part in parts:
        try:
            entries = os.listdir(exact)
        except OSError:
            return path
        if part not in entries:
            lowered = part.lower()
            part = next((entry for entry in entries if entry.lower() == lowered), part)
        exact = os.path.join(exact, part)
    return exact
