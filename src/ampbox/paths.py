"""Cross-platform path utilities for Docker mount compatibility.

Maps host paths to the string the Docker CLI must receive for a bind mount.
Under WSL, Windows drive paths (C:\\Users\\...) become their /mnt/<drive>
form; on native Windows and Unix the runtime's own path handling is trusted.
"""

from __future__ import annotations

import functools
import os
import platform
import re
from enum import Enum
from pathlib import Path

_DRIVE_PATTERN = re.compile(r"^([A-Za-z]):(.*)$")


class HostEnvironment(str, Enum):
    """Host environment class; selects the path rewrite rule."""

    WSL = "wsl"
    NATIVE_WINDOWS = "windows"
    UNIX = "unix"


def is_windows_path(path: str | Path) -> bool:
    """Check if path is a Windows-style path (e.g., D:\\GitHub or D:/GitHub).

    Args:
        path: Path to check.

    Returns:
        True if path looks like a Windows path (has drive letter).
    """
    path_str = str(path)
    # Match patterns like: D:\, D:/, D:
    return bool(re.match(r"^[A-Za-z]:([/\\]|$)", path_str))


@functools.cache
def is_wsl() -> bool:
    """Check if running inside WSL.

    Result is cached for performance.

    Returns:
        True if running in WSL environment.
    """
    # Check for WSL-specific kernel
    try:
        with open("/proc/version", encoding="utf-8") as f:
            if "microsoft" in f.read().lower():
                return True
    except OSError:
        pass

    # Fallback: check WSL env vars
    return bool(os.environ.get("WSL_DISTRO_NAME") or os.environ.get("WSLENV"))


@functools.cache
def detect_host_environment() -> HostEnvironment:
    """Detect the host environment class once per process.

    Rules are checked in order, first match wins:
    WSL marker -> WSL, Windows OS -> NATIVE_WINDOWS, otherwise UNIX.
    """
    if is_wsl():
        return HostEnvironment.WSL
    if platform.system() == "Windows":
        return HostEnvironment.NATIVE_WINDOWS
    return HostEnvironment.UNIX


def _normalize_path_separators(path_str: str) -> str:
    """Normalize path separators to forward slashes and remove duplicates.

    Args:
        path_str: Path string to normalize.

    Returns:
        Normalized path with single forward slashes.
    """
    # Convert backslashes to forward slashes
    normalized = path_str.replace("\\", "/")
    # Remove all duplicate slashes
    while "//" in normalized:
        normalized = normalized.replace("//", "/")
    # Remove trailing slash (unless it's root)
    if len(normalized) > 1:
        normalized = normalized.rstrip("/")
    return normalized


def windows_to_wsl_path(path: str | Path) -> str:
    """Convert a Windows drive path to its WSL mount form.

    Examples:
        >>> windows_to_wsl_path("C:\\\\Users\\\\dev\\\\app")
        '/mnt/c/Users/dev/app'
        >>> windows_to_wsl_path("D:/")
        '/mnt/d'
        >>> windows_to_wsl_path("/home/user/project")
        '/home/user/project'
    """
    path_str = str(path)

    match = _DRIVE_PATTERN.match(path_str)
    if not match:
        return _normalize_path_separators(path_str)

    drive = match.group(1).lower()
    rest = _normalize_path_separators(match.group(2)).strip("/")

    # Handle root drive case (C:\ or C:)
    if not rest:
        return f"/mnt/{drive}"

    return f"/mnt/{drive}/{rest}"


def translate_path(host_path: str | Path, env: HostEnvironment) -> str:
    """Translate a host path into the string Docker receives for a bind mount.

    This is the main function to use for Docker volume mounts.

    Args:
        host_path: Absolute host path.
        env: Detected host environment class.

    Returns:
        Mount path string. Identity for NATIVE_WINDOWS and UNIX.
    """
    if env is HostEnvironment.WSL:
        return windows_to_wsl_path(host_path)
    return str(host_path)


def resolve_host_path(raw: str | Path, env: HostEnvironment) -> Path:
    """Make a user-supplied path usable on this host.

    A Windows drive path typed into a WSL shell is rewritten to /mnt/<drive>
    before it is made absolute; everything else is resolved as-is.
    """
    raw_str = str(raw)
    if env is HostEnvironment.WSL and is_windows_path(raw_str):
        raw_str = windows_to_wsl_path(raw_str)
    return Path(raw_str).expanduser().resolve()


def get_docker_env() -> dict[str, str]:
    """Environment for docker subprocesses.

    Git Bash/MSYS rewrites arguments that look like POSIX paths, which breaks
    "-v host:/container" mount specs; MSYS_NO_PATHCONV disables that.
    """
    env = os.environ.copy()
    if detect_host_environment() is not HostEnvironment.UNIX:
        env["MSYS_NO_PATHCONV"] = "1"
    return env
