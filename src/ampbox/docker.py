"""Docker operations for ampbox.

This module contains Docker-specific utilities and operations,
separated from CLI logic for better modularity.
"""

from __future__ import annotations

import subprocess
from pathlib import Path
from typing import TYPE_CHECKING

from .constants import MOUNT_PROBE_IMAGE, MOUNT_PROBE_PATH, MOUNT_PROBE_TIMEOUT
from .errors import DockerError, DockerNotFoundError, DockerTimeoutError
from .logging import get_logger
from .paths import get_docker_env

logger = get_logger(__name__)

if TYPE_CHECKING:
    from collections.abc import Sequence

__all__ = [
    "DockerError",
    "DockerNotFoundError",
    "DockerTimeoutError",
    "safe_docker_run",
    "check_docker_installed",
    "check_docker_status",
    "image_exists",
    "build_image",
    "probe_mount",
    "run_interactive",
]


def safe_docker_run(
    cmd: Sequence[str],
    *,
    timeout: int | None = None,
    capture_output: bool = True,
    check: bool = False,
) -> subprocess.CompletedProcess[str]:
    """Run a Docker command with consistent error handling.

    Args:
        cmd: Command to run (should start with 'docker').
        timeout: Command timeout in seconds (None blocks until completion).
        capture_output: Capture stdout/stderr if True.
        check: Raise CalledProcessError on non-zero exit.

    Returns:
        CompletedProcess with command result.

    Raises:
        DockerNotFoundError: If docker command is not found.
        DockerTimeoutError: If command times out.
        subprocess.CalledProcessError: If check=True and command fails.
    """
    cmd_str = " ".join(cmd[:4]) + ("..." if len(cmd) > 4 else "")
    logger.debug("Running Docker command: %s", cmd_str)
    try:
        result = subprocess.run(
            cmd,
            capture_output=capture_output,
            text=True,
            check=check,
            timeout=timeout,
            env=get_docker_env(),
        )
        logger.debug("Docker command completed: exit=%d", result.returncode)
        return result
    except FileNotFoundError as e:
        logger.error("Docker not found in PATH: %s", cmd_str)
        raise DockerNotFoundError(f"Docker not found in PATH. Command: {cmd_str}") from e
    except subprocess.TimeoutExpired as e:
        logger.error("Docker command timed out after %ds: %s", timeout, cmd_str)
        raise DockerTimeoutError(
            f"Docker command timed out after {timeout}s. Command: {cmd_str}"
        ) from e


def check_docker_installed() -> str | None:
    """Check that the docker CLI is invocable.

    Returns:
        The `docker --version` output, or None if docker cannot be run.
    """
    try:
        result = safe_docker_run(["docker", "--version"])
    except DockerNotFoundError:
        return None
    if result.returncode != 0:
        return None
    return result.stdout.strip()


def check_docker_status() -> bool:
    """Check if Docker daemon is responsive.

    Returns:
        True if Docker is running and responsive, False otherwise.
    """
    try:
        result = safe_docker_run(["docker", "info"])
        return result.returncode == 0
    except (DockerNotFoundError, DockerTimeoutError):
        return False


def image_exists(image: str) -> bool:
    """Check if a Docker image exists locally."""
    try:
        result = safe_docker_run(["docker", "image", "inspect", image])
        return result.returncode == 0
    except DockerNotFoundError:
        return False


def build_image(image: str, context_dir: Path) -> bool:
    """Build an image from a prepared build context.

    Build output streams to the terminal.

    Returns:
        True if the build succeeded.
    """
    logger.info("Building image %s from %s", image, context_dir)
    result = safe_docker_run(
        ["docker", "build", "-t", image, str(context_dir)],
        capture_output=False,
    )
    return result.returncode == 0


def probe_mount(mount_path: str) -> tuple[bool, str]:
    """Check that a throwaway container can read a bind mount.

    Args:
        mount_path: Docker-compatible host path (already translated).

    Returns:
        (ok, detail) where detail carries docker's error output on failure.
    """
    cmd = [
        "docker",
        "run",
        "--rm",
        "-v",
        f"{mount_path}:{MOUNT_PROBE_PATH}:ro",
        MOUNT_PROBE_IMAGE,
        "ls",
        MOUNT_PROBE_PATH,
    ]
    try:
        result = safe_docker_run(cmd, timeout=MOUNT_PROBE_TIMEOUT)
    except (DockerNotFoundError, DockerTimeoutError) as e:
        return False, str(e)
    if result.returncode != 0:
        return False, (result.stderr or result.stdout or "").strip()
    return True, ""


def run_interactive(cmd: Sequence[str]) -> int:
    """Run a container attached to the terminal and return its exit code.

    Blocks until the container exits; no timeout is applied.
    """
    result = safe_docker_run(cmd, capture_output=False)
    return result.returncode
