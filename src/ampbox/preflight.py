"""Preflight checks run before any image build or container start.

Checks run in a fixed order and the first failure aborts the launch:

1. docker CLI invocable            -> RuntimeNotInstalledError
2. docker daemon reachable         -> RuntimeNotRunningError
3. target is an existing directory -> TargetNotFoundError
4. OAuth token present             -> MissingCredentialError
5. data dir exists or is created   -> DataDirUnwritableError
6. runtime can read the mount      -> warning only (MountUnverifiedError)
"""

from __future__ import annotations

import os
from pathlib import Path

from . import docker
from .constants import MIN_TOKEN_LENGTH, TOKEN_ENV_VAR
from .errors import (
    DataDirUnwritableError,
    MissingCredentialError,
    MountUnverifiedError,
    RuntimeNotInstalledError,
    RuntimeNotRunningError,
    TargetNotFoundError,
)
from .logging import get_logger
from .paths import HostEnvironment, resolve_host_path, translate_path
from .run_config import LaunchRequest, ValidatedRequest

logger = get_logger(__name__)

MOUNT_HINT = (
    "Docker could not read the project directory. Make sure the drive or folder "
    "is shared with Docker (Docker Desktop: Settings > Resources > File sharing)."
)


def check_runtime() -> None:
    """Checks 1-2: docker installed and daemon running."""
    version = docker.check_docker_installed()
    if version is None:
        raise RuntimeNotInstalledError(
            "Docker is not installed or not in PATH.",
            hint="Install Docker: https://docs.docker.com/get-docker/",
        )
    logger.debug("Docker available: %s", version)

    if not docker.check_docker_status():
        raise RuntimeNotRunningError(
            "Docker is not running.",
            hint="Start Docker (Docker Desktop or `sudo systemctl start docker`) and try again.",
        )


def check_target(target: Path) -> None:
    """Check 3: target must exist and be a directory."""
    if not target.exists():
        raise TargetNotFoundError(f"Target directory does not exist: {target}")
    if not target.is_dir():
        raise TargetNotFoundError(f"Target path is not a directory: {target}")


def check_credential(token: str) -> list[str]:
    """Check 4: token must be non-empty. Returns non-fatal warnings."""
    if not token.strip():
        raise MissingCredentialError(
            f"{TOKEN_ENV_VAR} environment variable is required but not set.",
            hint=f"Run `claude setup-token` on the host, then `export {TOKEN_ENV_VAR}=<token>`.",
        )
    if len(token) < MIN_TOKEN_LENGTH:
        return [f"{TOKEN_ENV_VAR} seems unusually short"]
    return []


def ensure_data_dir(data_dir: Path) -> None:
    """Check 5: create the data directory (idempotent) and confirm it is writable."""
    try:
        data_dir.mkdir(parents=True, exist_ok=True)
    except (FileExistsError, NotADirectoryError) as e:
        raise DataDirUnwritableError(f"Data path is not a directory: {data_dir}") from e
    except OSError as e:
        raise DataDirUnwritableError(
            f"Cannot create data directory {data_dir}: {e.strerror or e}",
            hint="Pass a writable data directory as the second argument.",
        ) from e

    if not os.access(data_dir, os.W_OK):
        raise DataDirUnwritableError(
            f"Data directory is not writable: {data_dir}",
            hint="Fix the directory permissions or pass another data directory.",
        )


def check_mount(target: Path, env: HostEnvironment) -> MountUnverifiedError | None:
    """Check 6 (soft): a throwaway container can list the translated target."""
    mount_path = translate_path(target, env)
    ok, detail = docker.probe_mount(mount_path)
    if ok:
        logger.debug("Mount verified: %s", mount_path)
        return None
    message = f"Could not verify that Docker can mount {mount_path}"
    if detail:
        message = f"{message}: {detail}"
    return MountUnverifiedError(message, hint=MOUNT_HINT)


def validate(request: LaunchRequest, env: HostEnvironment) -> ValidatedRequest:
    """Run all preflight checks in order.

    Args:
        request: Launch inputs.
        env: Detected host environment class.

    Returns:
        ValidatedRequest with resolved paths and collected warnings.

    Raises:
        AmpboxError: The first fatal check that failed.
    """
    check_runtime()

    target = resolve_host_path(request.target_path, env)
    check_target(target)

    warnings = check_credential(request.auth_token)

    data_dir = resolve_host_path(request.data_dir, env)
    ensure_data_dir(data_dir)

    mount_verified = False
    if request.verify_mount:
        mount_error = check_mount(target, env)
        if mount_error is None:
            mount_verified = True
        else:
            warnings.append(str(mount_error))
            if mount_error.hint:
                warnings.append(mount_error.hint)

    return ValidatedRequest(
        request=request,
        target_path=target,
        data_dir=data_dir,
        mount_verified=mount_verified,
        warnings=tuple(warnings),
    )
