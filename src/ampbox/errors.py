"""Unified exception hierarchy for ampbox.

All custom exceptions inherit from AmpboxError for consistent error handling.
The CLI and the container entrypoint catch these and print the message plus
the remediation hint, without a traceback.

Dependency direction:
    This module has NO internal dependencies (leaf module).
    It may be imported by: all other ampbox modules.
    It should NOT import from any other ampbox modules.
"""

from __future__ import annotations


class AmpboxError(Exception):
    """Base exception for all ampbox errors.

    Attributes:
        hint: Optional remediation shown to the operator below the message.
    """

    def __init__(self, message: str, *, hint: str | None = None) -> None:
        super().__init__(message)
        self.hint = hint


class DockerError(AmpboxError):
    """Docker operation errors.

    Base class for all Docker-related exceptions.
    """


class DockerNotFoundError(DockerError):
    """Raised when the docker executable cannot be started."""


class DockerTimeoutError(DockerError):
    """Raised when a Docker operation times out."""


class RuntimeNotInstalledError(DockerError):
    """Raised when `docker --version` does not succeed."""


class RuntimeNotRunningError(DockerError):
    """Raised when `docker info` does not succeed (daemon unreachable)."""


class ImageBuildError(DockerError):
    """Raised when the launch image cannot be built."""


class MountUnverifiedError(DockerError):
    """A throwaway container could not read the target mount.

    Warning-only: preflight records it and the launch proceeds.
    """


class TargetNotFoundError(AmpboxError):
    """Raised when the target project directory is missing or not a directory."""


class MissingCredentialError(AmpboxError):
    """Raised when the OAuth token variable is unset or empty."""


class DataDirUnwritableError(AmpboxError):
    """Raised when the data directory cannot be created or written."""


class ConfigWriteError(AmpboxError):
    """Raised when the tool configuration file cannot be written."""


class ConfigInvalidError(AmpboxError):
    """Raised when the written tool configuration does not parse back."""


class SmokeTestError(AmpboxError):
    """A diagnostic probe of the interactive tool failed.

    Warning-only: the bootstrapper logs it and continues.
    """
