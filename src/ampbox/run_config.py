"""Launch request dataclass for ampbox.

Bundles CLI arguments and the credential lookup into a single configuration
object, built once at process start, for cleaner function signatures and
easier testing.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path

from .constants import DEFAULT_DATA_DIR, DEFAULT_IMAGE, MASK_VISIBLE_CHARS, TOKEN_ENV_VAR


def mask_secret(secret: str, visible: int = MASK_VISIBLE_CHARS) -> str:
    """Mask a secret for display, keeping only a short suffix.

    >>> mask_secret("sk-ant-oat01-abcdefgh")
    '****efgh'
    """
    if len(secret) <= visible:
        return "****"
    return "****" + secret[-visible:]


@dataclass(frozen=True)
class LaunchRequest:
    """Inputs for one launch.

    Immutable; the token is excluded from repr so it never ends up in logs.
    """

    # Paths as given by the user (resolved during preflight)
    target_path: str
    data_dir: str = DEFAULT_DATA_DIR

    # Credential
    auth_token: str = field(default="", repr=False)

    # Launcher options
    image: str = DEFAULT_IMAGE
    rebuild: bool = False
    dry_run: bool = False
    verify_mount: bool = True
    debug: bool = False

    @property
    def masked_token(self) -> str:
        return mask_secret(self.auth_token)

    @classmethod
    def from_cli(
        cls,
        *,
        target: str,
        data_dir: str | None = None,
        image: str = DEFAULT_IMAGE,
        rebuild: bool = False,
        dry_run: bool = False,
        skip_mount_check: bool = False,
        debug: bool = False,
        environ: Mapping[str, str] | None = None,
    ) -> LaunchRequest:
        """Create LaunchRequest from CLI arguments and the process environment.

        Handles argument transformation (e.g., --skip-mount-check -> verify_mount).
        """
        env = os.environ if environ is None else environ
        return cls(
            target_path=target,
            data_dir=data_dir or DEFAULT_DATA_DIR,
            auth_token=env.get(TOKEN_ENV_VAR, ""),
            image=image,
            rebuild=rebuild,
            dry_run=dry_run,
            verify_mount=not skip_mount_check,
            debug=debug,
        )


@dataclass(frozen=True)
class ValidatedRequest:
    """A LaunchRequest that passed preflight, with resolved host paths."""

    request: LaunchRequest
    target_path: Path
    data_dir: Path
    mount_verified: bool = False
    warnings: tuple[str, ...] = ()
