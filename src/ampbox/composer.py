"""Container launch composition for ampbox.

Builds the `docker run` invocation from a validated request, and renders the
image build context (Dockerfile + package source) the invocation runs.
"""

from __future__ import annotations

import os
import re
import shutil
import sys
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType

from .constants import (
    AMPLIFIER_DIR_ENV_VAR,
    CONTAINER_AMPLIFIER_DIR,
    CONTAINER_DATA_DIR,
    CONTAINER_NAME_PREFIX,
    CONTAINER_PACKAGE_DIR,
    CONTAINER_TARGET_DIR,
    DATA_DIR_ENV_VAR,
    DEFAULT_IMAGE,
    TARGET_DIR_ENV_VAR,
    TOKEN_ENV_VAR,
)
from .paths import HostEnvironment, translate_path
from .run_config import ValidatedRequest, mask_secret

# Docker container names allow [a-zA-Z0-9_.-] only
_UNSAFE_NAME_CHARS = re.compile(r"[^a-zA-Z0-9_.-]")


@dataclass(frozen=True)
class VolumeBinding:
    """One bind mount: host path (Docker-compatible) -> container path."""

    host_path: str
    container_path: str

    def to_arg(self) -> str:
        return f"{self.host_path}:{self.container_path}"


@dataclass(frozen=True)
class ContainerLaunchSpec:
    """Complete, immutable description of one container launch."""

    image: str
    container_name: str
    env_vars: Mapping[str, str] = field(repr=False)
    volume_bindings: tuple[VolumeBinding, ...]
    interactive_tty: bool = True

    def _render(self, env_vars: Mapping[str, str]) -> list[str]:
        cmd = [
            "docker",
            "run",
            "--rm",  # Remove container on exit
            "-it" if self.interactive_tty else "-i",
            "--name",
            self.container_name,
        ]
        for name, value in env_vars.items():
            cmd.extend(["-e", f"{name}={value}"])
        for binding in self.volume_bindings:
            cmd.extend(["-v", binding.to_arg()])
        cmd.append(self.image)
        return cmd

    def to_command(self) -> list[str]:
        """Full docker run argv, credential included."""
        return self._render(self.env_vars)

    def to_display_command(self) -> list[str]:
        """Same argv with the credential masked, safe to print or log."""
        masked = {
            name: mask_secret(value) if name == TOKEN_ENV_VAR else value
            for name, value in self.env_vars.items()
        }
        return self._render(masked)


def get_container_name(target: Path, pid: int | None = None) -> str:
    """Get Docker container name for a target directory.

    Format: amplifier-<basename>-<pid>, with characters Docker rejects in the
    basename replaced by "-" and case preserved. Deterministic within one run; two
    concurrent runs on the same target from the same pid space may collide.
    """
    basename = target.name or "root"
    safe_name = _UNSAFE_NAME_CHARS.sub("-", basename)
    safe_name = safe_name.strip("-.") or "project"
    if pid is None:
        pid = os.getpid()
    return f"{CONTAINER_NAME_PREFIX}-{safe_name}-{pid}"


def compose(
    validated: ValidatedRequest,
    env: HostEnvironment,
    *,
    image: str | None = None,
    pid: int | None = None,
    tty: bool | None = None,
) -> ContainerLaunchSpec:
    """Compose the launch spec. Does not execute anything.

    Args:
        validated: Request that passed preflight.
        env: Detected host environment class.
        image: Image to run (defaults to the request's image).
        pid: Process id used in the container name (defaults to os.getpid()).
        tty: Allocate a TTY (defaults to whether stdin is a terminal).
    """
    request = validated.request
    env_vars = {
        TARGET_DIR_ENV_VAR: CONTAINER_TARGET_DIR,
        DATA_DIR_ENV_VAR: CONTAINER_DATA_DIR,
        TOKEN_ENV_VAR: request.auth_token,
    }
    bindings = (
        VolumeBinding(translate_path(validated.target_path, env), CONTAINER_TARGET_DIR),
        VolumeBinding(translate_path(validated.data_dir, env), CONTAINER_DATA_DIR),
    )
    if tty is None:
        tty = sys.stdin.isatty()

    return ContainerLaunchSpec(
        image=image or request.image or DEFAULT_IMAGE,
        container_name=get_container_name(validated.target_path, pid),
        env_vars=MappingProxyType(env_vars),
        volume_bindings=bindings,
        interactive_tty=tty,
    )


def generate_dockerfile() -> str:
    """Generate the Dockerfile for the launch image.

    The image provides Node.js + Claude Code, Python for the entrypoint, and
    the environment contract (TARGET_DIR, AMPLIFIER_DATA_DIR, writable HOME).
    """
    return f"""FROM node:20-bookworm-slim

ENV DEBIAN_FRONTEND=noninteractive

RUN apt-get update && apt-get install -y --no-install-recommends \\
    git curl ca-certificates bash python3 \\
    && rm -rf /var/lib/apt/lists/*

RUN npm install -g @anthropic-ai/claude-code

ENV {AMPLIFIER_DIR_ENV_VAR}={CONTAINER_AMPLIFIER_DIR} \\
    {DATA_DIR_ENV_VAR}={CONTAINER_DATA_DIR} \\
    {TARGET_DIR_ENV_VAR}={CONTAINER_TARGET_DIR} \\
    HOME=/root \\
    PYTHONPATH={CONTAINER_PACKAGE_DIR} \\
    PYTHONUNBUFFERED=1

COPY ampbox {CONTAINER_PACKAGE_DIR}/ampbox

RUN mkdir -p {CONTAINER_AMPLIFIER_DIR} {CONTAINER_DATA_DIR} {CONTAINER_TARGET_DIR}

VOLUME ["{CONTAINER_TARGET_DIR}", "{CONTAINER_DATA_DIR}"]

WORKDIR {CONTAINER_AMPLIFIER_DIR}

ENTRYPOINT ["python3", "-m", "ampbox.bootstrap"]
"""


def write_build_files(build_dir: Path) -> Path:
    """Write Dockerfile and a copy of the ampbox package to build directory."""
    build_dir.mkdir(parents=True, exist_ok=True)

    package_src = Path(__file__).resolve().parent
    package_dst = build_dir / "ampbox"
    if package_dst.exists():
        shutil.rmtree(package_dst)
    shutil.copytree(package_src, package_dst, ignore=shutil.ignore_patterns("__pycache__"))

    # Unix line endings regardless of host OS
    with open(build_dir / "Dockerfile", "w", encoding="utf-8", newline="\n") as f:
        f.write(generate_dockerfile())

    return build_dir
