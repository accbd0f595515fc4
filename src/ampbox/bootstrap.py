"""Container entrypoint for ampbox.

Runs once at container start and ends by replacing itself with the
interactive Claude Code process:

    START -> ENV_CHECKED -> CONFIG_WRITTEN -> CONFIG_VERIFIED -> SMOKE_TESTED -> EXEC

Any failure before CONFIG_VERIFIED exits 1 with a logged reason. Smoke test
failures are diagnostic and only logged as warnings.

Run as: python3 -m ampbox.bootstrap (or the ampbox-entrypoint script).
"""

from __future__ import annotations

import copy
import json
import logging
import os
import subprocess
import sys
from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, NoReturn

from .constants import (
    AMPLIFIER_DIR_ENV_VAR,
    CONTAINER_DATA_DIR,
    CONTAINER_TARGET_DIR,
    DATA_DIR_ENV_VAR,
    LOG_DIR_NAME,
    MIN_TOKEN_LENGTH,
    TARGET_DIR_ENV_VAR,
    TOKEN_ENV_VAR,
    TOOL_COMMAND,
    TOOL_CONFIG_FILENAME,
    TOOL_DATA_DIR_NAME,
    TOOL_HOME_DIR_NAME,
    TOOL_PERMISSION_MODE,
)
from .errors import (
    AmpboxError,
    ConfigInvalidError,
    ConfigWriteError,
    MissingCredentialError,
    SmokeTestError,
    TargetNotFoundError,
)
from .logging import add_phase_log_file, flush_all, get_logger, set_console_level
from .run_config import mask_secret

logger = get_logger(__name__)

# Canonical tool configuration, rewritten on every container start
TOOL_CONFIG: dict[str, Any] = {
    "hasCompletedOnboarding": True,
    "projects": {},
    "customApiKeyResponses": {
        "approved": [],
        "rejected": [],
    },
    "mcpServers": {},
}

# Settings applied through the tool's own CLI (best effort)
TOOL_CLI_FLAGS = ("hasCompletedOnboarding", "hasTrustDialogAccepted")


class BootstrapState(str, Enum):
    """Bootstrap states, in their only permitted order."""

    START = "start"
    ENV_CHECKED = "env_checked"
    CONFIG_WRITTEN = "config_written"
    CONFIG_VERIFIED = "config_verified"
    SMOKE_TESTED = "smoke_tested"
    EXEC = "exec"


_STATE_ORDER = list(BootstrapState)


@dataclass(frozen=True)
class BootstrapConfig:
    """Container-side settings, read from the environment once at start."""

    auth_token: str = field(repr=False)
    target_dir: Path
    data_dir: Path
    home: Path
    amplifier_dir: Path | None = None

    @property
    def config_path(self) -> Path:
        return self.home / TOOL_CONFIG_FILENAME

    @property
    def log_dir(self) -> Path:
        return self.data_dir / LOG_DIR_NAME

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> BootstrapConfig:
        env = os.environ if environ is None else environ
        amplifier_dir = env.get(AMPLIFIER_DIR_ENV_VAR)
        return cls(
            auth_token=env.get(TOKEN_ENV_VAR, ""),
            target_dir=Path(env.get(TARGET_DIR_ENV_VAR) or CONTAINER_TARGET_DIR),
            data_dir=Path(env.get(DATA_DIR_ENV_VAR) or CONTAINER_DATA_DIR),
            home=Path(env.get("HOME") or Path.home()),
            amplifier_dir=Path(amplifier_dir) if amplifier_dir else None,
        )


def initial_instruction(target_dir: Path) -> str:
    """First message handed to the interactive session."""
    return (
        f"I'm working in {target_dir} which doesn't have Amplifier files. "
        "Please cd to that directory and work there. "
        "Do NOT update any issues or PRs in the Amplifier repo."
    )


def build_tool_argv(target_dir: Path) -> list[str]:
    """Fixed argv for the interactive tool."""
    return [
        TOOL_COMMAND,
        "--add-dir",
        str(target_dir),
        "--permission-mode",
        TOOL_PERMISSION_MODE,
        initial_instruction(target_dir),
    ]


def write_tool_config(path: Path) -> None:
    """Overwrite path with the canonical tool configuration.

    Raises:
        ConfigWriteError: If the file cannot be written.
    """
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(copy.deepcopy(TOOL_CONFIG), indent=2) + "\n", encoding="utf-8")
    except OSError as e:
        raise ConfigWriteError(
            f"Cannot write configuration file {path}: {e.strerror or e}",
            hint="The container HOME directory must be writable.",
        ) from e


def verify_tool_config(path: Path) -> dict[str, Any]:
    """Parse the configuration file back and check its required keys.

    Raises:
        ConfigInvalidError: If the file is missing, unparsable or incomplete.
    """
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError as e:
        raise ConfigInvalidError(f"Configuration file not found: {path}") from e
    except (OSError, ValueError) as e:
        raise ConfigInvalidError(f"Configuration file contains invalid JSON: {path} ({e})") from e

    if not isinstance(data, dict):
        raise ConfigInvalidError(f"Configuration file is not a JSON object: {path}")
    missing = [key for key in TOOL_CONFIG if key not in data]
    if missing:
        raise ConfigInvalidError(
            f"Configuration file is missing keys {', '.join(missing)}: {path}"
        )
    return data


class Bootstrapper:
    """Forward-only state machine that prepares and launches the tool."""

    def __init__(self, config: BootstrapConfig) -> None:
        self.config = config
        self.state = BootstrapState.START
        self.warnings: list[str] = []

    def _advance(self, new_state: BootstrapState) -> None:
        current = _STATE_ORDER.index(self.state)
        if _STATE_ORDER.index(new_state) != current + 1:
            raise RuntimeError(
                f"Invalid bootstrap transition {self.state.value} -> {new_state.value}"
            )
        logger.debug("Bootstrap state: %s -> %s", self.state.value, new_state.value)
        self.state = new_state

    def _warn(self, message: str) -> None:
        self.warnings.append(message)
        logger.warning(message)

    def check_env(self) -> None:
        token = self.config.auth_token
        if not token:
            raise MissingCredentialError(
                f"{TOKEN_ENV_VAR} environment variable is required but not set",
                hint=f"Pass it to the container with -e {TOKEN_ENV_VAR}=<token>.",
            )
        logger.info("%s detected (%s)", TOKEN_ENV_VAR, mask_secret(token))
        if len(token) < MIN_TOKEN_LENGTH:
            self._warn("OAuth token seems unusually short")

        target = self.config.target_dir
        if not target.is_dir():
            raise TargetNotFoundError(
                f"Target directory not found: {target}",
                hint=f"Make sure you mounted your project directory to {target}.",
            )
        logger.info("Target directory found: %s", target)
        self._advance(BootstrapState.ENV_CHECKED)

    def write_config(self) -> None:
        path = self.config.config_path
        logger.info("Creating Claude configuration at: %s", path)
        write_tool_config(path)
        self._advance(BootstrapState.CONFIG_WRITTEN)

    def verify_config(self) -> None:
        data = verify_tool_config(self.config.config_path)
        if data.get("hasCompletedOnboarding") is not True:
            self._warn("Onboarding not marked as complete")
        logger.info("Configuration verified")
        self._advance(BootstrapState.CONFIG_VERIFIED)

    def _probe(self, args: list[str], description: str) -> str:
        """Run one diagnostic tool command.

        Raises:
            SmokeTestError: If the command cannot run or exits non-zero.
        """
        try:
            result = subprocess.run(args, capture_output=True, text=True, check=False)
        except OSError as e:
            raise SmokeTestError(f"{description} failed: {e}") from e
        if result.returncode != 0:
            detail = (result.stderr or result.stdout or "").strip()
            message = f"{description} failed (exit {result.returncode})"
            raise SmokeTestError(f"{message}: {detail}" if detail else message)
        return result.stdout.strip()

    def smoke_test(self) -> None:
        logger.info("Testing Claude Code functionality...")
        probes: list[tuple[list[str], str]] = [
            ([TOOL_COMMAND, "--version"], "Claude Code version check"),
        ]
        probes.extend(
            ([TOOL_COMMAND, "config", "set", flag, "true"], f"Setting {flag}")
            for flag in TOOL_CLI_FLAGS
        )
        probes.append(([TOOL_COMMAND, "config", "show"], "Claude Code configuration access"))

        for args, description in probes:
            try:
                output = self._probe(args, description)
            except SmokeTestError as e:
                self._warn(str(e))
                continue
            if args[1:] == ["--version"]:
                logger.info("%s successful: %s", description, output or "unknown")
            else:
                logger.debug("%s successful", description)
        self._advance(BootstrapState.SMOKE_TESTED)

    def prepare_tool_dirs(self) -> None:
        """Create the directories the tool expects to exist (best effort)."""
        dirs = [self.config.home / TOOL_HOME_DIR_NAME]
        if self.config.amplifier_dir is not None:
            dirs.insert(0, self.config.amplifier_dir / TOOL_DATA_DIR_NAME)
        for path in dirs:
            try:
                path.mkdir(parents=True, exist_ok=True)
            except OSError as e:
                self._warn(f"Cannot create {path}: {e}")

    def exec_tool(self) -> NoReturn:
        """Replace this process with the interactive tool. Never returns."""
        self._advance(BootstrapState.EXEC)
        self.prepare_tool_dirs()
        amplifier_dir = self.config.amplifier_dir
        if amplifier_dir is not None and amplifier_dir.is_dir():
            try:
                os.chdir(amplifier_dir)
            except OSError as e:
                self._warn(f"Cannot change to {amplifier_dir}: {e}")

        argv = build_tool_argv(self.config.target_dir)
        logger.info("Starting Claude Code in %s", self.config.target_dir)
        flush_all()
        os.execvp(argv[0], argv)
        # Unreachable unless execvp is replaced
        raise RuntimeError("os.execvp returned")

    def run(self) -> NoReturn:
        self.check_env()
        self.write_config()
        self.verify_config()
        self.smoke_test()
        self.exec_tool()


def _attach_log_file(config: BootstrapConfig) -> None:
    try:
        add_phase_log_file(config.log_dir, "entrypoint")
    except OSError as e:
        logger.warning("Cannot write log file under %s: %s", config.log_dir, e)


def main() -> int:
    """Entrypoint. Only returns when bootstrapping fails."""
    set_console_level(logging.INFO)
    config = BootstrapConfig.from_env()
    _attach_log_file(config)

    logger.info("Starting Amplifier container")
    logger.info("Target project: %s", config.target_dir)
    logger.info("Amplifier data: %s", config.data_dir)
    logger.debug("HOME=%s PWD=%s", config.home, os.getcwd())

    try:
        Bootstrapper(config).run()
    except AmpboxError as e:
        logger.error("ERROR: %s", e)
        if e.hint:
            logger.error("Hint: %s", e.hint)
        return 1
    except OSError as e:
        logger.error("ERROR: cannot start %s: %s", TOOL_COMMAND, e)
        return 127


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
