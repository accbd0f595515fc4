"""Constants module for ampbox.

Container paths, variable names and shared defaults are defined here (SSOT).
"""

from __future__ import annotations

# === Credential ===
TOKEN_ENV_VAR = "CLAUDE_CODE_OAUTH_TOKEN"
MIN_TOKEN_LENGTH = 20  # Shorter tokens only trigger a warning
MASK_VISIBLE_CHARS = 4  # Trailing characters shown when masking the token

# === Host defaults ===
DEFAULT_DATA_DIR = "./amplifier-data"
DEFAULT_IMAGE = "amplifier-claude"
CONTAINER_NAME_PREFIX = "amplifier"
BUILD_DIR_NAME = ".ampbox-build"  # Created inside the data dir

# === Container paths ===
CONTAINER_TARGET_DIR = "/workspace"
CONTAINER_DATA_DIR = "/app/amplifier-data"
CONTAINER_AMPLIFIER_DIR = "/app/amplifier"
CONTAINER_PACKAGE_DIR = "/opt/ampbox"

# === Container environment contract ===
TARGET_DIR_ENV_VAR = "TARGET_DIR"
DATA_DIR_ENV_VAR = "AMPLIFIER_DATA_DIR"
AMPLIFIER_DIR_ENV_VAR = "AMPLIFIER_DIR"

# === Mount probe (warning-only preflight check) ===
MOUNT_PROBE_IMAGE = "alpine:latest"
MOUNT_PROBE_PATH = "/probe"
MOUNT_PROBE_TIMEOUT = 120  # Seconds; includes a possible image pull

# === Interactive tool ===
TOOL_COMMAND = "claude"
TOOL_CONFIG_FILENAME = ".claude.json"
TOOL_PERMISSION_MODE = "acceptEdits"
# Directories the tool expects at start
TOOL_DATA_DIR_NAME = ".data"  # Under AMPLIFIER_DIR
TOOL_HOME_DIR_NAME = "amplifier"  # Under HOME

# === Logging ===
LOG_DIR_NAME = "logs"
LOG_RETENTION_DAYS = 7
