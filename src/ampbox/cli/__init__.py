"""CLI package for ampbox.

This package contains the CLI command and supporting modules:
- run: Launch workflow (preflight, compose, execute)
- build: Image provisioning
- utils: Console and error reporting
"""

from __future__ import annotations

import sys

# Configure UTF-8 encoding for Windows console output
# Must happen before any output, including Rich Console initialization
if sys.platform == "win32":
    if hasattr(sys.stdout, "reconfigure"):
        sys.stdout.reconfigure(encoding="utf-8", errors="replace")
    if hasattr(sys.stderr, "reconfigure"):
        sys.stderr.reconfigure(encoding="utf-8", errors="replace")

import click

from .. import __version__
from ..constants import DEFAULT_DATA_DIR, DEFAULT_IMAGE
from ..run_config import LaunchRequest

__all__ = ["cli"]


@click.command(context_settings={"help_option_names": ["-h", "--help"]})
@click.argument("target", type=click.Path(file_okay=True, dir_okay=True))
@click.argument("data_dir", required=False, default=DEFAULT_DATA_DIR, type=click.Path())
@click.option("--image", "-i", default=DEFAULT_IMAGE, show_default=True, help="Image to run")
@click.option("--rebuild", "-b", is_flag=True, help="Rebuild the image before launching")
@click.option("--dry-run", is_flag=True, help="Validate and print the docker command only")
@click.option(
    "--skip-mount-check",
    is_flag=True,
    help="Skip the throwaway-container mount check",
)
@click.option("--debug", "-d", is_flag=True, help="Verbose logging")
@click.version_option(version=__version__, prog_name="ampbox")
def cli(
    target: str,
    data_dir: str,
    image: str,
    rebuild: bool,
    dry_run: bool,
    skip_mount_check: bool,
    debug: bool,
) -> None:
    """ampbox - Run Claude Code for TARGET in an isolated Docker container.

    TARGET is the project directory mounted at /workspace. DATA_DIR
    (default ./amplifier-data) is mounted at /app/amplifier-data and keeps
    logs across runs.

    Requires the CLAUDE_CODE_OAUTH_TOKEN environment variable.
    """
    request = LaunchRequest.from_cli(
        target=target,
        data_dir=data_dir,
        image=image,
        rebuild=rebuild,
        dry_run=dry_run,
        skip_mount_check=skip_mount_check,
        debug=debug,
    )

    # Lazy import: run module pulls in docker/preflight/composer
    from .run import launch

    sys.exit(launch(request))


if __name__ == "__main__":  # pragma: no cover
    cli()
