"""Run operations for ampbox.

Handles the launch workflow: preflight, image provisioning, composition and
container execution.
"""

from __future__ import annotations

import shlex

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel

from .. import docker
from ..composer import ContainerLaunchSpec, compose
from ..constants import CONTAINER_TARGET_DIR, LOG_DIR_NAME
from ..errors import AmpboxError
from ..logging import add_phase_log_file, get_logger, set_debug
from ..paths import detect_host_environment
from ..preflight import validate
from ..run_config import LaunchRequest, ValidatedRequest
from .build import ensure_image
from .utils import print_error, print_warning

console = Console()
logger = get_logger(__name__)


def diagnose_container_failure(returncode: int, container_name: str) -> None:
    """Diagnose container failure and provide actionable feedback.

    Args:
        returncode: Container exit code.
        container_name: Name given to the container.
    """
    # Known exit codes
    if returncode == 125:
        console.print("[yellow]Docker could not start the container[/yellow]")
        console.print("[dim]Check the docker error above (image, mounts, name conflict)[/dim]")
        return
    if returncode == 137:
        console.print("[yellow]Container was killed (OOM or manual stop)[/yellow]")
        return
    if returncode == 139:
        console.print("[yellow]Container crashed (segmentation fault)[/yellow]")
        return
    if returncode == 143:
        console.print("[dim]Container terminated by signal[/dim]")
        return

    # Check Docker daemon health
    if not docker.check_docker_status():
        console.print("[red]Docker daemon is not responding[/red]")
        console.print("[dim]Docker may have restarted or crashed during session[/dim]")
        return

    console.print(
        f"[yellow]Container {escape(container_name)} exited with code {returncode}[/yellow]"
    )
    console.print(f"[dim]Entrypoint logs are kept in <data dir>/{LOG_DIR_NAME}[/dim]")


def _attach_launcher_log(validated: ValidatedRequest) -> None:
    log_dir = validated.data_dir / LOG_DIR_NAME
    try:
        add_phase_log_file(log_dir, "launcher")
    except OSError as e:
        print_warning(f"Cannot write launcher log under {log_dir}: {e}")


def execute_container(spec: ContainerLaunchSpec) -> int:
    """Run the composed container and return its exit code verbatim."""
    logger.info("Running: %s", shlex.join(spec.to_display_command()))
    console.print("[dim]Starting Claude Code...[/dim]\n")
    try:
        return docker.run_interactive(spec.to_command())
    except KeyboardInterrupt:
        return 130  # Standard Ctrl+C code


def launch(request: LaunchRequest) -> int:
    """Run the whole launch workflow.

    Returns:
        Process exit code: 0 on success, 1 on validation or provisioning
        failure, otherwise the container's own exit code.
    """
    if request.debug:
        set_debug(True)

    env = detect_host_environment()
    logger.info(
        "Launch requested: target=%s, data=%s, env=%s",
        request.target_path,
        request.data_dir,
        env.value,
    )

    try:
        validated = validate(request, env)
    except AmpboxError as e:
        print_error(e)
        return 1

    _attach_launcher_log(validated)
    for warning in validated.warnings:
        print_warning(warning)
        logger.info("Preflight warning: %s", warning)

    spec = compose(validated, env)

    console.print()
    console.print(
        Panel.fit(
            f"[bold]{escape(validated.target_path.name)}[/bold] → {escape(spec.image)}\n"
            f"[dim]{escape(str(validated.target_path))} → {CONTAINER_TARGET_DIR}[/dim]",
            border_style="blue",
        )
    )

    if request.dry_run:
        console.print(
            shlex.join(spec.to_display_command()), markup=False, highlight=False, soft_wrap=True
        )
        return 0

    try:
        ensure_image(spec.image, validated.data_dir, rebuild=request.rebuild)
        returncode = execute_container(spec)
    except AmpboxError as e:
        print_error(e)
        return 1

    # 0 = success, 130 = Ctrl+C
    if returncode not in (0, 130):
        diagnose_container_failure(returncode, spec.container_name)
    return returncode
