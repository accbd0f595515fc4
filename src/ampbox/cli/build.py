"""Build operations for ampbox.

Makes sure the launch image exists before a container is started.
"""

from __future__ import annotations

from pathlib import Path

from rich.console import Console
from rich.markup import escape

from .. import docker
from ..composer import write_build_files
from ..constants import BUILD_DIR_NAME
from ..errors import ImageBuildError
from ..logging import get_logger

console = Console()
logger = get_logger(__name__)


def get_build_dir(data_dir: Path) -> Path:
    """Build context location (inside the data directory, never the project)."""
    return data_dir / BUILD_DIR_NAME


def ensure_image(image: str, data_dir: Path, *, rebuild: bool = False) -> bool:
    """Build the launch image if it is missing or a rebuild was requested.

    Returns:
        True if a build ran, False if the existing image was reused.

    Raises:
        ImageBuildError: If the build fails.
    """
    if not rebuild and docker.image_exists(image):
        console.print(f"[dim]Using existing image: {escape(image)}[/dim]")
        return False

    build_dir = write_build_files(get_build_dir(data_dir))
    console.print(f"[bold]Building image {escape(image)}...[/bold]")
    logger.info("Build context written to %s", build_dir)

    if not docker.build_image(image, build_dir):
        raise ImageBuildError(
            f"Failed to build image {image}",
            hint=f"Inspect the build output above; the build context is in {build_dir}.",
        )
    console.print(f"[green]✓ Built {escape(image)}[/green]")
    return True
