"""Run workflow for pie.

Resolve config, scan imports if needed, write the build file, build the
image and run the container. Each step runs only if the previous one
succeeded.
"""

from __future__ import annotations

from pathlib import Path

from rich.panel import Panel

from .. import scanner
from ..config import ProjectConfig, load_project_document, resolve_config
from ..constants import BUILD_FILE, DEPS_FILE, IMAGE_TAG
from ..errors import DockerNotRunningError
from ..generator import write_build_file
from ..lifecycle import RunResult, build_image, run_container
from ..logging import get_logger
from ..run_config import RunOptions
from .utils import ERR_DOCKER_NOT_RUNNING, check_docker, console

logger = get_logger(__name__)


def prepare(options: RunOptions, root: str | Path = ".") -> tuple[ProjectConfig, Path]:
    """Resolve the configuration and write the build file.

    Returns:
        The final ProjectConfig and the path of the written build file.
    """
    document = load_project_document(options.config_file)
    config = resolve_config(options, document)

    if config.needs_scan:
        console.print("[dim]No dependencies configured, scanning imports...[/dim]")
        count = scanner.scan(root, Path(root) / DEPS_FILE)
        console.print(f"[dim]Found {count} import(s), written to {DEPS_FILE}[/dim]")
        config = config.with_dependency_file(DEPS_FILE)

    build_file = write_build_file(config, Path(root) / BUILD_FILE)
    return config, build_file


def run(options: RunOptions, root: str | Path = ".") -> RunResult:
    """Run a Python script in a fresh container.

    Raises:
        PieError: On any fatal step (config, scan, synthesis, build, run).
    """
    logger.info("Starting run workflow: options=%s", options)
    config, build_file = prepare(options, root)

    if not check_docker():
        raise DockerNotRunningError(ERR_DOCKER_NOT_RUNNING)

    console.print(
        Panel.fit(
            f"[bold]{config.entry_file}[/bold] → python:{config.runtime_version}-slim",
            border_style="blue",
        )
    )

    console.print(f"[dim]Building {IMAGE_TAG}...[/dim]")
    build_image(build_file, tag=IMAGE_TAG, context=root, verbose=options.verbose)

    return run_container(IMAGE_TAG, name=options.name, dispose=options.dispose)
