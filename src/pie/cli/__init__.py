"""CLI package for pie.

This package contains the CLI commands and supporting modules:
- commands: Click command definitions (this module)
- run: Resolve, scan, synthesize, build and run workflow
- utils: Consoles, Docker checks, fatal-error reporting

``pie [FILE]`` runs the default command; ``init``, ``list``, ``run`` and
``clean`` are subcommands.
"""

from __future__ import annotations

from pathlib import Path

import click
from rich.table import Table

from .. import __version__
from ..constants import CONFIG_FILE, INIT_TEMPLATE
from ..errors import ConfigError, PieError
from ..logging import set_debug
from ..run_config import RunOptions
from .utils import console, fail

DEFAULT_COMMAND = "exec"


class DefaultCommandGroup(click.Group):
    """Group that routes to DEFAULT_COMMAND when no subcommand is named.

    ``pie script.py -p 3.11`` becomes ``pie exec script.py -p 3.11`` while
    ``pie list`` and ``pie --help`` keep their usual meaning.
    """

    def parse_args(self, ctx: click.Context, args: list[str]) -> list[str]:
        passthrough = {*ctx.help_option_names, "--version"}
        if not args or (args[0] not in self.commands and args[0] not in passthrough):
            args = [DEFAULT_COMMAND, *args]
        return super().parse_args(ctx, args)


@click.group(cls=DefaultCommandGroup)
@click.version_option(version=__version__, prog_name="pie")
def cli() -> None:
    """pie - Run Python scripts in isolated Docker containers.

    Run 'pie' in a project directory (or 'pie script.py') to build an image
    from pie.yml and run the entry file in a fresh container.
    """


@cli.command(DEFAULT_COMMAND)
@click.argument("file", required=False)
@click.option(
    "--file",
    "-f",
    "config_file",
    default=CONFIG_FILE,
    show_default=True,
    help="Specify a custom pie.yml file",
)
@click.option("--python-version", "-p", help="Specify the Python version")
@click.option(
    "--dependencies",
    "-d",
    help="Comma-separated list of dependencies, e.g. '{pandas,numpy}'",
)
@click.option("--deps-file", "-r", help="Requirements file to install from")
@click.option("--verbose", "-v", is_flag=True, help="Show full Docker build output")
@click.option("--dispose", is_flag=True, help="Remove the container after it runs")
@click.option("--name", help="Fixed container name suffix instead of a random one")
@click.option("--debug", is_flag=True, help="Enable debug logging")
def exec_cmd(
    file: str | None,
    config_file: str,
    python_version: str | None,
    dependencies: str | None,
    deps_file: str | None,
    verbose: bool,
    dispose: bool,
    name: str | None,
    debug: bool,
) -> None:
    """Run FILE (or pie.yml's main) in a new container.

    Pass '.' as FILE to use the entry file from pie.yml.
    """
    if debug:
        set_debug(True)

    options = RunOptions.from_cli(
        file=file,
        config_file=config_file,
        python_version=python_version,
        dependencies=dependencies,
        deps_file=deps_file,
        verbose=verbose,
        dispose=dispose,
        name=name,
    )

    # Lazy import: run workflow pulls in the lifecycle machinery
    from .run import run as _run

    try:
        result = _run(options)
    except PieError as e:
        fail(e)

    if result.interrupted:
        return
    if not dispose:
        console.print(f"[dim]Container {result.name} kept; 'pie list' to inspect[/dim]")


@cli.command()
@click.option(
    "--file",
    "-f",
    "config_file",
    default=CONFIG_FILE,
    show_default=True,
    help="File to create",
)
@click.option("--force", is_flag=True, help="Overwrite an existing file")
def init(config_file: str, force: bool) -> None:
    """Initialize a new Pie project (creates pie.yml)."""
    console.print("Initializing Pie project...")
    path = Path(config_file)

    if path.exists() and not force:
        fail(ConfigError(f"{path} already exists (use --force to overwrite)"))

    try:
        path.write_text(INIT_TEMPLATE, encoding="utf-8")
    except OSError as e:
        fail(ConfigError(f"Error creating {path}: {e}"))

    console.print(f"[green]✓ Created {path}[/green]")


@cli.command("list")
def list_cmd() -> None:
    """List Pie containers with their name, ID and status."""
    from ..registry import list_containers

    try:
        rows = list_containers()
    except PieError as e:
        fail(e)

    if not rows:
        console.print("[dim]No Pie containers found[/dim]")
        return

    table = Table()
    table.add_column("NAME", style="cyan")
    table.add_column("ID")
    table.add_column("STATUS", style="dim")
    for row in rows:
        table.add_row(row.name, row.short_id, row.status)
    console.print(table)


@cli.command("run")
@click.argument("container_id")
def run_cmd(container_id: str) -> None:
    """Re-attach to a container by its 6-character ID."""
    from ..lifecycle import reattach

    try:
        reattach(container_id)
    except PieError as e:
        fail(e)


@cli.command()
@click.option("--force", "-f", is_flag=True, help="Skip confirmation")
def clean(force: bool) -> None:
    """Remove all Pie containers (running + stopped)."""
    if not force and not click.confirm("Remove all Pie containers?", default=False):
        return

    from ..registry import remove_containers

    try:
        removed = remove_containers()
    except PieError as e:
        fail(e)

    console.print(f"[green]✓ Removed {removed} container(s)[/green]")


if __name__ == "__main__":  # pragma: no cover
    cli()
