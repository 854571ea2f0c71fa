"""CLI utilities for pie.

Consoles, Docker status checks and fatal-error reporting.
"""

from __future__ import annotations

import sys
from typing import NoReturn

from rich.console import Console
from rich.markup import escape

from .. import docker
from ..errors import PieError

console = Console(soft_wrap=True)
err_console = Console(stderr=True, soft_wrap=True)

ERR_DOCKER_NOT_RUNNING = "Docker is not running. Start Docker and try again."


def check_docker() -> bool:
    """Check if Docker is available and running."""
    return docker.check_docker_status()


def fail(error: PieError) -> NoReturn:
    """Print a one-line diagnostic to stderr and exit non-zero."""
    err_console.print(f"[red]Error: {escape(str(error))}[/red]", highlight=False)
    sys.exit(error.exit_code)
