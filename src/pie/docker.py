"""Docker operations for pie.

One-shot docker CLI calls with consistent error handling, separated from
the run lifecycle and the CLI for better modularity.
"""

from __future__ import annotations

import subprocess
from typing import TYPE_CHECKING

from .constants import DOCKER_COMMAND_TIMEOUT
from .errors import ContainerError, DockerError, DockerNotFoundError, DockerTimeoutError
from .logging import get_logger

logger = get_logger(__name__)

if TYPE_CHECKING:
    from collections.abc import Sequence

__all__ = [
    "DockerError",
    "DockerNotFoundError",
    "DockerTimeoutError",
    "safe_docker_run",
    "check_docker_status",
    "stop_container",
    "remove_container",
    "list_container_rows",
]

# Tab-separated so status text with spaces stays one field
PS_FORMAT = "{{.Names}}\t{{.ID}}\t{{.Status}}"


def safe_docker_run(
    cmd: Sequence[str],
    *,
    timeout: float | None = DOCKER_COMMAND_TIMEOUT,
    capture_output: bool = True,
    check: bool = False,
) -> subprocess.CompletedProcess[str]:
    """Run a Docker command with consistent error handling.

    Args:
        cmd: Command to run (should start with 'docker').
        timeout: Command timeout in seconds, None to wait indefinitely.
        capture_output: Capture stdout/stderr if True, inherit them otherwise.
        check: Raise CalledProcessError on non-zero exit.

    Returns:
        CompletedProcess with command result.

    Raises:
        DockerNotFoundError: If docker command is not found.
        DockerTimeoutError: If command times out.
        subprocess.CalledProcessError: If check=True and command fails.
    """
    cmd_str = " ".join(cmd[:4]) + ("..." if len(cmd) > 4 else "")
    logger.debug("Running Docker command: %s", cmd_str)
    try:
        result = subprocess.run(
            cmd,
            capture_output=capture_output,
            text=True,
            check=check,
            timeout=timeout,
        )
        logger.debug("Docker command completed: exit=%d", result.returncode)
        return result
    except FileNotFoundError as e:
        logger.error("Docker not found in PATH: %s", cmd_str)
        raise DockerNotFoundError(f"Docker not found in PATH. Command: {cmd_str}") from e
    except subprocess.TimeoutExpired as e:
        logger.error("Docker command timed out after %ss: %s", timeout, cmd_str)
        raise DockerTimeoutError(
            f"Docker command timed out after {timeout}s. Command: {cmd_str}"
        ) from e


def check_docker_status() -> bool:
    """Check if Docker daemon is responsive.

    Returns:
        True if Docker is running and responsive, False otherwise.
    """
    try:
        result = safe_docker_run(["docker", "info"])
        return result.returncode == 0
    except (DockerNotFoundError, DockerTimeoutError):
        return False


def stop_container(container_name: str) -> subprocess.CompletedProcess[str]:
    """Stop a container. The caller decides whether failure matters."""
    return safe_docker_run(["docker", "stop", container_name])


def remove_container(container_name: str, *, force: bool = False) -> bool:
    """Remove a Docker container.

    Args:
        container_name: Container name or ID to remove.
        force: Force removal of a running container if True.

    Returns:
        True if container was removed, False otherwise.
    """
    cmd = ["docker", "rm"]
    if force:
        cmd.append("-f")
    cmd.append(container_name)
    result = safe_docker_run(cmd)
    if result.returncode != 0:
        logger.debug("docker rm %s failed: %s", container_name, result.stderr.strip())
    return result.returncode == 0


def list_container_rows() -> str:
    """Return raw ``docker ps -a`` output in PS_FORMAT.

    Raises:
        ContainerError: If the listing command fails.
    """
    result = safe_docker_run(["docker", "ps", "-a", "--format", PS_FORMAT])
    if result.returncode != 0:
        detail = (result.stderr or result.stdout or "").strip()
        raise ContainerError(
            f"Error listing Docker containers: {detail or 'unknown error'}", result.returncode
        )
    return result.stdout
