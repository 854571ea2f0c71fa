"""Read-only view of the containers pie has created."""

from __future__ import annotations

from dataclasses import dataclass

from . import docker
from .constants import CONTAINER_PREFIX, ID_DISPLAY_WIDTH
from .errors import DockerError
from .logging import get_logger

logger = get_logger(__name__)

NAME_PREFIX = f"{CONTAINER_PREFIX}-"


@dataclass(frozen=True)
class ContainerRow:
    """One pie container as shown by ``pie list``."""

    name: str  # suffix only, prefix stripped
    short_id: str
    status: str


def parse_rows(output: str) -> list[ContainerRow]:
    """Parse ``docker ps -a`` output in docker.PS_FORMAT.

    Rows for containers without the pie- prefix are dropped. Rows with the
    wrong number of fields are skipped with a warning.
    """
    rows: list[ContainerRow] = []
    for line in output.strip().splitlines():
        if not line.startswith(NAME_PREFIX):
            continue
        parts = line.split("\t", 2)
        if len(parts) != 3:
            logger.warning("Unexpected Docker output format for line: %s", line)
            continue
        name, container_id, status = parts
        rows.append(
            ContainerRow(
                name=name[len(NAME_PREFIX) :],
                short_id=container_id[:ID_DISPLAY_WIDTH],
                status=status,
            )
        )
    return rows


def list_containers() -> list[ContainerRow]:
    """List every pie container, running or not.

    Raises:
        ContainerError: If docker ps fails.
    """
    return parse_rows(docker.list_container_rows())


def remove_containers() -> int:
    """Force-remove all pie containers (running + stopped).

    Returns:
        Number of containers removed.
    """
    removed = 0
    for row in list_containers():
        name = NAME_PREFIX + row.name
        try:
            if docker.remove_container(name, force=True):
                removed += 1
        except DockerError as e:
            logger.warning("Could not remove %s: %s", name, e)
    return removed
