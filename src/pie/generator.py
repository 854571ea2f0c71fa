"""Build file generation for pie."""

from __future__ import annotations

import json
from pathlib import Path

from .config import FileReference, InlineList, ProjectConfig
from .constants import APP_ROOT, BASE_IMAGE, BUILD_FILE, INTERPRETER, PACKAGE_MANAGER
from .errors import SynthesisError
from .logging import get_logger

logger = get_logger(__name__)


def _install_line(config: ProjectConfig) -> str | None:
    """Return the dependency RUN line, if any."""
    source = config.dependency_source
    if isinstance(source, InlineList) and source.packages:
        return f"RUN {PACKAGE_MANAGER} install {' '.join(source.packages)}"
    if isinstance(source, FileReference) and source.path:
        return f"RUN {PACKAGE_MANAGER} install -r {source.path}"
    return None


def generate_build_file(config: ProjectConfig) -> str:
    """Generate build file content for a resolved configuration.

    Output is a pure function of the config, so repeated calls are
    byte-identical.
    """
    lines = [
        f"FROM {BASE_IMAGE}:{config.runtime_version}-slim",
        f"WORKDIR {APP_ROOT}",
        "COPY . .",
    ]

    install = _install_line(config)
    if install:
        lines.append(install)

    # JSON exec form: entry file names with quotes or spaces stay intact
    lines.append(f"CMD {json.dumps([INTERPRETER, config.entry_file])}")
    return "\n".join(lines) + "\n"


def parse_entry_command(content: str) -> list[str]:
    """Return the exec-form CMD array of a generated build file.

    Raises:
        ValueError: If the content has no exec-form CMD line.
    """
    for line in reversed(content.splitlines()):
        if line.startswith("CMD "):
            command = json.loads(line[len("CMD ") :])
            if isinstance(command, list):
                return [str(part) for part in command]
    raise ValueError("No exec-form CMD line in build file")


def write_build_file(config: ProjectConfig, path: str | Path = BUILD_FILE) -> Path:
    """Write the build file, creating its directory if needed.

    Returns:
        Path to the written build file.

    Raises:
        SynthesisError: If the directory or file cannot be written.
    """
    build_file = Path(path)
    content = generate_build_file(config)

    try:
        build_file.parent.mkdir(parents=True, exist_ok=True)
        with open(build_file, "w", encoding="utf-8", newline="\n") as f:
            f.write(content)
    except OSError as e:
        raise SynthesisError(f"Error creating {build_file}: {e}") from e

    logger.debug("Wrote %s, entry command %s", build_file, parse_entry_command(content))
    return build_file
