"""Project configuration resolution for pie.

Merges command-line overrides, the declarative project file (pie.yml) and
built-in defaults into one immutable ProjectConfig.

Precedence (highest wins, no partial merge across tiers):
    python version:  --python-version > pie.yml `python` > "latest"
    dependencies:    --dependencies > --deps-file > pie.yml > none (scan)
    entry file:      positional argument (unless ".") > pie.yml `main` > main.py
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any, Union

import yaml

from .constants import DEFAULT_ENTRY, DEFAULT_PYTHON
from .errors import ConfigError
from .logging import get_logger
from .run_config import RunOptions

logger = get_logger(__name__)


@dataclass(frozen=True)
class InlineList:
    """Dependencies given as an ordered list of package names."""

    packages: tuple[str, ...]


@dataclass(frozen=True)
class FileReference:
    """Dependencies read from a requirements-style file."""

    path: str


# Exactly one of the three forms; a tagged union keeps them exclusive.
DependencySource = Union[InlineList, FileReference, None]


@dataclass(frozen=True)
class ProjectConfig:
    """Resolved configuration for one invocation."""

    entry_file: str
    runtime_version: str = DEFAULT_PYTHON
    dependency_source: DependencySource = None

    @property
    def needs_scan(self) -> bool:
        """True when no dependency source was configured anywhere."""
        return self.dependency_source is None

    def with_dependency_file(self, path: str) -> ProjectConfig:
        """Return a copy whose dependency source is the given file."""
        return replace(self, dependency_source=FileReference(path))


def load_project_document(path: str | Path) -> bytes | None:
    """Read the declarative file, or return None if it does not exist.

    Raises:
        ConfigError: If the file exists but cannot be read.
    """
    file_path = Path(path)
    try:
        return file_path.read_bytes()
    except FileNotFoundError:
        logger.debug("No project file at %s, using defaults", file_path)
        return None
    except OSError as e:
        raise ConfigError(f"Cannot read {file_path}: {e}") from e


def _optional_str(data: dict[str, Any], key: str, source: str) -> str | None:
    value = data.get(key)
    if value is None:
        return None
    if not isinstance(value, str):
        raise ConfigError(f"Invalid {source}: '{key}' must be a string")
    return value


def parse_project_document(data: bytes, source: str) -> dict[str, Any]:
    """Parse pie.yml bytes into a validated mapping.

    Unknown keys are ignored. Only the keys pie understands are returned.

    Args:
        data: Raw file contents.
        source: File name used in error messages.

    Raises:
        ConfigError: If the YAML is malformed or fields have the wrong type.
    """
    try:
        raw = yaml.safe_load(data)
    except yaml.YAMLError as e:
        raise ConfigError(f"Error parsing {source}: {e}") from e

    if raw is None:
        return {}
    if not isinstance(raw, dict):
        raise ConfigError(f"Invalid {source}: expected a mapping at the top level")

    parsed: dict[str, Any] = {}

    main = _optional_str(raw, "main", source)
    if main is not None:
        parsed["main"] = main

    python = raw.get("python")
    if python is not None:
        if isinstance(python, bool) or not isinstance(python, (str, int, float)):
            raise ConfigError(f"Invalid {source}: 'python' must be a version string")
        if not isinstance(python, str):
            # YAML reads 3.10 as the float 3.1
            python = str(python)
            logger.warning("%s: unquoted python version read as '%s'", source, python)
        parsed["python"] = python

    deps_file = _optional_str(raw, "deps_file", source)
    if deps_file is not None:
        parsed["deps_file"] = deps_file

    dependencies = raw.get("dependencies")
    if dependencies is not None:
        if not isinstance(dependencies, list) or not all(
            isinstance(dep, str) for dep in dependencies
        ):
            raise ConfigError(f"Invalid {source}: 'dependencies' must be a list of strings")
        parsed["dependencies"] = list(dependencies)

    return parsed


def parse_dependency_flag(value: str) -> list[str]:
    """Split a --dependencies value such as "{pandas,numpy}" or "pandas,numpy".

    Braces are optional. Order is preserved and blank items are dropped.
    """
    trimmed = value.strip().strip("{}")
    return [item.strip() for item in trimmed.split(",") if item.strip()]


def _inline(packages: list[str]) -> DependencySource:
    return InlineList(tuple(packages)) if packages else None


def _resolve_dependencies(options: RunOptions, document: dict[str, Any]) -> DependencySource:
    if options.dependencies:
        source = _inline(parse_dependency_flag(options.dependencies))
        # An empty list yields to an explicit --deps-file
        if source is not None or not options.deps_file:
            return source
    if options.deps_file:
        return FileReference(options.deps_file)

    source = _inline(document.get("dependencies", []))
    if source is None and document.get("deps_file"):
        source = FileReference(document["deps_file"])
    return source


def resolve_config(
    options: RunOptions,
    document: bytes | None,
    *,
    source: str | None = None,
) -> ProjectConfig:
    """Resolve the configuration for one invocation.

    Args:
        options: Command-line input.
        document: Raw pie.yml contents, or None when the file is absent.
        source: File name for diagnostics (defaults to options.config_file).

    Returns:
        The resolved ProjectConfig. Check ``needs_scan`` before synthesis.

    Raises:
        ConfigError: If pie.yml is malformed or no entry file results.
    """
    source = source or options.config_file
    parsed = parse_project_document(document, source) if document is not None else {}

    runtime_version = options.python_version or parsed.get("python") or DEFAULT_PYTHON

    entry_file = parsed.get("main", DEFAULT_ENTRY)
    if options.entry and options.entry != ".":
        entry_file = options.entry
    if not entry_file or not entry_file.strip():
        raise ConfigError(f"No entry file: pass one as an argument or set 'main' in {source}")

    config = ProjectConfig(
        entry_file=entry_file,
        runtime_version=runtime_version,
        dependency_source=_resolve_dependencies(options, parsed),
    )
    logger.debug("Resolved config: %s", config)
    return config
