"""Run options dataclass for pie.

Bundles CLI arguments into a single configuration object for cleaner
function signatures and easier testing.
"""

from __future__ import annotations

from dataclasses import dataclass

from .constants import CONFIG_FILE


@dataclass(frozen=True)
class RunOptions:
    """Raw command-line input for the default command.

    Immutable dataclass bundling all CLI arguments. Empty strings from the
    command line are normalized to None so "not given" has one spelling.
    """

    # Positional entry file ("." defers to pie.yml)
    entry: str | None = None

    # Declarative file location
    config_file: str = CONFIG_FILE

    # Overrides
    python_version: str | None = None
    dependencies: str | None = None
    deps_file: str | None = None

    # Runtime options
    verbose: bool = False
    dispose: bool = False
    name: str | None = None

    @classmethod
    def from_cli(
        cls,
        *,
        file: str | None = None,
        config_file: str = CONFIG_FILE,
        python_version: str | None = None,
        dependencies: str | None = None,
        deps_file: str | None = None,
        verbose: bool = False,
        dispose: bool = False,
        name: str | None = None,
    ) -> RunOptions:
        """Create RunOptions from CLI arguments."""
        return cls(
            entry=file or None,
            config_file=config_file,
            python_version=python_version or None,
            dependencies=dependencies or None,
            deps_file=deps_file or None,
            verbose=verbose,
            dispose=dispose,
            name=name or None,
        )
