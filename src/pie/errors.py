"""Unified exception hierarchy for pie.

All custom exceptions inherit from PieError for consistent error handling.
The CLI catches these and turns them into a one-line diagnostic on stderr.

Dependency direction:
    This module has NO internal dependencies (leaf module).
    It may be imported by: all other pie modules.
    It should NOT import from any other pie modules.
"""

from __future__ import annotations


class PieError(Exception):
    """Base exception for all pie errors.

    All pie-specific exceptions should inherit from this class.
    This enables consistent error handling at the CLI layer.
    """

    exit_code = 1


class ConfigError(PieError):
    """Configuration-related errors.

    Examples:
        - pie.yml is not valid YAML
        - pie.yml fields have the wrong type
        - No entry file after resolution
    """


class ScanError(PieError):
    """Dependency scanning errors.

    Raised when a source file cannot be read during an import scan or
    the generated dependency list cannot be written. Aborts the run.
    """


class SynthesisError(PieError):
    """Build file generation errors (directory or file not writable)."""


class ValidationError(PieError):
    """Input validation errors.

    Examples:
        - Re-attach identifier of the wrong length
    """


class DockerError(PieError):
    """Docker operation errors.

    Base class for all Docker-related exceptions.
    """


class DockerNotFoundError(DockerError):
    """Raised when Docker is not installed or not in PATH."""


class DockerTimeoutError(DockerError):
    """Raised when a Docker operation times out."""


class DockerNotRunningError(DockerError):
    """Raised when Docker daemon is not running."""


class ImageBuildError(DockerError):
    """Raised when Docker image build fails."""


class ContainerError(DockerError):
    """Raised when container operations fail.

    Carries the exit code of the failed docker command so the CLI can
    propagate it.
    """

    def __init__(self, message: str, exit_code: int = 1) -> None:
        super().__init__(message)
        self.exit_code = exit_code if exit_code > 0 else 1
