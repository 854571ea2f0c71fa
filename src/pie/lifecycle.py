"""Container lifecycle for pie: build the image, run it, tear it down.

The run step races two things: the foreground wait on the attached
``docker run`` client and SIGINT/SIGTERM from the environment. Whichever
fires first decides the shutdown path:

- signal first: best-effort ``docker stop`` + ``docker rm``, exit status 0
- child first: normal exit (``--rm`` handles dispose mode), or a failure

A ShutdownGuard makes the decision exactly once, so cleanup never runs twice
and a second Ctrl+C during cleanup is ignored. A signal handled after the
child was already collected changes nothing.
"""

from __future__ import annotations

import secrets
import signal
import string
import subprocess
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Callable

from rich.console import Console

from .constants import (
    CONTAINER_PREFIX,
    IMAGE_TAG,
    PROCESS_TERM_TIMEOUT,
    SUFFIX_LENGTH,
)
from .docker import remove_container, safe_docker_run, stop_container
from .errors import (
    ContainerError,
    DockerError,
    DockerNotFoundError,
    ImageBuildError,
    ValidationError,
)
from .logging import get_logger

if TYPE_CHECKING:
    from collections.abc import Sequence
    from pathlib import Path

console = Console(stderr=True)
logger = get_logger(__name__)

SHUTDOWN_SIGNALS = (signal.SIGINT, signal.SIGTERM)

# Exit statuses that mean "the child went down with one of our signals":
# negative for the docker client itself, 128+n when docker relays it.
GRACEFUL_EXIT_CODES = frozenset(
    [-int(sig) for sig in SHUTDOWN_SIGNALS] + [128 + int(sig) for sig in SHUTDOWN_SIGNALS]
)

SUFFIX_ALPHABET = string.ascii_lowercase + string.digits

NameGenerator = Callable[[], str]


def random_suffix(length: int = SUFFIX_LENGTH) -> str:
    """Generate a lowercase alphanumeric container-name suffix."""
    return "".join(secrets.choice(SUFFIX_ALPHABET) for _ in range(length))


def container_name(suffix: str) -> str:
    """Get the Docker container name for a suffix (pie-<suffix>)."""
    return f"{CONTAINER_PREFIX}-{suffix}"


@dataclass
class CleanupOutcome:
    """What happened during interrupt-driven teardown.

    Failures are recorded here and logged, never raised: a fault during
    cleanup must not replace the shutdown that triggered it.
    """

    stopped: bool = False
    removed: bool = False
    errors: list[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors


@dataclass(frozen=True)
class RunResult:
    """Outcome of a supervised container run."""

    name: str
    returncode: int | None
    interrupted: bool = False
    signal: int | None = None
    cleanup: CleanupOutcome | None = None


class _ShutdownRequested(BaseException):
    """Raised from the signal handler into the waiting frame."""

    def __init__(self, signum: int) -> None:
        super().__init__(signum)
        self.signum = signum


class ShutdownGuard:
    """Installs SIGINT/SIGTERM handlers and decides the shutdown path once.

    The first signal raises _ShutdownRequested unless the child already
    finished (``settle()`` was called). Every later signal is ignored until
    ``restore()`` puts the previous handlers back.
    """

    def __init__(self, signals: Sequence[signal.Signals] = SHUTDOWN_SIGNALS) -> None:
        self.signals = tuple(signals)
        self._previous: dict[signal.Signals, Any] = {}
        self._settled = False

    def install(self) -> None:
        for sig in self.signals:
            self._previous[sig] = signal.signal(sig, self._handle)

    def settle(self) -> None:
        """Mark the race as decided in favour of the child."""
        self._settled = True

    def restore(self) -> None:
        for sig, handler in self._previous.items():
            signal.signal(sig, handler)
        self._previous.clear()

    def _handle(self, signum: int, frame: object) -> None:
        if self._settled:
            logger.debug("Ignoring signal %d: shutdown already decided", signum)
            return
        self._settled = True
        raise _ShutdownRequested(signum)


def shutdown_container(name: str, *, remove: bool = True) -> CleanupOutcome:
    """Stop (and optionally remove) a container, swallowing failures.

    Each command is attempted exactly once regardless of the other's result.
    """
    outcome = CleanupOutcome()

    try:
        result = stop_container(name)
        outcome.stopped = result.returncode == 0
        if not outcome.stopped:
            outcome.errors.append(f"docker stop {name}: {(result.stderr or '').strip()}")
    except (DockerError, OSError) as e:
        outcome.errors.append(f"docker stop {name}: {e}")

    if remove:
        try:
            outcome.removed = remove_container(name)
            if not outcome.removed:
                outcome.errors.append(f"docker rm {name} failed")
        except (DockerError, OSError) as e:
            outcome.errors.append(f"docker rm {name}: {e}")

    for error in outcome.errors:
        logger.warning("Cleanup: %s", error)
    return outcome


def _reap(proc: subprocess.Popen[bytes] | None) -> None:
    """Collect the docker client after teardown, killing it if it lingers."""
    if proc is None:
        return
    try:
        proc.wait(timeout=PROCESS_TERM_TIMEOUT)
    except subprocess.TimeoutExpired:
        logger.debug("docker client still running after stop, killing pid %d", proc.pid)
        proc.kill()
        proc.wait()


def _supervise(
    cmd: list[str],
    name: str,
    on_interrupt: Callable[[str], CleanupOutcome],
) -> RunResult:
    """Run an attached docker command under the shutdown guard."""
    guard = ShutdownGuard()
    proc: subprocess.Popen[bytes] | None = None
    try:
        # Handlers go in before launch so no signal is missed
        guard.install()
        logger.debug("Running: %s", " ".join(cmd))
        try:
            proc = subprocess.Popen(cmd)
        except FileNotFoundError as e:
            raise DockerNotFoundError("Docker not found in PATH") from e
        returncode = proc.wait()
        guard.settle()
    except _ShutdownRequested as request:
        if proc is not None and proc.returncode is not None:
            # The child exited before the signal was handled
            logger.debug("Signal %d after %s exited, ignoring", request.signum, name)
            returncode = proc.returncode
        else:
            return _interrupted(name, proc, request.signum, on_interrupt)
    finally:
        guard.restore()

    if returncode in GRACEFUL_EXIT_CODES:
        logger.debug("Container %s ended by signal (exit %d)", name, returncode)
        return RunResult(name=name, returncode=returncode, signal=abs(returncode) % 128)
    if returncode != 0:
        raise ContainerError(
            f"Error running Docker container {name}: exit status {returncode}", returncode
        )
    return RunResult(name=name, returncode=returncode)


def _interrupted(
    name: str,
    proc: subprocess.Popen[bytes] | None,
    signum: int,
    on_interrupt: Callable[[str], CleanupOutcome],
) -> RunResult:
    """Tear down after a signal won the race against the child."""
    console.print("\n[dim]Stopping container...[/dim]")
    outcome = on_interrupt(name)
    _reap(proc)
    if outcome.removed:
        console.print("[dim]Container stopped and removed.[/dim]")
    elif outcome.stopped:
        console.print("[dim]Container stopped.[/dim]")
    return RunResult(
        name=name,
        returncode=proc.returncode if proc is not None else None,
        interrupted=True,
        signal=signum,
        cleanup=outcome,
    )


def build_image(
    build_file: str | Path,
    *,
    tag: str = IMAGE_TAG,
    context: str | Path = ".",
    verbose: bool = False,
) -> str:
    """Build the image from a generated build file.

    Args:
        build_file: Path to the build file.
        tag: Image tag to build.
        context: Build context directory.
        verbose: Stream docker output to the terminal instead of capturing it.

    Returns:
        The built image tag.

    Raises:
        ImageBuildError: If docker build fails.
    """
    cmd = ["docker", "build", "-t", tag, "-f", str(build_file), str(context)]
    result = safe_docker_run(cmd, timeout=None, capture_output=not verbose)

    if result.returncode != 0:
        message = f"Error building Docker image {tag}: exit status {result.returncode}"
        if not verbose:
            output = (result.stdout or "") + (result.stderr or "")
            logger.debug("docker build output:\n%s", output)
            lines = [line for line in output.splitlines() if line.strip()]
            if lines:
                message += f" ({lines[-1].strip()})"
            message += "; run with --verbose for the full build output"
        raise ImageBuildError(message)

    logger.info("Built %s", tag)
    return tag


def run_container(
    image: str = IMAGE_TAG,
    *,
    name: str | None = None,
    dispose: bool = False,
    name_generator: NameGenerator = random_suffix,
) -> RunResult:
    """Start a container attached to this process and wait for it.

    Args:
        image: Image to run.
        name: Fixed suffix; a random one from name_generator otherwise.
        dispose: Remove the container when its process exits (``--rm``).
        name_generator: Suffix factory, injectable for tests.

    Returns:
        RunResult. ``interrupted`` is set when a signal triggered teardown.

    Raises:
        ContainerError: If the container exits with a non-signal failure.
    """
    full_name = container_name(name or name_generator())

    cmd = ["docker", "run", "--name", full_name]
    if dispose:
        cmd.append("--rm")
    cmd.append(image)

    return _supervise(cmd, full_name, shutdown_container)


def _stop_only(name: str) -> CleanupOutcome:
    return shutdown_container(name, remove=False)


def reattach(identifier: str) -> RunResult:
    """Restart a previous container by its 6-character suffix and attach.

    An interrupt stops the container but leaves it resident.

    Raises:
        ValidationError: If the identifier is not exactly 6 characters.
            No docker command runs in that case.
        ContainerError: If the container cannot be started or fails.
    """
    if len(identifier) != SUFFIX_LENGTH:
        raise ValidationError(f"The ID must be exactly {SUFFIX_LENGTH} characters long.")

    name = container_name(identifier)
    console.print(f"[dim]Attempting to run Pie container: {name}[/dim]")

    # Idempotent: a container that is not running just reports an error
    try:
        stop_container(name)
    except DockerError as e:
        logger.debug("Pre-start stop of %s failed: %s", name, e)

    return _supervise(["docker", "start", "-a", name], name, _stop_only)
