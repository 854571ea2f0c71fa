"""Constants module for pie.

Fixed names, paths and timeout values are defined here (SSOT).
"""

from __future__ import annotations

# === Project files ===
CONFIG_FILE = "pie.yml"  # Declarative project file (overridable with --file)
DEPS_FILE = "PieDeps.txt"  # Generated by the import scanner
BUILD_DIR = ".pie"  # Hidden directory for generated artifacts
BUILD_FILE = f"{BUILD_DIR}/Piefile"  # Synthesized build file

# === Defaults ===
DEFAULT_PYTHON = "latest"  # Python image tag when nothing else is configured
DEFAULT_ENTRY = "main.py"  # Entry file when neither flag nor pie.yml names one
SOURCE_SUFFIX = ".py"  # Files read by the import scanner

# === Build file template ===
BASE_IMAGE = "python"  # FROM python:<version>-slim
APP_ROOT = "/app"
PACKAGE_MANAGER = "pip"
INTERPRETER = "python"

# === Docker naming ===
IMAGE_TAG = "pie-runner"
CONTAINER_PREFIX = "pie"  # Containers are named pie-<suffix>
SUFFIX_LENGTH = 6
ID_DISPLAY_WIDTH = 10  # Truncated container ID in `pie list`

# === Docker Timeouts (seconds) ===
# Build and run have no timeout: they block until docker returns or the user interrupts.
DOCKER_COMMAND_TIMEOUT = 30  # Quick docker commands (info, stop, rm, ps)
PROCESS_TERM_TIMEOUT = 3.0  # Wait for the docker client after stop before SIGKILL

# === pie init ===
INIT_TEMPLATE = """main: main.py
python: "3.12"
# You can specify a dependency file, or list your dependencies here
# deps_file: requirements.txt
dependencies:
  - pandas
  - numpy
"""
