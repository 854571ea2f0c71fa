"""Import scanning for projects without a configured dependency source.

Walks the project tree, pulls the top-level module name out of every
``import x`` / ``from x`` line and writes them to PieDeps.txt so the build
file can install them with ``pip install -r``.

Names are kept in visitation order (directories and files in lexical order,
then line order) and are neither sorted nor deduplicated.
"""

from __future__ import annotations

import os
import re
from pathlib import Path
from typing import TYPE_CHECKING

from .constants import DEPS_FILE, SOURCE_SUFFIX
from .errors import ScanError
from .logging import get_logger

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator

logger = get_logger(__name__)

# Keyword at column 0, then the first identifier (one match per line).
IMPORT_PATTERN = re.compile(r"^(?:import|from)[ \t]+([A-Za-z_][A-Za-z0-9_]*)", re.MULTILINE)


def extract_imports(text: str) -> list[str]:
    """Return the module named by each import line of a source text."""
    return IMPORT_PATTERN.findall(text)


def _walk_error(error: OSError) -> None:
    raise ScanError(f"Error reading {error.filename}: {error}") from error


def iter_source_files(root: Path) -> Iterator[Path]:
    """Yield source files under root in lexical walk order.

    Raises:
        ScanError: If root or any directory below it cannot be listed.
    """
    for dirpath, dirnames, filenames in os.walk(root, onerror=_walk_error):
        dirnames.sort()
        for filename in sorted(filenames):
            if filename.endswith(SOURCE_SUFFIX):
                yield Path(dirpath) / filename


def scan_imports(root: str | Path) -> list[str]:
    """Collect imported module names from every source file under root.

    Raises:
        ScanError: If any source file cannot be read. The whole scan is
            aborted rather than skipping the file.
    """
    names: list[str] = []
    for path in iter_source_files(Path(root)):
        try:
            text = path.read_text(encoding="utf-8", errors="replace")
        except OSError as e:
            raise ScanError(f"Error reading {path}: {e}") from e
        found = extract_imports(text)
        logger.debug("Scanned %s: %d import(s)", path, len(found))
        names.extend(found)
    return names


def write_dependency_file(names: Iterable[str], path: str | Path = DEPS_FILE) -> Path:
    """Write one name per line, replacing any previous contents.

    Raises:
        ScanError: If the file cannot be written.
    """
    output = Path(path)
    content = "".join(f"{name}\n" for name in names)
    try:
        output.write_text(content, encoding="utf-8")
    except OSError as e:
        raise ScanError(f"Error writing {output}: {e}") from e
    return output


def scan(root: str | Path = ".", output: str | Path = DEPS_FILE) -> int:
    """Scan root for imports and persist them as the dependency list.

    Returns:
        Number of names written.
    """
    names = scan_imports(root)
    write_dependency_file(names, output)
    logger.info("Wrote %d dependency name(s) to %s", len(names), output)
    return len(names)
