"""File I/O utilities.

Helpers for reading wordlists and writing results. Unlike probe code, these
let OSError propagate - callers decide whether a failure is fatal.
"""

import json
import logging
from pathlib import Path
from typing import Any, Iterable, List

logger = logging.getLogger(__name__)


def ensure_dir(path: Path) -> Path:
    """Ensure directory exists, create if needed. Returns the path."""
    path = Path(path)
    path.mkdir(parents=True, exist_ok=True)
    return path


def write_json(path: Path, data: Any, indent: int = 2) -> None:
    """Write data to JSON file."""
    path = Path(path)
    ensure_dir(path.parent)

    with open(path, 'w', encoding='utf-8') as f:
        json.dump(data, f, indent=indent, default=str)
    logger.debug(f"Wrote JSON to {path}")


def read_text_lines(path: Path) -> List[str]:
    """Read text file and return non-empty lines, stripped.

    Useful for wordlists, domain lists, etc.
    """
    with open(path, 'r', encoding='utf-8', errors='replace') as f:
        return [line.strip() for line in f if line.strip()]


def write_lines(path: Path, lines: Iterable[str], terminator: str = "") -> int:
    """Write each entry followed by terminator and a newline.

    Returns the number of lines written.
    """
    path = Path(path)
    if path.parent != Path('.'):
        ensure_dir(path.parent)

    count = 0
    with open(path, 'w', encoding='utf-8') as f:
        for line in lines:
            f.write(f"{line}{terminator}\n")
            count += 1
    logger.debug(f"Wrote {count} lines to {path}")
    return count
