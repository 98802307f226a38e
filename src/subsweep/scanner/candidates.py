"""Candidate generation - wordlist entries joined to the base domain.

Duplicates in the wordlist are kept on purpose: the resolution cache makes
them free, and preserving order keeps batches predictable.
"""

import logging
from pathlib import Path
from typing import Iterable, List

from subsweep.util.errors import PreconditionError
from subsweep.util.io import read_text_lines

logger = logging.getLogger(__name__)


def normalize_domain(domain: str) -> str:
    """Trim, lowercase and drop the trailing dot: "Example.COM." -> "example.com"."""
    return domain.strip().strip(".").lower()


def load_wordlist(path) -> List[str]:
    """Read a wordlist: one prefix per line, trimmed, blank lines skipped.

    Raises PreconditionError if the file can't be read or has no entries.
    """
    path = Path(path)
    try:
        words = read_text_lines(path)
    except OSError as e:
        raise PreconditionError(f"Error loading wordlist file {path}: {e}")

    if not words:
        raise PreconditionError(f"Wordlist file {path} contains no entries")

    logger.info(f"Loaded {len(words)} words from {path}")
    return words


def build_candidates(words: Iterable[str], domain: str) -> List[str]:
    """Join each word to the domain: ["www", "mail"] -> ["www.example.com", ...]."""
    domain = normalize_domain(domain)
    candidates = []
    for word in words:
        word = word.strip().strip(".").lower()
        if word:
            candidates.append(f"{word}.{domain}")
    return candidates
