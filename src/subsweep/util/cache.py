"""In-memory cache for resolution outcomes.

Avoids hitting DNS twice for the same name within a run. Lives only as long
as the scan - nothing touches disk.
"""

import threading
from typing import Dict, Optional

from .types import ResolutionOutcome


class ResolutionCache:
    """Thread-safe map of candidate name -> ResolutionOutcome.

    One coarse lock guards every read and write.
    """

    def __init__(self):
        """Initialize an empty cache."""
        self._entries: Dict[str, ResolutionOutcome] = {}
        self._lock = threading.Lock()
        self._hits = 0
        self._misses = 0

    def get(self, name: str) -> Optional[ResolutionOutcome]:
        """Return the cached outcome for name, or None on a miss."""
        with self._lock:
            outcome = self._entries.get(name)
            if outcome is None:
                self._misses += 1
            else:
                self._hits += 1
            return outcome

    def put(self, name: str, outcome: ResolutionOutcome) -> ResolutionOutcome:
        """Store outcome for name unless one is already there.

        First write wins; returns whichever outcome ends up cached.
        """
        with self._lock:
            return self._entries.setdefault(name, outcome)

    def __contains__(self, name: str) -> bool:
        with self._lock:
            return name in self._entries

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def stats(self) -> Dict[str, int]:
        """Get cache statistics."""
        with self._lock:
            resolved = sum(1 for o in self._entries.values() if o.is_resolved)
            return {
                'entries': len(self._entries),
                'resolved': resolved,
                'unresolved': len(self._entries) - resolved,
                'hits': self._hits,
                'misses': self._misses,
            }
