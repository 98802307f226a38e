"""Wildcard DNS detection.

Some zones carry a wildcard record:
    *.example.com A 192.0.2.1

With one in place every brute-forced name "resolves", and the report fills
up with hosts that don't exist. Before the scan we query a handful of random
labels that certainly aren't real. If at least two resolve to a common set of
addresses, those addresses are the wildcard set, and the scheduler drops
resolved records that only point into it before any HTTP enrichment.

A single random hit isn't conclusive (could be flaky DNS), and random labels
resolving to unrelated addresses are treated as no wildcard.

RFC 4592 documents wildcard records in detail.
"""

import logging
import secrets
from typing import Callable, List, Optional, Set

from subsweep.scanner.resolver import LookupFunc, system_lookup
from subsweep.util.types import SubdomainRecord

logger = logging.getLogger(__name__)


class WildcardDetector:
    """Detects if a domain answers for arbitrary labels."""

    def __init__(self, domain: str, lookup: Optional[LookupFunc] = None,
                 num_tests: int = 5, timeout: float = 3.0):
        """Initialize wildcard detector.

        Args:
            domain: Base domain to test
            lookup: Lookup function (same one the scan uses)
            num_tests: Number of random labels to try
            timeout: Seconds per lookup
        """
        self.domain = domain
        self.lookup = lookup or system_lookup
        self.num_tests = num_tests
        self.timeout = timeout
        self.wildcard_ips: Optional[Set[str]] = None

    def has_wildcard(self) -> bool:
        if self.wildcard_ips is None:
            self._test_wildcard()
        return bool(self.wildcard_ips)

    def is_wildcard_match(self, addresses: List[str]) -> bool:
        """True if every address belongs to the wildcard set."""
        if not addresses or not self.has_wildcard():
            return False
        return all(ip in self.wildcard_ips for ip in addresses)

    def _test_wildcard(self) -> None:
        resolved = []
        for _ in range(self.num_tests):
            name = self._random_name()
            try:
                ips = set(self.lookup(name, self.timeout))
            except Exception as e:
                # NXDOMAIN is the expected answer here
                logger.debug(f"Wildcard probe {name}: {type(e).__name__}")
                continue
            if ips:
                resolved.append(ips)

        self.wildcard_ips = set()
        if len(resolved) < 2:
            logger.info(f"No wildcard DNS detected for {self.domain}")
            return

        common = set.intersection(*resolved)
        if common:
            self.wildcard_ips = common
            logger.warning(f"Wildcard DNS detected for {self.domain}: {', '.join(sorted(common))}")
        else:
            logger.info(f"Random labels under {self.domain} resolve inconsistently - not treating as wildcard")

    def _random_name(self) -> str:
        return f"nonexistent-{secrets.token_hex(8)}.{self.domain}"


def wildcard_exclusion(detector: WildcardDetector) -> Callable[[SubdomainRecord], bool]:
    """Predicate for the Scheduler: True for records that only hit the wildcard."""
    detector.has_wildcard()  # probe up front, before workers start

    def is_wildcard(record: SubdomainRecord) -> bool:
        return detector.is_wildcard_match(list(record.addresses))

    return is_wildcard
