"""DNS resolver - one lookup per candidate, with retries and caching.

This is the first (and usually only) question we ask about a candidate:
does it resolve? Every failure mode - NXDOMAIN, empty answer, timeout,
broken nameserver - ends up as an Unresolved outcome, never an exception.
"""

import logging
import threading
import time
from typing import Callable, List, Optional

import dns.exception
import dns.resolver

from subsweep.util.cache import ResolutionCache
from subsweep.util.types import ResolutionOutcome

logger = logging.getLogger(__name__)

# Signature of a lookup function: (name, timeout) -> list of IP strings.
# Raise or return [] on failure; the Resolver treats both the same.
LookupFunc = Callable[[str, float], List[str]]


def system_lookup(name: str, timeout: float) -> List[str]:
    """Resolve A and AAAA records through the host's configured nameservers.

    Uses dnspython's default resolver (built once from /etc/resolv.conf).
    Returns IPv4 addresses first, then IPv6, de-duplicated in order.
    Both record types share one deadline of timeout seconds.
    """
    resolver = dns.resolver.get_default_resolver()
    deadline = time.monotonic() + timeout
    addresses: List[str] = []
    last_error: Optional[Exception] = None

    for rdtype in ('A', 'AAAA'):
        remaining = deadline - time.monotonic()
        if remaining <= 0:
            last_error = last_error or dns.exception.Timeout(timeout=timeout)
            break
        try:
            answers = resolver.resolve(name, rdtype, lifetime=remaining)
        except dns.resolver.NXDOMAIN:
            # Name doesn't exist - AAAA won't exist either
            raise
        except (dns.resolver.NoAnswer, dns.resolver.NoNameservers,
                dns.exception.Timeout) as e:
            last_error = e
            continue
        for rdata in answers:
            ip = rdata.to_text()
            if ip not in addresses:
                addresses.append(ip)

    if not addresses and last_error is not None:
        raise last_error
    return addresses


class Resolver:
    """Cached, retrying DNS resolver shared by all workers.

    Tries a lookup up to retry_count + 1 times, waiting retry_wait between
    attempts (never after the last one). Outcomes, positive and negative,
    go into the shared cache so a name is looked up on the network at most
    once per run.
    """

    def __init__(self,
                 cache: ResolutionCache,
                 timeout: float = 2.0,
                 retry_count: int = 2,
                 retry_wait: float = 0.1,
                 lookup: Optional[LookupFunc] = None,
                 cancel_event: Optional[threading.Event] = None):
        """Initialize resolver.

        Args:
            cache: Shared outcome cache
            timeout: Seconds allowed per lookup attempt
            retry_count: Retries after the first attempt
            retry_wait: Seconds to wait between attempts
            lookup: Lookup function (defaults to system_lookup)
            cancel_event: When set, pending retry waits end early and no
                further attempts are made
        """
        self.cache = cache
        self.timeout = timeout
        self.retry_count = retry_count
        self.retry_wait = retry_wait
        self.lookup = lookup or system_lookup
        self.cancel_event = cancel_event or threading.Event()
        self._count_lock = threading.Lock()
        self._lookup_count = 0

    @property
    def lookup_count(self) -> int:
        """Network lookups attempted so far."""
        with self._count_lock:
            return self._lookup_count

    def _wait(self, seconds: float) -> bool:
        """Sleep between attempts. Returns False if the scan was cancelled."""
        if seconds > 0:
            return not self.cancel_event.wait(seconds)
        return not self.cancel_event.is_set()

    def _attempt(self, name: str, timeout: float):
        """One lookup. Returns (addresses, error message or None)."""
        with self._count_lock:
            self._lookup_count += 1
        try:
            addresses = list(self.lookup(name, timeout))
        except dns.resolver.NXDOMAIN:
            return [], "NXDOMAIN"
        except dns.exception.Timeout:
            return [], f"timeout after {timeout}s"
        except Exception as e:
            return [], f"{type(e).__name__}: {e}"
        if not addresses:
            return [], "no addresses"
        return addresses, None

    def resolve(self,
                name: str,
                timeout: Optional[float] = None,
                retry_count: Optional[int] = None,
                retry_wait: Optional[float] = None) -> ResolutionOutcome:
        """Resolve a candidate, consulting the cache first.

        Arguments left as None use the values the resolver was built with.
        """
        cached = self.cache.get(name)
        if cached is not None:
            logger.debug(f"DNS cache hit for {name}")
            return cached

        timeout = self.timeout if timeout is None else timeout
        retry_count = self.retry_count if retry_count is None else retry_count
        retry_wait = self.retry_wait if retry_wait is None else retry_wait

        max_attempts = retry_count + 1
        error = None
        for attempt in range(1, max_attempts + 1):
            addresses, error = self._attempt(name, timeout)
            if addresses:
                outcome = ResolutionOutcome.resolved(addresses, attempts=attempt)
                return self.cache.put(name, outcome)

            logger.debug(f"DNS attempt {attempt}/{max_attempts} failed for {name}: {error}")
            if attempt < max_attempts and not self._wait(retry_wait):
                # Cancelled mid-retry: don't cache a half-evaluated name
                return ResolutionOutcome.unresolved(attempts=attempt, error="cancelled")

        return self.cache.put(name, ResolutionOutcome.unresolved(attempts=max_attempts, error=error))
