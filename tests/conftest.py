"""Shared fixtures: fake DNS lookups so no test touches the network."""

import threading
import time
from collections import Counter

import dns.exception
import dns.resolver
import pytest

from subsweep.util.cache import ResolutionCache


class FakeLookup:
    """Lookup function backed by a dict, counting calls per name.

    Names missing from `records` raise NXDOMAIN. `fail_first` makes the
    first N calls for a name raise a timeout before answering normally.
    """

    def __init__(self, records=None, fail_first=0, delay=0.0):
        self.records = records or {}
        self.fail_first = fail_first
        self.delay = delay
        self.calls = Counter()
        self.timeouts = []
        self._lock = threading.Lock()

    def __call__(self, name, timeout):
        with self._lock:
            self.calls[name] += 1
            call_number = self.calls[name]
            self.timeouts.append(timeout)
        if self.delay:
            time.sleep(self.delay)
        if call_number <= self.fail_first:
            raise dns.exception.Timeout()
        if name not in self.records:
            raise dns.resolver.NXDOMAIN()
        return list(self.records[name])

    @property
    def total_calls(self):
        return sum(self.calls.values())


@pytest.fixture
def cache():
    return ResolutionCache()


@pytest.fixture
def example_records():
    return {
        'www.example.com': ['93.184.216.34'],
        'mail.example.com': ['93.184.216.35', '2606:2800:220:1::35'],
    }


@pytest.fixture
def fake_lookup(example_records):
    return FakeLookup(example_records)
