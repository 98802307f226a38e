"""Core data types used across the scanner.

These types make resolution results explicit: a candidate is either resolved
(with its addresses) or not, and every failure reason travels as data instead
of an exception.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Any, List, Optional, Sequence, Tuple


class OutcomeStatus(Enum):
    """Classification of a single candidate after DNS resolution."""
    RESOLVED = "resolved"
    UNRESOLVED = "unresolved"


@dataclass(frozen=True)
class ResolutionOutcome:
    """Result of resolving one candidate name.

    Written once into the cache and never mutated afterwards. A cache hit
    hands back this exact object.
    """
    status: OutcomeStatus
    addresses: Tuple[str, ...] = ()
    attempts: int = 0
    error: Optional[str] = None  # last lookup failure, diagnostic only

    @classmethod
    def resolved(cls, addresses: Sequence[str], attempts: int = 1) -> "ResolutionOutcome":
        return cls(OutcomeStatus.RESOLVED, tuple(addresses), attempts)

    @classmethod
    def unresolved(cls, attempts: int = 0, error: Optional[str] = None) -> "ResolutionOutcome":
        return cls(OutcomeStatus.UNRESOLVED, (), attempts, error)

    @property
    def is_resolved(self) -> bool:
        return self.status is OutcomeStatus.RESOLVED


@dataclass
class EnrichmentInfo:
    """HTTP status and page title for a confirmed subdomain.

    Both fields are optional: absence means the fetch or parse failed,
    never that the subdomain is invalid.
    """
    status_code: Optional[int] = None
    title: Optional[str] = None
    error: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            'status_code': self.status_code,
            'title': self.title,
            'error': self.error,
        }


@dataclass
class SubdomainRecord:
    """A confirmed subdomain as it lands in the report."""
    name: str
    addresses: Tuple[str, ...] = ()
    enrichment: Optional[EnrichmentInfo] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dict for JSON output."""
        data = {
            'name': self.name,
            'addresses': list(self.addresses),
        }
        if self.enrichment is not None:
            data.update(self.enrichment.to_dict())
        return data


@dataclass
class ScanReport:
    """Confirmed subdomains in completion order plus run metadata.

    Built incrementally by the result sink, finalized by the scheduler once
    every worker has terminated.
    """
    domain: str = ""
    records: List[SubdomainRecord] = field(default_factory=list)
    total_candidates: int = 0
    processed: int = 0
    failed_batches: int = 0
    cancelled: bool = False
    duration_ms: float = 0.0
    cache_stats: Dict[str, int] = field(default_factory=dict)

    def names(self, sort: bool = False) -> List[str]:
        """Confirmed names, in completion order unless sort is set."""
        names = [record.name for record in self.records]
        return sorted(names) if sort else names

    def to_dict(self, sort: bool = False) -> Dict[str, Any]:
        records = self.records
        if sort:
            records = sorted(records, key=lambda r: r.name)
        return {
            'domain': self.domain,
            'total_candidates': self.total_candidates,
            'processed': self.processed,
            'found': len(self.records),
            'failed_batches': self.failed_batches,
            'cancelled': self.cancelled,
            'duration_ms': round(self.duration_ms, 2),
            'cache': self.cache_stats,
            'subdomains': [r.to_dict() for r in records],
        }


@dataclass
class ScanConfig:
    """Runtime configuration for one scan.

    Built from CLI flags with .env overrides (see util.config); every field
    has been validated by the time the scanner sees it.
    """
    domain: str
    wordlist_path: Optional[str] = None
    threads: int = 100
    timeout: float = 2.0  # seconds per DNS attempt
    retry: int = 2  # retries after the first attempt
    retry_wait: float = 0.1  # seconds between attempts
    rate_limit: int = 200  # permits in the DNS gate
    batch_size: int = 50
    output_file: Optional[str] = None
    separator: str = ","
    status_code: bool = False
    title: bool = False
    http_timeout: float = 8.0
    json_output: Optional[str] = None
    sort_output: bool = False
    filter_wildcard: bool = False
    show_progress: bool = True

    @property
    def enrich(self) -> bool:
        """True when any HTTP enrichment was requested."""
        return self.status_code or self.title

    def to_dict(self) -> Dict[str, Any]:
        """Convert config to dict for the JSON report."""
        return {
            'domain': self.domain,
            'threads': self.threads,
            'timeout': self.timeout,
            'retry': self.retry,
            'retry_wait': self.retry_wait,
            'rate_limit': self.rate_limit,
            'batch_size': self.batch_size,
            'status_code': self.status_code,
            'title': self.title,
            'filter_wildcard': self.filter_wildcard,
        }
