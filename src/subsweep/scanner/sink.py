"""Result sink - collects confirmed subdomains and writes them out.

Console output and file output are separate concerns: the console line is
echoed as each record arrives, files are written once the scan is over.
"""

import logging
import threading
from pathlib import Path
from typing import Callable, Iterable, Optional, Set

from tqdm import tqdm

from subsweep.util.errors import OutputError
from subsweep.util.io import write_json, write_lines
from subsweep.util.types import ScanReport, SubdomainRecord

logger = logging.getLogger(__name__)


def format_record(record: SubdomainRecord) -> str:
    """Human-readable console line for a confirmed subdomain.

    Subdomain found: www.example.com (IPs: 93.184.216.34) | Status Code: 200 | Title: Example
    """
    line = f"Subdomain found: {record.name} (IPs: {', '.join(record.addresses)})"
    info = record.enrichment
    if info is not None:
        if info.status_code is not None:
            line += f" | Status Code: {info.status_code}"
        if info.title:
            line += f" | Title: {info.title}"
    return line


class ResultSink:
    """Accumulates confirmed records into a ScanReport.

    Normally fed by a single collector thread, but add() is locked anyway
    so it can be used directly from workers. A name already recorded is
    ignored, which collapses wordlist duplicates.
    """

    def __init__(self, report: Optional[ScanReport] = None,
                 echo: Optional[Callable[[str], None]] = tqdm.write):
        """Initialize sink.

        Args:
            report: Report to append to (a fresh one by default)
            echo: Called with each console line; None to stay silent
        """
        self.report = report if report is not None else ScanReport()
        self.echo = echo
        self._seen: Set[str] = set()
        self._lock = threading.Lock()

    def add(self, record: SubdomainRecord) -> bool:
        """Record a confirmed subdomain. Returns False for a duplicate."""
        with self._lock:
            if record.name in self._seen:
                return False
            self._seen.add(record.name)
            self.report.records.append(record)
        if self.echo is not None:
            self.echo(format_record(record))
        return True

    def __len__(self) -> int:
        with self._lock:
            return len(self.report.records)


def write_results(names: Iterable[str], destination, separator: str = ",") -> int:
    """Write one line per name: "<name><separator>\\n".

    No-op (returns 0) when destination is unset. Raises OutputError if the
    file can't be created or written.
    """
    if not destination:
        return 0
    try:
        count = write_lines(Path(destination), names, terminator=separator)
    except OSError as e:
        raise OutputError(destination, e.strerror or str(e))
    logger.info(f"Wrote {count} subdomains to {destination}")
    return count


def write_json_report(report: ScanReport, destination, sort: bool = False, config=None) -> None:
    """Write the full report (addresses, enrichment, run stats) as JSON."""
    data = report.to_dict(sort=sort)
    if config is not None:
        data['config'] = config.to_dict()
    try:
        write_json(Path(destination), data)
    except OSError as e:
        raise OutputError(destination, e.strerror or str(e))
    logger.info(f"Wrote JSON report to {destination}")
