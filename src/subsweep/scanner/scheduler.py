"""Scan scheduler - fan candidates out to workers, fan results back in.

FLOW:
1. Split candidates into contiguous batches of batch_size
2. Submit one task per batch to a thread pool capped at `threads`
   (the thread count, not the batch count, bounds concurrency)
3. Each worker walks its batch in order: permit -> resolve -> wildcard
   check -> enrich
4. Confirmed records go onto a queue drained by a single collector thread
5. run() returns only after every worker has finished and the collector
   has drained the queue

Cancelling (Ctrl-C in the CLI) stops workers from starting new lookups;
lookups already in flight finish and the partial report is returned.
"""

import concurrent.futures
import logging
import queue
import threading
import time
from typing import Callable, List, Optional, Sequence

from tqdm import tqdm

from subsweep.util.concurrency import RateLimiter
from subsweep.util.types import ScanReport, SubdomainRecord
from subsweep.scanner.enricher import Enricher
from subsweep.scanner.resolver import Resolver
from subsweep.scanner.sink import ResultSink

logger = logging.getLogger(__name__)

# Marks the end of the result stream for the collector
_DONE = object()


def chunk(candidates: Sequence[str], size: int) -> List[List[str]]:
    """Split candidates into contiguous batches of size (last may be shorter).

    chunk(105 names, 50) -> batches of 50, 50, 5
    """
    if size < 1:
        raise ValueError(f"batch size must be >= 1, got {size}")
    return [list(candidates[i:i + size]) for i in range(0, len(candidates), size)]


class Scheduler:
    """Runs one scan: bounded worker pool plus a single result collector.

    Owns the cancellation event; resolver and rate limiter waits observe it
    so a cancelled scan winds down promptly.
    """

    def __init__(self,
                 resolver: Resolver,
                 rate_limiter: RateLimiter,
                 sink: ResultSink,
                 enricher: Optional[Enricher] = None,
                 exclude: Optional[Callable[[SubdomainRecord], bool]] = None,
                 threads: int = 100,
                 batch_size: int = 50,
                 show_progress: bool = False):
        """Initialize scheduler.

        Args:
            resolver: Shared cached resolver
            rate_limiter: Shared DNS permit pool
            sink: Receives confirmed records (from the collector thread only)
            enricher: Optional HTTP enricher for resolved names
            exclude: Resolved records for which this returns True are dropped
                before enrichment (wildcard filtering)
            threads: Maximum concurrent workers
            batch_size: Candidates per worker batch
            show_progress: Show a tqdm progress bar
        """
        if threads < 1:
            raise ValueError(f"threads must be >= 1, got {threads}")
        self.resolver = resolver
        self.rate_limiter = rate_limiter
        self.sink = sink
        self.enricher = enricher
        self.exclude = exclude
        self.threads = threads
        self.batch_size = batch_size
        self.show_progress = show_progress

        # Share one cancel event with the resolver so retry waits wake up
        self.cancel_event = resolver.cancel_event
        self._results: "queue.Queue" = queue.Queue()
        self._processed = 0
        self._processed_lock = threading.Lock()
        self.excluded = 0

    def cancel(self) -> None:
        """Stop issuing new lookups; in-flight ones drain."""
        if not self.cancel_event.is_set():
            logger.warning("Cancellation requested - finishing in-flight lookups")
        self.cancel_event.set()

    @property
    def cancelled(self) -> bool:
        return self.cancel_event.is_set()

    def _process(self, name: str) -> bool:
        """Resolve (and maybe enrich) a single candidate.

        Returns False if cancelled before a permit was granted.
        """
        if not self.rate_limiter.acquire(self.cancel_event):
            return False
        try:
            outcome = self.resolver.resolve(name)
        finally:
            self.rate_limiter.release()

        if not outcome.is_resolved:
            return True

        record = SubdomainRecord(name, outcome.addresses)
        if self.exclude is not None and self.exclude(record):
            with self._processed_lock:
                self.excluded += 1
            logger.debug(f"Dropped wildcard match {name}")
            return True

        if self.enricher is not None and self.enricher.enabled:
            record.enrichment = self.enricher.enrich(name)
        self._results.put(record)
        return True

    def _run_batch(self, batch: List[str], progress: tqdm) -> int:
        """Worker body: process a batch strictly in order.

        Returns how many candidates were processed before finishing or
        being cancelled.
        """
        done = 0
        for name in batch:
            if self.cancelled or not self._process(name):
                break
            done += 1
            with self._processed_lock:
                self._processed += 1
                progress.update(1)
        return done

    def _collect(self) -> None:
        """Collector body: drain the result queue into the sink until _DONE."""
        while True:
            item = self._results.get()
            if item is _DONE:
                break
            self.sink.add(item)

    def run(self, candidates: Sequence[str]) -> ScanReport:
        """Scan every candidate and return the report once all workers finish."""
        start = time.monotonic()
        report = self.sink.report
        report.total_candidates = len(candidates)

        batches = chunk(candidates, self.batch_size)
        workers = min(self.threads, len(batches)) or 1
        logger.info(f"Scanning {len(candidates)} candidates in {len(batches)} batches "
                    f"({workers} workers, {self.rate_limiter.rate_limit} DNS permits)")

        collector = threading.Thread(target=self._collect, name="result-collector", daemon=True)
        collector.start()

        progress = tqdm(total=len(candidates), desc="Resolving", unit="name",
                        disable=not self.show_progress)
        try:
            with concurrent.futures.ThreadPoolExecutor(max_workers=workers,
                                                       thread_name_prefix="worker") as ex:
                futures = {ex.submit(self._run_batch, batch, progress): i
                           for i, batch in enumerate(batches)}
                try:
                    for fut in concurrent.futures.as_completed(futures):
                        try:
                            fut.result()
                        except Exception as e:
                            report.failed_batches += 1
                            logger.error(f"Worker for batch {futures[fut]} crashed: {e}", exc_info=True)
                except KeyboardInterrupt:
                    # Let running workers drain; queued batches see the flag and exit
                    self.cancel()
                    concurrent.futures.wait(futures)
        finally:
            progress.close()
            self._results.put(_DONE)
            collector.join()

        report.processed = self._processed
        report.cancelled = self.cancelled
        report.duration_ms = (time.monotonic() - start) * 1000
        report.cache_stats = self.resolver.cache.stats()

        logger.info(f"Processed {report.processed}/{report.total_candidates} candidates, "
                    f"{len(report.records)} confirmed in {report.duration_ms / 1000:.1f}s")
        if report.cancelled:
            logger.warning("Scan was cancelled - results are partial")
        return report
