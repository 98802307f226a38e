"""Command-line entrypoint.

ARCHITECTURE:
1. Parse flags (with .env defaults) and validate - bad input stops here
2. Load the wordlist and build candidates
3. Optionally probe for wildcard DNS
4. Run the scheduler (workers + collector) until every batch is done
5. Print the summary and write the output file(s)

Exit codes: 0 ok, 1 unexpected error, 2 bad input, 130 interrupted.
"""

import logging
import sys
from typing import Callable, List, Optional

import requests
from tqdm import tqdm

from subsweep.util.cache import ResolutionCache
from subsweep.util.concurrency import RateLimiter
from subsweep.util.config import build_parser, config_from_args, load_env
from subsweep.util.errors import ConfigError, OutputError, PreconditionError
from subsweep.util.log import setup_logging
from subsweep.util.types import ScanConfig, ScanReport
from subsweep.scanner.candidates import build_candidates, load_wordlist
from subsweep.scanner.enricher import Enricher
from subsweep.scanner.resolver import LookupFunc, Resolver
from subsweep.scanner.scheduler import Scheduler
from subsweep.scanner.sink import ResultSink, write_json_report, write_results
from subsweep.scanner.wildcard import WildcardDetector, wildcard_exclusion

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_ERROR = 1
EXIT_USAGE = 2
EXIT_INTERRUPTED = 130


def run_scan(config: ScanConfig,
             candidates: List[str],
             lookup: Optional[LookupFunc] = None,
             session: Optional[requests.Session] = None,
             echo: Optional[Callable[[str], None]] = tqdm.write) -> ScanReport:
    """Wire up one engine instance and scan candidates.

    Everything shared between workers (cache, permit pool, cancel event)
    is owned by the objects built here - nothing lives at module level.
    """
    cache = ResolutionCache()
    resolver = Resolver(
        cache,
        timeout=config.timeout,
        retry_count=config.retry,
        retry_wait=config.retry_wait,
        lookup=lookup,
    )
    rate_limiter = RateLimiter(config.rate_limit)

    exclude = None
    if config.filter_wildcard:
        detector = WildcardDetector(config.domain, lookup=resolver.lookup, timeout=config.timeout)
        exclude = wildcard_exclusion(detector)

    enricher = None
    if config.enrich:
        enricher = Enricher(
            check_status=config.status_code,
            fetch_title=config.title,
            timeout=config.http_timeout,
            session=session,
        )

    sink = ResultSink(ScanReport(domain=config.domain), echo=echo)
    scheduler = Scheduler(
        resolver,
        rate_limiter,
        sink,
        enricher=enricher,
        exclude=exclude,
        threads=config.threads,
        batch_size=config.batch_size,
        show_progress=config.show_progress,
    )

    try:
        report = scheduler.run(candidates)
    finally:
        if enricher is not None:
            enricher.close()

    if scheduler.excluded:
        logger.info(f"Dropped {scheduler.excluded} wildcard matches")
    return report


def print_summary(report: ScanReport, sort: bool = False) -> None:
    names = report.names(sort=sort)
    if names:
        print("Found subdomains:")
        for name in names:
            print(name)
    else:
        print("No subdomains found.")


def write_outputs(report: ScanReport, config: ScanConfig) -> bool:
    """Write the flat file and JSON report. Returns False if any write failed."""
    ok = True
    if config.output_file:
        try:
            write_results(report.names(sort=config.sort_output), config.output_file, config.separator)
            print(f"Results saved to {config.output_file}")
        except OutputError as e:
            logger.warning(f"Could not write output file: {e}")
            print(f"Error writing to output file: {e.reason}", file=sys.stderr)
            ok = False

    if config.json_output:
        try:
            write_json_report(report, config.json_output, sort=config.sort_output, config=config)
        except OutputError as e:
            logger.warning(f"Could not write JSON report: {e}")
            print(f"Error writing JSON report: {e.reason}", file=sys.stderr)
            ok = False
    return ok


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    try:
        load_env()
        parser = build_parser()
    except ConfigError as e:
        print(f"✗ Configuration error: {e}", file=sys.stderr)
        return EXIT_USAGE

    args = parser.parse_args(argv)

    level = logging.INFO
    if args.verbose:
        level = logging.DEBUG
    elif args.quiet:
        level = logging.WARNING
    setup_logging(log_file=args.log_file, level=level)

    try:
        config = config_from_args(args)
        words = load_wordlist(config.wordlist_path)
    except PreconditionError as e:
        print(f"✗ {e}", file=sys.stderr)
        parser.print_usage(sys.stderr)
        return EXIT_USAGE

    candidates = build_candidates(words, config.domain)
    logger.info(f"Domain: {config.domain}, candidates: {len(candidates)}")

    try:
        report = run_scan(config, candidates)
    except KeyboardInterrupt:
        print("\n✗ Scan interrupted by user", file=sys.stderr)
        return EXIT_INTERRUPTED
    except Exception as e:
        logger.error(f"Unexpected error: {e}", exc_info=True)
        print(f"\n✗ Unexpected error: {e}", file=sys.stderr)
        return EXIT_ERROR

    print_summary(report, sort=config.sort_output)
    write_outputs(report, config)

    if report.cancelled:
        print("\n✗ Scan interrupted by user - results are partial", file=sys.stderr)
        return EXIT_INTERRUPTED
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
