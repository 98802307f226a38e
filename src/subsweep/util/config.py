"""Configuration from CLI flags with .env overrides.

Precedence, highest first: command-line flag, environment variable (a .env
file in the working directory is loaded into the environment), built-in
default. Everything is validated here so the scanner never sees a bad value.
"""

import argparse
import os
import re
from pathlib import Path
from typing import Callable, List, Optional

from dotenv import load_dotenv

from .errors import ConfigError, PreconditionError
from .types import ScanConfig

ENV_PREFIX = "SUBSWEEP_"

DEFAULTS = {
    'threads': 100,
    'timeout': 2.0,
    'retry': 2,
    'retry_wait': 0.1,
    'rate_limit': 200,
    'batch_size': 50,
    'separator': ",",
    'http_timeout': 8.0,
}

_DURATION_RE = re.compile(r"^\s*(\d+(?:\.\d+)?)\s*(ms|s|m)?\s*$")
_DURATION_UNITS = {None: 1.0, 's': 1.0, 'ms': 0.001, 'm': 60.0}


def parse_duration(value) -> float:
    """Parse a duration into seconds.

    Accepts plain numbers (seconds) or a unit suffix: "100ms", "2s", "1m".
    """
    if isinstance(value, (int, float)):
        return float(value)
    match = _DURATION_RE.match(str(value))
    if not match:
        raise ValueError(f"invalid duration: {value!r}")
    number, unit = match.groups()
    return float(number) * _DURATION_UNITS[unit]


def _duration_arg(value: str) -> float:
    try:
        return parse_duration(value)
    except ValueError as e:
        raise argparse.ArgumentTypeError(str(e))


def load_env(env_file: Optional[Path] = None) -> None:
    """Load .env into os.environ without clobbering variables already set."""
    env_file = Path(env_file) if env_file else Path.cwd() / ".env"
    if env_file.exists():
        load_dotenv(env_file)


def env_default(key: str, convert: Callable = str):
    """Default for a setting: SUBSWEEP_<KEY> if set, else the built-in."""
    raw = os.getenv(ENV_PREFIX + key.upper())
    if raw is None or raw == "":
        return DEFAULTS.get(key)
    try:
        return convert(raw)
    except ValueError:
        raise ConfigError(f"{ENV_PREFIX}{key.upper()}={raw!r} is not a valid value")


def build_parser() -> argparse.ArgumentParser:
    """Build the CLI parser. Defaults reflect the environment at call time."""
    parser = argparse.ArgumentParser(
        prog='subsweep',
        description='Wordlist-driven subdomain discovery via concurrent DNS resolution',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  subsweep -d example.com -w words.txt
  subsweep -d example.com -w words.txt -t 50 --rate-limit 100 --retry 3 --retry-wait 250ms
  subsweep -d example.com -w words.txt --status-code --title -o found.txt --separator ';'

Environment (.env in the working directory is honoured):
  SUBSWEEP_THREADS, SUBSWEEP_TIMEOUT, SUBSWEEP_RETRY, SUBSWEEP_RETRY_WAIT,
  SUBSWEEP_RATE_LIMIT, SUBSWEEP_BATCH_SIZE, SUBSWEEP_HTTP_TIMEOUT,
  SUBSWEEP_SEPARATOR, SUBSWEEP_WORDLIST
        """
    )
    parser.add_argument('-d', '--domain', help='Domain to scan subdomains for')
    parser.add_argument('-w', '--wordlist', default=os.getenv(ENV_PREFIX + "WORDLIST") or None,
                        help='Wordlist file, one subdomain prefix per line')
    parser.add_argument('-t', '--threads', type=int, default=env_default('threads', int),
                        help='Maximum concurrent workers (default: %(default)s)')
    parser.add_argument('--timeout', type=_duration_arg, default=env_default('timeout', parse_duration),
                        help='Timeout per DNS attempt, seconds or e.g. 500ms (default: %(default)s)')
    parser.add_argument('--retry', type=int, default=env_default('retry', int),
                        help='Retries after the first DNS attempt (default: %(default)s)')
    parser.add_argument('--retry-wait', type=_duration_arg, default=env_default('retry_wait', parse_duration),
                        help='Wait between DNS attempts (default: %(default)s)')
    parser.add_argument('-o', '--output', default=None, help='Output file to save results')
    parser.add_argument('--separator', default=env_default('separator'),
                        help='Separator appended to each output line (default: %(default)r)')
    parser.add_argument('--rate-limit', type=int, default=env_default('rate_limit', int),
                        help='DNS resolutions allowed in flight at once (default: %(default)s)')
    parser.add_argument('--batch-size', type=int, default=env_default('batch_size', int),
                        help='Candidates per worker batch (default: %(default)s)')
    parser.add_argument('--status-code', action='store_true', help='Fetch HTTP status code of found subdomains')
    parser.add_argument('--title', action='store_true', help='Fetch page title of found subdomains')
    parser.add_argument('--http-timeout', type=_duration_arg, default=env_default('http_timeout', parse_duration),
                        help='Timeout for HTTP enrichment (default: %(default)s)')
    parser.add_argument('--json-output', default=None, help='Also write a JSON report to this path')
    parser.add_argument('--sort', action='store_true', help='Sort results alphabetically before output')
    parser.add_argument('--filter-wildcard', action='store_true',
                        help='Detect wildcard DNS and drop matches that only hit the wildcard')
    parser.add_argument('--no-progress', action='store_true', help='Disable the progress bar')
    parser.add_argument('-v', '--verbose', action='store_true', help='Debug logging')
    parser.add_argument('-q', '--quiet', action='store_true', help='Only log warnings and errors')
    parser.add_argument('--log-file', default=None, help='Also write logs to this file')
    return parser


def config_from_args(args: argparse.Namespace) -> ScanConfig:
    """Turn parsed CLI args into a validated ScanConfig."""
    domain = (args.domain or "").strip().strip(".").lower()
    if not domain:
        raise PreconditionError("No domain provided (use -d <domain>)")
    if not args.wordlist:
        raise PreconditionError("No wordlist file provided (use -w <wordlist>)")

    config = ScanConfig(
        domain=domain,
        wordlist_path=args.wordlist,
        threads=args.threads,
        timeout=args.timeout,
        retry=args.retry,
        retry_wait=args.retry_wait,
        rate_limit=args.rate_limit,
        batch_size=args.batch_size,
        output_file=args.output,
        separator=args.separator,
        status_code=args.status_code,
        title=args.title,
        http_timeout=args.http_timeout,
        json_output=args.json_output,
        sort_output=args.sort,
        filter_wildcard=args.filter_wildcard,
        show_progress=not (args.no_progress or args.quiet),
    )
    validate_config(config)
    return config


def validate_config(config: ScanConfig) -> None:
    """Reject out-of-range values. Raises ConfigError listing every problem."""
    problems: List[str] = []
    if config.threads < 1:
        problems.append(f"threads must be >= 1 (got {config.threads})")
    if config.rate_limit < 1:
        problems.append(f"rate-limit must be >= 1 (got {config.rate_limit})")
    if config.batch_size < 1:
        problems.append(f"batch-size must be >= 1 (got {config.batch_size})")
    if config.retry < 0:
        problems.append(f"retry must be >= 0 (got {config.retry})")
    if config.timeout <= 0:
        problems.append(f"timeout must be > 0 (got {config.timeout})")
    if config.http_timeout <= 0:
        problems.append(f"http-timeout must be > 0 (got {config.http_timeout})")
    if config.retry_wait < 0:
        problems.append(f"retry-wait must be >= 0 (got {config.retry_wait})")
    if problems:
        raise ConfigError("; ".join(problems))


def load_config(argv: Optional[List[str]] = None) -> ScanConfig:
    """Load .env, parse argv and return a validated ScanConfig."""
    load_env()
    args = build_parser().parse_args(argv)
    return config_from_args(args)
