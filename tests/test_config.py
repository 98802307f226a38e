"""
Unit Tests for CLI/.env configuration
"""

import pytest

from subsweep.util.config import (
    ENV_PREFIX,
    build_parser,
    config_from_args,
    env_default,
    load_config,
    load_env,
    parse_duration,
    validate_config,
)
from subsweep.util.errors import ConfigError, PreconditionError
from subsweep.util.types import ScanConfig


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Keep host SUBSWEEP_* variables out of the tests."""
    for key in ('THREADS', 'TIMEOUT', 'RETRY', 'RETRY_WAIT', 'RATE_LIMIT',
                'BATCH_SIZE', 'HTTP_TIMEOUT', 'SEPARATOR', 'WORDLIST'):
        monkeypatch.delenv(ENV_PREFIX + key, raising=False)


def parse(argv):
    return config_from_args(build_parser().parse_args(argv))


class TestParseDuration:
    """Duration strings"""

    @pytest.mark.parametrize("value,expected", [
        ("2", 2.0),
        ("1.5", 1.5),
        ("2s", 2.0),
        ("100ms", 0.1),
        ("1m", 60.0),
        (3, 3.0),
    ])
    def test_valid(self, value, expected):
        assert parse_duration(value) == pytest.approx(expected)

    @pytest.mark.parametrize("value", ["", "fast", "2h", "-1s"])
    def test_invalid(self, value):
        with pytest.raises(ValueError):
            parse_duration(value)


class TestConfigFromArgs:
    """CLI flags to ScanConfig"""

    def test_defaults(self):
        config = parse(['-d', 'example.com', '-w', 'words.txt'])

        assert config.domain == 'example.com'
        assert config.wordlist_path == 'words.txt'
        assert config.threads == 100
        assert config.timeout == 2.0
        assert config.retry == 2
        assert config.retry_wait == pytest.approx(0.1)
        assert config.rate_limit == 200
        assert config.batch_size == 50
        assert config.separator == ','
        assert config.enrich is False
        assert config.show_progress is True

    def test_flags(self):
        config = parse(['-d', 'Example.COM.', '-w', 'w.txt', '-t', '10', '--timeout', '500ms',
                        '--retry', '0', '--retry-wait', '250ms', '--rate-limit', '20',
                        '--batch-size', '5', '-o', 'out.txt', '--separator', ';',
                        '--status-code', '--title', '--sort', '--filter-wildcard', '-q'])

        assert config.domain == 'example.com'
        assert config.threads == 10
        assert config.timeout == pytest.approx(0.5)
        assert config.retry == 0
        assert config.retry_wait == pytest.approx(0.25)
        assert config.rate_limit == 20
        assert config.batch_size == 5
        assert config.output_file == 'out.txt'
        assert config.separator == ';'
        assert config.enrich is True
        assert config.sort_output is True
        assert config.filter_wildcard is True
        assert config.show_progress is False

    def test_missing_domain(self):
        with pytest.raises(PreconditionError, match="No domain provided"):
            parse(['-w', 'words.txt'])

    def test_blank_domain(self):
        with pytest.raises(PreconditionError, match="No domain provided"):
            parse(['-d', '  ', '-w', 'words.txt'])

    def test_missing_wordlist(self):
        with pytest.raises(PreconditionError, match="No wordlist file provided"):
            parse(['-d', 'example.com'])

    def test_bad_duration_is_usage_error(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args(['-d', 'example.com', '--timeout', 'soon'])

    def test_out_of_range_values(self):
        with pytest.raises(ConfigError) as excinfo:
            parse(['-d', 'example.com', '-w', 'w.txt', '-t', '0', '--rate-limit', '0', '--retry', '-1'])
        message = str(excinfo.value)
        assert 'threads' in message
        assert 'rate-limit' in message
        assert 'retry' in message


class TestEnvironment:
    """SUBSWEEP_* variables and .env files"""

    def test_env_overrides_default(self, monkeypatch):
        monkeypatch.setenv('SUBSWEEP_THREADS', '7')
        monkeypatch.setenv('SUBSWEEP_RETRY_WAIT', '300ms')

        config = parse(['-d', 'example.com', '-w', 'w.txt'])

        assert config.threads == 7
        assert config.retry_wait == pytest.approx(0.3)

    def test_flag_beats_env(self, monkeypatch):
        monkeypatch.setenv('SUBSWEEP_THREADS', '7')
        config = parse(['-d', 'example.com', '-w', 'w.txt', '-t', '3'])
        assert config.threads == 3

    def test_wordlist_from_env(self, monkeypatch):
        monkeypatch.setenv('SUBSWEEP_WORDLIST', 'env-words.txt')
        assert parse(['-d', 'example.com']).wordlist_path == 'env-words.txt'

    def test_invalid_env_value(self, monkeypatch):
        monkeypatch.setenv('SUBSWEEP_RATE_LIMIT', 'lots')
        with pytest.raises(ConfigError, match='SUBSWEEP_RATE_LIMIT'):
            env_default('rate_limit', int)

    def test_dotenv_file(self, tmp_path, monkeypatch):
        env_file = tmp_path / '.env'
        env_file.write_text('SUBSWEEP_BATCH_SIZE=25\n')
        monkeypatch.chdir(tmp_path)
        # set+del so monkeypatch removes whatever load_env puts there
        monkeypatch.setenv('SUBSWEEP_BATCH_SIZE', '1')
        monkeypatch.delenv('SUBSWEEP_BATCH_SIZE')

        load_env()
        config = parse(['-d', 'example.com', '-w', 'w.txt'])

        assert config.batch_size == 25

    def test_load_config(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        config = load_config(['-d', 'example.com', '-w', 'w.txt'])
        assert config.domain == 'example.com'


class TestValidateConfig:
    """Range checks"""

    def test_valid(self):
        validate_config(ScanConfig(domain='example.com'))

    def test_zero_timeout(self):
        with pytest.raises(ConfigError, match='timeout'):
            validate_config(ScanConfig(domain='example.com', timeout=0))

    def test_negative_retry_wait(self):
        with pytest.raises(ConfigError, match='retry-wait'):
            validate_config(ScanConfig(domain='example.com', retry_wait=-0.1))

    def test_config_error_is_value_error(self):
        with pytest.raises(ValueError):
            validate_config(ScanConfig(domain='example.com', batch_size=0))
