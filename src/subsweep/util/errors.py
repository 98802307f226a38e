"""Exception types surfaced to the caller.

Only two kinds of failure ever reach the user: bad preconditions (no domain,
no usable wordlist, invalid parameters) and output failures. DNS and HTTP
problems never show up here - they are folded into outcome/enrichment data.
"""


class SubsweepError(Exception):
    """Base class for all subsweep errors."""


class PreconditionError(SubsweepError):
    """Scan cannot start: missing domain, missing or unreadable wordlist."""


class ConfigError(PreconditionError, ValueError):
    """A scan parameter is out of range or malformed."""


class OutputError(SubsweepError):
    """Results could not be written to the requested destination.

    Non-fatal: the console already shows every confirmed subdomain.
    """

    def __init__(self, destination, reason):
        self.destination = str(destination)
        self.reason = reason
        super().__init__(f"{self.destination}: {reason}")
