"""Record model: severity levels, decoded metadata headers, and log contexts."""

import logging
from dataclasses import dataclass, field
from enum import Enum

VERBOSE_LEVEL = 5
logging.addLevelName(VERBOSE_LEVEL, "VERBOSE")

# Token layout of a "monotonic long" header:
#   [ 6252.287 443: 530 E/WifiVendorHal ]
MIN_TOKEN_COUNT = 6
TIMESTAMP_INDEX = 1
CONTEXT_INDEX = 4
CONTEXT_MIN_LENGTH = 3
OPEN_TOKEN = "["
CLOSE_TOKEN = "]"


class Severity(Enum):
    FATAL = logging.CRITICAL
    ERROR = logging.ERROR
    WARN = logging.WARNING
    INFO = logging.INFO
    DEBUG = logging.DEBUG
    VERBOSE = VERBOSE_LEVEL

    @property
    def level(self) -> int:
        """The stdlib logging level this severity is emitted at."""
        return self.value

    @classmethod
    def from_name(cls, name: str) -> "Severity":
        """Look up a severity by name, case-insensitive. Raises ValueError."""
        try:
            return cls[name.strip().upper()]
        except KeyError:
            raise ValueError(f"Unknown severity: {name!r}") from None


SEVERITY_CODES = {
    "F": Severity.FATAL,
    "E": Severity.ERROR,
    "W": Severity.WARN,
    "I": Severity.INFO,
    "D": Severity.DEBUG,
    "V": Severity.VERBOSE,
}


@dataclass(frozen=True)
class LogContext:
    severity: Severity
    name: str


BROKEN_CONTEXT = LogContext(Severity.FATAL, "Broken Context")


@dataclass(frozen=True)
class Metadata:
    tokens: tuple[str, ...] = field(default_factory=tuple)

    def is_valid(self) -> bool:
        return (
            len(self.tokens) >= MIN_TOKEN_COUNT
            and self.tokens[0] == OPEN_TOKEN
            and self.tokens[-1] == CLOSE_TOKEN
            and len(self.tokens[CONTEXT_INDEX]) >= CONTEXT_MIN_LENGTH
        )

    @property
    def timestamp(self) -> float:
        """Monotonic device timestamp in seconds, or -1 if unparseable."""
        try:
            return float(self.tokens[TIMESTAMP_INDEX])
        except (ValueError, IndexError):
            return -1

    @property
    def raw_context(self) -> str:
        return self.tokens[CONTEXT_INDEX]

    def log_context(self) -> LogContext:
        """Decode severity and source name from the context field.

        Names containing whitespace were split into several tokens; every
        token between the context field and the closing bracket is joined
        back onto the name.
        """
        raw = self.raw_context
        severity = SEVERITY_CODES.get(raw[:1])
        if severity is None:
            return BROKEN_CONTEXT

        name = raw[2:]
        if len(self.tokens) > MIN_TOKEN_COUNT:
            name += "".join(self.tokens[CONTEXT_INDEX + 1:-1])
        return LogContext(severity, name)


@dataclass(frozen=True)
class Record:
    metadata: Metadata
    message: str

    @property
    def context(self) -> LogContext:
        return self.metadata.log_context()
