"""Two-line record reconstruction: a metadata header followed by its message."""

import logging
from enum import Enum
from typing import Callable

from logcat_adapter.models import Metadata, Record, Severity
from logcat_adapter.parser import parse_metadata
from logcat_adapter.stats import AdapterStats

logger = logging.getLogger(__name__)


class ParsingStateError(RuntimeError):
    """The assembler reached a step it has no transition for."""


class Step(Enum):
    AWAITING_METADATA = "metadata"
    AWAITING_MESSAGE = "message"


class ParsingContext:
    """Mutable state of the record currently being assembled."""

    def __init__(self):
        self.step = Step.AWAITING_METADATA
        self.metadata: Metadata | None = None
        self.message: str | None = None

    def reset(self):
        self.step = Step.AWAITING_METADATA
        self.metadata = None
        self.message = None

    def set_metadata(self, metadata: Metadata):
        self.metadata = metadata
        self.step = Step.AWAITING_MESSAGE

    def set_message(self, message: str):
        self.message = message

    def is_completed(self) -> bool:
        return self.metadata is not None and self.message is not None

    def record(self) -> Record:
        if not self.is_completed():
            raise ParsingStateError("Record requested before both lines were read")
        return Record(self.metadata, self.message)


class RecordAssembler:
    """Feeds input lines through the two-step state machine.

    Every completed record is passed to `on_record` exactly once, at the
    moment its message line arrives. `trace` receives internal diagnostics.
    """

    def __init__(self, on_record: Callable[[Record], None],
                 trace: Callable[[Severity, str], None] | None = None,
                 stats: AdapterStats | None = None):
        self._on_record = on_record
        self._trace = trace or (lambda severity, text: None)
        self._stats = stats or AdapterStats()
        self._context = ParsingContext()
        self._transitions = {
            Step.AWAITING_METADATA: self._on_metadata_line,
            Step.AWAITING_MESSAGE: self._on_message_line,
        }

    @property
    def context(self) -> ParsingContext:
        return self._context

    @property
    def step(self) -> Step:
        return self._context.step

    def feed(self, line: str) -> Record | None:
        """Process one input line. Returns the record it completed, if any."""
        if line == "":
            self._trace(Severity.VERBOSE, "Null line")
            self._reset()
            return None
        if line == "\n":
            self._trace(Severity.VERBOSE, "Next line")
            self._reset()
            return None

        transition = self._transitions.get(self._context.step)
        if transition is None:
            raise ParsingStateError(f"Unsupported parsing step: {self._context.step!r}")
        return transition(line)

    def _reset(self):
        self._stats.resets += 1
        self._context.reset()

    def _on_metadata_line(self, line: str) -> None:
        metadata = parse_metadata(line)
        if metadata is None:
            self._stats.corrupted_metadata += 1
            logger.debug("Dropping non-header line: %r", line)
            self._trace(Severity.WARN, f"Corrupted metadata: {line}")
            self._context.reset()
            return None
        self._context.set_metadata(metadata)
        return None

    def _on_message_line(self, line: str) -> Record:
        self._context.set_message(line)
        try:
            record = self._context.record()
            self._on_record(record)
        finally:
            self._context.reset()
        self._stats.records_dispatched += 1
        return record
