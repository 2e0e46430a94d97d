"""LogcatAdapter: owns parsing state, identifiers and channels for one input stream."""

import logging
from typing import Iterable

from logcat_adapter.assembler import RecordAssembler
from logcat_adapter.config import Config
from logcat_adapter.encoder import ContextIdEncoder
from logcat_adapter.models import BROKEN_CONTEXT, Record, Severity
from logcat_adapter.registry import ContextRegistry
from logcat_adapter.sink import Channel, ChannelSink
from logcat_adapter.stats import AdapterStats

logger = logging.getLogger(__name__)


class LogcatAdapter:
    """Feeds lines through the record assembler and routes records to channels.

    Usage:
        with LogcatAdapter(config) as adapter:
            adapter.run(lines)
    """

    def __init__(self, config: Config, sink: ChannelSink | None = None):
        self._config = config
        self._sink = sink or ChannelSink(config.output_dir, config.min_severity)
        self._encoder = ContextIdEncoder()
        self._stats = AdapterStats()
        self._self_channel: Channel | None = None
        self._registry = ContextRegistry(self._sink, self._encoder,
                                         trace=self.trace, stats=self._stats)
        self._assembler = RecordAssembler(self._route, trace=self.trace,
                                          stats=self._stats)

    @property
    def stats(self) -> AdapterStats:
        return self._stats

    @property
    def registry(self) -> ContextRegistry:
        return self._registry

    @property
    def encoder(self) -> ContextIdEncoder:
        return self._encoder

    @property
    def assembler(self) -> RecordAssembler:
        return self._assembler

    @property
    def self_channel(self) -> Channel | None:
        return self._self_channel

    def start(self):
        """Register the application and its self-diagnostic channel."""
        app_id = self._config.app_id
        self._sink.register_application(app_id, self._config.app_description)
        self._encoder.reserve(app_id)
        self._self_channel = self._sink.register_channel(app_id, self._config.app_description)

    def trace(self, severity: Severity, text: str):
        if self._self_channel is not None:
            self._sink.emit(self._self_channel, severity, text)

    def process_line(self, line: str) -> Record | None:
        self._stats.lines_read += 1
        if self._config.echo_input:
            self.trace(Severity.VERBOSE, line)
        return self._assembler.feed(line)

    def run(self, lines: Iterable[str]) -> AdapterStats:
        """Process lines until the source is exhausted."""
        for line in lines:
            self.process_line(line)
        return self._stats

    def _route(self, record: Record):
        context = record.context
        if context == BROKEN_CONTEXT:
            self._stats.broken_contexts += 1
            self.trace(Severity.DEBUG, f"Unknown severity code in {record.metadata.raw_context!r}")
        self._registry.dispatch(context.name, context.severity, record.message,
                                record.metadata.timestamp)

    def close(self):
        """Release per-name channels in creation order, then the application."""
        if self._config.manifest_file:
            try:
                self._registry.save_manifest(self._config.manifest_file)
            except OSError as e:
                logger.error("Failed to write manifest %s: %s", self._config.manifest_file, e)
        self._registry.close()
        if self._self_channel is not None:
            self._sink.unregister_channel(self._self_channel)
            self._self_channel = None
        self._sink.unregister_application()

    def __enter__(self):
        self.start()
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
        return False
