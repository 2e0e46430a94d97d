"""Context registry: maps source names to lazily created channels."""

import json
import logging
import os
from typing import Callable

from logcat_adapter.encoder import ContextIdEncoder
from logcat_adapter.models import Severity
from logcat_adapter.sink import Channel, ChannelSink
from logcat_adapter.stats import AdapterStats

logger = logging.getLogger(__name__)


class ContextRegistry:
    """One channel per distinct source name, kept until close()."""

    def __init__(self, sink: ChannelSink, encoder: ContextIdEncoder,
                 trace: Callable[[Severity, str], None] | None = None,
                 stats: AdapterStats | None = None):
        self._sink = sink
        self._encoder = encoder
        self._trace = trace or (lambda severity, text: None)
        self._stats = stats or AdapterStats()
        self._channels: dict[str, Channel] = {}

    def __contains__(self, name: str) -> bool:
        return name in self._channels

    def __len__(self) -> int:
        return len(self._channels)

    def get(self, name: str) -> Channel | None:
        return self._channels.get(name)

    def identifiers(self) -> dict[str, str]:
        """identifier -> source name, in creation order."""
        return {ch.identifier: name for name, ch in self._channels.items()}

    def resolve(self, name: str) -> Channel:
        """Return the channel for `name`, creating it on first use."""
        channel = self._channels.get(name)
        if channel is None:
            identifier = self._encoder.allocate(name)
            channel = self._sink.register_channel(identifier, name)
            self._channels[name] = channel
            self._stats.channels_created += 1
            self._trace(Severity.INFO, f"Created new channel {identifier} - {name}")
        return channel

    def dispatch(self, name: str, severity: Severity, message: str,
                 timestamp: float | None = None) -> Channel:
        channel = self.resolve(name)
        self._sink.emit(channel, severity, message, timestamp)
        return channel

    def save_manifest(self, path: str):
        """Atomic write of the identifier -> name mapping as JSON."""
        os.makedirs(os.path.dirname(path) or ".", exist_ok=True)
        tmp_path = path + ".tmp"
        with open(tmp_path, "w", encoding="utf-8") as f:
            json.dump(self.identifiers(), f, indent=2)
        os.replace(tmp_path, path)
        logger.info("Wrote channel manifest to %s (%d entries)", path, len(self._channels))

    def close(self):
        """Unregister every channel in creation order."""
        for channel in self._channels.values():
            self._sink.unregister_channel(channel)
        self._channels.clear()
