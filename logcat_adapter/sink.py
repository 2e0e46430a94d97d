"""Channel sink: one log file per registered channel.

Each channel is a non-propagating stdlib logger under
``logcat_adapter.channels`` with its own FileHandler, writing lines like:

    2026-10-19T14:30:00.123456Z LDA WINR [ERROR] 6252.287 some message
"""

import logging
import os
from datetime import datetime, timezone

from logcat_adapter.models import Severity

logger = logging.getLogger(__name__)

CHANNEL_LOGGER_PREFIX = "logcat_adapter.channels"


class _UTCFormatter(logging.Formatter):
    def formatTime(self, record, datefmt=None):
        return datetime.fromtimestamp(record.created, timezone.utc).strftime(
            "%Y-%m-%dT%H:%M:%S.%fZ"
        )


class Channel:
    """A registered output endpoint bound to one identifier and display name."""

    def __init__(self, identifier: str, display_name: str, log: logging.Logger,
                 handler: logging.Handler, path: str):
        self.identifier = identifier
        self.display_name = display_name
        self.path = path
        self._logger = log
        self._handler = handler

    @property
    def closed(self) -> bool:
        return self._handler is None

    def log(self, severity: Severity, text: str, timestamp: float | None = None) -> bool:
        """Emit a message. Returns False if the channel was already unregistered."""
        if self._handler is None:
            return False
        device_ts = f"{timestamp:.3f}" if timestamp is not None and timestamp >= 0 else "-"
        self._logger.log(
            severity.level, text,
            extra={"severity": severity.name, "device_ts": device_ts},
        )
        return True

    def close(self):
        if self._handler is None:
            return
        self._logger.removeHandler(self._handler)
        self._handler.close()
        self._handler = None

    def __repr__(self):
        return f"Channel({self.identifier!r}, {self.display_name!r})"


class ChannelSink:
    """Registers channels and writes leveled messages to them."""

    def __init__(self, output_dir: str, min_severity: Severity = Severity.VERBOSE):
        self._output_dir = output_dir
        self._min_severity = min_severity
        self._app_id: str | None = None
        self._description = ""
        self._channels: dict[str, Channel] = {}
        self._opened: set[str] = set()

    @property
    def app_id(self) -> str | None:
        return self._app_id

    @property
    def channels(self) -> dict[str, Channel]:
        return dict(self._channels)

    def register_application(self, app_id: str, description: str):
        if self._app_id is not None:
            raise RuntimeError(f"Application {self._app_id} is already registered")
        os.makedirs(self._output_dir, exist_ok=True)
        self._app_id = app_id
        self._description = description
        logger.info("Registered application %s (%s), writing to %s",
                    app_id, description, self._output_dir)

    def unregister_application(self):
        if self._app_id is None:
            return
        for channel in list(self._channels.values()):
            self.unregister_channel(channel)
        logger.info("Unregistered application %s", self._app_id)
        self._app_id = None

    def register_channel(self, identifier: str, display_name: str) -> Channel:
        if self._app_id is None:
            raise RuntimeError("register_application() must be called before registering channels")
        if identifier in self._channels:
            raise ValueError(f"Channel {identifier} is already registered")

        path = os.path.join(self._output_dir, f"{self._app_id}-{identifier}.log")
        # The first registration in a sink truncates output left by earlier runs.
        mode = "a" if path in self._opened else "w"
        handler = logging.FileHandler(path, mode=mode, encoding="utf-8", errors="replace")
        self._opened.add(path)
        handler.setFormatter(_UTCFormatter(
            f"%(asctime)s {self._app_id} {identifier} [%(severity)s] %(device_ts)s %(message)s"
        ))

        log = logging.getLogger(f"{CHANNEL_LOGGER_PREFIX}.{self._app_id}.{identifier}")
        log.propagate = False
        log.setLevel(self._min_severity.level)
        # Loggers outlive sinks; detach handlers left by an earlier sink.
        for stale in list(log.handlers):
            log.removeHandler(stale)
        log.addHandler(handler)

        channel = Channel(identifier, display_name, log, handler, path)
        self._channels[identifier] = channel
        logger.debug("Registered channel %s (%s) -> %s", identifier, display_name, path)
        return channel

    def emit(self, channel: Channel, severity: Severity, text: str,
             timestamp: float | None = None) -> bool:
        return channel.log(severity, text, timestamp)

    def unregister_channel(self, channel: Channel):
        channel.close()
        self._channels.pop(channel.identifier, None)
