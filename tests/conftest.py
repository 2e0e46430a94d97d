"""Shared pytest fixtures for the logcat adapter test suite."""

import pytest

from logcat_adapter.config import Config
from logcat_adapter.sink import ChannelSink


def _read_channel(sink_dir, app_id: str, identifier: str) -> list[str]:
    path = sink_dir / f"{app_id}-{identifier}.log"
    return path.read_text(encoding="utf-8").splitlines()


@pytest.fixture()
def read_channel():
    """Return the lines written to one channel file."""
    return _read_channel


@pytest.fixture()
def config(tmp_path) -> Config:
    return Config(
        output_dir=str(tmp_path / "channels"),
        manifest_file=str(tmp_path / "channels" / "manifest.json"),
    )


@pytest.fixture()
def sink(tmp_path):
    s = ChannelSink(str(tmp_path / "channels"))
    s.register_application("LDA", "Logcat DLT Adapter")
    yield s
    s.unregister_application()
