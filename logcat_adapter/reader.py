"""Input line sources: standard input, a finished file, or a followed file.

All sources yield lines without their trailing newline, so the blank line
logcat writes between records arrives as "".
"""

import io
import logging
import os
import queue
import sys
import threading
from typing import Generator, TextIO

from watchdog.events import FileSystemEventHandler
from watchdog.observers import Observer

logger = logging.getLogger(__name__)


def _strip_newline(line: str) -> str:
    if line.endswith("\n"):
        line = line[:-1]
    if line.endswith("\r"):
        line = line[:-1]
    return line


def read_stream(stream: TextIO) -> Generator[str, None, None]:
    """Yield lines from an open text stream until EOF."""
    for line in stream:
        yield _strip_newline(line)


def read_stdin() -> Generator[str, None, None]:
    """Yield lines from standard input, decoded as UTF-8 with replacement."""
    stream = io.TextIOWrapper(sys.stdin.buffer, encoding="utf-8", errors="replace")
    yield from read_stream(stream)


def read_file(filepath: str) -> Generator[str, None, None]:
    with open(filepath, "r", encoding="utf-8", errors="replace") as f:
        yield from read_stream(f)


class FileFollower(FileSystemEventHandler):
    """Watchdog event handler that enqueues lines appended to one file.

    Partial lines are held back until their newline arrives. A file that
    shrinks below the read position is treated as truncated and re-read from
    the start.
    """

    def __init__(self, filepath: str, q: queue.Queue, from_start: bool = False):
        super().__init__()
        self._path = os.path.abspath(filepath)
        self._queue = q
        self._fh = None
        self._partial = ""
        self._from_start = from_start
        self._lock = threading.Lock()

    @property
    def path(self) -> str:
        return self._path

    def _open(self):
        if self._fh is not None:
            self._fh.close()
            self._fh = None
        try:
            fh = open(self._path, "r", encoding="utf-8", errors="replace")
        except FileNotFoundError:
            logger.debug("File not found: %s", self._path)
            return
        if not self._from_start:
            fh.seek(0, os.SEEK_END)
        self._fh = fh
        self._from_start = True
        logger.debug("Following %s from offset %d", self._path, fh.tell())

    def read_new_lines(self):
        """Read from the current position to EOF and enqueue complete lines."""
        with self._lock:
            if self._fh is None:
                self._open()
            if self._fh is None:
                return

            try:
                size = os.stat(self._path).st_size
            except FileNotFoundError:
                return
            if size < self._fh.tell():
                logger.info("File truncated: %s", self._path)
                self._partial = ""
                self._fh.seek(0)

            data = self._fh.read()
            if not data:
                return

            data = self._partial + data
            lines = data.split("\n")
            self._partial = lines.pop()
            for line in lines:
                self._queue.put(_strip_newline(line))

    def on_modified(self, event):
        if not event.is_directory and os.path.abspath(event.src_path) == self._path:
            self.read_new_lines()

    def on_created(self, event):
        if not event.is_directory and os.path.abspath(event.src_path) == self._path:
            logger.info("Followed file created: %s", self._path)
            with self._lock:
                self._from_start = True
                self._open()
            self.read_new_lines()

    def close(self):
        with self._lock:
            if self._fh is not None:
                self._fh.close()
                self._fh = None


def follow_file(filepath: str, stop_event: threading.Event,
                from_start: bool = False,
                poll_interval: float = 0.5) -> Generator[str, None, None]:
    """Yield lines appended to `filepath` until `stop_event` is set.

    The watchdog observer thread only enqueues lines; the caller consumes
    them on its own thread.
    """
    q: queue.Queue = queue.Queue()
    follower = FileFollower(filepath, q, from_start=from_start)
    watch_dir = os.path.dirname(follower.path)
    os.makedirs(watch_dir, exist_ok=True)

    observer = Observer()
    observer.schedule(follower, watch_dir, recursive=False)
    observer.start()
    logger.info("Following %s", follower.path)

    follower.read_new_lines()
    try:
        while not stop_event.is_set():
            try:
                line = q.get(timeout=poll_interval)
            except queue.Empty:
                continue
            yield line
        while True:
            try:
                yield q.get_nowait()
            except queue.Empty:
                break
    finally:
        observer.stop()
        observer.join(timeout=5)
        follower.close()
