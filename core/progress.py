"""
One-way progress notifications from an export to an observer.
"""

import queue
from dataclasses import dataclass

from core.errors import ChannelError


@dataclass(frozen=True)
class InProgress:
    done: int
    total: int


@dataclass(frozen=True)
class Done:
    total: int


@dataclass(frozen=True)
class Error:
    message: str


class ProgressChannel:
    """Queue carrying InProgress, Done and Error messages.

    The export is the only producer; a single observer consumes with
    ``poll`` so it can keep redrawing while nothing arrives. Once the
    observer calls ``close`` further sends raise ChannelError.
    """

    def __init__(self, maxsize=0):
        self._queue = queue.Queue(maxsize)
        self._closed = False
        self._terminated = False

    @property
    def closed(self):
        return self._closed

    @property
    def terminated(self):
        """True once a Done or Error message has been sent, delivered or not."""
        return self._terminated

    def send(self, message):
        """Queue ``message`` without blocking."""
        if isinstance(message, (Done, Error)):
            self._terminated = True
        if self._closed:
            raise ChannelError(f"Progress observer is gone, dropped {message!r}")
        try:
            self._queue.put_nowait(message)
        except queue.Full as exc:
            raise ChannelError(f"Progress queue is full, dropped {message!r}") from exc

    def poll(self, timeout=0.004):
        """Return the next message, or None if none arrives within ``timeout`` seconds."""
        try:
            return self._queue.get(timeout=timeout)
        except queue.Empty:
            return None

    def drain(self):
        """Return every message currently queued, oldest first."""
        messages = []
        while True:
            try:
                messages.append(self._queue.get_nowait())
            except queue.Empty:
                return messages

    def close(self):
        """Mark the observer as gone."""
        self._closed = True
