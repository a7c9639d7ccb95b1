"""One-directional channel for human-readable scan progress lines."""

import queue
import threading
from typing import Iterator, Optional

_CLOSED = object()


class ProgressChannel:
    """
    Queue-backed stream of progress lines.

    Producers call put() from any thread; the scanner calls close() exactly
    once when it is done. Consumers iterate until the channel is closed.
    """

    def __init__(self, maxsize: int = 0):
        self._queue: queue.Queue = queue.Queue(maxsize=maxsize)
        self._closed = False
        self._lock = threading.Lock()

    @property
    def closed(self) -> bool:
        return self._closed

    def put(self, line: str) -> None:
        """Send a line. Lines sent after close() are dropped."""
        with self._lock:
            if self._closed:
                return
            self._queue.put(line)

    def close(self) -> None:
        """Close the channel. Further calls are no-ops."""
        with self._lock:
            if self._closed:
                return
            self._closed = True
        self._queue.put(_CLOSED)

    def get(self, timeout: Optional[float] = None) -> Optional[str]:
        """
        Receive the next line.

        Returns:
            The line, or None once the channel is closed and drained

        Raises:
            queue.Empty: If timeout expires with nothing available
        """
        item = self._queue.get(timeout=timeout)
        if item is _CLOSED:
            # Leave the marker in place for any other consumer
            self._queue.put(_CLOSED)
            return None
        return item

    def __iter__(self) -> Iterator[str]:
        while True:
            line = self.get()
            if line is None:
                return
            yield line

    def drain(self) -> list[str]:
        """Collect every line until the channel is closed."""
        return list(self)
