"""Ring buffer storage adapter for diagnostics.

Provides bounded in-memory storage that automatically evicts oldest
entries when the buffer is full. Useful for long-running exporters
that keep recent extraction failures around for inspection.
"""

from collections import deque

from json_exporter.adapters.storage.in_memory import _filter_entries
from json_exporter.core.models import LogEntry


class RingBufferLogStorage:
    """Ring buffer implementation of LogStoragePort.

    Stores log entries in a fixed-size circular buffer. When the buffer
    is full, the oldest entry is automatically evicted to make room for
    new entries.

    Args:
        max_size: Maximum number of entries to store.
    """

    def __init__(self, max_size: int) -> None:
        if max_size < 1:
            raise ValueError(f"max_size must be positive, got {max_size}")
        self._buffer: deque[LogEntry] = deque(maxlen=max_size)

    def write(self, entry: LogEntry) -> None:
        """Write a log entry to storage."""
        self._buffer.append(entry)

    def read(self, since: float = 0, level: str | None = None) -> list[LogEntry]:
        """Read log entries since the given timestamp.

        Returns entries with timestamp > since, ordered by timestamp ascending.
        """
        return _filter_entries(self._buffer, since, level)
