"""Port interfaces for observation sinks and diagnostic log storage.

These protocols define the contracts that adapters must implement.
The core depends only on these interfaces, not concrete implementations.
"""

from collections.abc import Iterable
from typing import Protocol, runtime_checkable

from json_exporter.core.models import LogEntry, Observation


@runtime_checkable
class LogStoragePort(Protocol):
    """Port for diagnostic log storage.

    Adapters implementing this protocol can store and retrieve log entries.
    Examples: InMemoryLogStorage, RingBufferLogStorage.
    """

    def write(self, entry: LogEntry) -> None:
        """Write a log entry to storage."""
        ...

    def read(self, since: float = 0, level: str | None = None) -> Iterable[LogEntry]:
        """Read log entries since the given timestamp.

        Args:
            since: Unix timestamp. Returns entries with timestamp > since.
                   Default 0 returns all entries.
            level: Only return entries at this level (e.g. "ERROR").

        Returns:
            Iterable of LogEntry objects, ordered by timestamp ascending.
        """
        ...


@runtime_checkable
class ObservationSinkPort(Protocol):
    """Port handing observations over to an exposition layer.

    Examples: InMemoryObservationStorage.
    """

    async def write(self, observation: Observation) -> None:
        """Write one observation to the sink."""
        ...
