"""In-memory storage adapters for diagnostics and observations."""

from collections.abc import AsyncIterable, Iterable

from json_exporter.core.models import LogEntry, Observation


def _filter_entries(
    entries: Iterable[LogEntry], since: float, level: str | None
) -> list[LogEntry]:
    """Entries newer than since (and at level, if given), oldest first."""
    filtered = [
        e
        for e in entries
        if e.timestamp > since and (level is None or e.level == level.upper())
    ]
    return sorted(filtered, key=lambda e: e.timestamp)


class InMemoryLogStorage:
    """In-memory implementation of LogStoragePort.

    Stores log entries in a list. Suitable for testing and
    short-lived processes where persistence is not required.
    """

    def __init__(self) -> None:
        self._entries: list[LogEntry] = []

    def write(self, entry: LogEntry) -> None:
        """Write a log entry to storage."""
        self._entries.append(entry)

    def read(self, since: float = 0, level: str | None = None) -> list[LogEntry]:
        """Read log entries since the given timestamp.

        Returns entries with timestamp > since, ordered by timestamp ascending.
        """
        return _filter_entries(self._entries, since, level)

    def clear(self) -> None:
        self._entries.clear()


class InMemoryObservationStorage:
    """In-memory implementation of ObservationSinkPort.

    Keeps observations in write order until cleared, so one instance
    can hold the result of a single scrape.
    """

    def __init__(self) -> None:
        self._observations: list[Observation] = []

    async def write(self, observation: Observation) -> None:
        """Write an observation to storage."""
        self._observations.append(observation)

    async def scrape(self) -> AsyncIterable[Observation]:
        """Yield all stored observations in write order."""
        for observation in self._observations:
            yield observation

    def clear(self) -> None:
        self._observations.clear()
