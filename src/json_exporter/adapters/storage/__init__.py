"""Storage adapters implementing core ports."""

from json_exporter.adapters.storage.in_memory import (
    InMemoryLogStorage,
    InMemoryObservationStorage,
)
from json_exporter.adapters.storage.ring_buffer import RingBufferLogStorage

__all__ = [
    "InMemoryLogStorage",
    "InMemoryObservationStorage",
    "RingBufferLogStorage",
]
