"""Integration tests: parsed module configuration through to observations."""

import json
import logging
from collections.abc import Generator

import pytest

from json_exporter.adapters.logging import PACKAGE_LOGGER, configure_logging
from json_exporter.adapters.storage import InMemoryObservationStorage, RingBufferLogStorage
from json_exporter.core.collector import JSONMetricCollector
from json_exporter.core.descriptors import build_descriptors, select_module

CONFIG = {
    "modules": {
        "default": {
            "metrics": [
                {
                    "name": "example_global_value",
                    "path": "{ .counter }",
                    "help": "Example of a top-level global value scrape in the json",
                    "labels": {"environment": "beta", "location": "planet-{.location}"},
                },
                {
                    "name": "example_timestamped_value",
                    "type": "object",
                    "path": '{ .values[?(@.state == "INACTIVE")] }',
                    "epochTimestamp": "{ $.timestamp }",
                    "labels": {"environment": "beta"},
                    "values": {"count": "{.count}"},
                },
                {
                    "name": "example_value",
                    "type": "object",
                    "path": '{.values[?(@.state == "ACTIVE")]}',
                    "labels": {"environment": "beta", "id": "{.id}"},
                    "values": {
                        "active": 1,
                        "count": "{.count}",
                        "boolean": "{.some_boolean}",
                    },
                },
            ]
        }
    }
}

DATA = json.dumps(
    {
        "counter": 1234,
        "timestamp": 1657568506000,
        "values": [
            {"id": "id-A", "count": 1, "some_boolean": True, "state": "ACTIVE"},
            {"id": "id-B", "count": 2, "some_boolean": True, "state": "INACTIVE"},
            {"id": "id-C", "count": 3, "some_boolean": False, "state": "ACTIVE"},
        ],
        "location": "mars",
    }
).encode()


@pytest.fixture
def ring_buffer_logs() -> Generator[RingBufferLogStorage, None, None]:
    """Package diagnostics captured into a bounded buffer."""
    logger = logging.getLogger(PACKAGE_LOGGER)
    level, handlers = logger.level, list(logger.handlers)
    storage = RingBufferLogStorage(max_size=500)
    configure_logging("debug", storage)
    yield storage
    logger.setLevel(level)
    logger.handlers[:] = handlers


def _flatten(observations) -> list[tuple[str, dict[str, str], float]]:
    return [(o.name, o.labels, o.value) for o in observations]


class TestModuleCollection:
    """End-to-end collection for the example module."""

    @pytest.mark.tier(2)
    def test_example_module(self) -> None:
        descriptors = build_descriptors(select_module(CONFIG))
        observations = list(JSONMetricCollector(descriptors, DATA).collect())

        assert _flatten(observations) == [
            ("json_exporter_status", {}, 0.0),
            ("example_global_value", {"environment": "beta", "location": "planet-mars"}, 1234.0),
            ("example_timestamped_value_count", {"environment": "beta"}, 2.0),
            ("example_value_active", {"environment": "beta", "id": "id-A"}, 1.0),
            ("example_value_active", {"environment": "beta", "id": "id-C"}, 1.0),
            ("example_value_count", {"environment": "beta", "id": "id-A"}, 1.0),
            ("example_value_count", {"environment": "beta", "id": "id-C"}, 3.0),
            ("example_value_boolean", {"environment": "beta", "id": "id-A"}, 1.0),
            ("example_value_boolean", {"environment": "beta", "id": "id-C"}, 0.0),
        ]

    @pytest.mark.tier(2)
    def test_timestamp_only_on_timestamped_metric(self) -> None:
        descriptors = build_descriptors(select_module(CONFIG))
        observations = list(JSONMetricCollector(descriptors, DATA).collect())

        stamped = {o.name: o.timestamp for o in observations if o.timestamp is not None}
        assert stamped == {"example_timestamped_value_count": 1657568506.0}

    @pytest.mark.tier(2)
    async def test_collect_into_sink_with_diagnostics(
        self, ring_buffer_logs: RingBufferLogStorage
    ) -> None:
        """A partly broken document still reaches the sink and is diagnosed."""
        data = json.dumps(
            {"counter": "n/a", "values": [{"id": "id-A", "state": "ACTIVE", "count": 1}]}
        )
        descriptors = build_descriptors(select_module(CONFIG))
        sink = InMemoryObservationStorage()

        written = await JSONMetricCollector(descriptors, data).collect_into(sink)

        names = [o.name async for o in sink.scrape()]
        assert written == len(names)
        assert names == [
            "json_exporter_status",
            "example_value_active",
            "example_value_count",
        ]
        errors = ring_buffer_logs.read(level="ERROR")
        failed_paths = {e.attributes.get("path") for e in errors}
        assert "{ .counter }" in failed_paths
        assert "{.some_boolean}" in failed_paths
