"""Collection of observations from a JSON document.

The collector walks the configured descriptors in order and yields one
observation per successfully extracted metric instance. Failures of a single
descriptor or array element are logged and skipped; a collection run never
raises to its caller.
"""

import json
import logging
from collections.abc import Iterable, Iterator, Sequence
from typing import Any

from json_exporter.core.errors import (
    DocumentDecodeError,
    ExtractionError,
    NormalizationError,
)
from json_exporter.core.jsonpath import compile_path, evaluate, load_document
from json_exporter.core.labels import resolve_labels, select_scope
from json_exporter.core.models import (
    MetricDescriptor,
    Observation,
    ScrapeKind,
    ScrapeScope,
    ValueType,
)
from json_exporter.core.ports import ObservationSinkPort
from json_exporter.core.values import convert_value, sanitize_int_value, sanitize_value

logger = logging.getLogger(__name__)

EXPORTER_STATUS = MetricDescriptor(
    name="json_exporter_status",
    help="Up/Down Status of JSON Exporter. Should always be 0.",
    kind=ScrapeKind.VALUE,
    key_path="",
    value_type=ValueType.GAUGE,
)


def status_observation() -> Observation:
    """The fixed observation emitted once per collection run."""
    return Observation(descriptor=EXPORTER_STATUS, value=0.0)


def collect(
    descriptors: Iterable[MetricDescriptor], data: bytes | str
) -> Iterator[Observation]:
    """Lazily extract observations from a raw JSON document.

    Args:
        descriptors: Metric descriptors, in the order observations should
            be produced.
        data: The raw JSON document.

    Yields:
        The exporter status observation, then observations per descriptor.
    """
    yield status_observation()
    try:
        root = load_document(data)
    except DocumentDecodeError as e:
        logger.error("Failed to unmarshal data to json", extra={"error": str(e)})
        return
    for descriptor in descriptors:
        yield from scrape_metric(descriptor, root)


def scrape_metric(descriptor: MetricDescriptor, root: Any) -> Iterator[Observation]:
    """Yield the observations for a single descriptor."""
    match descriptor.kind:
        case ScrapeKind.VALUE:
            observation = _scrape_value(descriptor, root)
            if observation is not None:
                yield observation
        case ScrapeKind.OBJECT:
            yield from _scrape_objects(descriptor, root)
        case _:
            logger.error(
                "Unknown scrape config type",
                extra={"type": str(descriptor.kind), "metric": descriptor.name},
            )


def _scrape_value(descriptor: MetricDescriptor, root: Any) -> Observation | None:
    logger.info(
        "Extracting value via ValueScrape",
        extra={"path": descriptor.key_path, "metric": descriptor.name},
    )
    try:
        text = evaluate(root, descriptor.key_path)
    except ExtractionError as e:
        logger.error(
            "Failed to extract value for metric",
            extra={"path": descriptor.key_path, "metric": descriptor.name, "error": str(e)},
        )
        return None
    try:
        value = sanitize_value(text)
    except NormalizationError as e:
        logger.error(
            "Failed to convert extracted value to float",
            extra={
                "path": descriptor.key_path,
                "value": text,
                "metric": descriptor.name,
                "error": str(e),
            },
        )
        return None
    return _observe(descriptor, value, ScrapeScope(current=root, root=root))


def _scrape_objects(descriptor: MetricDescriptor, root: Any) -> Iterator[Observation]:
    logger.info(
        "Extracting value via ObjectScrape",
        extra={"path": descriptor.key_path, "metric": descriptor.name},
    )
    try:
        elements = json.loads(evaluate(root, descriptor.key_path, json_output=True))
    except ExtractionError as e:
        logger.error(
            "Failed to extract json objects for metric",
            extra={"path": descriptor.key_path, "metric": descriptor.name, "error": str(e)},
        )
        return
    # "{.items}" matches the array itself rather than its elements
    if (
        len(elements) == 1
        and isinstance(elements[0], list)
        and compile_path(descriptor.key_path).selects_field
    ):
        elements = elements[0]
    logger.debug(
        "Extracted json objects",
        extra={"path": descriptor.key_path, "metric": descriptor.name, "count": len(elements)},
    )
    for element in elements:
        observation = _scrape_element(descriptor, element, root)
        if observation is not None:
            yield observation


def _scrape_element(
    descriptor: MetricDescriptor, element: Any, root: Any
) -> Observation | None:
    try:
        text = evaluate(element, descriptor.value_path)
    except ExtractionError as e:
        logger.error(
            "Failed to extract value for metric",
            extra={"path": descriptor.value_path, "metric": descriptor.name, "error": str(e)},
        )
        return None
    text = convert_value(descriptor, text)
    try:
        value = sanitize_value(text)
    except NormalizationError as e:
        logger.error(
            "Failed to convert extracted value to float",
            extra={
                "path": descriptor.value_path,
                "value": text,
                "metric": descriptor.name,
                "error": str(e),
            },
        )
        return None
    return _observe(descriptor, value, ScrapeScope(current=element, root=root))


def _observe(
    descriptor: MetricDescriptor, value: float, scope: ScrapeScope
) -> Observation:
    return Observation(
        descriptor=descriptor,
        value=value,
        label_values=resolve_labels(descriptor.label_paths, scope, descriptor.name),
        timestamp=_timestamp(descriptor, scope),
    )


def _timestamp(descriptor: MetricDescriptor, scope: ScrapeScope) -> float | None:
    """Epoch timestamp in seconds, read from a millisecond value."""
    path = descriptor.epoch_timestamp_path
    if not path:
        return None
    try:
        millis = sanitize_int_value(evaluate(select_scope(path, scope), path))
    except (ExtractionError, NormalizationError) as e:
        logger.error(
            "Failed to extract timestamp for metric",
            extra={"path": path, "metric": descriptor.name, "error": str(e)},
        )
        return None
    return millis / 1000


class JSONMetricCollector:
    """Collects observations for a fixed descriptor list and document.

    One collector is built per scrape. Descriptors are shared read-only, so
    collectors for different documents can run concurrently.

    Example:
        ```python
        collector = JSONMetricCollector(descriptors, response_body)
        for observation in collector.collect():
            print(observation.name, observation.labels, observation.value)
        ```
    """

    def __init__(
        self, descriptors: Sequence[MetricDescriptor], data: bytes | str
    ) -> None:
        """Initialize the collector.

        Args:
            descriptors: Validated metric descriptors.
            data: The raw JSON document fetched from the target.
        """
        self.descriptors = tuple(descriptors)
        self.data = data

    def describe(self) -> Iterator[MetricDescriptor]:
        """Yield every descriptor this collector can produce, status first."""
        yield EXPORTER_STATUS
        yield from self.descriptors

    def collect(self) -> Iterator[Observation]:
        """Lazily yield the observations for this collector's document."""
        return collect(self.descriptors, self.data)

    async def collect_into(self, sink: ObservationSinkPort) -> int:
        """Write every observation to a sink.

        Returns:
            Number of observations written, including the status observation.
        """
        written = 0
        for observation in self.collect():
            await sink.write(observation)
            written += 1
        logger.info("Collected observations", extra={"count": written})
        return written
