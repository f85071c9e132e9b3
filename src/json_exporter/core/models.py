"""Core domain models for metric extraction."""

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any

from json_exporter.core.errors import ConfigurationError


class ScrapeKind(Enum):
    """How a metric locates its value in the document.

    VALUE reads a single scalar at the key path. OBJECT iterates the array
    found at the key path and reads the value path from every element.
    """

    VALUE = "value"
    OBJECT = "object"


class ValueType(Enum):
    """How an observation is exposed. Does not affect extraction."""

    GAUGE = "gauge"
    COUNTER = "counter"
    UNTYPED = "untyped"


@dataclass(frozen=True)
class MetricDescriptor:
    """Immutable description of one configured metric.

    Attributes:
        name: Metric name (e.g., "example_global_value").
        help: Help text shown alongside the metric.
        kind: Scrape kind, see ScrapeKind.
        key_path: Path to the scalar value (VALUE) or to the array (OBJECT).
        value_path: Path evaluated against each array element (OBJECT only).
        label_names: Declared label names.
        label_paths: One path per label name, in the same order.
        value_type: Counter, gauge or untyped.
        value_converter: Value path -> {lowercase raw value -> replacement}.
        epoch_timestamp_path: Path to a Unix epoch in milliseconds.
    """

    name: str
    kind: ScrapeKind
    key_path: str
    help: str = ""
    value_path: str = ""
    label_names: tuple[str, ...] = ()
    label_paths: tuple[str, ...] = ()
    value_type: ValueType = ValueType.UNTYPED
    value_converter: Mapping[str, Mapping[str, str]] = field(
        default_factory=dict, compare=False
    )
    epoch_timestamp_path: str = ""

    def __post_init__(self) -> None:
        object.__setattr__(self, "label_names", tuple(self.label_names))
        object.__setattr__(self, "label_paths", tuple(self.label_paths))
        object.__setattr__(
            self,
            "value_converter",
            MappingProxyType(
                {
                    path: MappingProxyType(
                        {key.lower(): str(repl) for key, repl in table.items()}
                    )
                    for path, table in self.value_converter.items()
                }
            ),
        )
        if len(self.label_names) != len(self.label_paths):
            raise ConfigurationError(
                f"metric {self.name!r} declares {len(self.label_names)} label "
                f"names but {len(self.label_paths)} label paths"
            )


@dataclass(frozen=True)
class Observation:
    """A single extracted metric instance.

    Attributes:
        descriptor: The descriptor this observation was produced from.
        value: The normalized metric value.
        label_values: Label values, aligned with descriptor.label_names.
        timestamp: Unix timestamp in seconds, or None for "now".
    """

    descriptor: MetricDescriptor
    value: float
    label_values: tuple[str, ...] = ()
    timestamp: float | None = None

    @property
    def name(self) -> str:
        return self.descriptor.name

    @property
    def labels(self) -> dict[str, str]:
        """Label names mapped to their resolved values."""
        return dict(zip(self.descriptor.label_names, self.label_values, strict=True))


@dataclass(frozen=True)
class ScrapeScope:
    """The two documents a label path can be evaluated against.

    Attributes:
        current: The array element being visited, or the root document.
        root: The whole document handed to the collector.
    """

    current: Any
    root: Any


@dataclass(frozen=True)
class LogEntry:
    """A structured diagnostic log entry.

    Attributes:
        timestamp: Unix timestamp in seconds.
        level: Log level (e.g., INFO, ERROR, DEBUG).
        message: The log message.
        attributes: Additional structured fields.
    """

    timestamp: float
    level: str
    message: str
    attributes: dict[str, str | int | float | bool] = field(default_factory=dict)
