"""Extract metric observations from JSON documents."""

from json_exporter.adapters.logging import DiagnosticsHandler, configure_logging
from json_exporter.adapters.storage import (
    InMemoryLogStorage,
    InMemoryObservationStorage,
    RingBufferLogStorage,
)
from json_exporter.core.collector import (
    EXPORTER_STATUS,
    JSONMetricCollector,
    collect,
)
from json_exporter.core.descriptors import build_descriptors, select_module
from json_exporter.core.errors import (
    ConfigurationError,
    DocumentDecodeError,
    ExtractionError,
    JSONExporterError,
    NormalizationError,
    PathEvaluationError,
    PathNotFoundError,
    PathSyntaxError,
)
from json_exporter.core.jsonpath import evaluate, extract_value
from json_exporter.core.models import (
    LogEntry,
    MetricDescriptor,
    Observation,
    ScrapeKind,
    ScrapeScope,
    ValueType,
)

__all__ = [
    "EXPORTER_STATUS",
    "ConfigurationError",
    "DiagnosticsHandler",
    "DocumentDecodeError",
    "ExtractionError",
    "InMemoryLogStorage",
    "InMemoryObservationStorage",
    "JSONExporterError",
    "JSONMetricCollector",
    "LogEntry",
    "MetricDescriptor",
    "NormalizationError",
    "Observation",
    "PathEvaluationError",
    "PathNotFoundError",
    "PathSyntaxError",
    "RingBufferLogStorage",
    "ScrapeKind",
    "ScrapeScope",
    "ValueType",
    "build_descriptors",
    "collect",
    "configure_logging",
    "evaluate",
    "extract_value",
    "select_module",
]
