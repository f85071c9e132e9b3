"""Build metric descriptors from an already-parsed mapping configuration.

The mapping mirrors the exporter's configuration file once it has been loaded
into plain Python values, e.g.::

    {
        "metrics": [
            {"name": "example_global_value", "path": "{ .counter }",
             "labels": {"environment": "beta"}},
            {"name": "example_value", "type": "object",
             "path": "{.values[?(@.state == \"ACTIVE\")]}",
             "labels": {"id": "{.id}"},
             "values": {"count": "{.count}"}},
        ]
    }
"""

import json
import re
from collections.abc import Mapping
from typing import Any

from json_exporter.core.errors import ConfigurationError
from json_exporter.core.models import MetricDescriptor, ScrapeKind, ValueType

_METRIC_NAME_RE = re.compile(r"^[a-zA-Z_:][a-zA-Z0-9_:]*$")
_LABEL_NAME_RE = re.compile(r"^[a-zA-Z_][a-zA-Z0-9_]*$")
_INVALID_NAME_CHARS = re.compile(r"[^a-zA-Z0-9_:]")


def make_metric_name(*parts: str) -> str:
    """Join name parts with "_" and replace characters invalid in metric names."""
    return _INVALID_NAME_CHARS.sub("_", "_".join(parts))


def config_path(raw: Any) -> str:
    """Normalize a configured path.

    Configured text without an action or a leading anchor is a constant, as
    in ``environment: beta``, and becomes a quoted literal action.
    """
    if raw is None or raw == "":
        return ""
    text = str(raw)
    if "{" in text or text.lstrip()[:1] in ("$", "@", ".", "["):
        return text
    return "{" + json.dumps(text) + "}"


def parse_scrape_kind(raw: Any) -> ScrapeKind:
    """Map a configured type string to a ScrapeKind ("value" when unset)."""
    if raw is None or raw == "":
        return ScrapeKind.VALUE
    try:
        return ScrapeKind(str(raw).lower())
    except ValueError:
        raise ConfigurationError(f"unknown metric type: {raw!r}") from None


def parse_value_type(raw: Any) -> ValueType:
    """Map a configured valuetype string to a ValueType ("untyped" when unset)."""
    if raw is None or raw == "":
        return ValueType.UNTYPED
    try:
        return ValueType(str(raw).lower())
    except ValueError:
        raise ConfigurationError(f"unknown value type: {raw!r}") from None


def _require_mapping(raw: Any, what: str) -> Mapping[str, Any]:
    if raw is None:
        return {}
    if not isinstance(raw, Mapping):
        raise ConfigurationError(f"{what} must be a mapping, got {type(raw).__name__}")
    return raw


def build_descriptor_set(metric: Mapping[str, Any]) -> list[MetricDescriptor]:
    """Build the descriptors for one configured metric.

    A value metric produces one descriptor. An object metric produces one
    descriptor per entry of its "values" mapping, named "<name>_<key>".

    Raises:
        ConfigurationError: If the metric entry is invalid.
    """
    name = metric.get("name")
    if not name or not isinstance(name, str):
        raise ConfigurationError("metric is missing a name")
    if not _METRIC_NAME_RE.match(name):
        raise ConfigurationError(f"invalid metric name: {name!r}")
    path = metric.get("path")
    if not path or not isinstance(path, str):
        raise ConfigurationError(f"metric {name!r} is missing a path")

    labels = _require_mapping(metric.get("labels"), f"labels of {name!r}")
    for label in labels:
        if not _LABEL_NAME_RE.match(str(label)):
            raise ConfigurationError(f"invalid label name {label!r} in {name!r}")
    converter = _require_mapping(metric.get("valueconverter"), f"valueconverter of {name!r}")

    common: dict[str, Any] = {
        "help": str(metric.get("help") or name),
        "key_path": config_path(path),
        "label_names": tuple(str(label) for label in labels),
        "label_paths": tuple(config_path(p) for p in labels.values()),
        "value_type": parse_value_type(metric.get("valuetype")),
        "epoch_timestamp_path": config_path(metric.get("epochTimestamp")),
    }

    kind = parse_scrape_kind(metric.get("type"))
    match kind:
        case ScrapeKind.VALUE:
            return [MetricDescriptor(name=name, kind=kind, **common)]
        case ScrapeKind.OBJECT:
            values = _require_mapping(metric.get("values"), f"values of {name!r}")
            if not values:
                raise ConfigurationError(f"object metric {name!r} defines no values")
            return [
                MetricDescriptor(
                    name=make_metric_name(name, str(suffix)),
                    kind=kind,
                    value_path=config_path(value_path),
                    value_converter={
                        str(p): _require_mapping(t, f"valueconverter of {name!r}")
                        for p, t in converter.items()
                    },
                    **common,
                )
                for suffix, value_path in values.items()
            ]


def build_descriptors(module: Mapping[str, Any]) -> list[MetricDescriptor]:
    """Build every descriptor of a module, in configured order.

    Args:
        module: Parsed module mapping with a "metrics" list.

    Raises:
        ConfigurationError: If any metric entry is invalid.
    """
    metrics = module.get("metrics") or []
    if not isinstance(metrics, list):
        raise ConfigurationError("metrics must be a list")
    descriptors: list[MetricDescriptor] = []
    for metric in metrics:
        descriptors.extend(build_descriptor_set(_require_mapping(metric, "metric")))
    return descriptors


def select_module(config: Mapping[str, Any], name: str = "default") -> Mapping[str, Any]:
    """Return a named module from a parsed configuration.

    Raises:
        ConfigurationError: If the module is not configured.
    """
    modules = _require_mapping(config.get("modules"), "modules")
    if name not in modules:
        raise ConfigurationError(f"unknown module {name!r}")
    return _require_mapping(modules[name], f"module {name!r}")
