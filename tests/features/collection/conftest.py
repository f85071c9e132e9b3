"""BDD step definitions for collection features."""

from dataclasses import dataclass, field

import pytest
from pytest_bdd import given, parsers, then, when

from json_exporter.core.collector import EXPORTER_STATUS, collect
from json_exporter.core.models import MetricDescriptor, Observation, ScrapeKind


@dataclass
class CollectionContext:
    """Mutable state shared between the steps of one scenario."""

    document: str = "{}"
    descriptors: list[MetricDescriptor] = field(default_factory=list)
    observations: list[Observation] = field(default_factory=list)

    def replace_last(self, **changes: object) -> None:
        last = self.descriptors[-1]
        values = {
            "name": last.name,
            "kind": last.kind,
            "key_path": last.key_path,
            "value_path": last.value_path,
            "label_names": last.label_names,
            "label_paths": last.label_paths,
            "value_converter": last.value_converter,
        }
        values.update(changes)
        self.descriptors[-1] = MetricDescriptor(**values)  # type: ignore[arg-type]

    def named(self, name: str) -> list[Observation]:
        return [o for o in self.observations if o.name == name]


@pytest.fixture
def ctx() -> CollectionContext:
    """Fresh scenario context for each test."""
    return CollectionContext()


@given(parsers.parse("the document '{document}'"))
def step_document(ctx: CollectionContext, document: str) -> None:
    ctx.document = document


@given(parsers.parse('an object metric "{name}" over "{key_path}" reading "{value_path}"'))
def step_object_metric(
    ctx: CollectionContext, name: str, key_path: str, value_path: str
) -> None:
    ctx.descriptors.append(
        MetricDescriptor(
            name=name, kind=ScrapeKind.OBJECT, key_path=key_path, value_path=value_path
        )
    )


@given(parsers.parse('a value metric "{name}" at "{key_path}"'))
def step_value_metric(ctx: CollectionContext, name: str, key_path: str) -> None:
    ctx.descriptors.append(
        MetricDescriptor(name=name, kind=ScrapeKind.VALUE, key_path=key_path)
    )


@given(parsers.parse('the metric has label "{label}" at "{path}"'))
def step_label(ctx: CollectionContext, label: str, path: str) -> None:
    last = ctx.descriptors[-1]
    ctx.replace_last(
        label_names=(*last.label_names, label),
        label_paths=(*last.label_paths, path),
    )


@given(parsers.parse('the metric maps "{first}" to "{first_to}" and "{second}" to "{second_to}"'))
def step_converter(
    ctx: CollectionContext, first: str, first_to: str, second: str, second_to: str
) -> None:
    value_path = ctx.descriptors[-1].value_path
    ctx.replace_last(value_converter={value_path: {first: first_to, second: second_to}})


@when("the collector runs")
def step_collect(ctx: CollectionContext) -> None:
    ctx.observations = list(collect(ctx.descriptors, ctx.document))


@then("the exporter status is reported once")
def step_status_once(ctx: CollectionContext) -> None:
    statuses = [o for o in ctx.observations if o.descriptor is EXPORTER_STATUS]
    assert len(statuses) == 1
    assert statuses[0].value == 0.0


@then(parsers.parse('"{name}" has values "{values}"'))
def step_values(ctx: CollectionContext, name: str, values: str) -> None:
    expected = [float(v) for v in values.split(",")]
    assert [o.value for o in ctx.named(name)] == expected


@then(parsers.parse('every "{name}" observation has label "{label}" set to "{value}"'))
def step_label_value(ctx: CollectionContext, name: str, label: str, value: str) -> None:
    observations = ctx.named(name)
    assert observations
    assert all(o.labels[label] == value for o in observations)


@then(parsers.parse('no "{name}" observation is produced'))
def step_no_observation(ctx: CollectionContext, name: str) -> None:
    assert ctx.named(name) == []
