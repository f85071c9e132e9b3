"""Label resolution against the current element or the root document."""

import logging
from collections.abc import Sequence
from typing import Any

from json_exporter.core.errors import ExtractionError
from json_exporter.core.jsonpath import evaluate
from json_exporter.core.models import ScrapeScope

logger = logging.getLogger(__name__)


def is_root_anchored(path: str) -> bool:
    """Check whether a path starts with the "$" root anchor.

    Spaces are ignored and the anchor may sit behind an opening brace,
    so "$.a", "{$.a}" and "{ $.a }" are all root anchored.
    """
    return "$" in path.replace(" ", "")[:4]


def select_scope(path: str, scope: ScrapeScope) -> Any:
    """Pick the document a label or timestamp path is evaluated against."""
    if is_root_anchored(path):
        logger.debug("Using JSON data from the root", extra={"path": path})
        return scope.root
    logger.debug("Using JSON data from the child node", extra={"path": path})
    return scope.current


def resolve_labels(
    paths: Sequence[str], scope: ScrapeScope, metric: str = ""
) -> tuple[str, ...]:
    """Resolve every label path to a string.

    Args:
        paths: Label paths, in declared label order.
        scope: Current and root documents.
        metric: Metric name, used only for diagnostics.

    Returns:
        One value per path. A path that fails resolves to "".
    """
    labels: list[str] = []
    for path in paths:
        try:
            labels.append(evaluate(select_scope(path, scope), path))
        except ExtractionError as e:
            logger.error(
                "Failed to extract label value",
                extra={"path": path, "metric": metric, "error": str(e)},
            )
            labels.append("")
    return tuple(labels)
