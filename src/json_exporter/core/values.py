"""Conversion of extracted text into metric values."""

import math

from json_exporter.core.errors import NormalizationError
from json_exporter.core.models import MetricDescriptor

_TRUE_STRINGS = frozenset({"1", "t", "T", "TRUE", "true", "True"})
_FALSE_STRINGS = frozenset({"0", "f", "F", "FALSE", "false", "False"})


def _strip(text: str) -> str:
    text = text.strip()
    if len(text) >= 2 and text[0] == text[-1] and text[0] in "\"'":
        text = text[1:-1].strip()
    return text


def sanitize_value(text: str) -> float:
    """Convert extracted text to a finite float.

    Surrounding whitespace and one layer of matching quotes are ignored.
    Boolean words ("true", "F", ...) map to 1.0 and 0.0.

    Args:
        text: Text produced by the path evaluator.

    Returns:
        The numeric value.

    Raises:
        NormalizationError: If the text is not a finite number or a boolean.
    """
    candidate = _strip(text)
    try:
        # float() also accepts digit separators such as "1_000"
        if "_" in candidate:
            raise ValueError(candidate)
        value = float(candidate)
    except ValueError:
        if candidate in _TRUE_STRINGS:
            return 1.0
        if candidate in _FALSE_STRINGS:
            return 0.0
        raise NormalizationError(f"cannot convert {text!r} to a number") from None
    if not math.isfinite(value):
        raise NormalizationError(f"{text!r} is not a finite number")
    return value


def sanitize_int_value(text: str) -> int:
    """Convert extracted text to an integer (used for epoch timestamps).

    Raises:
        NormalizationError: If the text is not a base-10 integer.
    """
    candidate = _strip(text)
    try:
        if "_" in candidate:
            raise ValueError(candidate)
        return int(candidate, 10)
    except ValueError:
        raise NormalizationError(f"cannot convert {text!r} to an integer") from None


def convert_value(descriptor: MetricDescriptor, value: str) -> str:
    """Apply the descriptor's value converter table, if any.

    Lookup is case-insensitive. Values without a table entry are returned
    exactly as extracted.
    """
    mappings = descriptor.value_converter.get(descriptor.value_path)
    if mappings is None:
        return value
    return mappings.get(value.lower(), value)
