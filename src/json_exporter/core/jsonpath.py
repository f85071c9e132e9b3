"""JSONPath template evaluation against parsed JSON documents.

Paths use the Kubernetes template flavour of JSONPath: literal text mixed
with ``{...}`` actions, e.g. ``{.items[*].name}`` or ``cpu={.stats.cpu}``.
A path without any braces is evaluated as a single action, so ``$.status``
and ``{$.status}`` are equivalent.

Each action is either a quoted constant such as ``{"beta"}`` or an
expression handed to ``jsonpath_ng.ext``. Expressions may start with ``$``,
``@``, ``.``, ``[`` or a bare field name; all of them are rooted at the node
being evaluated.
"""

import json
import logging
from dataclasses import dataclass, field
from functools import lru_cache
from typing import Any

from jsonpath_ng.exceptions import JSONPathError
from jsonpath_ng.ext import parse
from jsonpath_ng.jsonpath import Child, Fields, JSONPath

from json_exporter.core.errors import (
    DocumentDecodeError,
    ExtractionError,
    PathEvaluationError,
    PathNotFoundError,
    PathSyntaxError,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Action:
    """A single ``{...}`` block of a template.

    Attributes:
        text: The action's source text, without braces.
        expression: The parsed expression, or None for a quoted constant.
        constant: The constant's value when expression is None.
    """

    text: str
    expression: JSONPath | None = field(default=None, compare=False)
    constant: str = ""

    def find(self, node: Any) -> list[Any]:
        if self.expression is None:
            return [self.constant]
        return [match.value for match in self.expression.find(node)]


@dataclass(frozen=True)
class CompiledPath:
    """A parsed path template, reusable across documents.

    Attributes:
        source: The original path text.
        segments: Literal text (str) and Action blocks, in template order.
    """

    source: str
    segments: tuple[str | Action, ...]

    @property
    def selects_field(self) -> bool:
        """Whether the template is one action ending in a single named field.

        ``{.items}`` selects a field; ``{.items[*]}``, ``{..items}`` and
        ``{.items[0]}`` do not.
        """
        if len(self.segments) != 1 or not isinstance(self.segments[0], Action):
            return False
        expression = self.segments[0].expression
        if isinstance(expression, Child):
            expression = expression.right
        return (
            isinstance(expression, Fields)
            and len(expression.fields) == 1
            and expression.fields[0] != "*"
        )

    def find(self, node: Any) -> list[Any]:
        """Return every node matched by the template's actions."""
        matches: list[Any] = []
        for segment in self.segments:
            if isinstance(segment, Action):
                matches.extend(self._find_action(segment, node))
        return matches

    def render(self, node: Any) -> str:
        """Render the template as text, joining multiple matches with spaces."""
        parts: list[str] = []
        for segment in self.segments:
            if isinstance(segment, str):
                parts.append(segment)
                continue
            matches = self._find_action(segment, node)
            if not matches:
                raise PathNotFoundError(
                    f"path {self.source!r} matched nothing", self.source
                )
            parts.append(" ".join(render_node(match) for match in matches))
        return "".join(parts)

    def _find_action(self, action: Action, node: Any) -> list[Any]:
        try:
            return action.find(node)
        except (TypeError, ValueError, KeyError, AttributeError, RecursionError) as e:
            raise PathEvaluationError(
                f"cannot evaluate {action.text!r} in {self.source!r}: {e}", self.source
            ) from e


def load_document(data: bytes | bytearray | str) -> Any:
    """Parse raw JSON text into Python values.

    Raises:
        DocumentDecodeError: If the data is not valid JSON or nests too deeply.
    """
    try:
        return json.loads(data)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise DocumentDecodeError(f"invalid JSON document: {e}") from e
    except RecursionError as e:
        raise DocumentDecodeError("JSON document is nested too deeply") from e


@lru_cache(maxsize=1024)
def compile_path(path: str) -> CompiledPath:
    """Parse a path template.

    Raises:
        PathSyntaxError: If the template or any action in it is malformed.
    """
    if not path.strip():
        raise PathSyntaxError("empty path", path)
    if "{" not in path:
        return CompiledPath(path, (_parse_action(path, path),))

    segments: list[str | Action] = []
    pos = 0
    while pos < len(path):
        start = path.find("{", pos)
        if start == -1:
            segments.append(path[pos:])
            break
        if start > pos:
            segments.append(path[pos:start])
        end = _find_closing(path, start)
        inner = path[start + 1 : end]
        if not inner.strip():
            raise PathSyntaxError(f"empty action in {path!r}", path)
        segments.append(_parse_action(inner, path))
        pos = end + 1
    return CompiledPath(path, tuple(segments))


def evaluate(node: Any, path: str, json_output: bool = False) -> str:
    """Evaluate a path against an already parsed JSON value.

    Args:
        node: Parsed JSON (a string node is a JSON string, not a document).
        path: Path template to evaluate.
        json_output: Render every match as one JSON array instead of text.

    Returns:
        The textual rendering of the match (unquoted if it is a quoted
        literal), or a JSON array of matches when json_output is set.

    Raises:
        ExtractionError: Any of its subclasses, depending on what failed.
    """
    try:
        compiled = compile_path(path)
        if json_output:
            result = _dump_matches(compiled, node)
        else:
            result = unquote(compiled.render(node))
    except ExtractionError as e:
        logger.debug(
            "Failed to evaluate jsonpath",
            extra={"path": path, "error": str(e), "error_type": type(e).__name__},
        )
        raise
    logger.debug("Evaluated jsonpath", extra={"path": path, "result": result})
    return result


def extract_value(document: Any, path: str, json_output: bool = False) -> str:
    """Evaluate a path against a JSON document.

    Args:
        document: Raw JSON as bytes or str, which is parsed first, or an
            already parsed dict, list or scalar.
        path: Path template to evaluate.
        json_output: Render every match as one JSON array instead of text.

    Raises:
        ExtractionError: Any of its subclasses, depending on what failed.
    """
    if isinstance(document, bytes | bytearray | str):
        document = load_document(document)
    return evaluate(document, path, json_output)


def render_node(node: Any) -> str:
    """Render a matched JSON value as text."""
    if isinstance(node, str):
        return node
    if isinstance(node, bool):
        return "true" if node else "false"
    if node is None:
        return "null"
    if isinstance(node, float):
        if node.is_integer() and abs(node) < 1e21:
            return str(int(node))
        return repr(node)
    if isinstance(node, int):
        return str(node)
    return json.dumps(node, separators=(",", ":"))


def unquote(text: str) -> str:
    """Strip one layer of matching quotes, returning text unchanged otherwise."""
    if len(text) < 2 or text[0] != text[-1] or text[0] not in "\"'":
        return text
    if text[0] == '"':
        try:
            value = json.loads(text)
        except json.JSONDecodeError:
            return text
        return value if isinstance(value, str) else text
    return text[1:-1].replace("\\'", "'")


def _dump_matches(compiled: CompiledPath, node: Any) -> str:
    matches = compiled.find(node)
    try:
        return json.dumps(matches, separators=(",", ":"))
    except (TypeError, ValueError, RecursionError) as e:
        raise PathEvaluationError(
            f"cannot render matches of {compiled.source!r}: {e}", compiled.source
        ) from e


def _find_closing(text: str, start: int) -> int:
    """Return the index of the brace closing text[start], skipping quotes."""
    depth = 0
    quote: str | None = None
    pos = start
    while pos < len(text):
        char = text[pos]
        if quote is not None:
            if char == "\\":
                pos += 1
            elif char == quote:
                quote = None
        elif char in "\"'":
            quote = char
        elif char == "{":
            depth += 1
        elif char == "}":
            depth -= 1
            if depth == 0:
                return pos
        pos += 1
    raise PathSyntaxError(f"unclosed '{{' in {text!r}", text)


def _parse_action(text: str, source: str) -> Action:
    expr = text.strip()
    if len(expr) >= 2 and expr[0] in "\"'" and expr[-1] == expr[0]:
        return Action(text, constant=_parse_constant(expr, source))
    try:
        expression = parse(_rooted(expr))
    except JSONPathError as e:
        raise PathSyntaxError(f"invalid path {source!r}: {e}", source) from e
    return Action(text, expression=expression)


def _rooted(expr: str) -> str:
    """Rewrite an action so it starts at "$", the node being evaluated."""
    if expr in (".", "@"):
        return "$"
    if expr[0] == "@":
        return "$" + expr[1:]
    if expr[0] in ".[":
        return "$" + expr
    if expr[0] == "$":
        return expr
    return "$." + expr


def _parse_constant(text: str, source: str) -> str:
    if text[0] == "'":
        return text[1:-1].replace("\\'", "'")
    try:
        value = json.loads(text)
    except json.JSONDecodeError as e:
        raise PathSyntaxError(f"invalid string literal {text} in {source!r}", source) from e
    return value
