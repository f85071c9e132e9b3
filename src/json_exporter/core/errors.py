"""Exception types raised by the extraction engine and descriptor builder."""


class JSONExporterError(Exception):
    """Base class for all json_exporter errors."""


class ExtractionError(JSONExporterError):
    """A path expression could not be evaluated against a document.

    Attributes:
        path: The path expression that failed, if known.
    """

    def __init__(self, message: str, path: str | None = None) -> None:
        super().__init__(message)
        self.path = path


class DocumentDecodeError(ExtractionError):
    """The document is not valid JSON."""


class PathSyntaxError(ExtractionError):
    """The path expression could not be parsed."""


class PathNotFoundError(ExtractionError):
    """The path expression matched nothing in the document."""


class PathEvaluationError(ExtractionError):
    """The path expression hit a type mismatch or an out-of-range index."""


class NormalizationError(JSONExporterError, ValueError):
    """Extracted text is not representable as a finite number."""


class ConfigurationError(JSONExporterError, ValueError):
    """A metric mapping is invalid."""
