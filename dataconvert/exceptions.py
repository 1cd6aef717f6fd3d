"""
Error kinds raised by the conversion core.

Every error carries a human-readable message, the format it relates to (when
there is one), a free-form ``details`` mapping that ends up in logs and HTTP
error responses, and a stable ``code`` string.
"""

from typing import Any, Dict, Optional


class DataConversionError(Exception):
    """Base class for all conversion core errors."""

    code = "INTERNAL_ERROR"

    def __init__(self, message: str, format_type: Optional[str] = None, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.format_type = format_type
        self.details = details or {}


class MissingInputError(DataConversionError):
    """A required request field is absent or empty."""

    code = "MISSING_INPUT"


class FormatSyntaxError(DataConversionError):
    """Input text does not conform to the grammar of its declared format."""

    code = "SYNTAX_ERROR"


class UnsupportedFormatError(DataConversionError, ValueError):
    """A format token is not one of the recognized formats."""

    code = "UNSUPPORTED_FORMAT"


class UnsupportedShapeError(DataConversionError):
    """A canonical value cannot be represented in the target format."""

    code = "UNSUPPORTED_SHAPE"


class ConversionError(DataConversionError):
    """A native conversion failed while parsing or serializing."""

    PARSE = "parse"
    SERIALIZE = "serialize"

    def __init__(self, stage: str, cause: DataConversionError):
        message = f"{stage.capitalize()} failed: {cause.message}"
        super().__init__(message, format_type=cause.format_type, details=dict(cause.details, stage=stage))
        self.stage = stage
        self.cause = cause

    @property
    def code(self) -> str:
        return self.cause.code


class AssistedPathFailure(DataConversionError):
    """The generative assist backend could not produce an answer.

    Always absorbed by the orchestrator, which falls back to the native path.
    """

    code = "ASSIST_FAILURE"
