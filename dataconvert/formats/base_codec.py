"""
Base codec classes for textual data formats.

A codec pairs the parser and the serializer of one format. Parsers turn text
into a canonical value; serializers turn a canonical value back into text.
This module holds the shared plumbing so format-specific codecs only implement
the grammar-specific parts.
"""

import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

from ..canonical import CanonicalValue, ensure_canonical
from ..exceptions import DataConversionError, FormatSyntaxError, UnsupportedShapeError

logger = logging.getLogger(__name__)


class BaseCodec(ABC):
    """
    Base class for format codecs.

    Subclasses implement ``_parse_text`` and ``_serialize_value``. The public
    ``parse`` and ``serialize`` wrap them so that every failure leaves the
    codec as a ``FormatSyntaxError`` or ``UnsupportedShapeError`` tagged with
    the format name, and every parser result is checked against the canonical
    model.
    """

    def __init__(self, format_name: str):
        self.format_name = format_name
        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")

    def parse(self, text: str, **options) -> CanonicalValue:
        """
        Parse format-specific text into a canonical value.

        Args:
            text: Source text
            **options: Format-specific parse options

        Returns:
            The canonical value tree

        Raises:
            FormatSyntaxError: If the text does not conform to the format
            UnsupportedShapeError: If the text decodes to a value with no canonical
                counterpart, such as a recursive YAML alias
        """
        if not isinstance(text, str):
            raise FormatSyntaxError(
                f"{self.display_name} input must be text, got {type(text).__name__}",
                format_type=self.format_name
            )

        try:
            value = self._parse_text(text, **options)
        except DataConversionError:
            raise
        except Exception as e:
            self.logger.debug(f"{self.display_name} parse failed: {e}")
            raise self.syntax_error(str(e)) from e

        try:
            return ensure_canonical(value, self.format_name)
        except RecursionError as e:
            raise self.syntax_error("document is nested too deeply") from e

    def serialize(self, value: CanonicalValue, **options) -> str:
        """
        Serialize a canonical value into format-specific text.

        Raises:
            UnsupportedShapeError: If the value cannot be represented in this format
        """
        try:
            return self._serialize_value(value, **options)
        except DataConversionError:
            raise
        except Exception as e:
            self.logger.error(f"{self.display_name} serialization failed: {e}")
            raise UnsupportedShapeError(
                f"Cannot represent value as {self.display_name}: {e}",
                format_type=self.format_name,
                details={"serialize_error": str(e)}
            ) from e

    @property
    def display_name(self) -> str:
        return self.format_name.upper()

    def syntax_error(self, description: str, details: Optional[Dict[str, Any]] = None) -> FormatSyntaxError:
        """Build a ``FormatSyntaxError`` that names this format."""
        return FormatSyntaxError(
            f"Invalid {self.display_name}: {description}",
            format_type=self.format_name,
            details=details or {"parse_error": description}
        )

    def shape_error(self, description: str, details: Optional[Dict[str, Any]] = None) -> UnsupportedShapeError:
        """Build an ``UnsupportedShapeError`` that names this format."""
        return UnsupportedShapeError(
            f"Cannot represent value as {self.display_name}: {description}",
            format_type=self.format_name,
            details=details
        )

    @abstractmethod
    def _parse_text(self, text: str, **options) -> Any:
        """
        Perform format-specific parsing.

        May raise ``FormatSyntaxError`` directly or let the underlying library
        error propagate; ``parse`` converts the latter.
        """
        pass

    @abstractmethod
    def _serialize_value(self, value: CanonicalValue, **options) -> str:
        """Perform format-specific serialization."""
        pass
