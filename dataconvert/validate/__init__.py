"""
Syntax validation for pasted data.

Validation runs the format's parser and reports whether it succeeded. It never
needs a target format and never changes the input.
"""

import logging
from typing import Dict, Optional

from ..canonical import describe_shape
from ..config import DEFAULT_XML_ROOT_NAME, ConversionMethod, DataFormat, normalize_format_token
from ..exceptions import DataConversionError, FormatSyntaxError
from ..formats import BaseCodec, create_codecs
from ..models import ValidationOutcome

logger = logging.getLogger(__name__)


class FormatValidator:
    """Validates text against one of the supported formats."""

    def __init__(self, codecs: Optional[Dict[DataFormat, BaseCodec]] = None, xml_root_name: str = DEFAULT_XML_ROOT_NAME):
        self._codecs = codecs or create_codecs(xml_root_name=xml_root_name)

    def validate_text(self, text: str, expected_format, **options) -> ValidationOutcome:
        """
        Validate text against an expected format.

        Args:
            text: The text to validate
            expected_format: ``DataFormat`` or format token (json, xml, yaml, yml, csv)
            **options: Parser options, e.g. ``strict`` for CSV

        Returns:
            ValidationOutcome: ``valid`` plus a message naming the format and,
            on failure, the parser's description of the problem

        Raises:
            UnsupportedFormatError: If the format is not supported
        """
        data_format = normalize_format_token(expected_format)
        codec = self._codecs[data_format]
        label = codec.display_name

        if not isinstance(text, str) or not text.strip():
            return ValidationOutcome(
                valid=False,
                message=f"{label} is empty or contains only whitespace",
                method=ConversionMethod.NATIVE
            )

        if '\x00' in text:
            return ValidationOutcome(
                valid=False,
                message=f"{label} contains binary data (null bytes)",
                method=ConversionMethod.NATIVE
            )

        try:
            value = codec.parse(text, **options)
        except DataConversionError as e:
            logger.debug(f"{label} validation failed: {e.message}")
            message = e.message if isinstance(e, FormatSyntaxError) else f"Invalid {label}: {e.message}"
            return ValidationOutcome(
                valid=False,
                message=message,
                method=ConversionMethod.NATIVE,
                details=e.details
            )

        if isinstance(value, (dict, list)) and len(value) == 0:
            logger.info(f"{label} document contains an empty {type(value).__name__}")

        return ValidationOutcome(
            valid=True,
            message=f"Valid {label} ({describe_shape(value)})",
            method=ConversionMethod.NATIVE
        )


# Global validator instance
_validator = None


def get_validator() -> FormatValidator:
    """Get the global format validator instance."""
    global _validator
    if _validator is None:
        _validator = FormatValidator()
    return _validator


def validate_text(text: str, expected_format, **options) -> ValidationOutcome:
    """
    Convenience function to validate text.

    Args:
        text: The text to validate
        expected_format: Expected format token
        **options: Parser options

    Returns:
        ValidationOutcome
    """
    return get_validator().validate_text(text, expected_format, **options)
