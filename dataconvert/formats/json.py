"""
JSON codec.

Parses with the standard library in strict mode and serializes with a
two-space indent, preserving key insertion order.
"""

import json as json_lib
import logging

from .base_codec import BaseCodec

logger = logging.getLogger(__name__)


class JSONCodec(BaseCodec):
    """JSON parser and serializer."""

    def __init__(self):
        super().__init__("json")

    def _parse_text(self, text: str, **options):
        """
        Parse JSON text.

        Control characters inside strings, trailing commas, unmatched brackets
        and the non-standard ``NaN``/``Infinity`` constants are all rejected.
        """
        try:
            return json_lib.loads(text, parse_constant=self._reject_constant)
        except json_lib.JSONDecodeError as e:
            raise self.syntax_error(
                str(e),
                details={"json_error": e.msg, "line": e.lineno, "column": e.colno, "position": e.pos}
            )

    def _reject_constant(self, name: str):
        raise self.syntax_error(f"non-standard constant {name!r} is not allowed")

    def _serialize_value(self, value, **options) -> str:
        return json_lib.dumps(value, indent=2, ensure_ascii=False, allow_nan=False)
