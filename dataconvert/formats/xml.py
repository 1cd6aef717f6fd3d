"""
XML codec.

Parsing and serialization both go through ``xmltodict``:

- attributes map to ``@name`` keys and mixed text maps to ``#text``, so
  they never collide with child elements of the same name
- repeated sibling elements collapse into a sequence
- text-only elements become strings with their whitespace kept, empty
  elements become null
- text mixed with child elements is trimmed, so indentation-only text is dropped
- the document element is the single top-level key

XML leaves are text, so numbers and booleans converted to XML come back as
strings; an empty string, an empty sequence and null are all written as an
empty element and read back as null.
"""

import logging
import re
from xml.parsers.expat import ExpatError

import xmltodict

from ..canonical import is_scalar, scalar_to_text
from ..config import DEFAULT_XML_ROOT_NAME
from .base_codec import BaseCodec

logger = logging.getLogger(__name__)

ATTR_PREFIX = "@"
TEXT_KEY = "#text"
ITEM_TAG = "item"

# An XML Name with at most one namespace prefix
NAME_PATTERN = re.compile(r"^[^\W\d][\w.\-]*(?::[^\W\d][\w.\-]*)?$")

# Characters outside the XML 1.0 Char production
ILLEGAL_XML_CHARS = re.compile("[\x00-\x08\x0b\x0c\x0e-\x1f\ufffe\uffff]")


class XMLCodec(BaseCodec):
    """XML parser and serializer."""

    def __init__(self, root_name: str = DEFAULT_XML_ROOT_NAME):
        super().__init__("xml")
        self.root_name = root_name

    def _parse_text(self, text: str, **options):
        """
        Parse an XML document.

        Raises:
            FormatSyntaxError: On unbalanced tags, undefined entities or any
                other well-formedness error
        """
        try:
            document = xmltodict.parse(
                text,
                attr_prefix=ATTR_PREFIX,
                cdata_key=TEXT_KEY,
                disable_entities=True,
                strip_whitespace=False
            )
        except ExpatError as e:
            raise self.syntax_error(
                str(e),
                details={"xml_error": str(e), "line": getattr(e, "lineno", None), "column": getattr(e, "offset", None)}
            )
        return self._drop_indentation(document)

    def _drop_indentation(self, node):
        """
        Trim the text that sits between child elements.

        Text-only elements and attribute values are kept exactly as written.
        """
        if isinstance(node, list):
            return [self._drop_indentation(item) for item in node]
        if not isinstance(node, dict):
            return node
        has_children = any(self._is_element_key(key) for key in node)
        trimmed = {}
        for key, child in node.items():
            if key == TEXT_KEY and has_children and isinstance(child, str):
                child = child.strip()
                if not child:
                    continue
            trimmed[key] = self._drop_indentation(child)
        return trimmed

    def _serialize_value(self, value, **options) -> str:
        """
        Serialize a canonical value as a pretty-printed XML document.

        Element and attribute names that are not valid XML names are rejected,
        never rewritten.

        Raises:
            UnsupportedShapeError: For invalid names, non-scalar attribute or
                text values, or characters XML 1.0 cannot carry
        """
        document = self._prepare_element(self._as_document(value), path="")
        return xmltodict.unparse(
            document,
            pretty=True,
            indent="  ",
            attr_prefix=ATTR_PREFIX,
            cdata_key=TEXT_KEY,
            expand_iter=ITEM_TAG
        )

    def _as_document(self, value) -> dict:
        """Give the value a single document element, wrapping it when needed."""
        if isinstance(value, dict) and len(value) == 1:
            (key, child), = value.items()
            if self._is_element_key(key) and not isinstance(child, list):
                return value
        if isinstance(value, list) and value:
            return {self.root_name: {ITEM_TAG: value}}
        return {self.root_name: value}

    @staticmethod
    def _is_element_key(key: str) -> bool:
        return not key.startswith(ATTR_PREFIX) and key != TEXT_KEY

    def _prepare_element(self, node, path: str):
        """Check names and render leaf scalars as the text xmltodict will write."""
        if isinstance(node, dict):
            prepared = {}
            for key, child in node.items():
                child_path = f"{path}/{key}" if path else key
                if key == TEXT_KEY:
                    prepared[key] = self._prepare_text(child, child_path, "text content")
                elif key.startswith(ATTR_PREFIX):
                    self._check_name(key[len(ATTR_PREFIX):], child_path, "attribute")
                    prepared[key] = self._prepare_text(child, child_path, "attribute value")
                else:
                    self._check_name(key, child_path, "element")
                    prepared[key] = self._prepare_element(child, child_path)
            return prepared
        if isinstance(node, list):
            if not node:
                return None
            return [self._prepare_element(item, f"{path}[{index}]") for index, item in enumerate(node)]
        if node is None or node == "":
            return None
        return self._prepare_text(node, path, "element text")

    def _prepare_text(self, value, path: str, kind: str) -> str:
        if not is_scalar(value):
            raise self.shape_error(
                f"{kind} must be a scalar, got {type(value).__name__} (at {path})",
                details={"path": path}
            )
        text = "" if value is None else scalar_to_text(value)
        match = ILLEGAL_XML_CHARS.search(text)
        if match:
            raise self.shape_error(
                f"character {match.group()!r} cannot appear in XML (at {path})",
                details={"path": path, "character": hex(ord(match.group()))}
            )
        return text

    def _check_name(self, name: str, path: str, kind: str) -> None:
        if not NAME_PATTERN.match(name):
            raise self.shape_error(
                f"{name!r} is not a valid XML {kind} name (at {path})",
                details={"invalid_name": name, "path": path}
            )
