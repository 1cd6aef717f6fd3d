"""
YAML codec.

Parsing uses a PyYAML safe loader whose implicit scalar resolution follows the
YAML 1.2 core schema: only ``true``/``false`` are booleans, integers are
decimal, ``0o`` octal or ``0x`` hexadecimal, and YAML 1.1 timestamps or
sexagesimal numbers stay strings. Serialization uses block style, a two-space
indent and no line wrapping.
"""

import logging
import re

import yaml

from .base_codec import BaseCodec

logger = logging.getLogger(__name__)

INT_TAG = "tag:yaml.org,2002:int"
FLOAT_TAG = "tag:yaml.org,2002:float"
BOOL_TAG = "tag:yaml.org,2002:bool"
TIMESTAMP_TAG = "tag:yaml.org,2002:timestamp"

CORE_BOOL = re.compile(r"^(?:true|True|TRUE|false|False|FALSE)$")
CORE_INT = re.compile(r"^(?:[-+]?[0-9]+|0o[0-7]+|0x[0-9a-fA-F]+)$")
CORE_FLOAT = re.compile(
    r"^[-+]?(?:\.[0-9]+|[0-9]+\.[0-9]*|[0-9]+(?:\.[0-9]*)?[eE][-+]?[0-9]+|\.[0-9]+[eE][-+]?[0-9]+)$"
)

_REPLACED_TAGS = {BOOL_TAG, INT_TAG, FLOAT_TAG, TIMESTAMP_TAG}


class CoreSchemaLoader(yaml.SafeLoader):
    """Safe loader resolving plain scalars per the YAML 1.2 core schema."""
    pass


CoreSchemaLoader.yaml_implicit_resolvers = {
    first: [resolver for resolver in resolvers if resolver[0] not in _REPLACED_TAGS]
    for first, resolvers in yaml.SafeLoader.yaml_implicit_resolvers.items()
}
CoreSchemaLoader.add_implicit_resolver(BOOL_TAG, CORE_BOOL, list("tTfF"))
CoreSchemaLoader.add_implicit_resolver(INT_TAG, CORE_INT, list("-+0123456789"))
CoreSchemaLoader.add_implicit_resolver(FLOAT_TAG, CORE_FLOAT, list("-+0123456789."))


def _construct_core_int(loader, node):
    value = loader.construct_scalar(node).replace("_", "")
    sign = 1
    if value[:1] in ("-", "+"):
        if value[0] == "-":
            sign = -1
        value = value[1:]
    if value.startswith("0o"):
        return sign * int(value[2:], 8)
    if value.startswith("0x"):
        return sign * int(value[2:], 16)
    return sign * int(value, 10)


CoreSchemaLoader.add_constructor(INT_TAG, _construct_core_int)


class BlockDumper(yaml.SafeDumper):
    """
    Safe dumper that indents sequences under their parent key.

    It also quotes any string a YAML 1.2 core reader would resolve to a
    non-string, in addition to the YAML 1.1 cases PyYAML already handles.
    Shared nodes are written out in full at every place they occur.
    """

    def increase_indent(self, flow=False, indentless=False):
        return super().increase_indent(flow, False)

    def ignore_aliases(self, data):
        return True


BlockDumper.add_implicit_resolver(BOOL_TAG, CORE_BOOL, list("tTfF"))
BlockDumper.add_implicit_resolver(INT_TAG, CORE_INT, list("-+0123456789"))
BlockDumper.add_implicit_resolver(FLOAT_TAG, CORE_FLOAT, list("-+0123456789."))


class YAMLCodec(BaseCodec):
    """YAML parser and serializer."""

    def __init__(self):
        super().__init__("yaml")

    def _parse_text(self, text: str, **options):
        """
        Parse a single YAML document.

        Raises:
            FormatSyntaxError: On bad indentation, unresolvable aliases,
                multiple documents or any other YAML error
        """
        try:
            return yaml.load(text, Loader=CoreSchemaLoader)
        except yaml.MarkedYAMLError as e:
            details = {"yaml_error": e.problem or str(e)}
            if e.problem_mark is not None:
                details["line"] = e.problem_mark.line + 1
                details["column"] = e.problem_mark.column + 1
            raise self.syntax_error(self._describe(e), details=details)
        except yaml.YAMLError as e:
            raise self.syntax_error(str(e))

    @staticmethod
    def _describe(error: "yaml.MarkedYAMLError") -> str:
        problem = error.problem or error.context or "malformed document"
        if error.problem_mark is not None:
            mark = error.problem_mark
            return f"{problem} (line {mark.line + 1}, column {mark.column + 1})"
        return problem

    def _serialize_value(self, value, **options) -> str:
        return yaml.dump(
            value,
            Dumper=BlockDumper,
            indent=2,
            default_flow_style=False,
            allow_unicode=True,
            sort_keys=False,
            width=float("inf")
        )
