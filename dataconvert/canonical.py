"""
Canonical value model shared by every parser and serializer.

A canonical value is one of: ``None``, ``bool``, ``int``, ``float`` (finite),
``str``, ``list`` of canonical values, or ``dict`` mapping ``str`` keys to
canonical values. Mappings keep insertion order; duplicate keys are resolved
by whoever builds the dict (last write wins).
"""

import math
from datetime import date, datetime, time
from typing import Any, Dict, List, Set, Union

from .exceptions import UnsupportedShapeError

CanonicalValue = Union[None, bool, int, float, str, List[Any], Dict[str, Any]]

SCALAR_TYPES = (bool, int, float, str)


def is_scalar(value: Any) -> bool:
    """Return True for Null, Boolean, Number and String values."""
    return value is None or isinstance(value, SCALAR_TYPES)


def scalar_to_text(value: Any) -> str:
    """Render a scalar the way JSON spells it (``null``, ``true``, ``1.5``)."""
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float):
        return repr(value)
    return str(value)


def _normalize_key(key: Any, format_type: str) -> str:
    if isinstance(key, str):
        return key
    if is_scalar(key):
        return scalar_to_text(key)
    if isinstance(key, (date, datetime, time)):
        return key.isoformat()
    raise UnsupportedShapeError(
        f"Mapping key of type {type(key).__name__} cannot be used as a string key",
        format_type=format_type,
        details={"key_type": type(key).__name__}
    )


def ensure_canonical(value: Any, format_type: str = None) -> CanonicalValue:
    """
    Check that ``value`` conforms to the canonical model, normalizing the few
    foreign shapes parsers are known to produce.

    Tuples become lists, dates and times become ISO-8601 strings and
    non-string mapping keys become their scalar text. A container reached
    through several aliases is converted once and shared in the result.

    Raises:
        UnsupportedShapeError: For values with no canonical counterpart
            (bytes, sets, non-finite floats, arbitrary objects), and for
            containers that contain themselves
    """
    converted: Dict[int, CanonicalValue] = {}
    active: Set[int] = set()

    def convert(node: Any) -> CanonicalValue:
        if node is None or isinstance(node, (bool, int, str)):
            return node
        if isinstance(node, float):
            if not math.isfinite(node):
                raise UnsupportedShapeError(
                    f"Non-finite number {node!r} has no canonical representation",
                    format_type=format_type
                )
            return node
        if isinstance(node, (dict, list, tuple)):
            node_id = id(node)
            if node_id in converted:
                return converted[node_id]
            if node_id in active:
                raise UnsupportedShapeError(
                    f"Self-referencing {type(node).__name__} has no canonical representation",
                    format_type=format_type,
                    details={"value_type": type(node).__name__, "reason": "cycle"}
                )
            active.add(node_id)
            if isinstance(node, dict):
                result = {_normalize_key(k, format_type): convert(v) for k, v in node.items()}
            else:
                result = [convert(item) for item in node]
            active.discard(node_id)
            converted[node_id] = result
            return result
        if isinstance(node, (date, datetime, time)):
            return node.isoformat()
        raise UnsupportedShapeError(
            f"Value of type {type(node).__name__} has no canonical representation",
            format_type=format_type,
            details={"value_type": type(node).__name__}
        )

    return convert(value)


def canonical_equal(left: Any, right: Any) -> bool:
    """
    Structural equality on canonical values.

    Unlike ``==`` this is type-aware (``True`` is not ``1`` and ``1`` is not
    ``1.0``) and it treats mapping key order as significant.
    """
    if type(left) is not type(right):
        return False
    if isinstance(left, dict):
        if list(left.keys()) != list(right.keys()):
            return False
        return all(canonical_equal(left[k], right[k]) for k in left)
    if isinstance(left, list):
        if len(left) != len(right):
            return False
        return all(canonical_equal(a, b) for a, b in zip(left, right))
    return left == right


def describe_shape(value: Any) -> str:
    """Short human description of a value's top-level shape."""
    if isinstance(value, dict):
        return f"mapping with {len(value)} key(s)"
    if isinstance(value, list):
        return f"sequence with {len(value)} item(s)"
    if value is None:
        return "null"
    return type(value).__name__
