"""
Document path and JSON value helpers.

Dotted-path lookup used by partitioning, projection and predicates, plus
the clone/compare/measure helpers the store and response builder share.

Author: LocalCosmos Team
Date: 2026-10-17
"""

import copy
import json
from typing import Any


class _Missing:
    """Sentinel for an absent value (distinct from JSON null)."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "MISSING"

    def __bool__(self) -> bool:
        return False


MISSING: Any = _Missing()


def partition_key_field(partition_key_path: str) -> str:
    """Convert a container partition key path to a dotted field path.

    Args:
        partition_key_path: Path as declared on the container (e.g., "/address/zip")

    Returns:
        Dotted field path (e.g., "address.zip")
    """
    path = partition_key_path[1:] if partition_key_path.startswith("/") else partition_key_path
    return ".".join(segment for segment in path.split("/") if segment)


def resolve_path(document: Any, dotted_path: str) -> Any:
    """Get a nested value from a document.

    Args:
        document: Document
        dotted_path: Field path using dot notation

    Returns:
        Field value, or MISSING as soon as a segment is absent or the
        current value is not a mapping
    """
    value = document
    for part in dotted_path.split("."):
        if isinstance(value, dict) and part in value:
            value = value[part]
        else:
            return MISSING
    return value


def is_number(value: Any) -> bool:
    """True for JSON numbers (bool is not a number here)."""
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def is_json_value(value: Any) -> bool:
    """Check that a value is composed only of JSON-compatible types."""
    if value is None or isinstance(value, (str, bool)) or is_number(value):
        return True
    if isinstance(value, list):
        return all(is_json_value(item) for item in value)
    if isinstance(value, dict):
        return all(isinstance(key, str) and is_json_value(item) for key, item in value.items())
    return False


def is_partition_key_value(value: Any) -> bool:
    """Check that a value may be used as a partition key.

    Allowed: null, string, number, boolean, or an array of JSON values.
    """
    if value is MISSING:
        return False
    if value is None or isinstance(value, (str, bool)) or is_number(value):
        return True
    if isinstance(value, list):
        return all(is_json_value(item) for item in value)
    return False


def _normalize(value: Any) -> Any:
    # Integral floats serialize like ints so 5 and 5.0 compare equal
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, list):
        return [_normalize(item) for item in value]
    if isinstance(value, dict):
        return {key: _normalize(item) for key, item in value.items()}
    return value


def serialize(value: Any) -> str:
    """Serialize a JSON value to its compact text form."""
    return json.dumps(_normalize(value), separators=(",", ":"), ensure_ascii=False)


def json_equals(left: Any, right: Any) -> bool:
    """Compare two values by their serialized form.

    Mapping key order is significant. MISSING never equals anything.
    """
    if left is MISSING or right is MISSING:
        return False
    return serialize(left) == serialize(right)


def byte_length(value: Any) -> int:
    """UTF-8 length of the serialized value, 0 when the value is absent."""
    if value is None or value is MISSING:
        return 0
    return len(serialize(value).encode("utf-8"))


def clone(value: Any) -> Any:
    """Deep copy a JSON value so no caller shares stored state."""
    return copy.deepcopy(value)
