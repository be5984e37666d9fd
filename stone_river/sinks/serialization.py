"""Shared serialization utilities for sinks."""

from dataclasses import fields, is_dataclass
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from pathlib import Path
from typing import Any


def to_dict(obj: Any) -> dict:
    """Convert a report, event or record to a JSON-ready dictionary.

    Objects exposing ``to_dict()`` (job reports, resolutions) are trusted
    to shape their own output; other dataclasses are walked field by field.
    """
    if hasattr(obj, "to_dict") and callable(obj.to_dict):
        return serialize_value(obj.to_dict())
    if is_dataclass(obj):
        return to_dict_fast(obj)
    elif isinstance(obj, dict):
        return serialize_value(obj)
    else:
        return {"value": str(obj)}


def to_dict_fast(obj: Any) -> dict:
    """Convert a dataclass via ``fields()`` + ``getattr`` (no deep copy).

    Parameters
    ----------
    obj : Any
        A dataclass instance.

    Returns
    -------
    dict
        Serialized dictionary; nested dataclasses are converted recursively.
    """
    return {f.name: serialize_value(getattr(obj, f.name)) for f in fields(obj)}


def serialize_value(value: Any) -> Any:
    """Serialize a value for JSON output.

    Decimals become strings so premiums and outstanding amounts keep
    their cents exactly.
    """
    if isinstance(value, Decimal):
        return str(value)
    elif isinstance(value, Enum):
        return value.value
    elif isinstance(value, datetime):
        return value.isoformat()
    elif isinstance(value, date):
        return value.isoformat()
    elif isinstance(value, Path):
        return str(value)
    elif is_dataclass(value) and not isinstance(value, type):
        return to_dict_fast(value)
    elif isinstance(value, dict):
        return {str(serialize_value(k)): serialize_value(v) for k, v in value.items()}
    elif isinstance(value, (list, tuple, set, frozenset)):
        return [serialize_value(v) for v in value]
    return value
