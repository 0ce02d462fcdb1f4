"""
JSON Serialization

Converts analysis results (frozen slots dataclasses, enums, dates, numpy
scalars) into JSON-compatible structures.

Unbounded values (math.inf) are written as the string "unlimited" and NaN
as null, so the output is strict JSON.
"""

import json
import math
from dataclasses import fields, is_dataclass
from datetime import date, datetime
from enum import Enum
from typing import Any

import numpy as np

UNLIMITED = "unlimited"


def to_jsonable(value: Any) -> Any:
    """
    Recursively convert a value into JSON-compatible Python objects.

    Dataclasses become dicts (field order kept), tuples and lists become
    lists, enums their value, dates ISO strings, infinities "unlimited"
    (negative infinity "-unlimited").
    """
    if value is None or isinstance(value, (bool, str)):
        return value
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, (np.integer,)):
        return int(value)
    if isinstance(value, (float, np.floating)):
        number = float(value)
        if math.isnan(number):
            return None
        if math.isinf(number):
            return UNLIMITED if number > 0 else f"-{UNLIMITED}"
        return number
    if isinstance(value, int):
        return value
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if is_dataclass(value) and not isinstance(value, type):
        return {f.name: to_jsonable(getattr(value, f.name)) for f in fields(value)}
    if isinstance(value, dict):
        return {str(to_jsonable(k)): to_jsonable(v) for k, v in value.items()}
    if isinstance(value, (list, tuple, set, frozenset)):
        return [to_jsonable(v) for v in value]
    if isinstance(value, np.ndarray):
        return [to_jsonable(v) for v in value.tolist()]
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def to_json(value: Any, indent: int | None = 2) -> str:
    """Serialize a result to a strict JSON string."""
    return json.dumps(to_jsonable(value), indent=indent, allow_nan=False)
