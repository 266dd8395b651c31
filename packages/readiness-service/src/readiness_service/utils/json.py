import math
from dataclasses import asdict, is_dataclass
from typing import Any


def sanitize_for_json(obj: Any) -> Any:
    """
    Recursively traverse the object and replace NaN and Infinity float values with None.
    This ensures compliance with standard JSON specifications.

    Args:
        obj: The object to sanitize (dict, list, float, etc.)

    Returns:
        The sanitized object.
    """
    if isinstance(obj, float):
        if math.isnan(obj) or math.isinf(obj):
            return None
        return obj
    elif isinstance(obj, dict):
        return {k: sanitize_for_json(v) for k, v in obj.items()}
    elif isinstance(obj, list):
        return [sanitize_for_json(item) for item in obj]
    elif isinstance(obj, tuple):
        return [sanitize_for_json(item) for item in obj]
    return obj


def to_jsonable(obj: Any) -> Any:
    """Engine dataclasses (possibly nested in dicts / lists) to sanitized plain data."""
    if is_dataclass(obj) and not isinstance(obj, type):
        return sanitize_for_json(asdict(obj))
    if isinstance(obj, dict):
        return {k: to_jsonable(v) for k, v in obj.items()}
    if isinstance(obj, (list, tuple)):
        return [to_jsonable(item) for item in obj]
    return sanitize_for_json(obj)
