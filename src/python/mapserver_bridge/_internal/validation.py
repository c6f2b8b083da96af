# mapserver_bridge/_internal/validation.py

"""
Argument checks run at the Python/native boundary.

Every check runs before any native call is made, so a bad argument never
reaches the engine.
"""

from typing import Any, Optional

from ..types import INT32_MAX, INT32_MIN


def require_str(index: int, value: Any) -> str:
    if not isinstance(value, str):
        raise TypeError(f"Argument {index} must be a string, not {type(value).__name__}")
    return value


def optional_str(index: int, value: Any) -> Optional[str]:
    if value is None:
        return None
    return require_str(index, value)


def require_int32(name: str, value: Any) -> int:
    """
    Accepts any int in the int32 range. No further validation is applied:
    zero and negative values are passed to the engine unchanged.
    """
    # bool is an int subclass but never a meaningful dimension
    if isinstance(value, bool) or not isinstance(value, int):
        raise TypeError(f"{name} must be an integer, not {type(value).__name__}")
    if not (INT32_MIN <= value <= INT32_MAX):
        raise OverflowError(f"{name}={value} does not fit in a 32-bit signed integer")
    return value


def require_index(value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise TypeError(f"Index must be an integer, not {type(value).__name__}")
    return value
