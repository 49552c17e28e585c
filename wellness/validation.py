"""
Argument checks shared by the entry points.

Each helper returns the validated value or raises ``InvalidArgument``.
"""

from wellness.config import MAX_UINT, MAX_IDENTITY_LENGTH
from wellness.errors import InvalidArgument


def check_uint(name: str, value) -> int:
    """Accept a non-negative integer that fits the storage width."""
    # bool is an int subclass; True is not a patient id.
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidArgument(f"{name} must be an unsigned integer, got {value!r}.")
    if value < 0 or value > MAX_UINT:
        raise InvalidArgument(f"{name} must be between 0 and {MAX_UINT}, got {value}.")
    return value


def check_text(name: str, value, max_length: int) -> str:
    if not isinstance(value, str):
        raise InvalidArgument(f"{name} must be text, got {type(value).__name__}.")
    if len(value) > max_length:
        raise InvalidArgument(
            f"{name} is {len(value)} characters long, the limit is {max_length}."
        )
    return value


def check_key(name: str, value, max_length: int) -> str:
    """Like check_text, but keys must also be non-empty."""
    value = check_text(name, value, max_length)
    if not value.strip():
        raise InvalidArgument(f"{name} must not be empty.")
    return value


def check_identity(name: str, value) -> str:
    return check_key(name, value, MAX_IDENTITY_LENGTH)


def check_bool(name: str, value) -> bool:
    if not isinstance(value, bool):
        raise InvalidArgument(f"{name} must be a boolean, got {value!r}.")
    return value
