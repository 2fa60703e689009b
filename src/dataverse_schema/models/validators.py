# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""
Validator factories for :meth:`~dataverse_schema.models.schema.Schema.check`.

A validator is a callable taking the value and returning an error message, or
``None`` when the value is acceptable. Exceptions raised by a validator are
reported as issues too, so validators do not need to guard against odd input.

Example::

    name = string("name").required().check(max_length(100))
    email_address = string("emailaddress1").check(email())
"""

from __future__ import annotations

import math
import re
from typing import Any, Callable, Optional, Pattern, Tuple, Union

Validator = Callable[[Any], Optional[str]]

_EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


def _type_name(types: Tuple[type, ...]) -> str:
    return " or ".join(t.__name__ for t in types)


def _matches(value: Any, types: Tuple[type, ...]) -> bool:
    # bool is an int subclass; only accept it when asked for explicitly
    if isinstance(value, bool) and bool not in types:
        return False
    return isinstance(value, types)


def is_type(*types: type) -> Validator:
    """Value must be an instance of one of ``types``."""

    def validate(v: Any) -> Optional[str]:
        if not _matches(v, types):
            return f"Not of type {_type_name(types)}"
        return None

    return validate


def is_type_or_null(*types: type) -> Validator:
    """Value must be ``None`` or an instance of one of ``types``."""

    def validate(v: Any) -> Optional[str]:
        if v is not None and not _matches(v, types):
            return f"Not of type {_type_name(types)}"
        return None

    return validate


def required() -> Validator:
    """Value must be truthy: not ``None``, empty string, empty list, zero or False."""

    def validate(v: Any) -> Optional[str]:
        if not v:
            return "Required"
        return None

    return validate


def min_length(minimum: int) -> Validator:
    def validate(v: Any) -> Optional[str]:
        if len(v) < minimum:
            return f"Length less than {minimum}"
        return None

    return validate


def max_length(maximum: int) -> Validator:
    def validate(v: Any) -> Optional[str]:
        if len(v) > maximum:
            return f"Length more than {maximum}"
        return None

    return validate


def min_value(minimum: Union[int, float]) -> Validator:
    def validate(v: Any) -> Optional[str]:
        if _matches(v, (int, float)) and v < minimum:
            return f"Must be at least {minimum}"
        return None

    return validate


def max_value(maximum: Union[int, float]) -> Validator:
    def validate(v: Any) -> Optional[str]:
        if _matches(v, (int, float)) and v > maximum:
            return f"Must be no more than {maximum}"
        return None

    return validate


def _to_number(v: Any) -> Optional[float]:
    try:
        return float(v)
    except (TypeError, ValueError):
        return None


def numeric() -> Validator:
    """Value, when present, must convert to a number (``"12.5"`` passes)."""

    def validate(v: Any) -> Optional[str]:
        if v is None:
            return None
        num = _to_number(v)
        if num is None or math.isnan(num):
            return "Must be a number"
        return None

    return validate


def integer() -> Validator:
    """Value, when present, must convert to a whole number."""

    def validate(v: Any) -> Optional[str]:
        if v is None:
            return None
        num = _to_number(v)
        if num is None or not math.isfinite(num) or not num.is_integer():
            return "Must be an integer"
        return None

    return validate


def pattern(regex: Union[str, Pattern[str]], message: Optional[str] = None) -> Validator:
    """Non-empty value must match ``regex`` (searched, not anchored)."""
    compiled = re.compile(regex) if isinstance(regex, str) else regex

    def validate(v: Any) -> Optional[str]:
        if v and not compiled.search(v):
            return message or "Invalid format"
        return None

    return validate


def email() -> Validator:
    def validate(v: Any) -> Optional[str]:
        if v and not _EMAIL_RE.match(v):
            return "Invalid email format"
        return None

    return validate


__all__ = [
    "Validator",
    "is_type",
    "is_type_or_null",
    "required",
    "min_length",
    "max_length",
    "min_value",
    "max_value",
    "numeric",
    "integer",
    "pattern",
    "email",
]
