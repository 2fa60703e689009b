# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""
OData ``$filter`` expression builders.

Every builder returns a plain string. ``and_``/``or_``/``not_`` drop ``None`` and
empty conditions, so optional clauses compose without checks at the call site::

    and_(equals("statecode", 0), name and contains("name", name))
"""

from __future__ import annotations

from typing import Any, Optional

from ._util import is_non_empty_string, wrap_string


def _is_compound(condition: str) -> bool:
    """True when ``condition`` has an ``and``/``or`` outside parentheses and string literals."""
    depth = 0
    quoted = False
    for i, ch in enumerate(condition):
        if ch == "'":
            quoted = not quoted
        elif quoted:
            continue
        elif ch == "(":
            depth += 1
        elif ch == ")":
            depth -= 1
        elif depth == 0 and ch == " " and condition.startswith((" and ", " or "), i):
            return True
    return False


def _join(operator: str, conditions) -> str:
    valid = [c for c in conditions if is_non_empty_string(c)]
    if not valid:
        return ""
    if len(valid) == 1:
        return valid[0]
    # operands combined with another operator keep their own grouping
    terms = [f"({c})" if _is_compound(c) else c for c in valid]
    return f" {operator} ".join(terms)


def and_(*conditions: Optional[str]) -> str:
    """
    Combine conditions with ``and``; returns ``""`` when no condition is non-empty.

    Example::

        and_(equals("a", 1))                          # "(a eq 1)"
        and_(equals("a", 1), None, equals("b", "x"))  # "(a eq 1) and (b eq 'x')"
    """
    return _join("and", conditions)


def or_(*conditions: Optional[str]) -> str:
    """Combine conditions with ``or``; returns ``""`` when no condition is non-empty."""
    return _join("or", conditions)


def not_(condition: Optional[str]) -> str:
    """Negate a condition; an empty condition stays empty."""
    return f"not({condition})" if is_non_empty_string(condition) else ""


def contains(name: str, value: Any) -> str:
    return f"contains({name},{wrap_string(value)})"


def starts_with(name: str, value: Any) -> str:
    return f"startswith({name},{wrap_string(value)})"


def ends_with(name: str, value: Any) -> str:
    return f"endswith({name},{wrap_string(value)})"


def _compare(name: str, operator: str, value: Any) -> str:
    return f"({name} {operator} {wrap_string(value)})"


def equals(name: str, value: Any) -> str:
    """``(name eq value)``"""
    return _compare(name, "eq", value)


def not_equals(name: str, value: Any) -> str:
    return _compare(name, "ne", value)


def greater_than(name: str, value: Any) -> str:
    return _compare(name, "gt", value)


def greater_than_or_equal(name: str, value: Any) -> str:
    return _compare(name, "ge", value)


def less_than(name: str, value: Any) -> str:
    return _compare(name, "lt", value)


def less_than_or_equal(name: str, value: Any) -> str:
    return _compare(name, "le", value)


def is_active() -> str:
    return "statecode eq 0"


def is_inactive() -> str:
    return "statecode eq 1"


def is_null(name: str) -> str:
    return f"{name} eq null"


def is_not_null(name: str) -> str:
    return f"{name} ne null"


__all__ = [
    "and_",
    "or_",
    "not_",
    "contains",
    "starts_with",
    "ends_with",
    "equals",
    "not_equals",
    "greater_than",
    "greater_than_or_equal",
    "less_than",
    "less_than_or_equal",
    "is_active",
    "is_inactive",
    "is_null",
    "is_not_null",
]
