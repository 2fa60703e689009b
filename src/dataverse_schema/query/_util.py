# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

from __future__ import annotations

import datetime as _dt
import re
from typing import Any

_GUID_RE = re.compile(r"^[0-9a-fA-F]{8}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{12}$")
_DATE_ONLY_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")


def is_non_empty_string(value: Any) -> bool:
    """Return True when ``value`` is a ``str`` with at least one character."""
    return isinstance(value, str) and len(value) > 0


def is_guid(value: Any) -> bool:
    return isinstance(value, str) and _GUID_RE.match(value) is not None


def wrap_string(value: Any) -> str:
    """
    Format a value as an OData literal.

    Strings are single-quoted (embedded quotes doubled) unless they are a canonical
    GUID or a ``YYYY-MM-DD`` date, which OData accepts unquoted. Other values are
    stringified: ``None`` as ``null``, booleans lowercase, dates in ISO format.

    Example::

        wrap_string("hello")                                 # "'hello'"
        wrap_string("12345678-1234-1234-1234-123456789012")  # unquoted
        wrap_string(42)                                      # "42"
    """
    if isinstance(value, str):
        if is_guid(value) or _DATE_ONLY_RE.match(value):
            return value
        escaped = value.replace("'", "''")
        return f"'{escaped}'"
    if value is None:
        return "null"
    if isinstance(value, bool):
        return str(value).lower()
    if isinstance(value, (_dt.date, _dt.datetime)):
        return value.isoformat()
    return str(value)
