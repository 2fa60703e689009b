# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""
OData system query option builders: ``$select``, ``$expand``, ``$orderby`` and the
combined query string.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional, Union
from urllib.parse import quote, urlencode

from ._util import is_non_empty_string, wrap_string

# A nested expand entry is either a raw expand string or a mapping with
# optional "select" (str or list of str) and "expand" (str or nested mapping).
NestedQuery = Union[str, Mapping[str, Any]]

# OData punctuation left readable in the query string
_SAFE = "$,()'=;/@:"


@dataclass(frozen=True)
class Query:
    """
    Immutable description of the OData query options for one request.

    Every field is optional; :meth:`to_string` emits only those that are set.

    :param select: Comma-separated ``$select`` value.
    :param expand: ``$expand`` value.
    :param orderby: ``$orderby`` value.
    :param filter: ``$filter`` expression.
    :param top: ``$top`` record limit.
    :param apply: ``$apply`` aggregation expression.
    """

    select: Optional[str] = None
    expand: Optional[str] = None
    orderby: Optional[str] = None
    filter: Optional[str] = None
    top: Optional[Union[float, str]] = None
    apply: Optional[str] = None

    def to_string(self) -> str:
        return query(self)


def query(options: Union[Query, Mapping[str, Any], None] = None, **kwargs: Any) -> str:
    """
    Build an OData query string from query options.

    Accepts a :class:`Query`, a mapping with the same keys, or keyword arguments.
    Empty values are skipped; ``top`` may be a number or a numeric string and is serialized as a whole number.

    Example::

        query(select="name,revenue", filter="(revenue gt 100)", top=10)
        # "$select=name,revenue&$filter=(revenue%20gt%20100)&$top=10"
    """
    if isinstance(options, Query):
        values: Dict[str, Any] = {
            "select": options.select,
            "expand": options.expand,
            "orderby": options.orderby,
            "filter": options.filter,
            "top": options.top,
            "apply": options.apply,
        }
    else:
        values = dict(options or {})
    values.update(kwargs)

    params = []
    for key in ("select", "expand", "orderby", "filter"):
        if values.get(key):
            params.append((f"${key}", values[key]))
    if values.get("top"):
        params.append(("$top", f"{float(values['top']):.0f}"))
    if values.get("apply"):
        params.append(("$apply", values["apply"]))
    return urlencode(params, safe=_SAFE, quote_via=quote)


def keys(values: Mapping[str, Any]) -> str:
    """
    Build an alternate key expression, ``k1=v1,k2=v2``.

    Entries whose value is ``None`` or an empty string are skipped.

    Example::

        keys({"region": "US", "code": 123})  # "region='US',code=123"
    """
    return ",".join(
        f"{k}={wrap_string(v)}" for k, v in values.items() if v is not None and v != ""
    )


def select(*names: Optional[str]) -> str:
    """Comma-join non-empty property names for ``$select``."""
    return ",".join(n for n in names if is_non_empty_string(n))


def expand(values: Union[str, Mapping[str, NestedQuery]]) -> str:
    """
    Build an ``$expand`` expression.

    A plain string is returned verbatim. A mapping of navigation name to nested
    query builds ``name($select=...;$expand=...)`` for every entry.

    Example::

        expand({"customer": {"select": ["id", "name"], "expand": {"address": {"select": "city"}}}})
        # "customer($select=id,name;$expand=address($select=city;))"
    """
    if isinstance(values, str):
        return values
    parts = []
    for name, nested in values.items():
        if isinstance(nested, str):
            parts.append(nested)
            continue
        inner = ""
        nested_select = nested.get("select")
        if nested_select:
            names = [nested_select] if isinstance(nested_select, str) else list(nested_select)
            inner += f"$select={select(*names)};"
        nested_expand = nested.get("expand")
        if nested_expand:
            inner += f"$expand={expand(nested_expand)}"
        parts.append(f"{name}({inner})")
    return ",".join(parts)


def orderby(values: Mapping[str, Optional[str]]) -> str:
    """
    Build an ``$orderby`` expression from ``name -> "asc" | "desc"``.

    Example::

        orderby({"name": "asc", "age": "desc"})  # "name asc,age desc"
    """
    return ",".join(f"{k} {v}" for k, v in values.items() if is_non_empty_string(v))


__all__ = ["Query", "NestedQuery", "query", "keys", "select", "expand", "orderby"]
