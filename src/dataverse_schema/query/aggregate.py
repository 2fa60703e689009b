# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""
``$apply`` aggregation builders.

Example::

    query(apply=groupby(["category"], aggregate(average("price", "avgPrice"), count())))
"""

from __future__ import annotations

from typing import Iterable, Optional

from ._util import is_non_empty_string


def groupby(values: Iterable[Optional[str]], aggregations: Optional[str] = None) -> str:
    """
    ``groupby((a,b),<aggregations>)``; empty names are dropped.

    Example::

        groupby(["category"])                                   # "groupby((category))"
        groupby(["category"], aggregate(average("price")))      # "groupby((category),aggregate(price with average as price))"
    """
    names = ",".join(v for v in values if is_non_empty_string(v))
    return f"groupby(({names}){',' + aggregations if aggregations else ''})"


def aggregate(*values: Optional[str]) -> str:
    """``aggregate(expr1,expr2,...)``; empty expressions are dropped."""
    return f"aggregate({','.join(v for v in values if is_non_empty_string(v))})"


def average(name: str, alias: Optional[str] = None) -> str:
    return f"{name} with average as {alias or name}"


def sum_(name: str, alias: Optional[str] = None) -> str:
    return f"{name} with sum as {alias or name}"


def min_(name: str, alias: Optional[str] = None) -> str:
    return f"{name} with min as {alias or name}"


def max_(name: str, alias: Optional[str] = None) -> str:
    return f"{name} with max as {alias or name}"


def count(alias: str = "count") -> str:
    return f"$count as {alias}"


__all__ = ["groupby", "aggregate", "average", "sum_", "min_", "max_", "count"]
