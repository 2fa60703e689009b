# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""
OData query and filter string builders.

All builders are pure functions returning strings; they never raise on
well-typed input and drop empty parts instead of rendering them.
"""

from . import functions
from ._util import is_non_empty_string, wrap_string
from .aggregate import aggregate, average, count, groupby, max_, min_, sum_
from .filter import (
    and_,
    contains,
    ends_with,
    equals,
    greater_than,
    greater_than_or_equal,
    is_active,
    is_inactive,
    is_not_null,
    is_null,
    less_than,
    less_than_or_equal,
    not_,
    not_equals,
    or_,
    starts_with,
)
from .query import NestedQuery, Query, expand, keys, orderby, query, select

__all__ = [
    "functions",
    "is_non_empty_string",
    "wrap_string",
    "aggregate",
    "average",
    "count",
    "groupby",
    "max_",
    "min_",
    "sum_",
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
    "NestedQuery",
    "Query",
    "expand",
    "keys",
    "orderby",
    "query",
    "select",
]
