# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""
Value shapes of tables and properties, as typing constructs.

:func:`infer` turns a table into a :class:`typing.TypedDict` describing the
records :meth:`~dataverse_schema.models.table.Table.get_record` returns, for
use in annotations and by type-aware tooling::

    AccountRecord = infer(accounts)

    def greet(account: AccountRecord) -> str:
        return f"Hello {account['name']}"

Tables that reference each other produce forward references by record type name
instead of recursing forever.
"""

from __future__ import annotations

import datetime as _dt
from typing import Any, Dict, ForwardRef, List, Literal, Optional, TypedDict

from .properties import (
    BOOLEAN,
    COLLECTION,
    COLLECTION_IDS,
    DATE,
    DATE_ONLY,
    FORMATTED,
    IMAGE,
    LIST,
    LOOKUP,
    LOOKUP_ID,
    NUMBER,
    PRIMARY_KEY,
    STRING,
    Property,
)
from .schema import Schema
from .table import Table

_SCALARS: Dict[str, Any] = {
    PRIMARY_KEY: str,
    STRING: Optional[str],
    IMAGE: Optional[str],
    FORMATTED: Optional[str],
    NUMBER: Optional[float],
    BOOLEAN: bool,
    DATE: Optional[_dt.datetime],
    DATE_ONLY: Optional[_dt.date],
    LOOKUP_ID: Optional[str],
    COLLECTION_IDS: List[str],
}


def _record_type_name(t: Table) -> str:
    return "".join(part[:1].upper() + part[1:] for part in t.name.replace("-", "_").split("_")) + "Record"


def _infer(schema: Schema, in_progress: Dict[int, str]) -> Any:
    if isinstance(schema, Table):
        if id(schema) in in_progress:
            return ForwardRef(in_progress[id(schema)])
        name = _record_type_name(schema)
        in_progress[id(schema)] = name
        try:
            fields = {key: _infer(prop, in_progress) for key, prop in schema.properties.items()}
        finally:
            del in_progress[id(schema)]
        return TypedDict(name, fields)
    if not isinstance(schema, Property):
        return Any
    if schema.type in _SCALARS:
        return _SCALARS[schema.type]
    if schema.type == LIST:
        if not schema.choices:
            return Optional[Any]
        return Optional[Literal[tuple(schema.choices)]]
    if schema.type == LOOKUP:
        return Optional[_infer(schema.table, in_progress)]
    if schema.type == COLLECTION:
        return List[_infer(schema.table, in_progress)]
    return Any


def value_type(schema: Schema) -> Any:
    """
    The type of values held by ``schema``.

    Example::

        value_type(number("revenue"))           # Optional[float]
        value_type(list_("statuscode", [1, 2]))  # Optional[Literal[1, 2]]
    """
    return _infer(schema, {})


def infer(t: Table) -> Any:
    """The :class:`typing.TypedDict` of records read from ``t``."""
    return _infer(t, {})


__all__ = ["value_type", "infer"]
