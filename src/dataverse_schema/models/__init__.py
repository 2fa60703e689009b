# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""
Schema declarations: properties, tables, records and validators.
"""

from .properties import (
    Property,
    boolean,
    collection,
    collection_ids,
    date,
    date_only,
    formatted,
    image,
    list_,
    lookup,
    lookup_id,
    number,
    primary_key,
    string,
)
from .record import Record, merge_records
from .schema import Issue, Schema, ValidationResult
from .table import PrimaryKey, QueryForTable, Table, build_query, table
from .types import infer, value_type

__all__ = [
    "Property",
    "boolean",
    "collection",
    "collection_ids",
    "date",
    "date_only",
    "formatted",
    "image",
    "list_",
    "lookup",
    "lookup_id",
    "number",
    "primary_key",
    "string",
    "Record",
    "merge_records",
    "Issue",
    "Schema",
    "ValidationResult",
    "PrimaryKey",
    "QueryForTable",
    "Table",
    "build_query",
    "table",
    "infer",
    "value_type",
]
