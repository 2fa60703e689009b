# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""
Typed schema layer over the Microsoft Dataverse Web API.

Declare tables from typed properties, then read, save and associate records
with values converted to and from wire format::

    from dataverse_schema import primary_key, string, table

    accounts = table("accounts", {"id": primary_key("accountid"), "name": string("name")})
    accounts.save_record({"name": "Contoso"})
"""

import logging

from .client import DataverseClient, default_client, get_config, set_config
from .core.config import DataverseConfig
from .models import (
    Record,
    Table,
    boolean,
    collection,
    collection_ids,
    date,
    date_only,
    formatted,
    image,
    infer,
    list_,
    lookup,
    lookup_id,
    merge_records,
    number,
    primary_key,
    string,
    table,
    value_type,
)

__version__ = "0.1.0"

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    "DataverseClient",
    "DataverseConfig",
    "default_client",
    "get_config",
    "set_config",
    "Record",
    "Table",
    "boolean",
    "collection",
    "collection_ids",
    "date",
    "date_only",
    "formatted",
    "image",
    "infer",
    "list_",
    "lookup",
    "lookup_id",
    "merge_records",
    "number",
    "primary_key",
    "string",
    "table",
    "value_type",
]
