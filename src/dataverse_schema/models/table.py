# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""
Tables: named sets of properties bound to one Dataverse entity set.

A :class:`Table` converts records between wire format and application values,
validates them, builds the OData query that reads a whole record (including
expanded navigation properties), and runs reads and saves through a
:class:`~dataverse_schema.client.DataverseClient`.

Example::

    accounts = table("accounts", {
        "id": primary_key("accountid"),
        "name": string("name").required(),
        "contacts": collection("contact_customer_accounts", lambda: contacts),
    })

    account_id = accounts.save_record({"name": "Contoso", "contacts": [{"first_name": "Ada"}]})
    account = accounts.get_record(account_id)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from functools import partial
from typing import TYPE_CHECKING, Any, Dict, List, Mapping, Optional, Sequence

from ..core._concurrency import _gather
from ..core._error_codes import PROPERTY_MISSING_CHILD_ID, PROPERTY_NOT_NAVIGATION, PROPERTY_NOT_VALUE
from ..core.config import DataverseConfig
from ..core.errors import InvalidPropertyError, SchemaError
from ..query.query import keys, query, select
from .properties import (
    COLLECTION,
    COLLECTION_TYPES,
    FORMATTED,
    LOOKUP,
    LOOKUP_ID,
    LOOKUP_TYPES,
    NAVIGATION,
    PRIMARY_KEY,
    TABLE,
    VALUE,
    Property,
)
from .record import ETAG_ANNOTATION, Record
from .schema import Issue, PathItem, Schema

if TYPE_CHECKING:
    import pandas as pd

    from ..client import DataverseClient
    from ..data._odata import _ODataClient

logger = logging.getLogger(__name__)

FORMATTED_VALUES_PREFER = 'odata.include-annotations="OData.Community.Display.V1.FormattedValue"'


@dataclass(frozen=True)
class QueryForTable:
    """
    Caller-supplied options for :meth:`Table.get_records`.

    :param orderby: Logical property key to ``"asc"`` or ``"desc"``.
    :type orderby: dict[str, str] | None
    :param filter: ``$filter`` expression, typically built with :mod:`dataverse_schema.query`.
    :type filter: str | None
    :param top: Maximum number of records.
    :type top: int | None
    """

    orderby: Optional[Mapping[str, str]] = None
    filter: Optional[str] = None
    top: Optional[int] = None


@dataclass(frozen=True)
class PrimaryKey:
    """Logical key and property of a table's primary key."""

    key: str
    property: Property


def _as_mapping(value: Any) -> Mapping[str, Any]:
    if isinstance(value, (dict, Record)):
        return value
    return {}


def _as_options(options: Any) -> QueryForTable:
    if options is None:
        return QueryForTable()
    if isinstance(options, QueryForTable):
        return options
    return QueryForTable(**dict(options))


class Table(Schema[Record]):
    """
    A named, ordered mapping of logical keys to properties.

    The primary key is looked up lazily: a table without a ``primary_key``
    property can be declared, and only fails when an operation needs the key.

    :param entity_set_name: Entity set the table reads from and writes to.
    :type entity_set_name: str
    :param properties: Logical key to property.
    :type properties: dict[str, ~dataverse_schema.models.properties.Property]
    :param client: Client used for network operations. Defaults to the process-wide client.
    :type client: ~dataverse_schema.client.DataverseClient | None
    """

    kind = TABLE
    type = TABLE

    def __init__(
        self,
        entity_set_name: str,
        properties: Mapping[str, Property],
        client: Optional["DataverseClient"] = None,
    ) -> None:
        super().__init__(entity_set_name, None)
        self.properties: Dict[str, Property] = dict(properties)
        self._client = client

    # ----------------------------- plumbing -----------------------------
    def _get_client(self) -> "DataverseClient":
        if self._client is not None:
            return self._client
        from ..client import default_client

        return default_client()

    def _odata(self) -> "_ODataClient":
        return self._get_client()._get_odata()

    def _config(self) -> DataverseConfig:
        return self._get_client().config

    def _property(self, key: str) -> Property:
        try:
            return self.properties[key]
        except KeyError:
            raise InvalidPropertyError(f"Unknown property {key!r} on table {self.name!r}") from None

    def _read_headers(self, t: Optional["Table"] = None) -> Optional[Dict[str, str]]:
        if _has_formatted(t or self, self._config().expand_depth):
            return {"Prefer": FORMATTED_VALUES_PREFER}
        return None

    # ----------------------------- schema -----------------------------
    def get_primary_key(self) -> PrimaryKey:
        """
        Find the primary key property.

        :raises ~dataverse_schema.core.errors.SchemaError: ``"No Primary Key"`` if the table has none.
        """
        for key, prop in self.properties.items():
            if prop.type == PRIMARY_KEY:
                return PrimaryKey(key, prop)
        raise SchemaError("No Primary Key", details={"table": self.name})

    def get_primary_id(self, value: Mapping[str, Any]) -> Optional[str]:
        """Primary key value of ``value``, or None when it has none."""
        return value.get(self.get_primary_key().key)

    def get_issues(self, value: Any, path: Sequence[PathItem] = ()) -> List[Issue]:
        issues = super().get_issues(value, path)
        path = tuple(path)
        record = _as_mapping(value)
        for key, prop in self.properties.items():
            if not prop.get_read_only():
                issues.extend(prop.get_issues(record.get(key), path + (key,)))
        return issues

    def get_default(self, value: Optional[Mapping[str, Any]] = None) -> Dict[str, Any]:
        """
        A complete record: every key of ``value`` kept as given, every other
        property set to its default.

        Nested navigation values are not filled in.
        """
        value = value or {}
        return {key: value[key] if key in value else prop.get_default() for key, prop in self.properties.items()}

    def from_wire(self, value: Optional[Mapping[str, Any]]) -> Optional[Record]:
        """Convert a raw record into a :class:`Record`, keeping its ETag on the envelope."""
        if value is None:
            return None
        data = {key: prop.from_wire(value.get(prop.name)) for key, prop in self.properties.items()}
        return Record(table=self.name, data=data, etag=value.get(ETAG_ANNOTATION))

    def to_wire(self, value: Optional[Mapping[str, Any]]) -> Optional[Dict[str, Any]]:
        """
        Convert the value properties present in ``value`` to a write payload.

        Read-only properties and navigation properties are left out; navigation
        properties are written by :meth:`save_record`.
        """
        if value is None:
            return None
        result: Dict[str, Any] = {}
        for key, prop in self.properties.items():
            if prop.get_read_only() or key not in value:
                continue
            if prop.kind == VALUE:
                result[prop.name] = prop.to_wire(value[key])
        return result

    def get_alternate_keys(self, value: Mapping[str, Any]) -> str:
        """
        Alternate key expression for the given logical values.

        Example::

            accounts.get_alternate_keys({"number": "A-100"})  # "accountnumber='A-100'"
        """
        return keys({self._property(k).name: v for k, v in value.items()})

    def build_query(self, options: Any = None) -> str:
        """Query string reading whole records of this table, honoring ``options``."""
        return build_query(self, options, depth=self._config().expand_depth)

    def _related_query(self, related: "Table", options: Any) -> str:
        return build_query(related, options, depth=self._config().expand_depth)

    # ----------------------------- structure -----------------------------
    def pick_properties(self, *keys: str) -> "Table":
        return Table(self.name, {k: p for k, p in self.properties.items() if k in keys}, client=self._client)

    def omit_properties(self, *keys: str) -> "Table":
        return Table(self.name, {k: p for k, p in self.properties.items() if k not in keys}, client=self._client)

    def append_properties(self, properties: Mapping[str, Property]) -> "Table":
        return Table(self.name, {**self.properties, **properties}, client=self._client)

    # ----------------------------- reads -----------------------------
    def get_record(self, record_id: str) -> Optional[Record]:
        """
        Read one record with every declared property.

        :return: The record, or None if it does not exist.
        """
        raw = self._odata().get_record(self.name, record_id, self.build_query(), headers=self._read_headers())
        return self.from_wire(raw)

    def get_records(self, options: Any = None) -> List[Record]:
        """
        Read all records matching ``options``, following server-side paging.

        :param options: :class:`QueryForTable` or a mapping with ``orderby``, ``filter`` and ``top``.

        Example::

            accounts.get_records({"filter": equals("name", "Contoso"), "orderby": {"name": "asc"}, "top": 10})
        """
        raws = self._odata().get_records(self.name, self.build_query(options), headers=self._read_headers())
        return [self.from_wire(r) for r in raws]

    def get_records_dataframe(self, options: Any = None) -> "pd.DataFrame":
        """:meth:`get_records` as a pandas DataFrame with one column per property."""
        from ..utils._pandas import records_to_dataframe

        return records_to_dataframe(self.get_records(options), columns=list(self.properties))

    def fetch_xml(self, xml: str) -> List[Record]:
        """Run a FetchXML query; the result is converted like :meth:`get_records`."""
        return [self.from_wire(r) for r in self._odata().fetch_xml(self.name, xml)]

    def get_property_value(self, key: str, record_id: str, options: Any = None) -> Any:
        """
        Read a single property of a record.

        Value properties and ``lookup_id`` properties read the scalar. Collection
        properties read the associated records and lookups read the associated record,
        each with every declared property of the related table.

        :raises ~dataverse_schema.core.errors.InvalidPropertyError: For unsupported property types.
        """
        prop = self._property(key)
        odata = self._odata()
        if prop.kind == VALUE or prop.type == LOOKUP_ID:
            return prop.from_wire(odata.get_property_value(self.name, record_id, prop.name))
        if prop.type in COLLECTION_TYPES:
            related = prop.table
            raws = odata.get_associated_records(
                self.name, record_id, prop.name, self._related_query(related, options), headers=self._read_headers(related)
            )
            return prop.from_wire(raws)
        if prop.type == LOOKUP:
            related = prop.table
            raw = odata.get_associated_record(
                self.name, record_id, prop.name, self._related_query(related, options), headers=self._read_headers(related)
            )
            return prop.from_wire(raw)
        raise InvalidPropertyError(f"Invalid Property {key!r}")

    # ----------------------------- writes -----------------------------
    def update_property_value(self, key: str, record_id: str, value: Any) -> str:
        """Write a single property; navigation properties go through :meth:`update_navigation_property`."""
        prop = self._property(key)
        if prop.kind == NAVIGATION:
            self.update_navigation_property(prop, record_id, value)
        else:
            self._odata().update_property_value(self.name, record_id, prop.name, prop.to_wire(value))
        return record_id

    def update_navigation_property(self, prop: Property, record_id: str, value: Any) -> Any:
        """
        Bring a navigation property of a stored record in line with ``value``.

        Collections are synchronized against the current members: embedded records
        are saved first (concurrently), then missing members are associated and
        surplus members dissociated. Lookups are dissociated for None, otherwise
        associated, saving an embedded record first.
        """
        odata = self._odata()
        if prop.type in COLLECTION_TYPES:
            if not isinstance(value, list):
                return None
            related = prop.table
            if prop.type == COLLECTION:
                workers = self._config().max_workers
                ids = _gather([partial(related.save_record, v) for v in value], max_workers=workers)
            else:
                ids = list(value)
            return odata.associate_record_to_list(
                self.name, record_id, prop.name, related.name, related.get_primary_key().property.name, ids
            )
        if prop.type in LOOKUP_TYPES:
            name = prop.name if prop.type == LOOKUP else prop.navigation_name
            if value is None:
                return odata.dissociate_record(self.name, record_id, name)
            related = prop.table
            child_id = related.save_record(value) if prop.type == LOOKUP else value
            return odata.associate_record(self.name, record_id, name, related.name, child_id)
        raise InvalidPropertyError(
            f"Property {prop.name!r} is not a navigation property", subcode=PROPERTY_NOT_NAVIGATION
        )

    def save_record(self, value: Mapping[str, Any]) -> str:
        """
        Create or update a record and its navigation properties.

        With a primary key in ``value`` the value properties are PATCHed; without one
        the record is created first to obtain its key. Every present, writable
        navigation property is then updated. The PATCH and all navigation updates run
        concurrently, and the call returns once all of them have finished.

        The calls are not atomic: when one fails, the others may already have been applied.

        :return: Primary key of the saved record.
        :raises ~dataverse_schema.core.errors.SchemaError: If the table has no primary key.
        """
        pk = self.get_primary_key().property.name
        select_pk = query(select=select(pk))
        odata = self._odata()
        calls = []
        record_id = self.get_primary_id(value)
        if record_id:
            calls.append(partial(odata.patch_record, self.name, record_id, self.to_wire(value), select_pk))
        else:
            created = odata.post_record(self.name, self.to_wire(value), select_pk)
            record_id = created[pk]
            logger.debug("created %s(%s)", self.name, record_id)

        for key, prop in self.properties.items():
            if prop.get_read_only() or key not in value:
                continue
            if prop.kind == NAVIGATION:
                calls.append(partial(self.update_navigation_property, prop, record_id, value[key]))
        _gather(calls, max_workers=self._config().max_workers)
        return record_id

    def save_dataframe(self, df: "pd.DataFrame") -> List[str]:
        """
        Save every row of ``df`` with :meth:`save_record`, in order.

        Missing cells are left out of the row, so they are not written.
        """
        from ..utils._pandas import dataframe_to_records

        return [self.save_record(row) for row in dataframe_to_records(df)]

    def associate_record(self, key: str, record_id: str, child_id: str) -> str:
        prop = self._navigation(key)
        return self._odata().associate_record(
            self.name, record_id, prop.navigation_name or prop.name, prop.table.name, child_id
        )

    def dissociate_record(self, key: str, record_id: str, child_id: Optional[str] = None) -> str:
        """
        Remove an association. ``child_id`` is required for collection properties
        and ignored for lookups.

        :raises ~dataverse_schema.core.errors.InvalidPropertyError: If ``child_id`` is missing
            for a collection property.
        """
        prop = self._navigation(key)
        if prop.type in COLLECTION_TYPES and not child_id:
            raise InvalidPropertyError(
                f"Dissociating from collection {key!r} requires a child id", subcode=PROPERTY_MISSING_CHILD_ID
            )
        member = child_id if prop.type in COLLECTION_TYPES else None
        return self._odata().dissociate_record(self.name, record_id, prop.navigation_name or prop.name, member)

    def delete_record(self, record_id: str) -> str:
        return self._odata().delete_record(self.name, record_id)

    def delete_property_value(self, key: str, record_id: str) -> str:
        """Clear a value property of a record."""
        prop = self._property(key)
        if prop.kind != VALUE:
            raise InvalidPropertyError("Cannot delete navigation property values", subcode=PROPERTY_NOT_VALUE)
        return self._odata().delete_property_value(self.name, record_id, prop.name)

    def activate_record(self, record_id: str) -> str:
        return self._odata().activate_record(self.name, record_id)

    def deactivate_record(self, record_id: str) -> str:
        return self._odata().deactivate_record(self.name, record_id)

    def _navigation(self, key: str) -> Property:
        prop = self._property(key)
        if prop.kind != NAVIGATION:
            raise InvalidPropertyError(
                "Can only associate to navigation properties", subcode=PROPERTY_NOT_NAVIGATION
            )
        return prop

    def __repr__(self) -> str:
        return f"Table({self.name!r}, {list(self.properties)!r})"


def table(name: str, properties: Mapping[str, Property], client: Optional["DataverseClient"] = None) -> Table:
    """Declare a table over the entity set ``name``."""
    return Table(name, properties, client=client)


# ----------------------------- query building -----------------------------


def _build_select(t: Table) -> str:
    return select(
        *(p.name for p in t.properties.values() if (p.kind == VALUE and p.type != FORMATTED) or p.type == LOOKUP_ID)
    )


def _build_expand(t: Table, depth: int) -> str:
    if depth <= 0:
        return ""
    parts = []
    for p in t.properties.values():
        if p.kind != NAVIGATION or p.type == LOOKUP_ID:
            continue
        related = p.table
        options = []
        related_select = _build_select(related)
        if related_select:
            options.append(f"$select={related_select}")
        related_expand = _build_expand(related, depth - 1)
        if related_expand:
            options.append(f"$expand={related_expand}")
        parts.append(f"{p.name}({';'.join(options)})")
    return ",".join(parts)


def _has_formatted(t: Table, depth: int) -> bool:
    for p in t.properties.values():
        if p.type == FORMATTED:
            return True
        if depth > 0 and p.kind == NAVIGATION and p.type != LOOKUP_ID and _has_formatted(p.table, depth - 1):
            return True
    return False


def build_query(t: Table, options: Any = None, depth: int = 5) -> str:
    """
    Query string selecting every value property of ``t`` and expanding its
    navigation properties, nested at most ``depth`` levels.

    ``options.orderby`` uses logical keys; they are translated to wire names.
    """
    opts = _as_options(options)
    orderby = None
    if opts.orderby:
        orderby = ",".join(f"{t._property(k).name} {direction}" for k, direction in opts.orderby.items())
    return query(
        select=_build_select(t),
        expand=_build_expand(t, depth),
        orderby=orderby,
        filter=opts.filter,
        top=opts.top,
    )


__all__ = ["Table", "QueryForTable", "PrimaryKey", "table", "build_query"]
