# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""
Typed table properties.

Every column of a table is a :class:`Property`. A property knows its wire
name, its structural ``kind`` (``"value"`` or ``"navigation"``), its finer
``type`` and the two transforms between wire format and application values.
Use the factory functions rather than constructing :class:`Property` directly::

    contacts = table("contacts", {
        "id": primary_key("contactid"),
        "first_name": string("firstname").required(),
        "birthday": date_only("birthdate"),
        "parent": lookup_id("parentcustomerid_account", lambda: accounts),
    })

Navigation properties reference their related table through a resolver: either
the :class:`~dataverse_schema.models.table.Table` itself or a zero-argument
callable returning it. The callable runs at most once, so two tables may refer
to each other regardless of declaration order.
"""

from __future__ import annotations

import datetime as _dt
from typing import TYPE_CHECKING, Any, Callable, Iterable, List, Optional, Sequence, Union

from ..core._error_codes import PROPERTY_NOT_NAVIGATION
from ..core.errors import InvalidPropertyError
from .schema import Issue, PathItem, Schema
from .validators import is_type, is_type_or_null

if TYPE_CHECKING:
    from .table import Table

# Property kinds
VALUE = "value"
NAVIGATION = "navigation"
TABLE = "table"

# Property types
STRING = "string"
NUMBER = "number"
BOOLEAN = "boolean"
DATE = "date"
DATE_ONLY = "dateOnly"
IMAGE = "image"
LIST = "list"
PRIMARY_KEY = "primaryKey"
FORMATTED = "formatted"
LOOKUP = "lookup"
LOOKUP_ID = "lookupId"
COLLECTION = "collection"
COLLECTION_IDS = "collectionIds"

COLLECTION_TYPES = (COLLECTION, COLLECTION_IDS)
LOOKUP_TYPES = (LOOKUP, LOOKUP_ID)

FORMATTED_VALUE_SUFFIX = "@OData.Community.Display.V1.FormattedValue"

TableSource = Union["Table", Callable[[], "Table"]]
Transform = Callable[[Any], Any]


def _identity(value: Any) -> Any:
    return value


class _TableResolver:
    """Deferred reference to a related table, resolved once and cached."""

    def __init__(self, source: TableSource) -> None:
        self._source = source
        self._table: Optional["Table"] = None

    def __call__(self) -> "Table":
        if self._table is None:
            from .table import Table

            source = self._source
            self._table = source if isinstance(source, Table) else source()
        return self._table


class Property(Schema[Any]):
    """
    A single table column.

    :param name: Wire-format name of the column or navigation property.
    :type name: str
    :param kind: ``"value"`` or ``"navigation"``.
    :type kind: str
    :param type: Property type, for example ``"string"`` or ``"lookupId"``.
    :type type: str
    :param default: Default value used by :meth:`Table.get_default`.
    :param to_wire: Transform from application value to wire value.
    :param from_wire: Transform from wire value to application value.
    :param table: Related table (or zero-argument callable returning it) for navigation properties.
    :param navigation_name: Navigation property name used for association calls, when it differs from ``name``.
    :type navigation_name: str | None
    :param key_only: Whether the related table should be reduced to its primary key.
    :type key_only: bool
    :param choices: Allowed values of a ``"list"`` property.
    """

    def __init__(
        self,
        name: str,
        kind: str,
        type: str,
        default: Any = None,
        to_wire: Optional[Transform] = None,
        from_wire: Optional[Transform] = None,
        table: Optional[TableSource] = None,
        navigation_name: Optional[str] = None,
        key_only: bool = False,
        choices: Optional[Sequence[Any]] = None,
    ) -> None:
        super().__init__(name, default)
        self.kind = kind
        self.type = type
        self.navigation_name = navigation_name
        self.choices = list(choices) if choices is not None else None
        self._to_wire = to_wire or _identity
        self._from_wire = from_wire or _identity
        self._resolver = _TableResolver(table) if table is not None else None
        self._key_only = key_only
        self._key_table: Optional["Table"] = None

    @property
    def table(self) -> "Table":
        """
        Related table of a navigation property.

        For ``lookupId`` and ``collectionIds`` properties this is a table holding
        only the related primary key, under the logical key ``"id"``.

        :raises ~dataverse_schema.core.errors.InvalidPropertyError: If the property is not a navigation property.
        """
        if self._resolver is None:
            raise InvalidPropertyError(
                f"Property {self.name!r} has no related table", subcode=PROPERTY_NOT_NAVIGATION
            )
        related = self._resolver()
        if not self._key_only:
            return related
        if self._key_table is None:
            from .table import Table

            self._key_table = Table(related.name, {"id": related.get_primary_key().property})
        return self._key_table

    def to_wire(self, value: Any) -> Any:
        return self._to_wire(value)

    def from_wire(self, value: Any) -> Any:
        return self._from_wire(value)

    def get_issues(self, value: Any, path: Sequence[PathItem] = ()) -> List[Issue]:
        issues = super().get_issues(value, path)
        path = tuple(path)
        if self.type in COLLECTION_TYPES and isinstance(value, list):
            element = self.table
            for index, item in enumerate(value):
                issues.extend(element.get_issues(item, path + (index,)))
        elif self.type == LOOKUP and value is not None:
            issues.extend(self.table.get_issues(value, path))
        return issues


# ----------------------------- value properties -----------------------------


def string(name: str) -> Property:
    return Property(name, VALUE, STRING).check(is_type_or_null(str))


def number(name: str) -> Property:
    return Property(name, VALUE, NUMBER).check(is_type_or_null(int, float))


def boolean(name: str) -> Property:
    return Property(name, VALUE, BOOLEAN, default=False).check(is_type(bool))


def image(name: str) -> Property:
    """Image column; the wire value is the base64 image content."""
    return Property(name, VALUE, IMAGE).check(is_type_or_null(str))


def primary_key(name: str) -> Property:
    """Primary key column. Always read-only; never written by saves."""
    return Property(name, VALUE, PRIMARY_KEY, default="").set_read_only().check(is_type(str))


def formatted(name: str) -> Property:
    """
    Read-only formatted value (display label) of another column.

    Tables holding formatted properties ask the service to include the
    ``OData.Community.Display.V1.FormattedValue`` annotation on reads.
    """
    return Property(name + FORMATTED_VALUE_SUFFIX, VALUE, FORMATTED).set_read_only()


def list_(name: str, choices: Iterable[Any]) -> Property:
    """
    Choice column restricted to ``choices``.

    Example::

        status = list_("statuscode", [1, 2, 3])
    """
    allowed = list(choices)

    def in_choices(v: Any) -> Optional[str]:
        if v is not None and v not in allowed:
            return f"{v} not in [{','.join(str(c) for c in allowed)}]"
        return None

    return Property(name, VALUE, LIST, choices=allowed).check(in_choices)


def _parse_datetime(value: Any) -> Optional[_dt.datetime]:
    if value is None or value == "":
        return None
    if isinstance(value, _dt.datetime):
        return value
    if isinstance(value, _dt.date):
        return _dt.datetime(value.year, value.month, value.day)
    text = str(value)
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    return _dt.datetime.fromisoformat(text)


def _format_datetime(value: Any) -> Any:
    if isinstance(value, _dt.date):
        return value.isoformat()
    return value


def date(name: str) -> Property:
    """Date and time column; application values are ``datetime`` objects."""
    return Property(
        name, VALUE, DATE, to_wire=_format_datetime, from_wire=_parse_datetime
    ).check(is_type_or_null(_dt.datetime))


def _to_date_only(value: Any) -> Optional[str]:
    if isinstance(value, _dt.date):
        return value.strftime("%Y-%m-%d")
    return None


def _from_date_only(value: Any) -> Optional[_dt.date]:
    if value is None or value == "":
        return None
    if isinstance(value, _dt.datetime):
        return value.date()
    if isinstance(value, _dt.date):
        return value
    return _dt.datetime.strptime(str(value)[:10], "%Y-%m-%d").date()


def date_only(name: str) -> Property:
    """Date column with day precision; application values are ``date`` objects."""
    return Property(
        name, VALUE, DATE_ONLY, to_wire=_to_date_only, from_wire=_from_date_only
    ).check(is_type_or_null(_dt.date))


# --------------------------- navigation properties --------------------------


def _must_be_list(v: Any) -> Optional[str]:
    if not isinstance(v, list):
        return "value is not an array"
    return None


def lookup(name: str, table: TableSource) -> Property:
    """
    Single-valued navigation property holding the full related record.

    Reads expand the navigation; saves store the embedded record through the
    related table and associate the result.
    """
    prop = Property(name, NAVIGATION, LOOKUP, table=table)
    prop._from_wire = lambda v: None if v is None else prop.table.from_wire(v)
    return prop


def lookup_id(name: str, table: TableSource) -> Property:
    """
    Single-valued navigation property holding only the related key.

    ``name`` is the navigation property name; the value is read from the
    ``_<name>_value`` lookup attribute.

    Example::

        parent = lookup_id("parentcustomerid_account", lambda: accounts)
        parent.name             # "_parentcustomerid_account_value"
        parent.navigation_name  # "parentcustomerid_account"
    """
    prop = Property(
        f"_{name.lower()}_value",
        NAVIGATION,
        LOOKUP_ID,
        table=table,
        navigation_name=name,
        key_only=True,
    ).check(is_type_or_null(str))
    prop._to_wire = lambda v: f"{prop.table.name}({v})" if v else None
    return prop


def collection(name: str, table: TableSource) -> Property:
    """Collection-valued navigation property holding full related records."""
    prop = Property(name, NAVIGATION, COLLECTION, default=[], table=table).check(_must_be_list)
    prop._from_wire = lambda v: [prop.table.from_wire(r) for r in (v or [])]
    return prop


def collection_ids(name: str, table: TableSource) -> Property:
    """Collection-valued navigation property holding only the related keys."""
    prop = Property(name, NAVIGATION, COLLECTION_IDS, default=[], table=table, key_only=True).check(
        _must_be_list
    )

    def from_wire(v: Any) -> List[Any]:
        key = prop.table.get_primary_key().property.name
        return [r[key] for r in (v or [])]

    prop._from_wire = from_wire
    return prop


__all__ = [
    "Property",
    "VALUE",
    "NAVIGATION",
    "TABLE",
    "FORMATTED_VALUE_SUFFIX",
    "string",
    "number",
    "boolean",
    "date",
    "date_only",
    "image",
    "list_",
    "primary_key",
    "formatted",
    "lookup",
    "lookup_id",
    "collection",
    "collection_ids",
]
