# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""
Record envelope returned by table reads.

A record maps logical keys to application values and carries the ETag of the
server copy it was read from. The ETag is metadata on the envelope: it is never
part of :meth:`Record.to_dict` and so never part of a serialized payload.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Optional, Sequence, TypeVar

ETAG_ANNOTATION = "@odata.etag"

R = TypeVar("R")


@dataclass
class Record:
    """
    Dict-like record with an attached ETag.

    :param table: Entity set name the record was read from.
    :type table: str
    :param data: Values keyed by logical property key.
    :type data: dict[str, Any]
    :param etag: ETag of the server copy, used for optimistic merges.
    :type etag: str | None

    Example::

        account = accounts.get_record(account_id)
        print(account["name"])
        print(account.etag)
        json.dumps(account.to_dict())   # no ETag in the output
    """

    table: str
    data: Dict[str, Any] = field(default_factory=dict)
    etag: Optional[str] = None

    def __getitem__(self, key: str) -> Any:
        return self.data[key]

    def __setitem__(self, key: str, value: Any) -> None:
        self.data[key] = value

    def __delitem__(self, key: str) -> None:
        del self.data[key]

    def __contains__(self, key: object) -> bool:
        return key in self.data

    def __iter__(self) -> Iterator[str]:
        return iter(self.data)

    def __len__(self) -> int:
        return len(self.data)

    def get(self, key: str, default: Any = None) -> Any:
        return self.data.get(key, default)

    def keys(self):
        return self.data.keys()

    def values(self):
        return self.data.values()

    def items(self):
        return self.data.items()

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert to a plain dictionary, recursively for nested records.

        :return: Logical values only; the ETag is left out.
        :rtype: dict[str, Any]
        """
        return {k: _plain(v) for k, v in self.data.items()}


def _plain(value: Any) -> Any:
    if isinstance(value, Record):
        return value.to_dict()
    if isinstance(value, list):
        return [_plain(v) for v in value]
    return value


def merge_records(previous: Sequence[R], new: Sequence[R]) -> List[R]:
    """
    Reuse previously fetched records whose ETag is unchanged.

    Lets callers keep object identity (and any caches keyed on it) across refetches.
    Records without an ETag are never reused.

    :param previous: Records from an earlier fetch.
    :param new: Records from the latest fetch.
    :return: ``new`` with unchanged entries replaced by their ``previous`` object.
    """
    by_etag = {getattr(r, "etag", None): r for r in previous}
    by_etag.pop(None, None)
    return [by_etag.get(getattr(r, "etag", None), r) for r in new]


__all__ = ["Record", "merge_records", "ETAG_ANNOTATION"]
