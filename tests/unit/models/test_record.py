# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

import json

from dataverse_schema.models import Record, merge_records


class TestRecord:
    def test_mapping_access(self):
        r = Record(table="accounts", data={"id": "a1", "name": "Contoso"}, etag='W/"1"')
        assert r["name"] == "Contoso"
        assert r.get("missing") is None
        assert "id" in r
        assert list(r) == ["id", "name"]
        assert len(r) == 2
        r["name"] = "Fabrikam"
        assert dict(r.items()) == {"id": "a1", "name": "Fabrikam"}

    def test_etag_is_not_serialized(self):
        nested = Record(table="contacts", data={"id": "c1"}, etag="e2")
        r = Record(table="accounts", data={"id": "a1", "contacts": [nested], "primary": nested}, etag="e1")
        assert r.to_dict() == {"id": "a1", "contacts": [{"id": "c1"}], "primary": {"id": "c1"}}
        assert "e1" not in json.dumps(r.to_dict())


class TestMergeRecords:
    def test_unchanged_records_keep_identity(self):
        old_a = Record(table="accounts", data={"id": "a"}, etag="1")
        old_b = Record(table="accounts", data={"id": "b"}, etag="2")
        new_a = Record(table="accounts", data={"id": "a"}, etag="1")
        new_b = Record(table="accounts", data={"id": "b"}, etag="3")

        merged = merge_records([old_a, old_b], [new_a, new_b])

        assert merged[0] is old_a
        assert merged[1] is new_b

    def test_records_without_etag_are_not_reused(self):
        old = Record(table="accounts", data={"id": "a"})
        new = Record(table="accounts", data={"id": "a"})
        assert merge_records([old], [new])[0] is new

    def test_empty_inputs(self):
        assert merge_records([], []) == []
        new = Record(table="accounts", etag="1")
        assert merge_records([], [new]) == [new]
