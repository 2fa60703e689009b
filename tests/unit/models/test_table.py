# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

import json
import unittest

import pandas as pd

from conftest import make_client, make_tables
from dataverse_schema.core._error_codes import PROPERTY_MISSING_CHILD_ID
from dataverse_schema.core.errors import InvalidPropertyError, SchemaError
from dataverse_schema.models import (
    QueryForTable,
    Record,
    boolean,
    collection,
    formatted,
    lookup,
    number,
    primary_key,
    string,
    table,
)
from dataverse_schema.models.schema import Issue
from dataverse_schema.models.table import FORMATTED_VALUES_PREFER, build_query
from dataverse_schema.query import equals


class TestTableSchema(unittest.TestCase):
    def setUp(self):
        self.client = make_client()
        self.accounts, self.contacts, self.addresses = make_tables(self.client)

    def test_kind_and_type(self):
        self.assertEqual((self.accounts.kind, self.accounts.type, self.accounts.name), ("table", "table", "accounts"))

    def test_missing_primary_key_is_lazy(self):
        t = table("x", {"name": string("name")})
        with self.assertRaises(SchemaError) as ctx:
            t.get_primary_key()
        self.assertEqual(str(ctx.exception), "No Primary Key")

    def test_primary_key(self):
        pk = self.accounts.get_primary_key()
        self.assertEqual(pk.key, "id")
        self.assertEqual(pk.property.name, "accountid")
        self.assertEqual(self.accounts.get_primary_id({"id": "a1"}), "a1")
        self.assertIsNone(self.accounts.get_primary_id({"name": "x"}))

    def test_get_default_keeps_given_values(self):
        t = table(
            "things",
            {
                "id": primary_key("thingid"),
                "name": string("name"),
                "size": number("size").set_default(42),
                "active": boolean("active"),
                "parts": collection("parts", lambda: t),
            },
        )
        self.assertEqual(
            t.get_default({"name": "X"}),
            {"id": "", "name": "X", "size": 42, "active": False, "parts": []},
        )
        self.assertEqual(t.get_default({"size": None})["size"], None)

    def test_validation_aggregates_nested_issues(self):
        issues = self.accounts.get_issues({"addresses": [{"street": ""}]})
        self.assertIn(Issue("Required", ("name",)), issues)
        self.assertIn(Issue("Required", ("addresses", 0, "street")), issues)
        self.assertGreaterEqual(len(issues), 2)

    def test_validation_of_non_mapping(self):
        issues = self.accounts.get_issues("nonsense")
        self.assertIn(Issue("Required", ("name",)), issues)

    def test_read_only_properties_are_not_validated(self):
        issues = self.accounts.get_issues(self.accounts.get_default({"id": 5, "name": "x"}))
        self.assertEqual(issues, [])

    def test_parse(self):
        with self.assertRaises(Exception) as ctx:
            self.accounts.parse({})
        self.assertEqual(json.loads(str(ctx.exception))[0]["path"], ["name"])

    def test_from_wire(self):
        raw = {
            "@odata.etag": 'W/"42"',
            "accountid": "a1",
            "name": "Contoso",
            "revenue": 10,
            "contact_customer_accounts": [{"contactid": "c1", "fullname": "Ada", "_parentcustomerid_account_value": "a1"}],
            "primarycontactid": None,
        }
        record = self.accounts.from_wire(raw)
        self.assertIsInstance(record, Record)
        self.assertEqual(record.etag, 'W/"42"')
        self.assertEqual(record["contact_ids"], ["c1"])
        self.assertEqual(record["contacts"][0].to_dict(), {"id": "c1", "name": "Ada", "account": "a1"})
        self.assertIsNone(record["primary_contact"])
        self.assertEqual(record["addresses"], [])
        self.assertNotIn("@odata.etag", json.dumps(record.to_dict()))

    def test_from_wire_none(self):
        self.assertIsNone(self.accounts.from_wire(None))

    def test_to_wire_only_present_writable_value_properties(self):
        payload = self.accounts.to_wire({"id": "a1", "name": "Contoso", "contacts": [], "primary_contact": None})
        self.assertEqual(payload, {"name": "Contoso"})
        self.assertEqual(self.accounts.to_wire({}), {})
        self.assertIsNone(self.accounts.to_wire(None))

    def test_get_alternate_keys(self):
        self.assertEqual(self.accounts.get_alternate_keys({"name": "Contoso", "revenue": 5}), "name='Contoso',revenue=5")

    def test_structural_derivation(self):
        picked = self.accounts.pick_properties("id", "name")
        self.assertEqual(list(picked.properties), ["id", "name"])
        omitted = self.accounts.omit_properties("contacts", "contact_ids", "primary_contact", "addresses")
        self.assertEqual(list(omitted.properties), ["id", "name", "revenue"])
        appended = picked.append_properties({"code": string("accountnumber")})
        self.assertEqual(list(appended.properties), ["id", "name", "code"])
        self.assertEqual(appended.name, "accounts")
        self.assertEqual(len(self.accounts.properties), 7)

    def test_unknown_property(self):
        with self.assertRaises(InvalidPropertyError):
            self.accounts.get_property_value("nope", "a1")


class TestBuildQuery(unittest.TestCase):
    def setUp(self):
        self.client = make_client()
        self.accounts, self.contacts, self.addresses = make_tables(self.client)

    def test_select_and_expand(self):
        q = build_query(self.contacts)
        self.assertEqual(q, "$select=contactid,fullname,_parentcustomerid_account_value")

    def test_expand_recurses_into_related_tables(self):
        q = self.accounts.pick_properties("id", "primary_contact", "contact_ids").build_query()
        self.assertEqual(
            q,
            "$select=accountid"
            "&$expand=contact_customer_accounts($select=contactid),"
            "primarycontactid($select=contactid,fullname,_parentcustomerid_account_value)",
        )

    def test_options(self):
        q = self.contacts.build_query(QueryForTable(orderby={"name": "desc"}, filter=equals("fullname", "Ada"), top=2))
        self.assertEqual(
            q,
            "$select=contactid,fullname,_parentcustomerid_account_value"
            "&$orderby=fullname%20desc&$filter=(fullname%20eq%20'Ada')&$top=2",
        )

    def test_mapping_options(self):
        q = self.contacts.build_query({"top": 1})
        self.assertTrue(q.endswith("&$top=1"))

    def test_cyclic_expand_stops_at_depth(self):
        parents = table("parents", {"id": primary_key("parentid"), "child": lookup("child", lambda: children)})
        children = table("children", {"id": primary_key("childid"), "parent": lookup("parent", parents)})
        q = build_query(parents, depth=2)
        self.assertEqual(
            q,
            "$select=parentid&$expand=child($select=childid;$expand=parent($select=parentid))",
        )

    def test_formatted_values_are_requested_by_header(self):
        t = self.client.table(
            "accounts",
            {"id": primary_key("accountid"), "status": formatted("statuscode")},
        )
        self.assertEqual(t.build_query(), "$select=accountid")
        self.assertEqual(t._read_headers(), {"Prefer": FORMATTED_VALUES_PREFER})
        self.assertIsNone(self.contacts._read_headers())


class TestTableReads(unittest.TestCase):
    def setUp(self):
        self.client = make_client()
        self.odata = self.client._odata
        self.accounts, self.contacts, self.addresses = make_tables(self.client)

    def test_get_record(self):
        self.odata.get_record.return_value = {"contactid": "c1", "fullname": "Ada", "@odata.etag": "e1"}
        record = self.contacts.get_record("c1")
        self.assertEqual(record.to_dict(), {"id": "c1", "name": "Ada", "account": None})
        self.assertEqual(record.etag, "e1")
        self.odata.get_record.assert_called_once_with(
            "contacts", "c1", "$select=contactid,fullname,_parentcustomerid_account_value", headers=None
        )

    def test_get_record_not_found(self):
        self.odata.get_record.return_value = None
        self.assertIsNone(self.contacts.get_record("missing"))

    def test_get_records(self):
        self.odata.get_records.return_value = [{"contactid": "c1"}, {"contactid": "c2"}]
        records = self.contacts.get_records({"filter": "x"})
        self.assertEqual([r["id"] for r in records], ["c1", "c2"])
        args = self.odata.get_records.call_args
        self.assertEqual(args[0][0], "contacts")
        self.assertIn("$filter=x", args[0][1])

    def test_get_records_dataframe(self):
        self.odata.get_records.return_value = [{"contactid": "c1", "fullname": "Ada"}]
        df = self.contacts.get_records_dataframe()
        self.assertIsInstance(df, pd.DataFrame)
        self.assertEqual(list(df.columns), ["id", "name", "account"])
        self.assertEqual(df.iloc[0]["name"], "Ada")

    def test_fetch_xml(self):
        self.odata.fetch_xml.return_value = [{"contactid": "c1"}]
        records = self.contacts.fetch_xml("<fetch><entity name='contact' /></fetch>")
        self.assertEqual(records[0]["id"], "c1")

    def test_get_property_value_scalar(self):
        self.odata.get_property_value.return_value = "Ada"
        self.assertEqual(self.contacts.get_property_value("name", "c1"), "Ada")
        self.odata.get_property_value.assert_called_once_with("contacts", "c1", "fullname")

    def test_get_property_value_lookup_id(self):
        self.odata.get_property_value.return_value = "a1"
        self.assertEqual(self.contacts.get_property_value("account", "c1"), "a1")
        self.odata.get_property_value.assert_called_once_with("contacts", "c1", "_parentcustomerid_account_value")

    def test_get_property_value_collection(self):
        self.odata.get_associated_records.return_value = [{"contactid": "c1", "fullname": "Ada"}]
        contacts = self.accounts.get_property_value("contacts", "a1", {"top": 1})
        self.assertEqual(contacts[0]["name"], "Ada")
        args = self.odata.get_associated_records.call_args[0]
        self.assertEqual(args[:3], ("accounts", "a1", "contact_customer_accounts"))
        self.assertEqual(args[3], "$select=contactid,fullname,_parentcustomerid_account_value&$top=1")

    def test_get_property_value_collection_ids(self):
        self.odata.get_associated_records.return_value = [{"contactid": "c1"}, {"contactid": "c2"}]
        self.assertEqual(self.accounts.get_property_value("contact_ids", "a1"), ["c1", "c2"])
        self.assertEqual(self.odata.get_associated_records.call_args[0][3], "$select=contactid")

    def test_get_property_value_lookup(self):
        self.odata.get_associated_record.return_value = {"contactid": "c1", "fullname": "Ada"}
        contact = self.accounts.get_property_value("primary_contact", "a1")
        self.assertEqual(contact["id"], "c1")

    def test_get_property_value_lookup_not_found(self):
        self.odata.get_associated_record.return_value = None
        self.assertIsNone(self.accounts.get_property_value("primary_contact", "a1"))


class TestTableWrites(unittest.TestCase):
    def setUp(self):
        self.client = make_client()
        self.odata = self.client._odata
        self.accounts, self.contacts, self.addresses = make_tables(self.client)

    def test_update_value_property(self):
        self.assertEqual(self.accounts.update_property_value("name", "a1", "New"), "a1")
        self.odata.update_property_value.assert_called_once_with("accounts", "a1", "name", "New")

    def test_update_navigation_property_value(self):
        self.accounts.update_property_value("primary_contact", "a1", None)
        self.odata.dissociate_record.assert_called_once_with("accounts", "a1", "primarycontactid")

    def test_associate_and_dissociate(self):
        self.accounts.associate_record("contacts", "a1", "c1")
        self.odata.associate_record.assert_called_once_with(
            "accounts", "a1", "contact_customer_accounts", "contacts", "c1"
        )
        self.accounts.dissociate_record("contacts", "a1", "c1")
        self.odata.dissociate_record.assert_called_with("accounts", "a1", "contact_customer_accounts", "c1")
        self.accounts.dissociate_record("primary_contact", "a1", "ignored")
        self.odata.dissociate_record.assert_called_with("accounts", "a1", "primarycontactid", None)

    def test_dissociate_collection_requires_child_id(self):
        for child_id in (None, ""):
            with self.assertRaises(InvalidPropertyError) as ctx:
                self.accounts.dissociate_record("contacts", "a1", child_id)
            self.assertEqual(ctx.exception.subcode, PROPERTY_MISSING_CHILD_ID)
        with self.assertRaises(InvalidPropertyError):
            self.accounts.dissociate_record("contact_ids", "a1")
        self.odata.dissociate_record.assert_not_called()

    def test_associate_lookup_id_uses_navigation_name(self):
        self.contacts.associate_record("account", "c1", "a1")
        self.odata.associate_record.assert_called_once_with(
            "contacts", "c1", "parentcustomerid_account", "accounts", "a1"
        )

    def test_associate_value_property_rejected(self):
        with self.assertRaises(InvalidPropertyError):
            self.accounts.associate_record("name", "a1", "c1")

    def test_delete_record(self):
        self.odata.delete_record.return_value = "a1"
        self.assertEqual(self.accounts.delete_record("a1"), "a1")
        self.odata.delete_record.assert_called_once_with("accounts", "a1")

    def test_delete_property_value(self):
        self.accounts.delete_property_value("revenue", "a1")
        self.odata.delete_property_value.assert_called_once_with("accounts", "a1", "revenue")
        with self.assertRaises(InvalidPropertyError):
            self.accounts.delete_property_value("contacts", "a1")

    def test_activate_and_deactivate(self):
        self.accounts.activate_record("a1")
        self.odata.activate_record.assert_called_once_with("accounts", "a1")
        self.accounts.deactivate_record("a1")
        self.odata.deactivate_record.assert_called_once_with("accounts", "a1")


if __name__ == "__main__":
    unittest.main()
