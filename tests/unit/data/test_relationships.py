# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""Tests for association operations."""

import unittest
from unittest.mock import MagicMock

from dataverse_schema.core.config import DataverseConfig
from dataverse_schema.core.errors import HttpError
from dataverse_schema.data._relationships import _RelationshipOperationsMixin

API = "https://org.example.com/api/data/v9.2"


class _Client(_RelationshipOperationsMixin):
    def __init__(self):
        self.api = API
        self.config = DataverseConfig(url=API, max_workers=4)
        self._request = MagicMock(return_value=None)
        self.get_associated_records = MagicMock(return_value=[])


class TestAssociate(unittest.TestCase):
    def setUp(self):
        self.client = _Client()

    def test_associate_record(self):
        result = self.client.associate_record("accounts", "a1", "contact_customer_accounts", "contacts", "c1")
        self.assertEqual(result, "c1")
        self.client._request.assert_called_once_with(
            "put",
            f"{API}/accounts(a1)/contact_customer_accounts/$ref",
            json={"@odata.id": f"{API}/contacts(c1)"},
        )

    def test_dissociate_collection_member(self):
        result = self.client.dissociate_record("accounts", "a1", "contact_customer_accounts", "c1")
        self.assertEqual(result, "c1")
        self.client._request.assert_called_once_with("delete", f"{API}/accounts(a1)/contact_customer_accounts(c1)/$ref")

    def test_dissociate_single_valued(self):
        result = self.client.dissociate_record("accounts", "a1", "primarycontactid")
        self.assertEqual(result, "a1")
        self.client._request.assert_called_once_with("delete", f"{API}/accounts(a1)/primarycontactid/$ref")


class TestAssociateRecordToList(unittest.TestCase):
    def setUp(self):
        self.client = _Client()
        self.client.get_associated_records.return_value = [
            {"contactid": "A"},
            {"contactid": "B"},
            {"contactid": "C"},
        ]

    def _requests(self, method):
        return sorted(c.args[1] for c in self.client._request.call_args_list if c.args[0] == method)

    def test_only_differences_are_sent(self):
        result = self.client.associate_record_to_list(
            "accounts", "a1", "contact_customer_accounts", "contacts", "contactid", ["B", "C", "D"]
        )

        self.assertEqual(result, ["B", "C", "D"])
        self.client.get_associated_records.assert_called_once_with(
            "accounts", "a1", "contact_customer_accounts", "$select=contactid"
        )
        self.assertEqual(self._requests("put"), [f"{API}/accounts(a1)/contact_customer_accounts/$ref"])
        put = next(c for c in self.client._request.call_args_list if c.args[0] == "put")
        self.assertEqual(put.kwargs["json"], {"@odata.id": f"{API}/contacts(D)"})
        self.assertEqual(self._requests("delete"), [f"{API}/accounts(a1)/contact_customer_accounts(A)/$ref"])

    def test_unchanged_membership_sends_nothing(self):
        self.client.associate_record_to_list(
            "accounts", "a1", "contact_customer_accounts", "contacts", "contactid", ["C", "A", "B"]
        )
        self.client._request.assert_not_called()

    def test_empty_target_removes_everything(self):
        self.client.associate_record_to_list("accounts", "a1", "contact_customer_accounts", "contacts", "contactid", [])
        self.assertEqual(len(self._requests("delete")), 3)
        self.assertEqual(self._requests("put"), [])

    def test_failure_is_raised_after_all_calls(self):
        def request(method, url, json=None):
            if method == "put":
                raise HttpError("denied", status_code=403)

        self.client._request.side_effect = request
        with self.assertRaises(HttpError):
            self.client.associate_record_to_list(
                "accounts", "a1", "contact_customer_accounts", "contacts", "contactid", ["B", "C", "D"]
            )
        self.assertEqual(self._requests("delete"), [f"{API}/accounts(a1)/contact_customer_accounts(A)/$ref"])


if __name__ == "__main__":
    unittest.main()
