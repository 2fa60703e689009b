# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""
Shared pytest fixtures for dataverse_schema tests.

Tables in these fixtures are bound to a client whose transport is a MagicMock,
so no test touches the network.
"""

from unittest.mock import MagicMock

import pytest

from dataverse_schema.client import DataverseClient
from dataverse_schema.core.config import DataverseConfig
from dataverse_schema.models import (
    collection,
    collection_ids,
    lookup,
    lookup_id,
    number,
    primary_key,
    string,
)

API = "https://org.example.com/api/data/v9.2"


def make_client():
    """Client with a MagicMock transport and a fixed Web API root."""
    client = DataverseClient(DataverseConfig(url=API))
    client._odata = MagicMock()
    return client


def make_tables(client):
    """Accounts, contacts and addresses referencing each other."""
    addresses = client.table(
        "addresses",
        {
            "id": primary_key("addressid"),
            "street": string("street").required(),
        },
    )
    contacts = client.table(
        "contacts",
        {
            "id": primary_key("contactid"),
            "name": string("fullname"),
            "account": lookup_id("parentcustomerid_account", lambda: accounts),
        },
    )
    accounts = client.table(
        "accounts",
        {
            "id": primary_key("accountid"),
            "name": string("name").required(),
            "revenue": number("revenue"),
            "contacts": collection("contact_customer_accounts", contacts),
            "contact_ids": collection_ids("contact_customer_accounts", contacts),
            "primary_contact": lookup("primarycontactid", contacts),
            "addresses": collection("account_addresses", addresses),
        },
    )
    return accounts, contacts, addresses


@pytest.fixture
def client():
    return make_client()


@pytest.fixture
def tables(client):
    return make_tables(client)


@pytest.fixture
def sample_base_url():
    """Standard test Web API root."""
    return API
