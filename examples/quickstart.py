# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""
Quickstart: declare two related tables, save an account with embedded contacts,
read it back and clean up.

Run with ``python examples/quickstart.py`` after ``pip install -e .``.
"""

import logging
import sys

from azure.identity import InteractiveBrowserCredential

from dataverse_schema import (
    DataverseClient,
    DataverseConfig,
    collection,
    date_only,
    formatted,
    list_,
    lookup_id,
    number,
    primary_key,
    string,
)
from dataverse_schema.core.errors import DataverseError
from dataverse_schema.query import contains, functions, or_

entered = input("Enter Dataverse org URL (e.g. https://yourorg.crm.dynamics.com): ").strip()
if not entered:
    print("No URL entered; exiting.")
    sys.exit(1)

logging.basicConfig(level=logging.INFO)
logging.getLogger("dataverse_schema").setLevel(logging.DEBUG)

config = DataverseConfig.from_env().merged(url=entered.rstrip("/") + "/api/data/v9.2")

with DataverseClient(config, InteractiveBrowserCredential()) as client:
    contacts = client.table(
        "contacts",
        {
            "id": primary_key("contactid"),
            "first_name": string("firstname"),
            "last_name": string("lastname").required(),
            "birthday": date_only("birthdate"),
            "account": lookup_id("parentcustomerid_account", lambda: accounts),
        },
    )
    accounts = client.table(
        "accounts",
        {
            "id": primary_key("accountid"),
            "name": string("name").required(),
            "revenue": number("revenue"),
            "category": list_("accountcategorycode", [1, 2]),
            "category_label": formatted("accountcategorycode"),
            "contacts": collection("contact_customer_accounts", contacts),
        },
    )

    draft = accounts.get_default({"name": "Contoso (sample)", "revenue": 1000})
    draft["contacts"] = [{"first_name": "Ada", "last_name": "Lovelace"}]
    result = accounts.validate(draft)
    if result.issues:
        print({"issues": [i.to_dict() for i in result.issues]})
        sys.exit(1)

    try:
        account_id = accounts.save_record(draft)
        print({"created": account_id})

        account = accounts.get_record(account_id)
        print({"account": account.to_dict(), "etag": account.etag})

        matches = accounts.get_records(
            {"filter": or_(contains("name", "sample"), functions.last_x_days("createdon", 1)), "top": 5}
        )
        print({"matches": [a["name"] for a in matches]})
        print(accounts.get_records_dataframe({"orderby": {"name": "asc"}, "top": 5}))

        for contact in accounts.get_property_value("contacts", account_id):
            contacts.delete_record(contact["id"])
        accounts.delete_record(account_id)
        print({"deleted": account_id})
    except DataverseError as ex:
        print(ex.to_dict())
        raise
