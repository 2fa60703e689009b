# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

# HTTP subcode constants
HTTP_400 = "http_400"
HTTP_401 = "http_401"
HTTP_403 = "http_403"
HTTP_404 = "http_404"
HTTP_409 = "http_409"
HTTP_412 = "http_412"
HTTP_429 = "http_429"
HTTP_500 = "http_500"
HTTP_502 = "http_502"
HTTP_503 = "http_503"
HTTP_504 = "http_504"

TRANSIENT_STATUS = {429, 502, 503, 504}

# Service error code Dataverse reports when a record does not exist
SERVICE_RECORD_NOT_FOUND = "0x80060891"

# Validation subcodes
VALIDATION_ISSUES = "validation_issues"

# Schema subcodes
SCHEMA_NO_PRIMARY_KEY = "schema_no_primary_key"

# Property subcodes
PROPERTY_NOT_NAVIGATION = "property_not_navigation"
PROPERTY_NOT_VALUE = "property_not_value"
PROPERTY_MISSING_CHILD_ID = "property_missing_child_id"
PROPERTY_UNSUPPORTED = "property_unsupported"


def http_subcode(status: int) -> str:
    """Map an HTTP status code to the matching ``http_<status>`` subcode."""
    return f"http_{status}"
