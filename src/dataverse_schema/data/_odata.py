# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""
Low-level Dataverse Web API transport.

:class:`_ODataClient` issues the individual Web API calls used by tables:
record reads with pagination, single-property reads and writes, create,
update and delete, association endpoints, FetchXML and a few unbound functions.
"""

from __future__ import annotations

import logging
import re
from typing import Any, Dict, List, Optional, Set
from urllib.parse import quote, urlsplit

import requests

from ..core._auth import _AuthManager
from ..core._error_codes import SERVICE_RECORD_NOT_FOUND, TRANSIENT_STATUS, http_subcode
from ..core._http import _HttpClient
from ..core.config import DataverseConfig
from ..core.errors import HttpError
from ..query._util import wrap_string
from ._relationships import _RelationshipOperationsMixin

logger = logging.getLogger(__name__)

_PARENTHESES_RE = re.compile(r"\(([^)]*)\)")
_XML_GAP_AFTER_RE = re.compile(r">\s*")
_XML_GAP_BEFORE_RE = re.compile(r"\s*<")

NEXT_LINK_ANNOTATION = "@odata.nextLink"
RETURN_REPRESENTATION = {"Prefer": "return=representation"}


def _with_query(url: str, query: Optional[str]) -> str:
    return f"{url}?{query}" if query else url


def compact_xml(text: str) -> str:
    """
    Remove the whitespace between XML tags.

    Example::

        compact_xml('''
            <fetch>
              <entity name="account" />
            </fetch>
        ''')
        # '<fetch><entity name="account" /></fetch>'
    """
    text = _XML_GAP_AFTER_RE.sub(">", text)
    return _XML_GAP_BEFORE_RE.sub("<", text).strip()


def map_choices(data: Dict[str, Any]) -> List[Dict[str, Any]]:
    """
    Flatten option set metadata into ``value``/``color``/``label``/``description`` entries.

    :param data: ``GlobalOptionSetDefinitions`` response body.
    :type data: ``dict``
    :rtype: ``list[dict]``
    """
    return [
        {
            "value": int(option["Value"]),
            "color": str(option.get("Color")),
            "label": str(option["Label"]["UserLocalizedLabel"]["Label"]),
            "description": str(option["Description"]["UserLocalizedLabel"]["Label"]),
        }
        for option in data.get("Options", [])
    ]


class _ODataClient(_RelationshipOperationsMixin):
    """
    Dataverse Web API client used by tables.

    :param auth: Token provider, or None when requests are already authenticated
        (for example through headers or a pre-configured session).
    :type auth: ~dataverse_schema.core._auth._AuthManager | None
    :param config: Web API root, default headers and transport tuning.
    :type config: ~dataverse_schema.core.config.DataverseConfig
    :param session: Optional requests.Session for connection pooling.
    :type session: :class:`requests.Session` | None
    """

    def __init__(
        self,
        auth: Optional[_AuthManager],
        config: DataverseConfig,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.auth = auth
        self.config = config
        self.api = config.url.rstrip("/")
        self._http = _HttpClient(
            retries=config.http_retries,
            backoff=config.http_backoff,
            timeout=config.http_timeout,
            session=session,
        )

    def close(self) -> None:
        self._http.close()

    def _scope(self) -> str:
        parts = urlsplit(self.api)
        return f"{parts.scheme}://{parts.netloc}/.default"

    def _headers(self, extra: Optional[Dict[str, str]] = None) -> Dict[str, str]:
        """Default headers, overridden by ``extra``, plus a bearer token when a credential is configured."""
        headers = {k: v for k, v in self.config.headers.items() if v}
        if self.auth is not None:
            token = self.auth._acquire_token(self._scope()).access_token
            headers["Authorization"] = f"Bearer {token}"
        headers.update(extra or {})
        return headers

    def _request(
        self,
        method: str,
        url: str,
        *,
        json: Any = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> Any:
        """
        Send one Web API request and decode the response.

        :return: The JSON body for JSON responses, ``None`` when the service reports
            that the record does not exist, the key from the ``OData-EntityId`` header
            (or ``None``) for ``204 No Content``, otherwise the text body.

        :raises HttpError: If the service reports an error or the status is not 2xx.
        """
        kwargs: Dict[str, Any] = {"headers": self._headers(headers)}
        if json is not None:
            kwargs["json"] = json
        r = self._http._request(method, url, **kwargs)

        content_type = r.headers.get("Content-Type") or ""
        if "application/json" in content_type:
            try:
                body = r.json()
            except ValueError:
                body = None
            error = body.get("error") if isinstance(body, dict) else None
            if error:
                if error.get("code") == SERVICE_RECORD_NOT_FOUND:
                    logger.debug("%s %s: record not found", method.upper(), url)
                    return None
                raise self._http_error(method, url, r, error)
            if r.status_code >= 400:
                raise self._http_error(method, url, r, None)
            return body

        if not 200 <= r.status_code < 300:
            raise self._http_error(method, url, r, None)
        if r.status_code == 204:
            entity_id = r.headers.get("OData-EntityId")
            if entity_id:
                match = _PARENTHESES_RE.search(entity_id)
                if match:
                    return match.group(1)
            return None
        return r.text

    def _http_error(self, method: str, url: str, r: Any, error: Optional[Dict[str, Any]]) -> HttpError:
        status = r.status_code
        message = (error or {}).get("message") or f"{status} {getattr(r, 'reason', '') or ''}".strip()
        details: Dict[str, Any] = {"method": method.upper(), "url": url}
        retry_after = r.headers.get("Retry-After")
        if retry_after and str(retry_after).isdigit():
            details["retry_after"] = int(retry_after)
        logger.warning("%s %s failed with %s: %s", method.upper(), url, status, message)
        return HttpError(
            message,
            status_code=status,
            is_transient=status in TRANSIENT_STATUS,
            subcode=http_subcode(status),
            service_error_code=(error or {}).get("code"),
            correlation_id=r.headers.get("x-ms-correlation-request-id"),
            request_id=r.headers.get("x-ms-service-request-id"),
            body_excerpt=(getattr(r, "text", "") or "")[:200] or None,
            details=details,
        )

    def _get_all_pages(self, url: str, headers: Optional[Dict[str, str]] = None) -> List[Dict[str, Any]]:
        """Follow ``@odata.nextLink`` until the last page and concatenate every ``value`` array."""
        records: List[Dict[str, Any]] = []
        next_url: Optional[str] = url
        while next_url:
            body = self._request("get", next_url, headers=headers)
            if not body:
                break
            records.extend(body.get("value", []))
            next_url = body.get(NEXT_LINK_ANNOTATION)
        return records

    # ----------------------------- reads --------------------------------
    def get_record(
        self, entity_set: str, record_id: str, query: str = "", headers: Optional[Dict[str, str]] = None
    ) -> Optional[Dict[str, Any]]:
        """
        Read one record.

        :return: The raw record, or ``None`` if it does not exist.
        """
        return self._request("get", _with_query(f"{self.api}/{entity_set}({record_id})", query), headers=headers)

    def get_records(
        self, entity_set: str, query: str = "", headers: Optional[Dict[str, str]] = None
    ) -> List[Dict[str, Any]]:
        """Read every record matching ``query``, across all pages."""
        return self._get_all_pages(_with_query(f"{self.api}/{entity_set}", query), headers=headers)

    def get_associated_record(
        self,
        entity_set: str,
        record_id: str,
        navigation_property: str,
        query: str = "",
        headers: Optional[Dict[str, str]] = None,
    ) -> Optional[Dict[str, Any]]:
        url = f"{self.api}/{entity_set}({record_id})/{navigation_property}"
        return self._request("get", _with_query(url, query), headers=headers)

    def get_associated_records(
        self,
        entity_set: str,
        record_id: str,
        navigation_property: str,
        query: str = "",
        headers: Optional[Dict[str, str]] = None,
    ) -> List[Dict[str, Any]]:
        url = f"{self.api}/{entity_set}({record_id})/{navigation_property}"
        return self._get_all_pages(_with_query(url, query), headers=headers)

    def get_property_value(self, entity_set: str, record_id: str, property_name: str) -> Any:
        """Read a single property; ``None`` when the record or the value does not exist."""
        body = self._request("get", f"{self.api}/{entity_set}({record_id})/{property_name}")
        if not isinstance(body, dict):
            return None
        return body.get("value")

    def get_property_raw_value_url(self, entity_set: str, record_id: str, property_name: str) -> str:
        return f"{self.api}/{entity_set}({record_id})/{property_name}/$value"

    def get_property_raw_value(self, entity_set: str, record_id: str, property_name: str) -> Any:
        """Read the raw (unformatted, for files and images binary-as-text) value of a property."""
        return self._request("get", self.get_property_raw_value_url(entity_set, record_id, property_name))

    # ----------------------------- writes -------------------------------
    def update_property_value(self, entity_set: str, record_id: str, property_name: str, value: Any) -> str:
        self._request("put", f"{self.api}/{entity_set}({record_id})/{property_name}", json={"value": value})
        return record_id

    def delete_property_value(self, entity_set: str, record_id: str, property_name: str) -> str:
        self._request("delete", f"{self.api}/{entity_set}({record_id})/{property_name}")
        return record_id

    def post_record(self, entity_set: str, value: Dict[str, Any], query: str = "") -> Dict[str, Any]:
        """Create a record and return its representation (limited by ``query``)."""
        return self._request(
            "post", _with_query(f"{self.api}/{entity_set}", query), json=value, headers=RETURN_REPRESENTATION
        )

    def post_record_get_id(self, entity_set: str, value: Dict[str, Any]) -> Optional[str]:
        """Create a record and return the key from the ``OData-EntityId`` response header."""
        return self._request("post", f"{self.api}/{entity_set}", json=value)

    def patch_record(
        self, entity_set: str, record_id: str, value: Dict[str, Any], query: str = ""
    ) -> Dict[str, Any]:
        """Update a record and return its representation (limited by ``query``)."""
        url = _with_query(f"{self.api}/{entity_set}({record_id})", query)
        return self._request("patch", url, json=value, headers=RETURN_REPRESENTATION)

    def delete_record(self, entity_set: str, record_id: str) -> str:
        self._request("delete", f"{self.api}/{entity_set}({record_id})")
        return record_id

    def activate_record(self, entity_set: str, record_id: str) -> str:
        return self.update_property_value(entity_set, record_id, "statecode", 0)

    def deactivate_record(self, entity_set: str, record_id: str) -> str:
        return self.update_property_value(entity_set, record_id, "statecode", 1)

    # --------------------------- queries and functions ---------------------------
    def fetch_xml(self, entity_set: str, xml: str) -> List[Dict[str, Any]]:
        """
        Run a FetchXML query against an entity set.

        :return: The raw records of the first page.
        """
        body = self._request("get", f"{self.api}/{entity_set}?fetchXml={quote(compact_xml(xml))}")
        return (body or {}).get("value", [])

    def fetch_choices(self, name: str) -> List[Dict[str, Any]]:
        """Read a global option set by name and flatten it with :func:`map_choices`."""
        body = self._request("get", f"{self.api}/GlobalOptionSetDefinitions(Name={wrap_string(name)})")
        return map_choices(body or {})

    def who_am_i(self) -> Dict[str, str]:
        body = self._request("get", f"{self.api}/WhoAmI()")
        return {
            "BusinessUnitId": body["BusinessUnitId"],
            "UserId": body["UserId"],
            "OrganizationId": body["OrganizationId"],
        }

    def retrieve_total_record_count(self, logical_name: str) -> int:
        """Approximate number of rows in a table, from the service snapshot."""
        body = self._request("get", f"{self.api}/RetrieveTotalRecordCount(EntityNames=[{wrap_string(logical_name)}])")
        counts = body.get("EntityRecordCountCollection", body)
        return counts["Values"][0]

    def retrieve_aad_user_roles(self, directory_object_id: str) -> Set[str]:
        """Names of the security roles held by the Microsoft Entra user."""
        body = self._request(
            "get", f"{self.api}/RetrieveAadUserRoles(DirectoryObjectId={directory_object_id})?$select=name"
        )
        return {r["name"] for r in body.get("value", [])}
