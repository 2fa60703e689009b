# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

from __future__ import annotations

import os
from dataclasses import dataclass, field, replace
from typing import Dict, Optional

DEFAULT_API_PATH = "/api/data/v9.2"

DEFAULT_HEADERS: Dict[str, str] = {
    "OData-MaxVersion": "4.0",
    "OData-Version": "4.0",
    "Content-Type": "application/json; charset=utf-8",
    "If-None-Match": "null",
    "Accept": "application/json",
}


@dataclass(frozen=True)
class DataverseConfig:
    """
    Configuration settings for the Dataverse transport and table operations.

    :param url: Web API root, for example ``"https://org.crm.dynamics.com/api/data/v9.2"``.
    :type url: str
    :param headers: Default headers sent with every request. Per-call headers override them.
    :type headers: dict[str, str]
    :param http_retries: Number of attempts for a request on network errors (default: 1, no retry).
    :type http_retries: int or None
    :param http_backoff: Base delay in seconds between attempts (default: 0.5).
    :type http_backoff: float or None
    :param http_timeout: Request timeout in seconds (default: method-dependent).
    :type http_timeout: float or None
    :param max_workers: Maximum number of concurrent requests in a save or association fan-out.
    :type max_workers: int
    :param expand_depth: Maximum navigation nesting emitted in ``$expand`` clauses built from a table.
    :type expand_depth: int
    """

    url: str = DEFAULT_API_PATH
    headers: Dict[str, str] = field(default_factory=lambda: dict(DEFAULT_HEADERS))

    http_retries: Optional[int] = None
    http_backoff: Optional[float] = None
    http_timeout: Optional[float] = None

    max_workers: int = 8
    expand_depth: int = 5

    def merged(self, url: Optional[str] = None, headers: Optional[Dict[str, str]] = None) -> "DataverseConfig":
        """
        Return a copy with ``headers`` merged over the current ones and ``url`` replaced when given.

        :param url: New Web API root, or None to keep the current one.
        :type url: str or None
        :param headers: Headers to merge; later values win.
        :type headers: dict[str, str] or None
        :rtype: ~dataverse_schema.core.config.DataverseConfig
        """
        return replace(
            self,
            url=url.rstrip("/") if url else self.url,
            headers={**self.headers, **(headers or {})},
        )

    @classmethod
    def from_env(cls) -> "DataverseConfig":
        """
        Create a configuration instance from ``DATAVERSE_*`` environment variables.

        Unset variables fall back to the defaults.

        :return: Configuration instance.
        :rtype: ~dataverse_schema.core.config.DataverseConfig
        """
        headers = dict(DEFAULT_HEADERS)
        caller_id = os.environ.get("DATAVERSE_CALLER_ID")
        if caller_id:
            headers["MSCRMCallerID"] = caller_id
        caller_object_id = os.environ.get("DATAVERSE_CALLER_OBJECT_ID")
        if caller_object_id:
            headers["CallerObjectId"] = caller_object_id
        timeout = os.environ.get("DATAVERSE_HTTP_TIMEOUT")
        return cls(
            url=(os.environ.get("DATAVERSE_URL") or DEFAULT_API_PATH).rstrip("/"),
            headers=headers,
            http_retries=None,  # Will default to 1 in _HttpClient
            http_backoff=None,  # Will default to 0.5 in _HttpClient
            http_timeout=float(timeout) if timeout else None,
        )
