# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

from __future__ import annotations

import threading
from typing import Any, Dict, List, Mapping, Optional, Set

import requests
from azure.core.credentials import TokenCredential

from .core._auth import _AuthManager
from .core.config import DataverseConfig
from .data._odata import _ODataClient
from .models.properties import Property
from .models.table import Table


class DataverseClient:
    """
    Connection to one Dataverse environment, shared by the tables bound to it.

    The client owns the configuration (Web API root, default headers, transport
    tuning) and lazily creates the low-level
    :class:`~dataverse_schema.data._odata._ODataClient` on first use.

    **Context Manager Support (Recommended)**:
        Using the client as a context manager pools connections in a
        ``requests.Session`` and releases them on exit::

            with DataverseClient(config, credential) as client:
                accounts = client.table("accounts", {...})
                accounts.get_records()

    :param config: Web API root, headers and transport tuning. If not provided,
        defaults are loaded from :meth:`~dataverse_schema.core.config.DataverseConfig.from_env`.
    :type config: ~dataverse_schema.core.config.DataverseConfig or None
    :param credential: Azure Identity credential used to add bearer tokens. Leave it
        out when requests are already authenticated, for example by a header in ``config``.
    :type credential: ~azure.core.credentials.TokenCredential or None

    Example::

        from azure.identity import InteractiveBrowserCredential

        config = DataverseConfig(url="https://org.crm.dynamics.com/api/data/v9.2")
        client = DataverseClient(config, InteractiveBrowserCredential())
        try:
            print(client.who_am_i()["UserId"])
        finally:
            client.close()
    """

    def __init__(
        self,
        config: Optional[DataverseConfig] = None,
        credential: Optional[TokenCredential] = None,
    ) -> None:
        self.auth = _AuthManager(credential) if credential is not None else None
        self._config = config or DataverseConfig.from_env()
        self._odata: Optional[_ODataClient] = None
        self._session: Optional[requests.Session] = None
        self._owns_session: bool = False

    @property
    def config(self) -> DataverseConfig:
        return self._config

    def __enter__(self) -> "DataverseClient":
        """
        Enter the context manager.

        Creates an HTTP session for connection pooling. All operations within
        the context will reuse this session.
        """
        if self._session is None:
            self._session = requests.Session()
            self._owns_session = True
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def close(self) -> None:
        """
        Close the HTTP session (if any) and the internal OData client.

        Safe to call multiple times.
        """
        if self._odata is not None:
            self._odata.close()
            self._odata = None
        if self._session is not None and self._owns_session:
            self._session.close()
            self._session = None
            self._owns_session = False

    def _get_odata(self) -> _ODataClient:
        """
        Get or create the internal OData client instance.

        When a session exists (from the context manager), it is passed to the
        OData client for connection pooling.
        """
        if self._odata is None:
            self._odata = _ODataClient(self.auth, self._config, session=self._session)
        return self._odata

    def table(self, name: str, properties: Mapping[str, Property]) -> Table:
        """Declare a table whose network operations go through this client."""
        return Table(name, properties, client=self)

    # ----------------------------- unbound functions -----------------------------
    def who_am_i(self) -> Dict[str, str]:
        """``BusinessUnitId``, ``UserId`` and ``OrganizationId`` of the calling user."""
        return self._get_odata().who_am_i()

    def retrieve_total_record_count(self, logical_name: str) -> int:
        return self._get_odata().retrieve_total_record_count(logical_name)

    def retrieve_aad_user_roles(self, directory_object_id: str) -> Set[str]:
        return self._get_odata().retrieve_aad_user_roles(directory_object_id)

    def fetch_choices(self, name: str) -> List[Dict[str, Any]]:
        """Options of the global choice ``name`` as ``value``/``color``/``label``/``description``."""
        return self._get_odata().fetch_choices(name)

    def get_property_raw_value_url(self, entity_set: str, record_id: str, property_name: str) -> str:
        return self._get_odata().get_property_raw_value_url(entity_set, record_id, property_name)

    def get_property_raw_value(self, entity_set: str, record_id: str, property_name: str) -> Any:
        return self._get_odata().get_property_raw_value(entity_set, record_id, property_name)


# Process-wide client used by tables declared without one.
_default_lock = threading.Lock()
_default_client: Optional[DataverseClient] = None


def default_client() -> DataverseClient:
    """Process-wide client, created from the environment on first use."""
    global _default_client
    with _default_lock:
        if _default_client is None:
            _default_client = DataverseClient()
        return _default_client


def get_config() -> DataverseConfig:
    return default_client().config


def set_config(
    url: Optional[str] = None,
    headers: Optional[Dict[str, str]] = None,
    credential: Optional[TokenCredential] = None,
) -> DataverseConfig:
    """
    Replace the process-wide client with one whose configuration is the current one
    with ``headers`` merged in and ``url`` replaced when given.

    Meant to be called once at startup. Requests already in flight keep using the
    previous client.

    Example::

        set_config(url="https://org.crm.dynamics.com/api/data/v9.2", credential=DefaultAzureCredential())
        set_config(headers={"MSCRMCallerID": user_id})
    """
    global _default_client
    with _default_lock:
        current = _default_client
        base = current.config if current is not None else DataverseConfig.from_env()
        config = base.merged(url=url, headers=headers)
        if credential is None and current is not None and current.auth is not None:
            credential = current.auth.credential
        _default_client = DataverseClient(config, credential)
        return config


__all__ = ["DataverseClient", "default_client", "get_config", "set_config"]
