# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""
Association operations for Dataverse Web API navigation properties.

This module provides mixin functionality for associating and dissociating
records through ``$ref`` endpoints.
"""

from __future__ import annotations

import logging
from functools import partial
from typing import Any, List, Optional, Sequence

from ..core._concurrency import _gather

logger = logging.getLogger(__name__)


class _RelationshipOperationsMixin:
    """
    Mixin providing association operations.

    This mixin is designed to be used with _ODataClient and depends on:
    - self.api: The API base URL
    - self.config: The active DataverseConfig
    - self._request(): Method to make HTTP requests
    - self.get_associated_records(): Method to read a collection-valued navigation property
    """

    def associate_record(
        self,
        entity_set: str,
        parent_id: str,
        navigation_property: str,
        child_entity_set: str,
        child_id: str,
    ) -> str:
        """
        Point a navigation property of the parent record at a child record.

        Issues ``PUT {entity_set}({parent_id})/{navigation_property}/$ref``. For
        collection-valued navigation properties the child is added to the collection.

        :param entity_set: Entity set of the parent record.
        :type entity_set: ``str``
        :param parent_id: Key of the parent record.
        :type parent_id: ``str``
        :param navigation_property: Navigation property name on the parent.
        :type navigation_property: ``str``
        :param child_entity_set: Entity set of the child record.
        :type child_entity_set: ``str``
        :param child_id: Key of the child record.
        :type child_id: ``str``

        :return: ``child_id``.
        :rtype: ``str``

        :raises HttpError: If the Web API request fails.
        """
        url = f"{self.api}/{entity_set}({parent_id})/{navigation_property}/$ref"
        payload = {"@odata.id": f"{self.api}/{child_entity_set}({child_id})"}
        self._request("put", url, json=payload)
        return child_id

    def dissociate_record(
        self,
        entity_set: str,
        parent_id: str,
        navigation_property: str,
        child_id: Optional[str] = None,
    ) -> str:
        """
        Remove an association.

        ``child_id`` selects the member to remove from a collection-valued navigation
        property; leave it out to clear a single-valued one.

        :return: ``child_id`` when given, else ``parent_id``.
        :rtype: ``str``

        :raises HttpError: If the Web API request fails.
        """
        member = f"({child_id})" if child_id else ""
        url = f"{self.api}/{entity_set}({parent_id})/{navigation_property}{member}/$ref"
        self._request("delete", url)
        return child_id or parent_id

    def associate_record_to_list(
        self,
        entity_set: str,
        parent_id: str,
        navigation_property: str,
        child_entity_set: str,
        child_primary_key: str,
        child_ids: Sequence[str],
    ) -> List[str]:
        """
        Make the members of a collection-valued navigation property exactly ``child_ids``.

        Reads the current members (selecting only ``child_primary_key``), then
        associates the missing keys and dissociates the surplus ones concurrently.
        Members present on both sides are left untouched.

        :return: ``child_ids``.
        :rtype: ``list[str]``

        :raises HttpError: If any Web API request fails. Every add and remove is
            attempted before the first failure is re-raised.
        """
        current = [
            r[child_primary_key]
            for r in self.get_associated_records(
                entity_set, parent_id, navigation_property, f"$select={child_primary_key}"
            )
        ]
        wanted = list(child_ids)
        calls: List[Any] = []
        for child_id in wanted:
            if child_id not in current:
                calls.append(
                    partial(
                        self.associate_record,
                        entity_set,
                        parent_id,
                        navigation_property,
                        child_entity_set,
                        child_id,
                    )
                )
        for child_id in current:
            if child_id not in wanted:
                calls.append(partial(self.dissociate_record, entity_set, parent_id, navigation_property, child_id))
        logger.debug(
            "syncing %s(%s)/%s: %d change(s)", entity_set, parent_id, navigation_property, len(calls)
        )
        _gather(calls, max_workers=self.config.max_workers)
        return wanted
