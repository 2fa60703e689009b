# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""
Structured error types raised by the schema layer and its transport.

Validation problems are normally returned as issue lists; :class:`ValidationError`
is only raised by :meth:`~dataverse_schema.models.schema.Schema.parse`.
"""

from __future__ import annotations

import datetime as _dt
import json
from typing import Any, Dict, List, Optional, TYPE_CHECKING

from ._error_codes import (
    PROPERTY_UNSUPPORTED,
    SCHEMA_NO_PRIMARY_KEY,
    VALIDATION_ISSUES,
)

if TYPE_CHECKING:
    from ..models.schema import Issue


class DataverseError(Exception):
    """Base structured error for the schema layer."""

    def __init__(
        self,
        message: str,
        *,
        code: str,
        subcode: Optional[str] = None,
        status_code: Optional[int] = None,
        details: Optional[Dict[str, Any]] = None,
        source: Optional[str] = None,
        is_transient: bool = False,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code
        self.subcode = subcode
        self.status_code = status_code
        self.details = details or {}
        self.source = source or "client"
        self.is_transient = is_transient
        self.timestamp = _dt.datetime.now(_dt.timezone.utc).isoformat()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "message": self.message,
            "code": self.code,
            "subcode": self.subcode,
            "status_code": self.status_code,
            "details": self.details,
            "source": self.source,
            "is_transient": self.is_transient,
            "timestamp": self.timestamp,
        }

    def __repr__(self) -> str:  # pragma: no cover
        return f"{self.__class__.__name__}(code={self.code!r}, subcode={self.subcode!r}, message={self.message!r})"


class ValidationError(DataverseError):
    """Raised by ``parse`` when a value has issues; the message is the JSON issue list."""

    def __init__(self, issues: List["Issue"]) -> None:
        self.issues = list(issues)
        message = json.dumps([i.to_dict() for i in self.issues])
        super().__init__(
            message,
            code="validation_error",
            subcode=VALIDATION_ISSUES,
            details={"issues": [i.to_dict() for i in self.issues]},
        )


class SchemaError(DataverseError):
    def __init__(self, message: str, *, subcode: Optional[str] = SCHEMA_NO_PRIMARY_KEY, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, code="schema_error", subcode=subcode, details=details)


class InvalidPropertyError(DataverseError):
    def __init__(self, message: str, *, subcode: Optional[str] = PROPERTY_UNSUPPORTED, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, code="invalid_property", subcode=subcode, details=details)


class HttpError(DataverseError):
    def __init__(
        self,
        message: str,
        status_code: int,
        is_transient: bool = False,
        subcode: Optional[str] = None,
        service_error_code: Optional[str] = None,
        correlation_id: Optional[str] = None,
        request_id: Optional[str] = None,
        body_excerpt: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        d = details or {}
        if service_error_code is not None:
            d["service_error_code"] = service_error_code
        if correlation_id is not None:
            d["correlation_id"] = correlation_id
        if request_id is not None:
            d["request_id"] = request_id
        if body_excerpt is not None:
            d["body_excerpt"] = body_excerpt
        super().__init__(
            message,
            code="http_error",
            subcode=subcode,
            status_code=status_code,
            details=d,
            source="server",
            is_transient=is_transient,
        )


__all__ = ["DataverseError", "HttpError", "ValidationError", "SchemaError", "InvalidPropertyError"]
