# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""
Core infrastructure components for the schema layer.

This module contains configuration, the HTTP client, authentication and error types.
"""

from .config import DataverseConfig
from .errors import (
    DataverseError,
    HttpError,
    InvalidPropertyError,
    SchemaError,
    ValidationError,
)

__all__ = [
    "DataverseConfig",
    "DataverseError",
    "HttpError",
    "InvalidPropertyError",
    "SchemaError",
    "ValidationError",
]
