# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""
Shared contract for properties and tables: default values, the read-only flag,
validator chains and issue collection.
"""

from __future__ import annotations

import copy
from dataclasses import dataclass, field
from typing import Any, Generic, List, Optional, Sequence, TypeVar, Union

from ..core.errors import ValidationError
from .validators import Validator, required

T = TypeVar("T")
PathItem = Union[str, int]


@dataclass(frozen=True)
class Issue:
    """
    A single validation problem.

    :param message: Human-readable description.
    :type message: str
    :param path: Location of the offending value, as logical keys and list indexes.
    :type path: tuple
    """

    message: str
    path: tuple = ()

    def to_dict(self) -> dict:
        return {"message": self.message, "path": list(self.path)}


@dataclass
class ValidationResult(Generic[T]):
    """Outcome of :meth:`Schema.validate`: either ``value`` or a non-empty ``issues`` list."""

    value: Optional[T] = None
    issues: Optional[List[Issue]] = None

    @property
    def ok(self) -> bool:
        return not self.issues


@dataclass
class _SchemaState:
    default: Any = None
    read_only: bool = False
    validators: List[Validator] = field(default_factory=list)


class Schema(Generic[T]):
    """
    Base for every property and table.

    Configuration methods return ``self`` so declarations read as a chain::

        revenue = number("revenue").set_default(0).check(min_value(0))

    :param name: Wire-format name (attribute logical name or entity set name).
    :type name: str
    :param default: Initial default value.
    """

    kind = "schema"
    type = "schema"

    def __init__(self, name: str, default: Any = None) -> None:
        self.name = name
        self._state = _SchemaState(default=default)

    def set_default(self, value: T) -> "Schema[T]":
        self._state.default = value
        return self

    def get_default(self) -> T:
        default = self._state.default
        # hand out a fresh container so records never share a default list
        if isinstance(default, (list, dict)):
            return copy.copy(default)
        return default

    def set_read_only(self, value: bool = True) -> "Schema[T]":
        self._state.read_only = value
        return self

    def get_read_only(self) -> bool:
        return self._state.read_only

    def check(self, validator: Validator) -> "Schema[T]":
        """Append a validator to the chain."""
        self._state.validators.append(validator)
        return self

    def required(self) -> "Schema[T]":
        return self.check(required())

    def get_issues(self, value: Any, path: Sequence[PathItem] = ()) -> List[Issue]:
        """
        Run every validator against ``value``.

        A validator producing a message, or raising, contributes one issue at ``path``.
        """
        path = tuple(path)
        issues: List[Issue] = []
        for validator in self._state.validators:
            try:
                message = validator(value)
            except Exception as ex:
                message = str(ex) or ex.__class__.__name__
            if message:
                issues.append(Issue(message=message, path=path))
        return issues

    def validate(self, value: Any, path: Sequence[PathItem] = ()) -> ValidationResult[T]:
        issues = self.get_issues(value, path)
        if issues:
            return ValidationResult(issues=issues)
        return ValidationResult(value=value)

    def parse(self, value: Any) -> T:
        """
        Return ``value`` unchanged when valid.

        :raises ~dataverse_schema.core.errors.ValidationError: If any issue is found.
        """
        result = self.validate(value)
        if result.issues:
            raise ValidationError(result.issues)
        return result.value

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.type}:{self.name!r})"


__all__ = ["Schema", "Issue", "ValidationResult", "PathItem"]
