# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""
``Microsoft.Dynamics.CRM`` query functions for ``$filter`` expressions.

Every function renders ``Microsoft.Dynamics.CRM.<Operator>(PropertyName='<name>',...)``
following the Web API query function syntax. The catalogue is generated from five
templates according to the arguments the operator takes.

Example::

    and_(last_x_days("createdon", 7), in_("statecode", 0, 1))
"""

from __future__ import annotations

from typing import Any, Callable

from ._util import wrap_string

_PREFIX = "Microsoft.Dynamics.CRM"


def _call(operator: str, name: str, *arguments: str) -> str:
    params = ",".join((f"PropertyName={wrap_string(name)}",) + arguments)
    return f"{_PREFIX}.{operator}({params})"


def _no_value(operator: str) -> Callable[[str], str]:
    def build(name: str) -> str:
        return _call(operator, name)

    build.__name__ = operator
    build.__doc__ = f"``{_PREFIX}.{operator}(PropertyName=name)``"
    return build


def _value(operator: str) -> Callable[[str, Any], str]:
    def build(name: str, value: Any) -> str:
        return _call(operator, name, f"PropertyValue={wrap_string(value)}")

    build.__name__ = operator
    build.__doc__ = f"``{_PREFIX}.{operator}(PropertyName=name,PropertyValue=value)``"
    return build


def _pair(operator: str) -> Callable[[str, Any, Any], str]:
    def build(name: str, value1: Any, value2: Any) -> str:
        return _call(operator, name, f"PropertyValues=[{wrap_string(value1)},{wrap_string(value2)}]")

    build.__name__ = operator
    build.__doc__ = f"``{_PREFIX}.{operator}(PropertyName=name,PropertyValues=[value1,value2])``"
    return build


def _values(operator: str) -> Callable[..., str]:
    def build(name: str, *values: Any) -> str:
        return _call(operator, name, f"PropertyValues=[{','.join(wrap_string(v) for v in values)}]")

    build.__name__ = operator
    build.__doc__ = f"``{_PREFIX}.{operator}(PropertyName=name,PropertyValues=[...])``"
    return build


def _period_and_year(operator: str) -> Callable[[str, int, int], str]:
    def build(name: str, fiscal_period: int, fiscal_year: int) -> str:
        return _call(operator, name, f"PropertyValue1={fiscal_period}", f"PropertyValue2={fiscal_year}")

    build.__name__ = operator
    build.__doc__ = f"``{_PREFIX}.{operator}(PropertyName=name,PropertyValue1=period,PropertyValue2=year)``"
    return build


# Hierarchy
above = _value("Above")
above_or_equal = _value("AboveOrEqual")
under = _value("Under")
under_or_equal = _value("UnderOrEqual")
not_under = _value("NotUnder")

# Values
between = _pair("Between")
not_between = _pair("NotBetween")
in_ = _values("In")
not_in = _values("NotIn")
contains_values = _values("ContainsValues")
does_not_contain_values = _values("DoesNotContainValues")

# Current user and business unit
equal_business_id = _no_value("EqualBusinessId")
not_equal_business_id = _no_value("NotEqualBusinessId")
equal_role_business_id = _no_value("EqualRoleBusinessId")
equal_user_id = _no_value("EqualUserId")
not_equal_user_id = _no_value("NotEqualUserId")
equal_user_or_user_hierarchy = _no_value("EqualUserOrUserHierarchy")
equal_user_or_user_hierarchy_and_teams = _no_value("EqualUserOrUserHierarchyAndTeams")
equal_user_or_user_teams = _no_value("EqualUserOrUserTeams")
equal_user_teams = _no_value("EqualUserTeams")

# Fiscal periods
in_fiscal_period = _value("InFiscalPeriod")
in_fiscal_year = _value("InFiscalYear")
in_fiscal_period_and_year = _period_and_year("InFiscalPeriodAndYear")
in_or_after_fiscal_period_and_year = _period_and_year("InOrAfterFiscalPeriodAndYear")
in_or_before_fiscal_period_and_year = _period_and_year("InOrBeforeFiscalPeriodAndYear")
last_fiscal_period = _no_value("LastFiscalPeriod")
last_fiscal_year = _no_value("LastFiscalYear")
next_fiscal_period = _no_value("NextFiscalPeriod")
next_fiscal_year = _no_value("NextFiscalYear")
this_fiscal_period = _no_value("ThisFiscalPeriod")
this_fiscal_year = _no_value("ThisFiscalYear")
last_x_fiscal_periods = _value("LastXFiscalPeriods")
last_x_fiscal_years = _value("LastXFiscalYears")
next_x_fiscal_periods = _value("NextXFiscalPeriods")
next_x_fiscal_years = _value("NextXFiscalYears")

# Relative dates
today = _no_value("Today")
tomorrow = _no_value("Tomorrow")
yesterday = _no_value("Yesterday")
last_7_days = _no_value("Last7Days")
next_7_days = _no_value("Next7Days")
last_week = _no_value("LastWeek")
this_week = _no_value("ThisWeek")
next_week = _no_value("NextWeek")
last_month = _no_value("LastMonth")
this_month = _no_value("ThisMonth")
next_month = _no_value("NextMonth")
last_year = _no_value("LastYear")
this_year = _no_value("ThisYear")
next_year = _no_value("NextYear")
last_x_hours = _value("LastXHours")
last_x_days = _value("LastXDays")
last_x_weeks = _value("LastXWeeks")
last_x_months = _value("LastXMonths")
last_x_years = _value("LastXYears")
next_x_hours = _value("NextXHours")
next_x_days = _value("NextXDays")
next_x_weeks = _value("NextXWeeks")
next_x_months = _value("NextXMonths")
next_x_years = _value("NextXYears")
older_than_x_minutes = _value("OlderThanXMinutes")
older_than_x_hours = _value("OlderThanXHours")
older_than_x_days = _value("OlderThanXDays")
older_than_x_weeks = _value("OlderThanXWeeks")
older_than_x_months = _value("OlderThanXMonths")
older_than_x_years = _value("OlderThanXYears")

# Absolute dates
on = _value("On")
on_or_after = _value("OnOrAfter")
on_or_before = _value("OnOrBefore")
