"""Condition matching. Decides whether an entry applies to an input.

A condition set maps input field names to one of:

    exact value    -- ``{"method": "GET"}``, compared with ``==`` (a bool
                      only equals a bool)
    regex          -- ``{"host": re.compile(r"^api\\.")}``, searched
    predicate      -- ``{"size": lambda v: v and v > 10}``, must be truthy

A field missing from the input is read as ``None``.
"""

import re
from collections.abc import Mapping
from typing import Any

from waypost._internal.records import get_field


def condition_holds(condition: Any, value: Any) -> bool:
    """Check a single condition against a field value."""
    if isinstance(condition, re.Pattern):
        if value is None:
            return False
        subject = value if isinstance(value, str) else str(value)
        return condition.search(subject) is not None
    if callable(condition):
        return bool(condition(value))
    if isinstance(condition, bool) or isinstance(value, bool):
        # True == 1 and False == 0 in Python; booleans only match booleans
        return type(condition) is type(value) and condition == value
    return bool(condition == value)


def conditions_hold(conditions: Mapping[str, Any], record: Any) -> bool:
    """Check every condition; the first failure short-circuits."""
    return all(
        condition_holds(condition, get_field(record, key))
        for key, condition in conditions.items()
    )
