"""Field access for input records.

Inputs are either mappings (``dict`` and friends) or plain attribute
objects. These helpers keep that distinction out of the matcher and the
path binder.
"""

import copy
from collections.abc import Mapping
from typing import Any


def get_field(record: Any, key: str) -> Any:
    """Return ``record[key]`` (or ``record.key``), ``None`` when absent."""
    if isinstance(record, Mapping):
        return record.get(key)
    return getattr(record, key, None)


def with_fields(record: Any, changes: Mapping[str, Any]) -> Any:
    """Return a shallow copy of *record* with *changes* applied.

    The incoming record is never modified.
    """
    if isinstance(record, Mapping):
        return {**record, **changes}
    clone = copy.copy(record)
    for key, value in changes.items():
        setattr(clone, key, value)
    return clone
