"""
Value cleaner: prunes ``UNSET`` leaves from a finished record.
"""

from __future__ import annotations

from typing import Any

from ..protocols import UNSET, MediaRecord


def remove_unset_values(value: Any) -> Any:
    """Recursively drop ``UNSET`` values from dicts and lists.

    Media dataclasses are turned into plain dicts on the way. ``None`` and empty
    strings are kept: they mean "present but empty", not "never supplied".
    Running the cleaner on its own output returns an equal structure.
    """
    if isinstance(value, MediaRecord):
        value = value.to_dict()

    if isinstance(value, dict):
        return {key: remove_unset_values(item) for key, item in value.items() if item is not UNSET}
    if isinstance(value, list):
        return [remove_unset_values(item) for item in value if item is not UNSET]
    return value
