"""Deep merge of configuration trees where the override side always wins."""

from __future__ import annotations

import copy
from collections.abc import Mapping
from typing import Any


def _is_tree(value: Any) -> bool:
    return isinstance(value, Mapping)


def _merge(base: Mapping[str, Any], override: Mapping[str, Any]) -> dict[str, Any]:
    result = dict(base)
    for key, value in override.items():
        current = base.get(key)
        if _is_tree(current) and _is_tree(value):
            result[key] = _merge(current, value)
        else:
            result[key] = value
    return result


def deep_merge(base: Mapping[str, Any], override: Mapping[str, Any]) -> dict[str, Any]:
    """Merge *override* into *base* and return a new tree.

    Nested mappings present on both sides are merged recursively.  Anything
    else at a key *override* sets, lists included, replaces the base value
    wholesale.  Keys only one side has are kept.  Neither argument is
    mutated and the result shares no mutable values with them.

    Cyclic trees are not supported and end in ``RecursionError``.
    """
    return copy.deepcopy(_merge(base, override))
