"""Shared state for one release run.

Every plugin reads and writes the same ``Context``. Values live in nested
mappings addressed by dotted paths (``github.username``). ``set`` merges by
namespace: writing ``{"github": {"username": "x"}}`` keeps every other key under
``github``.

There is no locking. The orchestrator runs phases and plugins one at a time,
so at most one writer is active.
"""

from __future__ import annotations

import copy
from collections.abc import Mapping

from .structured import StrDict, as_str_dict

__all__ = ["Context", "merge_into"]


def merge_into(target: StrDict, partial: Mapping[str, object]) -> None:
    """Recursively merge ``partial`` into ``target`` in place.

    Nested mappings merge key by key; any other value replaces the existing
    one. Incoming mappings are copied so callers cannot mutate the store later.
    """
    for key, value in partial.items():
        if not isinstance(value, Mapping):
            target[key] = value
            continue

        incoming: StrDict = {str(k): v for k, v in value.items()}
        existing = as_str_dict(target.get(key))
        if existing is None:
            existing = {}
            target[key] = existing
        merge_into(existing, incoming)


class Context:
    """Namespaced key/value store shared by all plugins."""

    def __init__(self, initial: Mapping[str, object] | None = None) -> None:
        self._data: StrDict = {}
        if initial:
            merge_into(self._data, initial)

    def get(self, path: str | None = None) -> object | None:
        """Return the value at a dotted ``path``, or None when absent.

        Without a path the whole store is returned (live, not a copy).
        """
        if not path:
            return self._data

        current: object = self._data
        for part in path.split("."):
            table = as_str_dict(current)
            if table is None or part not in table:
                return None
            current = table[part]
        return current

    def set(self, partial: Mapping[str, object]) -> None:
        merge_into(self._data, partial)

    def snapshot(self) -> StrDict:
        """Deep copy of the store, for reporting."""
        return copy.deepcopy(self._data)

    def __contains__(self, path: object) -> bool:
        return isinstance(path, str) and self.get(path) is not None

    def __repr__(self) -> str:
        return f"Context({self._data!r})"
