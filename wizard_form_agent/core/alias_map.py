"""Many-keys-to-one-value store used to resolve form questions to answers."""

import logging
from typing import Dict, Generic, Hashable, Iterator, List, Optional, TypeVar

logger = logging.getLogger(__name__)

V = TypeVar("V")


class AliasMap(Generic[V]):
    """Maps any number of alias strings onto one shared value slot.

    Two ``add`` calls with different keys but an equal value end up as
    aliases of the same slot. ``get`` is fuzzy: the queried string is treated
    as a haystack and the first stored alias (in insertion order) contained in
    it wins. ``get_exact`` only matches the alias itself, spelled exactly
    as it was added; every other lookup ignores case.
    """

    def __init__(self):
        self._keys: Dict[str, int] = {}
        # Alias as originally spelled, for exact lookups
        self._spellings: Dict[str, str] = {}
        self._values: Dict[int, V] = {}
        self._next_slot = 0

    @staticmethod
    def _normalize(key: str) -> str:
        return key.lower()

    def _slot_for_value(self, value: V) -> Optional[int]:
        for slot, stored in self._values.items():
            if stored == value:
                return slot
        return None

    def add(self, key: str, value: V) -> None:
        """Register ``key`` as an alias for ``value``.

        Raises:
            ValueError: if ``key`` is empty. An empty alias would be a
                substring of every question.
        """
        if not isinstance(key, str) or not key.strip():
            raise ValueError("Alias keys must be non-empty strings")

        alias = self._normalize(key)
        slot = self._slot_for_value(value)
        if slot is None:
            slot = self._next_slot
            self._next_slot += 1
            self._values[slot] = value

        previous = self._keys.get(alias)
        self._keys[alias] = slot
        self._spellings[alias] = key
        if previous is not None and previous != slot:
            self._drop_slot_if_orphaned(previous)

    def get(self, key: Optional[str]) -> Optional[V]:
        """Fuzzy lookup; returns None when no alias is contained in ``key``."""
        if not key:
            return None

        haystack = self._normalize(key)
        for alias, slot in self._keys.items():
            if alias and alias in haystack:
                return self._values[slot]
        return None

    def get_exact(self, key: Optional[str]) -> Optional[V]:
        if not key:
            return None
        alias = self._normalize(key)
        if self._spellings.get(alias) != key:
            return None
        slot = self._keys.get(alias)
        return self._values.get(slot) if slot is not None else None

    def remove(self, key: str) -> Optional[V]:
        """Remove an alias. The value is dropped with its last alias."""
        if not key:
            return None
        alias = self._normalize(key)
        slot = self._keys.pop(alias, None)
        self._spellings.pop(alias, None)
        if slot is None:
            return None
        value = self._values.get(slot)
        self._drop_slot_if_orphaned(slot)
        return value

    def _drop_slot_if_orphaned(self, slot: int) -> None:
        if slot not in self._keys.values():
            self._values.pop(slot, None)

    def aliases_for(self, value: V) -> List[str]:
        slot = self._slot_for_value(value)
        if slot is None:
            return []
        return [alias for alias, s in self._keys.items() if s == slot]

    def values(self) -> List[V]:
        return list(self._values.values())

    def __contains__(self, key: Hashable) -> bool:
        return isinstance(key, str) and self._normalize(key) in self._keys

    def __len__(self) -> int:
        return len(self._keys)

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._keys))

    def __repr__(self) -> str:
        return f"AliasMap(aliases={len(self._keys)}, values={len(self._values)})"
