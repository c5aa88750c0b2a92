"""
TreeBus Events - Selector Bucket
==================================
Handlers of one (node, event type), grouped by delegation selector.

Rules:
- Key "" holds non-delegated handlers
- Records keep insertion order per selector (= invocation order)
- A selector key exists only while it has records
- Snapshots are shallow copies; live lists are never handed out
"""

from __future__ import annotations

from typing import Callable, Dict, List, Optional

from treebus.events.records import NON_DELEGATED, HandlerRecord


class SelectorBucket:
    """Ordered handler lists keyed by selector string."""

    def __init__(self) -> None:
        self._by_selector: Dict[str, List[HandlerRecord]] = {}

    def __bool__(self) -> bool:
        return bool(self._by_selector)

    def __len__(self) -> int:
        return sum(len(records) for records in self._by_selector.values())

    def add(self, key: str, record: HandlerRecord) -> None:
        self._by_selector.setdefault(key, []).append(record)

    def selectors(self) -> List[str]:
        """All keys in first-registration order, including ""."""
        return list(self._by_selector)

    def delegated_selectors(self) -> List[str]:
        return [key for key in self._by_selector if key != NON_DELEGATED]

    def snapshot(self, key: str) -> List[HandlerRecord]:
        return list(self._by_selector.get(key, ()))

    def remove(self, key: str, callback: Optional[Callable] = None) -> int:
        """
        Remove records under a key.

        With a callback, only records for that handler go; without,
        the whole key is cleared. Returns how many were removed.
        """
        records = self._by_selector.get(key)
        if records is None:
            return 0

        if callback is None:
            removed = len(records)
            records.clear()
        else:
            kept = [r for r in records if not r.same_handler(callback)]
            removed = len(records) - len(kept)
            records[:] = kept

        if not records:
            del self._by_selector[key]
        return removed

    def discard(self, key: str, record: HandlerRecord) -> bool:
        """Remove one exact record. False if it was already gone."""
        records = self._by_selector.get(key)
        if not records:
            return False

        for index, candidate in enumerate(records):
            if candidate is record:
                del records[index]
                if not records:
                    del self._by_selector[key]
                return True
        return False

