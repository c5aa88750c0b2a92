"""
TreeBus Events - Handler Registry
===================================
Controls which callbacks a node holds, per event type and selector.

Rules:
- One HandlerRegistry per node, created on first attach
- Registries live in a RegistryTable keyed by node identity,
  never on the node itself
- A per-type entry exists only while its bucket is non-empty
- subscribe() fires when a type gains its first handler on a node,
  unsubscribe() when it loses its last one
- Attaching never de-duplicates
- Detaching something that was never attached is a silent no-op
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, List, Optional, Tuple
from weakref import WeakSet

from treebus.config.settings import EngineSettings
from treebus.events.bucket import SelectorBucket
from treebus.events.records import (
    Binding,
    HandlerRecord,
    prepare_attach,
    resolve_callback,
    selector_key,
    split_event_types,
)
from treebus.host.contracts import OccurrenceSource


class HandlerRegistry:
    """Per-node map from event type to SelectorBucket."""

    def __init__(
        self,
        node: Any,
        source: OccurrenceSource,
        settings: Optional[EngineSettings] = None,
    ) -> None:
        self._node = node
        self._source = source
        self._settings = settings or EngineSettings()
        self._logger = logging.getLogger(self._settings.logger_name)
        self._buckets: Dict[str, SelectorBucket] = {}
        # Once-records that have already fired on this node.
        self._consumed: "WeakSet[HandlerRecord]" = WeakSet()

    @property
    def node(self) -> Any:
        return self._node

    def __bool__(self) -> bool:
        return bool(self._buckets)

    def event_types(self) -> List[str]:
        return list(self._buckets)

    def bucket(self, event_type: str) -> Optional[SelectorBucket]:
        """Live bucket for a type. Callers must snapshot before iterating."""
        return self._buckets.get(event_type)

    def handlers(
        self, event_type: str, selector: Optional[str] = None
    ) -> List[HandlerRecord]:
        """Snapshot of the records under one selector ("" when None)."""
        bucket = self._buckets.get(event_type)
        if bucket is None:
            return []
        return bucket.snapshot(selector_key(selector))

    # ── attach ────────────────────────────────────────────────

    def attach(self, binding: Binding, callback: Any) -> None:
        """
        Append one record per event type named in the binding.

        Raises:
            InvalidEventTypesError: event_types is not a string, or names
                                    nothing while reject_empty_event_types
            InvalidHandlerError:    callback is neither callable nor False
        """
        prepared = prepare_attach(
            binding, callback, self._settings.reject_empty_event_types
        )
        if prepared is not None:
            self.add(binding, *prepared)

    def add(self, binding: Binding, callback: Callable, names: List[str]) -> None:
        """Append records for already validated input. See prepare_attach."""
        key = binding.key
        for event_type in names:
            record = HandlerRecord(
                callback=callback, data=binding.data, once=binding.once
            )
            self._bucket_for(event_type).add(key, record)

    def _bucket_for(self, event_type: str) -> SelectorBucket:
        bucket = self._buckets.get(event_type)
        if bucket is None:
            self._source.subscribe(self._node, event_type)
            bucket = self._buckets[event_type] = SelectorBucket()
            self._logger.info(
                f"Subscribed {self._node!r} to '{event_type}'"
            )
        return bucket

    # ── detach ────────────────────────────────────────────────

    def detach(
        self,
        event_types: Optional[str] = None,
        selector: Optional[str] = None,
        callback: Any = None,
    ) -> int:
        """
        Remove matching records and prune what becomes empty.

        event_types None means every type on the node. A non-string
        selector means every selector. callback None means every
        record under the chosen selector(s); False means return_false.
        Returns the number of records removed.
        """
        if event_types is None:
            names = list(self._buckets)
        else:
            names = split_event_types(event_types)

        if callback is not None:
            callback = resolve_callback(callback)

        removed = 0
        for event_type in names:
            bucket = self._buckets.get(event_type)
            if bucket is None:
                continue

            if isinstance(selector, str):
                removed += bucket.remove(selector, callback)
            else:
                for key in bucket.selectors():
                    removed += bucket.remove(key, callback)

            self._prune(event_type, bucket)

        if not removed:
            self._logger.debug(
                f"Detach matched nothing on {self._node!r} "
                f"(types: {event_types!r}, selector: {selector!r})"
            )
        return removed

    def discard(
        self, event_type: str, selector: str, record: HandlerRecord
    ) -> bool:
        """Remove one exact record. Used for once-handlers."""
        bucket = self._buckets.get(event_type)
        if bucket is None:
            return False
        found = bucket.discard(selector, record)
        self._prune(event_type, bucket)
        return found

    def consume(
        self, event_type: str, selector: str, record: HandlerRecord
    ) -> bool:
        """
        Claim a once-record for its single invocation.

        Marks it fired and detaches it before the callback runs, so a
        nested dispatch cannot reach it. False if it already fired.
        """
        if record in self._consumed:
            return False
        self._consumed.add(record)
        self.discard(event_type, selector, record)
        return True

    def _prune(self, event_type: str, bucket: SelectorBucket) -> None:
        if bucket or self._buckets.get(event_type) is not bucket:
            return
        del self._buckets[event_type]
        self._source.unsubscribe(self._node, event_type)
        self._logger.info(
            f"Unsubscribed {self._node!r} from '{event_type}'"
        )

    # ── copy ──────────────────────────────────────────────────

    def merge_from(self, other: "HandlerRegistry") -> None:
        """Append every record of another registry, in its order."""
        for event_type, bucket in list(other._buckets.items()):
            snapshots = [(key, bucket.snapshot(key)) for key in bucket.selectors()]
            target = self._bucket_for(event_type)
            for key, records in snapshots:
                for record in records:
                    target.add(key, record)


# ══════════════════════════════════════════════════════════════
# REGISTRY TABLE (node identity -> registry)
# ══════════════════════════════════════════════════════════════

class RegistryTable:
    """
    Out-of-band storage of registries, keyed by id(node).

    The node is held alongside its registry so its id cannot be
    reused while the entry exists. Entries leave only via drop().
    """

    def __init__(
        self,
        source: OccurrenceSource,
        settings: Optional[EngineSettings] = None,
    ) -> None:
        self._source = source
        self._settings = settings or EngineSettings()
        self._entries: Dict[int, Tuple[Any, HandlerRegistry]] = {}

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, node: Any) -> bool:
        return id(node) in self._entries

    def get(self, node: Any) -> Optional[HandlerRegistry]:
        entry = self._entries.get(id(node))
        return entry[1] if entry is not None else None

    def get_or_create(self, node: Any) -> HandlerRegistry:
        entry = self._entries.get(id(node))
        if entry is None:
            registry = HandlerRegistry(node, self._source, self._settings)
            self._entries[id(node)] = (node, registry)
            return registry
        return entry[1]

    def drop(self, node: Any) -> Optional[HandlerRegistry]:
        entry = self._entries.pop(id(node), None)
        return entry[1] if entry is not None else None
