"""
TreeBus Events - Engine
=========================
Public entry point: attach, detach and dispatch handlers on host nodes.

Usage:
    engine = EventEngine(tree, source)
    engine.on(root, "click", on_item, selector=".item")
    engine.one(root, "click keydown", on_first)
    engine.off(root, "click", on_item, selector=".item")
    engine.dispatch(root, "click", target, payload)

Handlers are called as handler(occurrence, node, data) where node is
the matched path node (delegated) or the bound node (non-delegated).
"""

from __future__ import annotations

import logging
from typing import Any, List, Mapping, Optional

from treebus.config.settings import EngineSettings
from treebus.events.dispatcher import Dispatcher
from treebus.events.propagation import PropagationControl
from treebus.events.records import Binding, HandlerRecord, prepare_attach
from treebus.events.registry import RegistryTable
from treebus.host.contracts import NullOccurrenceSource, OccurrenceSource, TreeAdapter


class EventEngine:
    """Per-host facade over RegistryTable and Dispatcher."""

    def __init__(
        self,
        tree: TreeAdapter,
        source: Optional[OccurrenceSource] = None,
        settings: Optional[EngineSettings] = None,
    ) -> None:
        self._tree = tree
        self._source = source if source is not None else NullOccurrenceSource()
        self._settings = settings or EngineSettings()
        self._logger = logging.getLogger(self._settings.logger_name)
        self._table = RegistryTable(self._source, self._settings)
        self._dispatcher = Dispatcher(self._table, tree, self._settings)

    @property
    def settings(self) -> EngineSettings:
        return self._settings

    # ══════════════════════════════════════════════════════════
    # ATTACH
    # ══════════════════════════════════════════════════════════

    def attach(self, node: Any, binding: Binding, callback: Any) -> None:
        """
        Attach callback according to binding.

        Validation happens before a registry is created for the node,
        so a rejected call leaves no trace.
        """
        prepared = prepare_attach(
            binding, callback, self._settings.reject_empty_event_types
        )
        if prepared is None:
            return
        self._table.get_or_create(node).add(binding, *prepared)

    def on(
        self,
        node: Any,
        event_types: str,
        handler: Any,
        selector: Optional[str] = None,
        data: Any = None,
    ) -> None:
        """Attach handler for one or more space-separated event types."""
        self.attach(node, Binding(event_types, selector, data), handler)

    def one(
        self,
        node: Any,
        event_types: str,
        handler: Any,
        selector: Optional[str] = None,
        data: Any = None,
    ) -> None:
        """Like on(), but each record is removed after its first call."""
        self.attach(node, Binding(event_types, selector, data, once=True), handler)

    def on_map(
        self,
        node: Any,
        handlers: Mapping[str, Any],
        selector: Optional[str] = None,
        data: Any = None,
        once: bool = False,
    ) -> None:
        """Attach several handlers at once: {"click keydown": fn, ...}."""
        for event_types, handler in handlers.items():
            self.attach(node, Binding(event_types, selector, data, once), handler)

    # ══════════════════════════════════════════════════════════
    # DETACH
    # ══════════════════════════════════════════════════════════

    def off(
        self,
        node: Any,
        event_types: Optional[str] = None,
        selector: Any = None,
        handler: Any = None,
    ) -> int:
        """
        Detach handlers. Returns how many records were removed.

        off(node)                          everything on the node
        off(node, "click")                 every click handler
        off(node, "click", ".item")        click handlers for .item
        off(node, "click", fn)             fn under every selector
        off(node, "click", ".item", fn)    fn under .item only

        A handler of False means the handler attached as False.
        """
        if selector is not None and not isinstance(selector, str):
            # The handler was passed where the selector goes.
            handler, selector = selector, None

        registry = self._table.get(node)
        if registry is None:
            return 0
        return registry.detach(event_types, selector, handler)

    def off_map(
        self,
        node: Any,
        handlers: Mapping[str, Any],
        selector: Optional[str] = None,
    ) -> int:
        return sum(
            self.off(node, event_types, selector, handler)
            for event_types, handler in handlers.items()
        )

    def release(self, node: Any) -> int:
        """Detach everything from node and forget its registry."""
        registry = self._table.drop(node)
        if registry is None:
            return 0
        removed = registry.detach()
        self._logger.debug(f"Released {node!r} ({removed} handlers)")
        return removed

    # ══════════════════════════════════════════════════════════
    # DISPATCH
    # ══════════════════════════════════════════════════════════

    def dispatch(
        self,
        bound_node: Any,
        event_type: str,
        target: Any,
        payload: Any = None,
    ) -> PropagationControl:
        return self._dispatcher.dispatch(bound_node, event_type, target, payload)

    # ══════════════════════════════════════════════════════════
    # COPY / INTROSPECTION
    # ══════════════════════════════════════════════════════════

    def copy_handlers(self, source: Any, target: Any, deep: bool = True) -> None:
        """
        Give target every handler source has, e.g. after cloning.

        With deep, children are paired up in order and copied too.
        """
        registry = self._table.get(source)
        if registry:
            self._table.get_or_create(target).merge_from(registry)

        if deep:
            for source_child, target_child in zip(
                self._tree.children(source), self._tree.children(target)
            ):
                self.copy_handlers(source_child, target_child, deep=True)

    def has_handlers(self, node: Any, event_type: Optional[str] = None) -> bool:
        registry = self._table.get(node)
        if not registry:
            return False
        if event_type is None:
            return True
        return registry.bucket(event_type) is not None

    def handlers(
        self, node: Any, event_type: str, selector: Optional[str] = None
    ) -> List[HandlerRecord]:
        """Snapshot of records for one (node, type, selector)."""
        registry = self._table.get(node)
        if registry is None:
            return []
        return registry.handlers(event_type, selector)
