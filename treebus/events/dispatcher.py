"""
TreeBus Events - Dispatcher
=============================
Runs one dispatch cycle for an occurrence that reached a bound node.

Cycle:
1. Look up the (bound node, event type) bucket; none → no-op
2. Snapshot every selector's records, delegated and not, so that
   handlers attached or detached mid-cycle do not change this cycle
3. Walk the bubble path; at each node, invoke the snapshotted
   records of every selector the node matches
4. Unless stopped, invoke the snapshotted non-delegated records
5. Hand the PropagationControl back to the trigger

Stop rules:
- A callback returning False (or Propagation.STOP) stops propagation
  and prevents the default action
- Once stopped, no further path node is visited and the
  non-delegated records are skipped; within the non-delegated
  list the remaining records are skipped too

This module does NOT:
- Catch callback or matcher exceptions (fail fast)
- Iterate live registry storage
- Remove anything except through HandlerRegistry.consume
"""

from __future__ import annotations

import logging
from typing import Any, List, Optional

from treebus.config.settings import EngineSettings
from treebus.events.path import BubblePathBuilder
from treebus.events.propagation import (
    Occurrence,
    PropagationControl,
    requests_stop,
)
from treebus.events.records import NON_DELEGATED, HandlerRecord
from treebus.events.registry import HandlerRegistry, RegistryTable
from treebus.host.contracts import TreeAdapter


class Dispatcher:
    """Drives dispatch cycles over registries held in a RegistryTable."""

    def __init__(
        self,
        table: RegistryTable,
        tree: TreeAdapter,
        settings: Optional[EngineSettings] = None,
    ) -> None:
        self._table = table
        self._tree = tree
        self._paths = BubblePathBuilder(tree)
        self._settings = settings or EngineSettings()
        self._logger = logging.getLogger(self._settings.logger_name)

    def dispatch(
        self,
        bound_node: Any,
        event_type: str,
        target: Any,
        payload: Any = None,
    ) -> PropagationControl:
        """
        Invoke every handler of bound_node that applies to an
        occurrence of event_type triggered at target.

        Returns the cycle's PropagationControl. Exceptions raised by
        callbacks or by selector matching propagate unchanged.
        """
        control = PropagationControl()

        registry = self._table.get(bound_node)
        bucket = registry.bucket(event_type) if registry is not None else None
        if bucket is None:
            self._logger.debug(
                f"No handlers for '{event_type}' on {bound_node!r}"
            )
            return control

        occurrence = Occurrence(payload, event_type, target, bound_node, control)
        selectors = bucket.delegated_selectors()
        direct = bucket.snapshot(NON_DELEGATED)
        if selectors and target is not bound_node:
            snapshots = {selector: bucket.snapshot(selector) for selector in selectors}

            for path_node in self._paths.build_path(target, bound_node):
                if control.stopped:
                    break
                for selector in selectors:
                    if not self._tree.matches(path_node, selector):
                        continue
                    self._invoke(
                        registry,
                        occurrence,
                        selector,
                        snapshots[selector],
                        path_node,
                        halt_on_stop=False,
                    )

        if not control.stopped:
            self._invoke(
                registry,
                occurrence,
                NON_DELEGATED,
                direct,
                bound_node,
                halt_on_stop=True,
            )

        self._logger.debug(
            f"Dispatch complete: '{event_type}' on {bound_node!r} "
            f"(target: {target!r}, stopped: {control.stopped})"
        )
        return control

    def _invoke(
        self,
        registry: HandlerRegistry,
        occurrence: Occurrence,
        selector: str,
        records: List[HandlerRecord],
        node: Any,
        halt_on_stop: bool,
    ) -> None:
        for record in records:
            if halt_on_stop and occurrence.control.stopped:
                return
            # Claimed before the call so a nested dispatch cannot rerun it.
            if record.once and not registry.consume(
                occurrence.type, selector, record
            ):
                continue

            occurrence.current_node = node
            occurrence.data = record.data

            if self._settings.trace_dispatch:
                handler_name = getattr(
                    record.callback, "__qualname__", repr(record.callback)
                )
                self._logger.debug(
                    f"Invoking {handler_name} for '{occurrence.type}' "
                    f"on {node!r} (selector: {selector!r})"
                )

            result = record.callback(occurrence, node, record.data)

            if requests_stop(result):
                occurrence.control.cancel()
