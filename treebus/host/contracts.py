"""
TreeBus Host - Collaborator Contracts
=======================================
What the engine needs from the environment it runs in.

The engine never navigates a tree or matches a selector itself.
A host supplies a TreeAdapter, and optionally an OccurrenceSource
that learns when a node starts or stops caring about an event type.
"""

from __future__ import annotations

from typing import Any, Optional, Protocol, Sequence


class TreeAdapter(Protocol):
    """Structural queries over host nodes."""

    def matches(self, node: Any, selector: str) -> bool:
        """Selector predicate. May raise on a malformed selector."""
        ...  # pragma: no cover

    def parent(self, node: Any) -> Optional[Any]:
        """One-step ancestor, or None at the root."""
        ...  # pragma: no cover

    def is_matchable(self, node: Any) -> bool:
        """True for nodes a selector can be tested against."""
        ...  # pragma: no cover

    def children(self, node: Any) -> Sequence[Any]:
        """Direct children, in order. Only used for deep handler copies."""
        ...  # pragma: no cover


class OccurrenceSource(Protocol):
    """
    Raw occurrence feed.

    subscribe/unsubscribe are called exactly once per transition of a
    (node, event_type) pair between "no handlers" and "has handlers".
    """

    def subscribe(self, node: Any, event_type: str) -> None:
        ...  # pragma: no cover

    def unsubscribe(self, node: Any, event_type: str) -> None:
        ...  # pragma: no cover


class NullOccurrenceSource:
    """For hosts that call dispatch themselves and need no hook."""

    def subscribe(self, node: Any, event_type: str) -> None:
        pass

    def unsubscribe(self, node: Any, event_type: str) -> None:
        pass
