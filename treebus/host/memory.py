"""
TreeBus Host - In-Memory Reference Host
=========================================
A small document model for running the engine without a browser.

Provides:
- Element / Text nodes with parent and child links
- MemoryTree: TreeAdapter with a minimal selector matcher
- MemoryEventSource: tracks subscriptions and simulates native
  bubbling by dispatching on every subscribed ancestor
- MemoryHost: tree + source + engine wired together

Selector support is intentionally small: tag or *, #id, .class,
[attr], [attr=value], compounds of those, and comma-separated lists.
There are no combinators.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from functools import lru_cache
from typing import Any, Dict, Iterable, List, Optional, Tuple

from treebus.config.settings import EngineSettings
from treebus.events.engine import EventEngine
from treebus.events.propagation import PropagationControl

logger = logging.getLogger("treebus.host")


# ══════════════════════════════════════════════════════════════
# NODES
# ══════════════════════════════════════════════════════════════

class Node:
    """Base tree member."""

    def __init__(self) -> None:
        self.parent: Optional[Node] = None
        self.children: List[Node] = []

    def append(self, *children: "Node") -> "Node":
        for child in children:
            if child.parent is not None:
                child.parent.remove(child)
            child.parent = self
            self.children.append(child)
        return self

    def remove(self, child: "Node") -> None:
        self.children.remove(child)
        child.parent = None


class Element(Node):
    """Matchable node with a tag, an optional id, classes and attributes."""

    def __init__(
        self,
        tag: str,
        id: Optional[str] = None,
        classes: Iterable[str] = (),
        attrs: Optional[Dict[str, str]] = None,
        children: Iterable[Node] = (),
    ) -> None:
        super().__init__()
        self.tag = tag.lower()
        self.id = id
        self.classes = list(classes)
        self.attrs = dict(attrs or {})
        self.append(*children)

    def __repr__(self) -> str:
        label = self.tag
        if self.id:
            label += f"#{self.id}"
        for name in self.classes:
            label += f".{name}"
        return f"<{label}>"


class Text(Node):
    """Non-matchable leaf."""

    def __init__(self, value: str = "") -> None:
        super().__init__()
        self.value = value

    def append(self, *children: Node) -> Node:
        raise TypeError("Text nodes cannot have children.")

    def __repr__(self) -> str:
        return f"Text({self.value!r})"


# ══════════════════════════════════════════════════════════════
# SELECTORS
# ══════════════════════════════════════════════════════════════

class SelectorSyntaxError(ValueError):
    """Selector string could not be parsed."""

    def __init__(self, selector: Any, reason: str):
        self.selector = selector
        self.reason = reason
        super().__init__(f"Invalid selector {selector!r}: {reason}.")


_TOKEN = re.compile(
    r"""
      (?P<tag>\*|[A-Za-z][\w-]*)
    | \#(?P<id>[\w-]+)
    | \.(?P<cls>[\w-]+)
    | \[\s*(?P<attr>[\w-]+)\s*
        (?:=\s*(?P<value>"[^"]*"|'[^']*'|[\w-]+)\s*)?
      \]
    """,
    re.VERBOSE,
)


@dataclass(frozen=True)
class CompoundSelector:
    """One comma-free selector such as li.item[data-id]."""

    tag: Optional[str] = None
    ids: Tuple[str, ...] = ()
    classes: Tuple[str, ...] = ()
    attrs: Tuple[Tuple[str, Optional[str]], ...] = ()

    def matches(self, element: Element) -> bool:
        if self.tag is not None and self.tag != element.tag:
            return False
        if any(element.id != wanted for wanted in self.ids):
            return False
        if any(name not in element.classes for name in self.classes):
            return False
        for name, value in self.attrs:
            if name not in element.attrs:
                return False
            if value is not None and element.attrs[name] != value:
                return False
        return True


def _parse_compound(selector: str, text: str) -> CompoundSelector:
    tag: Optional[str] = None
    ids: List[str] = []
    classes: List[str] = []
    attrs: List[Tuple[str, Optional[str]]] = []

    pos = 0
    while pos < len(text):
        match = _TOKEN.match(text, pos)
        if match is None:
            raise SelectorSyntaxError(
                selector, f"unexpected {text[pos]!r} at offset {pos}"
            )
        if match.group("tag") is not None:
            if pos != 0:
                raise SelectorSyntaxError(selector, "tag name must come first")
            if match.group("tag") != "*":
                tag = match.group("tag").lower()
        elif match.group("id") is not None:
            ids.append(match.group("id"))
        elif match.group("cls") is not None:
            classes.append(match.group("cls"))
        else:
            value = match.group("value")
            if value is not None and value[:1] in ("'", '"'):
                value = value[1:-1]
            attrs.append((match.group("attr"), value))
        pos = match.end()

    return CompoundSelector(tag, tuple(ids), tuple(classes), tuple(attrs))


@lru_cache(maxsize=256)
def compile_selector(selector: str) -> Tuple[CompoundSelector, ...]:
    """Parse a selector list. Raises SelectorSyntaxError."""
    if not isinstance(selector, str) or not selector.strip():
        raise SelectorSyntaxError(selector, "empty selector")

    compounds = []
    for part in selector.split(","):
        part = part.strip()
        if not part:
            raise SelectorSyntaxError(selector, "empty selector in list")
        compounds.append(_parse_compound(selector, part))
    return tuple(compounds)


# ══════════════════════════════════════════════════════════════
# TREE ADAPTER
# ══════════════════════════════════════════════════════════════

class MemoryTree:
    """TreeAdapter over Element/Text nodes."""

    def matches(self, node: Any, selector: str) -> bool:
        compounds = compile_selector(selector)
        if not isinstance(node, Element):
            return False
        return any(compound.matches(node) for compound in compounds)

    def parent(self, node: Any) -> Optional[Node]:
        return node.parent

    def is_matchable(self, node: Any) -> bool:
        return isinstance(node, Element)

    def children(self, node: Any) -> List[Node]:
        return list(node.children)

    def clone(self, node: Node, deep: bool = True) -> Node:
        """Structural copy. The copy has no parent."""
        if isinstance(node, Text):
            return Text(node.value)
        if not isinstance(node, Element):
            raise TypeError(f"Cannot clone {type(node).__name__}.")
        copy = Element(node.tag, node.id, node.classes, node.attrs)
        if deep:
            copy.append(*(self.clone(child) for child in node.children))
        return copy


# ══════════════════════════════════════════════════════════════
# OCCURRENCE SOURCE
# ══════════════════════════════════════════════════════════════

class MemoryEventSource:
    """
    OccurrenceSource that remembers which nodes listen to what.

    history records every subscribe/unsubscribe call in order, as
    ("subscribe" | "unsubscribe", node, event_type) tuples. It is a
    test and debugging aid that grows with every transition; call
    clear_history() to reset it in long-running use.
    """

    def __init__(self, engine: Optional[EventEngine] = None) -> None:
        self._engine = engine
        self._listening: Dict[Tuple[int, str], Node] = {}
        self.history: List[Tuple[str, Any, str]] = []

    def connect(self, engine: EventEngine) -> None:
        self._engine = engine

    def subscribe(self, node: Any, event_type: str) -> None:
        self._listening[(id(node), event_type)] = node
        self.history.append(("subscribe", node, event_type))

    def unsubscribe(self, node: Any, event_type: str) -> None:
        self._listening.pop((id(node), event_type), None)
        self.history.append(("unsubscribe", node, event_type))

    def is_subscribed(self, node: Any, event_type: str) -> bool:
        return (id(node), event_type) in self._listening

    def clear_history(self) -> None:
        """Forget recorded transitions. Current subscriptions are kept."""
        self.history.clear()

    def fire(self, target: Node, event_type: str, payload: Any = None) -> bool:
        """
        Bubble an occurrence from target to the root.

        Every subscribed node on the way gets its own dispatch cycle.
        Bubbling ends at the first cycle that stops propagation.
        Returns False if any cycle prevented the default action.
        """
        if self._engine is None:
            raise RuntimeError("MemoryEventSource is not connected to an engine.")

        prevented = False
        node: Optional[Node] = target
        while node is not None:
            if self.is_subscribed(node, event_type):
                control: PropagationControl = self._engine.dispatch(
                    node, event_type, target, payload
                )
                prevented = prevented or control.default_prevented
                if control.stopped:
                    logger.debug(
                        f"'{event_type}' from {target!r} stopped at {node!r}"
                    )
                    break
            node = node.parent
        return not prevented


# ══════════════════════════════════════════════════════════════
# HOST
# ══════════════════════════════════════════════════════════════

class MemoryHost:
    """Tree, occurrence source and engine wired together."""

    def __init__(self, settings: Optional[EngineSettings] = None) -> None:
        self.tree = MemoryTree()
        self.source = MemoryEventSource()
        self.engine = EventEngine(self.tree, self.source, settings)
        self.source.connect(self.engine)

    def fire(self, target: Node, event_type: str, payload: Any = None) -> bool:
        return self.source.fire(target, event_type, payload)

    def clone(
        self, node: Node, deep: bool = True, with_events: bool = False
    ) -> Node:
        """Copy node (and children when deep), optionally with handlers."""
        copy = self.tree.clone(node, deep)
        if with_events:
            self.engine.copy_handlers(node, copy, deep)
        return copy
