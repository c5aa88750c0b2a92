"""
TreeBus Events - Bubble Path
==============================
Ancestor chain from a trigger target up to, but excluding, the
node a handler was bound to.

Rules:
- target is bound node → empty path
- target leads the path only if it is matchable (an element,
  not e.g. a text node)
- only matchable ancestors are included
- the walk ends at the bound node or at the root, whichever first
"""

from __future__ import annotations

from typing import Any, List

from treebus.host.contracts import TreeAdapter


class BubblePathBuilder:
    """Builds delegation paths using the host's tree navigation."""

    def __init__(self, tree: TreeAdapter) -> None:
        self._tree = tree

    def build_path(self, target: Any, bound_node: Any) -> List[Any]:
        if target is bound_node:
            return []

        path: List[Any] = []
        if self._tree.is_matchable(target):
            path.append(target)

        node = self._tree.parent(target)
        while node is not None and node is not bound_node:
            if self._tree.is_matchable(node):
                path.append(node)
            node = self._tree.parent(node)
        return path
