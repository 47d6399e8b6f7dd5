"""Parent/child index over a session's flat node list."""

from __future__ import annotations

from typing import Dict, Iterable, List, Optional, Set

from .types import Node


class NodeIndex:
    """Snapshot of the current ``parent_id`` links, keyed both ways."""

    def __init__(self, nodes: Iterable[Node]) -> None:
        self._nodes: Dict[str, Node] = {}
        self._children: Dict[str, List[str]] = {}
        self._roots: List[str] = []
        for node in nodes:
            self._nodes[node.id] = node
            if node.parent_id is None:
                self._roots.append(node.id)
            else:
                self._children.setdefault(node.parent_id, []).append(node.id)

    def get(self, node_id: str) -> Optional[Node]:
        return self._nodes.get(node_id)

    def children(self, node_id: str) -> List[str]:
        return list(self._children.get(node_id, []))

    def roots(self) -> List[str]:
        return list(self._roots)

    def descendants(self, node_id: str) -> Set[str]:
        """Return ``node_id`` and every node transitively below it."""
        collected: Set[str] = {node_id}
        stack = [node_id]
        while stack:
            current = stack.pop()
            for child_id in self._children.get(current, []):
                if child_id in collected:
                    continue
                collected.add(child_id)
                stack.append(child_id)
        return collected
