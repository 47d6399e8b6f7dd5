"""Read-only derivations over a session."""

from __future__ import annotations

from typing import Dict, List, Optional

from .tree import NodeIndex
from .types import Node, PromptLog, Session, SessionStats, TreeNode


def _is_root(node: Node) -> bool:
    return node.parent_id is None or node.level == 0


def get_node(session: Optional[Session], node_id: Optional[str]) -> Optional[Node]:
    if session is None or not node_id:
        return None
    return next((node for node in session.nodes if node.id == node_id), None)


def get_children(session: Session, node_id: str) -> List[Node]:
    return [node for node in session.nodes if node.parent_id == node_id]


def get_root_node(session: Session) -> Optional[Node]:
    # May disagree with session.root_node_id; see tree_issues().
    return next((node for node in session.nodes if _is_root(node)), None)


def find_roots(session: Session) -> List[Node]:
    return [node for node in session.nodes if node.parent_id is None]


def build_tree(session: Session) -> Optional[TreeNode]:
    """Project the flat node list into a nested tree of copies.

    Returns ``None`` for an empty session. When several parentless nodes
    exist the last one in store order is returned.
    """
    if not session.nodes:
        return None

    by_id: Dict[str, TreeNode] = {}
    for node in session.nodes:
        copy = node.model_copy(deep=True)
        copy.children = []
        by_id[node.id] = TreeNode(node=copy)

    root: Optional[TreeNode] = None
    for node in session.nodes:
        if node.parent_id and node.parent_id in by_id:
            parent = by_id[node.parent_id]
            parent.children.append(by_id[node.id])
            parent.node.children.append(node.id)
        elif _is_root(node):
            root = by_id[node.id]
    return root


def get_shallow_nodes(session: Session, min_depth: int = 3) -> List[Node]:
    index = NodeIndex(session.nodes)
    return [
        node
        for node in session.nodes
        if not index.children(node.id) and node.level < min_depth
    ]


def get_nodes_in_cluster(session: Session, cluster_id: str) -> List[Node]:
    return [node for node in session.nodes if node.cluster_id == cluster_id]


def get_cluster_counts(session: Session) -> Dict[str, int]:
    counts = {cluster.id: 0 for cluster in session.clusters}
    for node in session.nodes:
        if node.cluster_id in counts:
            counts[node.cluster_id] += 1
    return counts


def get_recent_nodes(session: Session, limit: int = 5) -> List[Node]:
    if limit <= 0:
        return []
    return list(reversed(session.nodes[-limit:]))


def get_latest_prompt_log(session: Session) -> Optional[PromptLog]:
    return session.prompt_logs[-1] if session.prompt_logs else None


def get_session_stats(session: Session) -> SessionStats:
    nodes = session.nodes
    return SessionStats(
        total_nodes=len(nodes),
        total_clusters=len(session.clusters),
        max_depth=max((node.level for node in nodes), default=0),
        shallow_nodes=len(get_shallow_nodes(session)),
        unclustered_nodes=sum(1 for node in nodes if not node.cluster_id),
    )


def tree_issues(session: Session) -> List[str]:
    """Describe structural inconsistencies without repairing them."""
    issues: List[str] = []
    index = NodeIndex(session.nodes)
    roots = index.roots()
    if session.nodes and not roots:
        issues.append("no parentless node")
    if len(roots) > 1:
        issues.append(f"multiple parentless nodes: {', '.join(roots)}")

    if session.root_node_id is not None:
        root = index.get(session.root_node_id)
        if root is None:
            issues.append(f"root_node_id {session.root_node_id} does not match any node")
        elif root.parent_id is not None:
            issues.append(f"root_node_id {session.root_node_id} has a parent")

    cluster_ids = {cluster.id for cluster in session.clusters}
    for node in session.nodes:
        if node.parent_id is None:
            if node.level != 0:
                issues.append(f"node {node.id} has no parent but level {node.level}")
        else:
            parent = index.get(node.parent_id)
            if parent is None:
                issues.append(f"node {node.id} references missing parent {node.parent_id}")
            elif node.level != parent.level + 1:
                issues.append(
                    f"node {node.id} has level {node.level}, expected {parent.level + 1}"
                )
        if node.cluster_id is not None and node.cluster_id not in cluster_ids:
            issues.append(f"node {node.id} references missing cluster {node.cluster_id}")
    return issues
