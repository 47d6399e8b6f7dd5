"""Mutating operations on a session's tree, clusters, and logs."""

from __future__ import annotations

import logging
from typing import Optional

from .errors import EmptyNodeTextError, ParentNotFoundError
from .factories import create_node
from .queries import get_node, get_root_node
from .tree import NodeIndex
from .types import AGENCY_LEVELS, PHASES, Author, Cluster, Node, PromptLog, Session

logger = logging.getLogger(__name__)


def add_node_to_session(session: Session, node: Node) -> Node:
    """Insert ``node`` and finalize its level and parent link.

    Raises ``ParentNotFoundError`` when ``node.parent_id`` names a node that
    is not in the session, so no node is ever stored with a guessed level.
    """
    if not node.text or not node.text.strip():
        raise EmptyNodeTextError()

    if node.parent_id:
        parent = get_node(session, node.parent_id)
        if parent is None:
            raise ParentNotFoundError(node.parent_id)
        node.level = parent.level + 1
        parent.children.append(node.id)
    else:
        node.parent_id = None
        node.level = 0
        if session.root_node_id is None:
            session.root_node_id = node.id

    session.nodes.append(node)
    return node


def grow_node(
    session: Session,
    text: str,
    parent_id: Optional[str] = None,
    author_id: Author = "participant",
) -> Node:
    return add_node_to_session(session, create_node(session.id, text, parent_id, author_id))


def delete_node(session: Optional[Session], node_id: str) -> bool:
    """Remove ``node_id`` together with its whole subtree.

    Returns ``False`` without touching anything when there is nothing to
    delete from.
    """
    if session is None or not session.nodes:
        return False

    index = NodeIndex(session.nodes)
    doomed = index.descendants(node_id)

    node = index.get(node_id)
    if node is not None and node.parent_id:
        parent = index.get(node.parent_id)
        if parent is not None:
            parent.children = [child for child in parent.children if child != node_id]

    before = len(session.nodes)
    session.nodes = [n for n in session.nodes if n.id not in doomed]

    if session.root_node_id and session.root_node_id in doomed:
        session.root_node_id = None

    logger.debug("Deleted %d node(s) from session %s", before - len(session.nodes), session.id)
    return True


def add_cluster_to_session(session: Session, cluster: Cluster) -> Cluster:
    session.clusters.append(cluster)
    return cluster


def assign_node_to_cluster(session: Session, node_id: str, cluster_id: Optional[str]) -> Optional[Node]:
    node = get_node(session, node_id)
    if node is not None:
        node.cluster_id = cluster_id
    return node


def set_node_agency(session: Session, node_id: str, agency: Optional[str]) -> Optional[Node]:
    node = get_node(session, node_id)
    if node is None:
        return None
    if agency is None or agency in AGENCY_LEVELS:
        node.agency = agency  # type: ignore[assignment]
    return node


def clear_clusters(session: Session) -> None:
    for node in session.nodes:
        node.cluster_id = None
    session.clusters = []


def add_prompt_log(session: Session, log: PromptLog) -> PromptLog:
    session.prompt_logs.append(log)
    return log


def update_phase(session: Session, new_phase: str) -> Session:
    if new_phase in PHASES:
        session.phase = new_phase  # type: ignore[assignment]
    return session


def set_reflection(session: Session, text: Optional[str]) -> Session:
    session.reflection = text
    return session


def reset_tree(session: Session) -> Session:
    session.nodes = []
    session.clusters = []
    session.prompt_logs = []
    session.reflection = None
    session.root_node_id = None
    session.phase = "seeding"
    return session


def elect_root(session: Session) -> Optional[Node]:
    root = get_root_node(session)
    session.root_node_id = root.id if root is not None else None
    return root
