"""In-memory causal tree model for causality garden workshops."""

from .errors import EmptyNodeTextError, GardenError, ParentNotFoundError, SessionImportError
from .factories import create_cluster, create_node, create_prompt_log, create_session
from .ids import generate_id, now_iso
from .io import export_session, load_sample_session, parse_session
from .queries import (
    build_tree,
    find_roots,
    get_children,
    get_cluster_counts,
    get_latest_prompt_log,
    get_node,
    get_nodes_in_cluster,
    get_recent_nodes,
    get_root_node,
    get_session_stats,
    get_shallow_nodes,
    tree_issues,
)
from .registry import SessionRegistry
from .store import (
    add_cluster_to_session,
    add_node_to_session,
    add_prompt_log,
    assign_node_to_cluster,
    clear_clusters,
    delete_node,
    elect_root,
    grow_node,
    reset_tree,
    set_node_agency,
    set_reflection,
    update_phase,
)
from .tree import NodeIndex
from .types import PHASES, Cluster, Node, PromptLog, Session, SessionStats, TreeNode

__all__ = [
    "PHASES",
    "Cluster",
    "EmptyNodeTextError",
    "GardenError",
    "Node",
    "NodeIndex",
    "ParentNotFoundError",
    "PromptLog",
    "Session",
    "SessionImportError",
    "SessionRegistry",
    "SessionStats",
    "TreeNode",
    "add_cluster_to_session",
    "add_node_to_session",
    "add_prompt_log",
    "assign_node_to_cluster",
    "build_tree",
    "clear_clusters",
    "create_cluster",
    "create_node",
    "create_prompt_log",
    "create_session",
    "delete_node",
    "elect_root",
    "export_session",
    "find_roots",
    "generate_id",
    "get_children",
    "get_cluster_counts",
    "get_latest_prompt_log",
    "get_node",
    "get_nodes_in_cluster",
    "get_recent_nodes",
    "get_root_node",
    "get_session_stats",
    "get_shallow_nodes",
    "grow_node",
    "load_sample_session",
    "now_iso",
    "parse_session",
    "reset_tree",
    "set_node_agency",
    "set_reflection",
    "tree_issues",
    "update_phase",
]
