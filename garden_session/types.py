"""Core records for workshop sessions, nodes, clusters, and prompt logs."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Literal, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field

from .ids import now_iso

Phase = Literal["seeding", "growing", "deepening", "clustering", "reflection"]
Author = Literal["facilitator", "participant"]
Agency = Literal["low", "med", "high"]

PHASES: Tuple[str, ...] = ("seeding", "growing", "deepening", "clustering", "reflection")
AGENCY_LEVELS: Tuple[str, ...] = ("low", "med", "high")

CLUSTER_COLOURS: Tuple[str, ...] = (
    "#F6D365",  # yellow
    "#FDA085",  # orange
    "#A8E6CF",  # green
    "#FFB3BA",  # pink
    "#BAE1FF",  # blue
    "#FFFFBA",  # light yellow
    "#E0BBE4",  # purple
)

EXPORT_FIELDS: Tuple[str, ...] = (
    "id",
    "title",
    "facilitator_name",
    "phase",
    "created_at",
    "nodes",
    "clusters",
    "prompt_logs",
    "reflection",
    "root_node_id",
)


class Node(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: str
    session_id: str
    parent_id: Optional[str] = None
    text: str
    level: int = Field(default=0, ge=0)
    author_id: Author = "participant"
    created_at: str = Field(default_factory=now_iso)
    tags: List[str] = Field(default_factory=list)
    cluster_id: Optional[str] = None
    agency: Optional[Agency] = None
    needs_deepening: bool = True
    children: List[str] = Field(default_factory=list)


class Cluster(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: str
    session_id: str
    label: str
    colour: str
    description: str = ""
    created_at: str = Field(default_factory=now_iso)


class PromptLog(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: str
    session_id: str
    node_id: str
    prompt_text: str
    response_text: Optional[str] = None
    timestamp: str = Field(default_factory=now_iso)


class Session(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: str
    title: str = "Untitled Session"
    facilitator_name: str = "Facilitator"
    phase: Phase = "seeding"
    created_at: str = Field(default_factory=now_iso)
    nodes: List[Node] = Field(default_factory=list)
    clusters: List[Cluster] = Field(default_factory=list)
    prompt_logs: List[PromptLog] = Field(default_factory=list)
    reflection: Optional[str] = None
    root_node_id: Optional[str] = None


class SessionStats(BaseModel):
    model_config = ConfigDict(extra="forbid")

    total_nodes: int = 0
    total_clusters: int = 0
    max_depth: int = 0
    shallow_nodes: int = 0
    unclustered_nodes: int = 0


@dataclass
class TreeNode:
    """A detached copy of a node with its children resolved to objects."""

    node: Node
    children: List["TreeNode"] = field(default_factory=list)

    @property
    def id(self) -> str:
        return self.node.id

    def to_dict(self) -> Dict[str, Any]:
        data = self.node.model_dump()
        data["children"] = [child.to_dict() for child in self.children]
        return data
