"""Constructors for fresh session records."""

from __future__ import annotations

import random
from typing import Optional

from .ids import generate_id, now_iso
from .types import CLUSTER_COLOURS, Author, Cluster, Node, PromptLog, Session


def create_session(title: Optional[str] = None, facilitator_name: Optional[str] = None) -> Session:
    # root_node_id stays unset until a parentless node is inserted.
    return Session(
        id=generate_id("session"),
        title=title or "Untitled Session",
        facilitator_name=facilitator_name or "Facilitator",
        phase="seeding",
        created_at=now_iso(),
    )


def create_node(
    session_id: str,
    text: str,
    parent_id: Optional[str] = None,
    author_id: Author = "participant",
) -> Node:
    """Build a detached node.

    The level is provisional (0 without a parent, 1 with one) until
    ``add_node_to_session`` resolves the parent and recomputes it.
    """
    return Node(
        id=generate_id("node"),
        session_id=session_id,
        parent_id=parent_id,
        text=text,
        level=1 if parent_id else 0,
        author_id=author_id,
        created_at=now_iso(),
        needs_deepening=True,
    )


def create_cluster(
    session_id: str,
    label: str,
    colour: Optional[str] = None,
    description: str = "",
) -> Cluster:
    return Cluster(
        id=generate_id("cluster"),
        session_id=session_id,
        label=label,
        colour=colour or random.choice(CLUSTER_COLOURS),
        description=description or "",
        created_at=now_iso(),
    )


def create_prompt_log(
    session_id: str,
    node_id: str,
    prompt_text: str,
    response_text: Optional[str] = None,
) -> PromptLog:
    return PromptLog(
        id=generate_id("pl"),
        session_id=session_id,
        node_id=node_id,
        prompt_text=prompt_text,
        response_text=response_text,
        timestamp=now_iso(),
    )
