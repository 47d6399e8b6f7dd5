"""Local rules and canned fallbacks that need no collaborator."""

from __future__ import annotations

import re
from typing import Any, Dict, List

from garden_session.types import Session

from .types import Idea, IdeaSplit

MIN_CLUSTER_NODES = 5
REFLECTION_SAMPLE_SIZE = 10

VAGUE_PATTERNS = (
    re.compile(r"i don't know", re.IGNORECASE),
    re.compile(r"not sure", re.IGNORECASE),
    re.compile(r"maybe", re.IGNORECASE),
    re.compile(r"just is", re.IGNORECASE),
    re.compile(r"it's like that", re.IGNORECASE),
    re.compile(r"^(yes|no|ok|okay)$", re.IGNORECASE),
)

DEFAULT_NUDGE = "Can you describe a specific situation or moment when you noticed this?"

FOLLOW_UP_FALLBACKS = (
    "Why might that be?",
    "What contributes to that?",
    "What makes that true?",
    "Can you give an example of when this happens?",
)

DEFAULT_REFLECTION = (
    "This session explored multiple interconnected themes. Consider reviewing the clusters "
    "to identify which area feels most important to address next."
)

_SENTENCE_RE = re.compile(r"[^.!?]+[.!?]?")


def is_vague(text: str) -> bool:
    return any(pattern.search(text) for pattern in VAGUE_PATTERNS) or len(text.strip()) < 10


def fallback_split(text: str) -> IdeaSplit:
    return IdeaSplit.model_construct(idea_count=1, ideas=[Idea.model_construct(text=text, type="unknown")])


def fallback_follow_up(depth: int) -> str:
    index = min(max(depth, 0), len(FOLLOW_UP_FALLBACKS) - 1)
    return FOLLOW_UP_FALLBACKS[index]


def reflection_summary(session: Session) -> Dict[str, Any]:
    nodes = session.nodes
    return {
        "total_nodes": len(nodes),
        "clusters": [
            {
                "label": cluster.label,
                "node_count": sum(1 for node in nodes if node.cluster_id == cluster.id),
            }
            for cluster in session.clusters
        ],
        "sample_nodes": [node.text for node in nodes[:REFLECTION_SAMPLE_SIZE]],
    }


def split_sentences(text: str | None) -> List[str]:
    if not text:
        return []
    cleaned = re.sub(r"\s+", " ", str(text)).strip()
    if not cleaned:
        return []
    parts = _SENTENCE_RE.findall(cleaned) or [cleaned]
    return [part.strip() for part in parts if part.strip()]
