"""Test helpers for causality garden."""

from __future__ import annotations

from typing import List, Optional

from garden_ai.models import create_openai_model
from garden_ai.types import Completion, Model, Usage
from garden_session import create_session, grow_node
from garden_session.types import Node, Session


def create_model() -> Model:
    return create_openai_model("mock", provider="openai")


def create_completion(text: str, usage: Optional[Usage] = None) -> Completion:
    return Completion(text=text, model="mock", provider="openai", usage=usage or Usage())


def build_session(texts: Optional[List[str]] = None) -> Session:
    """A root with one child per text."""
    session = create_session("Test session", "Tess")
    root = grow_node(session, "Root cause", None, "facilitator")
    for text in texts or []:
        grow_node(session, text, root.id)
    return session


def build_chain(depth: int) -> tuple[Session, List[Node]]:
    session = create_session("Chain")
    chain: List[Node] = []
    parent_id = None
    for level in range(depth):
        node = grow_node(session, f"level {level}", parent_id)
        chain.append(node)
        parent_id = node.id
    return session, chain


class ScriptedComplete:
    """Stand-in for ``garden_ai.complete`` that replays canned replies."""

    def __init__(self, *replies):
        self.replies = list(replies)
        self.calls = []

    async def __call__(self, model, context, options=None):
        self.calls.append((context, options))
        reply = self.replies.pop(0) if self.replies else ""
        if isinstance(reply, BaseException):
            raise reply
        return create_completion(reply)
