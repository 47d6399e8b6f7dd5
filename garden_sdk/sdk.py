"""Workshop facade: threads suggestions through the tree store."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence

from garden_ai.models import create_openai_model, get_model
from garden_ai.types import Model
from garden_session import io as session_io
from garden_session.factories import create_cluster, create_prompt_log
from garden_session.queries import (
    build_tree,
    get_cluster_counts,
    get_latest_prompt_log,
    get_node,
    get_recent_nodes,
    get_session_stats,
    get_shallow_nodes,
)
from garden_session.registry import SessionRegistry
from garden_session.store import (
    add_cluster_to_session,
    add_prompt_log,
    assign_node_to_cluster,
    clear_clusters,
    delete_node,
    grow_node,
    reset_tree,
    set_node_agency,
    set_reflection,
    update_phase,
)
from garden_session.types import Author, Cluster, Node, PromptLog, Session, SessionStats, TreeNode
from garden_suggest.adapter import LLMSuggestionAdapter, OfflineSuggestionAdapter
from garden_suggest.heuristics import MIN_CLUSTER_NODES
from garden_suggest.policy import FallbackPolicy
from garden_suggest.types import IdeaSplit, SuggestionAdapter, VaguenessCheck

from .config import GardenConfig, load_config

logger = logging.getLogger(__name__)


@dataclass
class Dashboard:
    session: Session
    tree: Optional[TreeNode]
    stats: SessionStats
    shallow_nodes: List[Node]
    cluster_counts: Dict[str, int]


@dataclass
class ParticipantView:
    session: Session
    current_prompt: Optional[str]
    current_node_id: Optional[str]
    recent_nodes: List[Node] = field(default_factory=list)


@dataclass
class ResponseAnalysis:
    original_response: str
    parent_id: Optional[str]
    split: IdeaSplit
    vagueness: VaguenessCheck
    follow_up_question: str


class Workshop:
    """Facilitation operations over a registry of in-memory sessions.

    Operations on one session run one at a time; different sessions do not
    block each other. Unknown session or node ids yield ``None``/empty
    results rather than errors.
    """

    def __init__(self, adapter: SuggestionAdapter, registry: Optional[SessionRegistry] = None) -> None:
        self._adapter = adapter
        self._registry = registry if registry is not None else SessionRegistry()
        self._locks: Dict[str, asyncio.Lock] = {}

    @property
    def adapter(self) -> SuggestionAdapter:
        return self._adapter

    @property
    def registry(self) -> SessionRegistry:
        return self._registry

    def _lock(self, session_id: str) -> asyncio.Lock:
        lock = self._locks.get(session_id)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[session_id] = lock
        return lock

    def get_session(self, session_id: Optional[str]) -> Optional[Session]:
        return self._registry.get(session_id)

    def list_sessions(self) -> List[Session]:
        return self._registry.list()

    def remove_session(self, session_id: str) -> Optional[Session]:
        self._locks.pop(session_id, None)
        return self._registry.remove(session_id)

    def create_session(
        self,
        title: Optional[str] = None,
        facilitator_name: Optional[str] = None,
        initial_seed: Optional[str] = None,
    ) -> Session:
        session = self._registry.create(title, facilitator_name)
        if initial_seed and initial_seed.strip():
            grow_node(session, initial_seed.strip(), None, "facilitator")
        return session

    def dashboard(self, session_id: str) -> Optional[Dashboard]:
        session = self.get_session(session_id)
        if session is None:
            return None
        return Dashboard(
            session=session,
            tree=build_tree(session),
            stats=get_session_stats(session),
            shallow_nodes=get_shallow_nodes(session, 3),
            cluster_counts=get_cluster_counts(session),
        )

    def participant_view(self, session_id: str) -> Optional[ParticipantView]:
        session = self.get_session(session_id)
        if session is None:
            return None
        latest = get_latest_prompt_log(session)
        return ParticipantView(
            session=session,
            current_prompt=latest.prompt_text if latest else None,
            current_node_id=latest.node_id if latest else None,
            recent_nodes=get_recent_nodes(session, 5),
        )

    async def update_phase(self, session_id: str, phase: str) -> Optional[Session]:
        session = self.get_session(session_id)
        if session is None:
            return None
        async with self._lock(session.id):
            return update_phase(session, phase)

    async def delete_node(self, session_id: str, node_id: str) -> bool:
        session = self.get_session(session_id)
        if session is None:
            return False
        async with self._lock(session.id):
            return delete_node(session, node_id)

    async def reset_tree(self, session_id: str) -> Optional[Session]:
        session = self.get_session(session_id)
        if session is None:
            return None
        async with self._lock(session.id):
            return reset_tree(session)

    async def add_node(
        self,
        session_id: str,
        text: str,
        parent_id: Optional[str] = None,
        author_id: Author = "participant",
    ) -> Optional[Node]:
        nodes = await self.create_nodes(session_id, [text], parent_id, author_id)
        return nodes[0] if nodes else None

    async def create_nodes(
        self,
        session_id: str,
        texts: Sequence[str],
        parent_id: Optional[str] = None,
        author_id: Author = "participant",
    ) -> List[Node]:
        """Commit reviewed ideas under ``parent_id``, skipping blank entries."""
        session = self.get_session(session_id)
        if session is None:
            return []
        async with self._lock(session.id):
            if parent_id and get_node(session, parent_id) is None:
                logger.warning("Parent %s is gone from session %s; nothing added", parent_id, session.id)
                return []
            return [
                grow_node(session, text.strip(), parent_id or None, author_id)
                for text in texts
                if text and text.strip()
            ]

    async def analyze_response(
        self,
        session_id: str,
        text: str,
        parent_id: Optional[str] = None,
    ) -> Optional[ResponseAnalysis]:
        session = self.get_session(session_id)
        if session is None or not text or not text.strip():
            return None
        async with self._lock(session.id):
            parent = get_node(session, parent_id)
            depth = parent.level + 1 if parent else 0
            split, vagueness, question = await asyncio.gather(
                self._adapter.split_ideas(text),
                self._adapter.check_vagueness(text),
                self._adapter.follow_up(text, depth),
            )
        return ResponseAnalysis(
            original_response=text,
            parent_id=parent.id if parent else None,
            split=split,
            vagueness=vagueness,
            follow_up_question=question,
        )

    async def add_response(
        self,
        session_id: str,
        text: str,
        parent_id: Optional[str] = None,
        author_id: Author = "participant",
    ) -> List[Node]:
        """Split a free-text response and add one node per idea."""
        session = self.get_session(session_id)
        if session is None or not text or not text.strip():
            return []
        async with self._lock(session.id):
            split = await self._adapter.split_ideas(text)
            parent = get_node(session, parent_id)
            resolved_parent = parent.id if parent else None
            if split.idea_count == 1:
                texts = [text]
            else:
                texts = [idea.text for idea in split.ideas]
            return [
                grow_node(session, idea.strip(), resolved_parent, author_id)
                for idea in texts
                if idea and idea.strip()
            ]

    async def deepen_node(self, session_id: str, node_id: str) -> Optional[PromptLog]:
        session = self.get_session(session_id)
        if session is None:
            return None
        async with self._lock(session.id):
            node = get_node(session, node_id)
            if node is None:
                return None
            question = await self._adapter.follow_up(node.text, node.level)
            return add_prompt_log(session, create_prompt_log(session.id, node.id, question))

    async def add_cluster(
        self,
        session_id: str,
        label: str,
        colour: Optional[str] = None,
        description: str = "",
    ) -> Optional[Cluster]:
        session = self.get_session(session_id)
        if session is None or not label or not label.strip():
            return None
        async with self._lock(session.id):
            return add_cluster_to_session(
                session, create_cluster(session.id, label.strip(), colour, description)
            )

    async def assign_cluster(
        self,
        session_id: str,
        node_id: str,
        cluster_id: Optional[str],
    ) -> Optional[Node]:
        session = self.get_session(session_id)
        if session is None:
            return None
        if cluster_id is not None and not any(c.id == cluster_id for c in session.clusters):
            return None
        async with self._lock(session.id):
            return assign_node_to_cluster(session, node_id, cluster_id)

    async def set_agency(self, session_id: str, node_id: str, agency: Optional[str]) -> Optional[Node]:
        session = self.get_session(session_id)
        if session is None:
            return None
        async with self._lock(session.id):
            return set_node_agency(session, node_id, agency)

    async def suggest_clusters(self, session_id: str, *, refresh: bool = False) -> List[Cluster]:
        """Ask for theme clusters and apply them to the current nodes.

        With ``refresh`` the existing clusters and every node's cluster
        reference are cleared before the new ones are applied. Nothing is
        cleared when no suggestion comes back.
        """
        session = self.get_session(session_id)
        if session is None or len(session.nodes) < MIN_CLUSTER_NODES:
            return []
        async with self._lock(session.id):
            snapshot = list(session.nodes)
            suggestions = await self._adapter.suggest_clusters(snapshot)
            if not suggestions.clusters:
                return []
            if refresh:
                clear_clusters(session)

            created: List[Cluster] = []
            for suggestion in suggestions.clusters:
                cluster = add_cluster_to_session(
                    session,
                    create_cluster(session.id, suggestion.label, None, suggestion.description or ""),
                )
                created.append(cluster)
                for index in suggestion.node_indices:
                    if not 0 <= index < len(snapshot):
                        continue
                    assign_node_to_cluster(session, snapshot[index].id, cluster.id)
            logger.info("Applied %d suggested cluster(s) to session %s", len(created), session.id)
            return created

    async def generate_reflection(self, session_id: str) -> Optional[str]:
        session = self.get_session(session_id)
        if session is None:
            return None
        async with self._lock(session.id):
            reflection = await self._adapter.reflect(session)
            set_reflection(session, reflection)
            return reflection

    def export_session(self, session_id: str) -> Optional[str]:
        session = self.get_session(session_id)
        if session is None:
            return None
        return session_io.export_session(session)

    def import_session(self, raw: str | bytes) -> Session:
        return self._registry.import_json(raw)

    def load_sample_session(self) -> Session:
        return self._registry.load_sample()


def _resolve_model(config: GardenConfig) -> Model:
    try:
        model = get_model(config.provider, config.model_id)
    except KeyError:
        model = create_openai_model(config.model_id, provider=config.provider)
    if config.base_url:
        model = model.model_copy(update={"base_url": config.base_url})
    return model


def create_adapter(config: GardenConfig) -> SuggestionAdapter:
    if not config.api_key:
        logger.info("No API key configured for %s; using offline suggestions", config.provider)
        return OfflineSuggestionAdapter()
    return LLMSuggestionAdapter(
        _resolve_model(config),
        policy=FallbackPolicy(timeout=config.adapter_timeout),
        api_key=config.api_key,
    )


def create_workshop(
    config: Optional[GardenConfig] = None,
    *,
    adapter: Optional[SuggestionAdapter] = None,
    registry: Optional[SessionRegistry] = None,
) -> Workshop:
    resolved_config = config or load_config()
    if adapter is None:
        adapter = create_adapter(resolved_config)
    return Workshop(adapter, registry)
