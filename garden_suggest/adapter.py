"""Suggestion adapters backed by a chat model, or by canned fallbacks only."""

from __future__ import annotations

import json
import logging
from typing import Awaitable, Callable, Optional, Sequence

from garden_ai.dispatch import complete
from garden_ai.types import ChatMessage, Completion, CompletionOptions, Context, Model, Usage
from garden_session.types import Node, Session

from .heuristics import (
    DEFAULT_NUDGE,
    DEFAULT_REFLECTION,
    MIN_CLUSTER_NODES,
    fallback_follow_up,
    fallback_split,
    is_vague,
    reflection_summary,
)
from .policy import FallbackPolicy
from .prompts import (
    FOLLOW_UP_PROMPT,
    REFLECTION_PROMPT,
    SPLIT_IDEAS_PROMPT,
    SUGGEST_CLUSTERS_PROMPT,
    VAGUENESS_NUDGE_PROMPT,
)
from .types import ClusterSuggestions, IdeaSplit, VaguenessCheck

CompleteFn = Callable[[Model, Context, Optional[CompletionOptions]], Awaitable[Completion]]

logger = logging.getLogger(__name__)


class LLMSuggestionAdapter:
    def __init__(
        self,
        model: Model,
        *,
        policy: Optional[FallbackPolicy] = None,
        api_key: Optional[str] = None,
        complete_fn: Optional[CompleteFn] = None,
    ) -> None:
        self._model = model
        self._policy = policy or FallbackPolicy()
        self._api_key = api_key
        self._complete_fn = complete_fn or complete
        self._usage = Usage()

    @property
    def policy(self) -> FallbackPolicy:
        return self._policy

    @property
    def usage(self) -> Usage:
        """Tokens and cost summed over every completion this adapter received."""
        return self._usage

    def _record_usage(self, completion: Completion) -> None:
        used = completion.usage
        total = self._usage
        total.input += used.input
        total.output += used.output
        total.cache_read += used.cache_read
        total.total_tokens += used.total_tokens
        total.cost.input += used.cost.input
        total.cost.output += used.cost.output
        total.cost.cache_read += used.cost.cache_read
        total.cost.total += used.cost.total
        logger.debug(
            "%s: %d tokens ($%.6f); running total %d tokens ($%.6f)",
            completion.model,
            used.total_tokens,
            used.cost.total,
            total.total_tokens,
            total.cost.total,
        )

    async def _ask(
        self,
        system_prompt: str,
        content: str,
        *,
        temperature: float,
        json_mode: bool = False,
    ) -> str:
        context = Context(
            system_prompt=system_prompt,
            messages=[ChatMessage(role="user", content=content)],
        )
        options = CompletionOptions(
            api_key=self._api_key,
            temperature=temperature,
            json_mode=json_mode,
            timeout=self._policy.timeout,
        )
        completion = await self._complete_fn(self._model, context, options)
        self._record_usage(completion)
        text = completion.text.strip()
        if not text:
            raise ValueError("empty completion")
        return text

    async def split_ideas(self, text: str) -> IdeaSplit:
        async def call() -> IdeaSplit:
            raw = await self._ask(SPLIT_IDEAS_PROMPT, text, temperature=0.3, json_mode=True)
            return IdeaSplit.model_validate_json(raw)

        return await self._policy.run("split_ideas", call, lambda: fallback_split(text))

    async def check_vagueness(self, text: str) -> VaguenessCheck:
        if not is_vague(text):
            return VaguenessCheck(is_vague=False, nudge=None)

        async def call() -> VaguenessCheck:
            nudge = await self._ask(VAGUENESS_NUDGE_PROMPT, text, temperature=0.7)
            return VaguenessCheck(is_vague=True, nudge=nudge)

        return await self._policy.run(
            "check_vagueness",
            call,
            lambda: VaguenessCheck(is_vague=True, nudge=DEFAULT_NUDGE),
        )

    async def follow_up(self, text: str, depth: int) -> str:
        async def call() -> str:
            payload = json.dumps({"text": text, "depth": depth})
            return await self._ask(FOLLOW_UP_PROMPT, payload, temperature=0.7)

        return await self._policy.run("follow_up", call, lambda: fallback_follow_up(depth))

    async def suggest_clusters(self, nodes: Sequence[Node]) -> ClusterSuggestions:
        if len(nodes) < MIN_CLUSTER_NODES:
            return ClusterSuggestions()

        async def call() -> ClusterSuggestions:
            listing = "- " + "\n- ".join(node.text for node in nodes)
            raw = await self._ask(SUGGEST_CLUSTERS_PROMPT, listing, temperature=0.5, json_mode=True)
            return ClusterSuggestions.model_validate_json(raw)

        return await self._policy.run("suggest_clusters", call, ClusterSuggestions)

    async def reflect(self, session: Session) -> str:
        async def call() -> str:
            payload = json.dumps(reflection_summary(session))
            return await self._ask(REFLECTION_PROMPT, payload, temperature=0.7)

        return await self._policy.run("reflect", call, lambda: DEFAULT_REFLECTION)


class OfflineSuggestionAdapter:
    """Same contract with no collaborator; every answer is the fallback."""

    async def split_ideas(self, text: str) -> IdeaSplit:
        return fallback_split(text)

    async def check_vagueness(self, text: str) -> VaguenessCheck:
        if not is_vague(text):
            return VaguenessCheck(is_vague=False, nudge=None)
        return VaguenessCheck(is_vague=True, nudge=DEFAULT_NUDGE)

    async def follow_up(self, text: str, depth: int) -> str:
        return fallback_follow_up(depth)

    async def suggest_clusters(self, nodes: Sequence[Node]) -> ClusterSuggestions:
        return ClusterSuggestions()

    async def reflect(self, session: Session) -> str:
        return DEFAULT_REFLECTION
