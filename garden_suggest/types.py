"""Result shapes and the adapter protocol for text suggestions."""

from __future__ import annotations

from typing import Any, List, Literal, Optional, Protocol, Sequence

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from garden_session.types import Node, Session

IdeaType = Literal["concrete_situation", "inferred_cause", "vague_feeling", "unknown"]
IDEA_TYPES = ("concrete_situation", "inferred_cause", "vague_feeling", "unknown")


class Idea(BaseModel):
    model_config = ConfigDict(extra="ignore")

    text: str
    type: IdeaType = "unknown"

    @field_validator("type", mode="before")
    @classmethod
    def _coerce_type(cls, value: Any) -> str:
        return value if value in IDEA_TYPES else "unknown"

    @field_validator("text")
    @classmethod
    def _strip_text(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("idea text must not be empty")
        return value


class IdeaSplit(BaseModel):
    model_config = ConfigDict(extra="ignore")

    idea_count: int = 0
    ideas: List[Idea]

    @model_validator(mode="after")
    def _sync_count(self) -> "IdeaSplit":
        if not self.ideas:
            raise ValueError("at least one idea is required")
        self.idea_count = len(self.ideas)
        return self


class VaguenessCheck(BaseModel):
    model_config = ConfigDict(extra="forbid")

    is_vague: bool
    nudge: Optional[str] = None


class ClusterSuggestion(BaseModel):
    model_config = ConfigDict(extra="ignore")

    label: str
    description: str = ""
    node_indices: List[int] = Field(default_factory=list)


class ClusterSuggestions(BaseModel):
    model_config = ConfigDict(extra="ignore")

    clusters: List[ClusterSuggestion] = Field(default_factory=list)


class SuggestionAdapter(Protocol):
    async def split_ideas(self, text: str) -> IdeaSplit: ...

    async def check_vagueness(self, text: str) -> VaguenessCheck: ...

    async def follow_up(self, text: str, depth: int) -> str: ...

    async def suggest_clusters(self, nodes: Sequence[Node]) -> ClusterSuggestions: ...

    async def reflect(self, session: Session) -> str: ...
