"""Text suggestions for workshop facilitation."""

from .adapter import LLMSuggestionAdapter, OfflineSuggestionAdapter
from .heuristics import DEFAULT_NUDGE, DEFAULT_REFLECTION, FOLLOW_UP_FALLBACKS, is_vague, split_sentences
from .policy import FallbackPolicy
from .types import (
    ClusterSuggestion,
    ClusterSuggestions,
    Idea,
    IdeaSplit,
    SuggestionAdapter,
    VaguenessCheck,
)

__all__ = [
    "DEFAULT_NUDGE",
    "DEFAULT_REFLECTION",
    "FOLLOW_UP_FALLBACKS",
    "ClusterSuggestion",
    "ClusterSuggestions",
    "FallbackPolicy",
    "Idea",
    "IdeaSplit",
    "LLMSuggestionAdapter",
    "OfflineSuggestionAdapter",
    "SuggestionAdapter",
    "VaguenessCheck",
    "is_vague",
    "split_sentences",
]
