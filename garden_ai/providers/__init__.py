"""Provider implementations."""

from __future__ import annotations

from .openai import complete_openai_completions

__all__ = [
    "complete_openai_completions",
    "openai",
]
