"""LLM access layer for causality garden."""

from .dispatch import complete
from .models import create_openai_model, get_model, list_models, register_model
from .types import ChatMessage, Completion, CompletionOptions, Context, Model

__all__ = [
    "ChatMessage",
    "Completion",
    "CompletionOptions",
    "Context",
    "Model",
    "complete",
    "create_openai_model",
    "get_model",
    "list_models",
    "register_model",
]
