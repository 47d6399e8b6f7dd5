"""Provider dispatch for one-shot chat completions."""

from __future__ import annotations

from typing import Optional

from .providers import openai as openai_provider
from .types import Completion, CompletionOptions, Context, Model


async def complete(
    model: Model,
    context: Context,
    options: Optional[CompletionOptions] = None,
) -> Completion:
    if model.api == "openai-completions":
        return await openai_provider.complete_openai_completions(model, context, options)
    raise NotImplementedError(f"Completion not implemented for API: {model.api}")
