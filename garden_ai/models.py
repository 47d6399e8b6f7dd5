"""Model registry and cost accounting."""

from __future__ import annotations

from typing import Dict, List, Tuple

from .types import Model, ModelCost, Usage

DEFAULT_OPENAI_BASE_URL = "https://api.openai.com/v1"

_MODEL_REGISTRY: Dict[Tuple[str, str], Model] = {}


def register_model(model: Model) -> None:
    _MODEL_REGISTRY[(model.provider, model.id)] = model


def create_openai_model(
    model_id: str,
    *,
    provider: str = "openai",
    base_url: str | None = None,
    context_window: int | None = None,
    max_tokens: int | None = None,
    cost: ModelCost | None = None,
    headers: Dict[str, str] | None = None,
    supports_json_mode: bool = True,
) -> Model:
    return Model(
        id=model_id,
        api="openai-completions",
        provider=provider,
        base_url=base_url or DEFAULT_OPENAI_BASE_URL,
        context_window=context_window,
        max_tokens=max_tokens,
        cost=cost or ModelCost(),
        headers=headers or {},
        supports_json_mode=supports_json_mode,
    )


def get_model(provider: str, model_id: str) -> Model:
    key = (provider, model_id)
    if key in _MODEL_REGISTRY:
        return _MODEL_REGISTRY[key]
    if provider == "openai":
        model = create_openai_model(model_id)
        register_model(model)
        return model
    raise KeyError(f"Model not found: {provider}/{model_id}. Register it first.")


def list_models(provider: str | None = None) -> List[Model]:
    if provider is None:
        return list(_MODEL_REGISTRY.values())
    return [model for (prov, _), model in _MODEL_REGISTRY.items() if prov == provider]


def calculate_cost(model: Model, usage: Usage) -> None:
    rates = model.cost
    usage.cost.input = usage.input * rates.input / 1_000_000
    usage.cost.output = usage.output * rates.output / 1_000_000
    usage.cost.cache_read = usage.cache_read * rates.cache_read / 1_000_000
    usage.cost.total = usage.cost.input + usage.cost.output + usage.cost.cache_read


def _register_if_missing(model: Model) -> None:
    key = (model.provider, model.id)
    if key not in _MODEL_REGISTRY:
        _MODEL_REGISTRY[key] = model


def _register_builtin_models() -> None:
    _register_if_missing(
        create_openai_model(
            "gpt-4.1-mini",
            context_window=1047576,
            max_tokens=32768,
            cost=ModelCost(input=0.4, output=1.6, cache_read=0.1),
        )
    )
    _register_if_missing(
        create_openai_model(
            "gpt-4o-mini",
            context_window=128000,
            max_tokens=16384,
            cost=ModelCost(input=0.15, output=0.6, cache_read=0.08),
        )
    )
    _register_if_missing(
        create_openai_model(
            "gpt-4o",
            context_window=128000,
            max_tokens=16384,
            cost=ModelCost(input=2.5, output=10, cache_read=1.25),
        )
    )


_register_builtin_models()
