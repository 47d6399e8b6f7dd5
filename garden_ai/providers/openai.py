"""OpenAI-compatible Chat Completions provider."""

from __future__ import annotations

import re
from typing import Any, Dict, List, Optional

import httpx

from ..auth import resolve_api_key
from ..models import calculate_cost
from ..types import ChatMessage, Completion, CompletionOptions, Context, FinishReason, Model, Usage

# Lone UTF-16 surrogates make the JSON body unencodable.
_LONE_SURROGATE = re.compile(r"[\ud800-\udbff](?![\udc00-\udfff])|(?<![\ud800-\udbff])[\udc00-\udfff]")


async def complete_openai_completions(
    model: Model,
    context: Context,
    options: Optional[CompletionOptions] = None,
    *,
    client: Optional[httpx.AsyncClient] = None,
) -> Completion:
    api_key = resolve_api_key(model.provider, options.api_key if options else None)
    if not api_key:
        raise RuntimeError(f"No API key for provider: {model.provider}. Set an env var or pass api_key.")

    params = _build_params(model, context, options)
    if options and options.on_payload:
        options.on_payload(params)

    headers = _build_headers(model, api_key, options.headers if options else None)
    url = _build_url(model.base_url)
    timeout = options.timeout if options else None

    if client is not None:
        response = await client.post(url, json=params, headers=headers, timeout=timeout)
    else:
        async with httpx.AsyncClient(timeout=timeout) as owned:
            response = await owned.post(url, json=params, headers=headers)
    response.raise_for_status()
    return _parse_completion(model, response.json())


def _build_url(base_url: str) -> str:
    base = base_url.rstrip("/")
    if base.endswith("/chat/completions"):
        return base
    if base.endswith("/v1"):
        return f"{base}/chat/completions"
    return f"{base}/v1/chat/completions"


def _build_headers(
    model: Model,
    api_key: str,
    options_headers: Optional[Dict[str, str]],
) -> Dict[str, str]:
    headers: Dict[str, str] = {"Authorization": f"Bearer {api_key}", "Content-Type": "application/json"}
    headers.update(model.headers)
    if options_headers:
        headers.update(options_headers)
    return headers


def _clean(text: str) -> str:
    return _LONE_SURROGATE.sub("", text)


def _convert_messages(context: Context) -> List[Dict[str, Any]]:
    messages: List[Dict[str, Any]] = []
    if context.system_prompt:
        messages.append({"role": "system", "content": _clean(context.system_prompt)})
    for message in context.messages:
        if not message.content.strip():
            continue
        messages.append({"role": message.role, "content": _clean(message.content)})
    return messages


def _build_params(
    model: Model,
    context: Context,
    options: Optional[CompletionOptions],
) -> Dict[str, Any]:
    params: Dict[str, Any] = {
        "model": model.id,
        "messages": _convert_messages(context),
    }
    if options and options.max_tokens:
        params["max_completion_tokens"] = options.max_tokens
    if options and options.temperature is not None:
        params["temperature"] = options.temperature
    if options and options.json_mode and model.supports_json_mode:
        params["response_format"] = {"type": "json_object"}
    return params


def _map_finish_reason(reason: Optional[str]) -> FinishReason:
    if reason in (None, "stop", "tool_calls", "function_call"):
        return "stop"
    if reason == "length":
        return "length"
    if reason == "content_filter":
        return "content_filter"
    return "error"


def _parse_usage(model: Model, raw: Optional[Dict[str, Any]]) -> Usage:
    usage = Usage()
    if not raw:
        return usage
    cached_tokens = (raw.get("prompt_tokens_details") or {}).get("cached_tokens", 0) or 0
    usage.input = max((raw.get("prompt_tokens") or 0) - cached_tokens, 0)
    usage.output = max(raw.get("completion_tokens") or 0, 0)
    usage.cache_read = max(cached_tokens, 0)
    usage.total_tokens = usage.input + usage.output + usage.cache_read
    calculate_cost(model, usage)
    return usage


def _parse_completion(model: Model, payload: Dict[str, Any]) -> Completion:
    choices = payload.get("choices") or []
    if not choices:
        raise RuntimeError("Completion response contained no choices")
    choice = choices[0]
    message = ChatMessage.model_validate(
        {
            "role": (choice.get("message") or {}).get("role") or "assistant",
            "content": (choice.get("message") or {}).get("content") or "",
        }
    )
    return Completion(
        text=message.content,
        model=payload.get("model") or model.id,
        provider=model.provider,
        usage=_parse_usage(model, payload.get("usage")),
        finish_reason=_map_finish_reason(choice.get("finish_reason")),
    )
