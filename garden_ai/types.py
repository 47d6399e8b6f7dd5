"""Core types for chat requests, models, and completions."""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

Api = Literal["openai-completions"]
Role = Literal["system", "user", "assistant"]
FinishReason = Literal["stop", "length", "content_filter", "error"]


class ModelCost(BaseModel):
    model_config = ConfigDict(extra="forbid")

    input: float = 0.0
    output: float = 0.0
    cache_read: float = 0.0


class UsageCost(BaseModel):
    model_config = ConfigDict(extra="forbid")

    input: float = 0.0
    output: float = 0.0
    cache_read: float = 0.0
    total: float = 0.0


class Usage(BaseModel):
    model_config = ConfigDict(extra="forbid")

    input: int = 0
    output: int = 0
    cache_read: int = 0
    total_tokens: int = 0
    cost: UsageCost = Field(default_factory=UsageCost)


class Model(BaseModel):
    model_config = ConfigDict(extra="forbid")

    id: str
    api: Api = "openai-completions"
    provider: str
    name: Optional[str] = None
    base_url: str = "https://api.openai.com/v1"
    context_window: Optional[int] = None
    max_tokens: Optional[int] = None
    cost: ModelCost = Field(default_factory=ModelCost)
    headers: Dict[str, str] = Field(default_factory=dict)
    supports_json_mode: bool = True


class ChatMessage(BaseModel):
    model_config = ConfigDict(extra="forbid")

    role: Role
    content: str


class Context(BaseModel):
    model_config = ConfigDict(extra="forbid")

    system_prompt: Optional[str] = None
    messages: List[ChatMessage] = Field(default_factory=list)


class Completion(BaseModel):
    model_config = ConfigDict(extra="forbid")

    text: str
    model: str
    provider: str
    usage: Usage = Field(default_factory=Usage)
    finish_reason: FinishReason = "stop"
    timestamp: int = Field(default_factory=lambda: int(time.time() * 1000))


@dataclass
class CompletionOptions:
    api_key: Optional[str] = None
    headers: Optional[Dict[str, str]] = None
    max_tokens: Optional[int] = None
    temperature: Optional[float] = None
    json_mode: bool = False
    timeout: Optional[float] = None
    on_payload: Optional[Callable[[Dict[str, Any]], None]] = None
