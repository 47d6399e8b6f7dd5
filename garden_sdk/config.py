"""Environment-driven configuration."""

from __future__ import annotations

import logging
import math
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

from garden_ai.auth import resolve_api_key
from garden_suggest.policy import DEFAULT_TIMEOUT_SECONDS

logger = logging.getLogger(__name__)

DEFAULT_PROVIDER = "openai"
DEFAULT_MODEL_ID = "gpt-4.1-mini"


@dataclass
class GardenConfig:
    provider: str = DEFAULT_PROVIDER
    model_id: str = DEFAULT_MODEL_ID
    base_url: Optional[str] = None
    api_key: Optional[str] = None
    adapter_timeout: float = DEFAULT_TIMEOUT_SECONDS


def _parse_timeout(raw: Optional[str]) -> float:
    if raw is None or not raw.strip():
        return DEFAULT_TIMEOUT_SECONDS
    try:
        value = float(raw)
    except ValueError:
        value = 0.0
    if not (value > 0 and math.isfinite(value)):
        logger.warning("Ignoring invalid GARDEN_ADAPTER_TIMEOUT=%r; using %ss", raw, DEFAULT_TIMEOUT_SECONDS)
        return DEFAULT_TIMEOUT_SECONDS
    return value


def load_config(env_file: Optional[str | Path] = None) -> GardenConfig:
    """Read settings from the environment, filling gaps from a ``.env`` file."""
    load_dotenv(dotenv_path=env_file, override=False)
    provider = os.getenv("GARDEN_PROVIDER") or DEFAULT_PROVIDER
    return GardenConfig(
        provider=provider,
        model_id=os.getenv("GARDEN_MODEL") or DEFAULT_MODEL_ID,
        base_url=os.getenv("GARDEN_BASE_URL") or None,
        api_key=resolve_api_key(provider),
        adapter_timeout=_parse_timeout(os.getenv("GARDEN_ADAPTER_TIMEOUT")),
    )
