"""API key resolution for chat providers."""

from __future__ import annotations

import os
import re
from typing import Optional

GARDEN_KEY_VAR = "GARDEN_API_KEY"


def provider_key_var(provider: str) -> str:
    """``openrouter`` -> ``OPENROUTER_API_KEY``; ``my-proxy`` -> ``MY_PROXY_API_KEY``."""
    stem = re.sub(r"[^0-9A-Za-z]+", "_", provider).strip("_").upper()
    return f"{stem}_API_KEY"


def resolve_api_key(provider: str, explicit: Optional[str] = None) -> Optional[str]:
    """Pick the key for ``provider``: explicit value, then GARDEN_API_KEY, then the provider variable."""
    for candidate in (explicit, os.getenv(GARDEN_KEY_VAR), os.getenv(provider_key_var(provider))):
        if candidate and candidate.strip():
            return candidate.strip()
    return None
