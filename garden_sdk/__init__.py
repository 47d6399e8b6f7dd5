"""Embedding entry points for causality garden."""

from .config import GardenConfig, load_config
from .sdk import Dashboard, ParticipantView, ResponseAnalysis, Workshop, create_adapter, create_workshop

__all__ = [
    "Dashboard",
    "GardenConfig",
    "ParticipantView",
    "ResponseAnalysis",
    "Workshop",
    "create_adapter",
    "create_workshop",
    "load_config",
]
