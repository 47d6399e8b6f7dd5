"""Exceptions raised by the tree store and session import."""

from __future__ import annotations


class GardenError(Exception):
    """Base class for causality garden errors."""


class ParentNotFoundError(GardenError, KeyError):
    def __init__(self, parent_id: str) -> None:
        super().__init__(f"Parent not found: {parent_id}")
        self.parent_id = parent_id

    def __str__(self) -> str:
        # KeyError would otherwise quote the message.
        return str(self.args[0])


class EmptyNodeTextError(GardenError, ValueError):
    def __init__(self) -> None:
        super().__init__("Node text must not be empty")


class SessionImportError(GardenError, ValueError):
    pass
