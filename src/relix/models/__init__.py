"""Data models for relix."""

from relix.models.config import RelixConfig
from relix.models.metadata import RepoMetadata
from relix.models.repository import NO_STANZA, OperationResult, RepoEntry, SortMode, StanzaRange, UndoSnapshot
from relix.models.system import OSInfo

__all__ = [
    "NO_STANZA",
    "OSInfo",
    "OperationResult",
    "RelixConfig",
    "RepoEntry",
    "RepoMetadata",
    "SortMode",
    "StanzaRange",
    "UndoSnapshot",
]
