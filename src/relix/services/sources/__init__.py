"""APT source file services: parsing, storage and safe mutation."""

from .manager import SourcesManager
from .pipeline import MutationPipeline, UndoStack
from .store import RepositoryStore

__all__ = ["MutationPipeline", "RepositoryStore", "SourcesManager", "UndoStack"]
