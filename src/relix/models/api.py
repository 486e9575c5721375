"""API models for the repository endpoints."""

from pydantic import BaseModel

from relix.models.metadata import RepoMetadata
from relix.models.repository import RepoEntry, SortMode


class EntryInfo(BaseModel):
    """A repository entry with its id (position in the master list)."""

    id: int
    entry: RepoEntry


class RepositoryView(BaseModel):
    """Filtered, sorted repository list."""

    filter: str
    sort: SortMode
    total: int
    entries: list[EntryInfo]


class AddRepositoryRequest(BaseModel):
    line: str
    target_file: str | None = None


class PathRequest(BaseModel):
    path: str


class ProbeStatus(BaseModel):
    accepted: bool
    running: bool
    target: str
    message: str = ""


class SystemStatus(BaseModel):
    os_id: str
    os_version: float
    read_only: bool
    stanza_format: bool
    entries: int
    undo_depth: int
