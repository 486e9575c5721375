"""Repository declaration models."""

from enum import Enum
from pathlib import Path

from pydantic import BaseModel, Field

# stanza_index value for entries parsed from one-line files
NO_STANZA = -1


class SortMode(str, Enum):
    """Orderings available for the repository view."""

    FILE = "file"  # source file path, then raw text
    STATUS = "status"  # enabled first, then raw text
    ALPHA = "alpha"  # case-insensitive raw text


class RepoEntry(BaseModel):
    """One repository declaration as found on disk.

    For one-line files `raw_text` is the exact physical line, disable marker
    included. It is the only key used to find the line again when mutating,
    so it is never normalized. For stanza files it is a synthesized
    "types uri suite components" string used for display, filtering and
    sorting; stanza entries are located by `stanza_index` instead.
    """

    source_file: Path
    raw_text: str
    enabled: bool
    is_stanza_format: bool = False
    stanza_index: int = NO_STANZA
    uri: str = ""
    suite: str = ""
    components: str = ""
    types: str = ""

    @property
    def display(self) -> str:
        return self.raw_text


class StanzaRange(BaseModel):
    """Line span of one stanza inside a freshly read file (inclusive bounds)."""

    start_line: int
    end_line: int
    enabled_field_line: int = -1


class UndoSnapshot(BaseModel):
    """File content captured right before a destructive write."""

    file: Path
    lines: list[str] = Field(default_factory=list)


class OperationResult(BaseModel):
    """Outcome of a mutating operation, one human-readable status each."""

    ok: bool
    message: str
    warning: str | None = None
    status_code: int = 200
