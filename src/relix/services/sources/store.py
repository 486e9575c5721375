"""In-memory repository store.

Holds the master entry list in load order and a derived view: indices into
the master list after filtering and sorting. Read paths never reorder or
modify the master list. Writers reload everything from disk after each
mutation instead of patching entries in place.
"""

from pathlib import Path

from relix.logger import get_logger
from relix.models.config import PathsConfig
from relix.models.repository import RepoEntry, SortMode
from relix.models.system import OSInfo
from relix.services.sources.parsers import parse_one_line_text, parse_stanza_text
from relix.services.system import supports_stanza_format

logger = get_logger(__name__)

ONE_LINE_SUFFIX = ".list"
STANZA_SUFFIX = ".sources"


def _sort_key(mode: SortMode, entry: RepoEntry) -> tuple:
    if mode == SortMode.STATUS:
        return (not entry.enabled, entry.raw_text)
    if mode == SortMode.ALPHA:
        return (entry.raw_text.lower(),)
    return (str(entry.source_file), entry.raw_text)


class RepositoryStore:
    """Master entry list plus a filtered, sorted view over it."""

    def __init__(self, paths: PathsConfig, os_info: OSInfo) -> None:
        self.paths = paths
        self.os_info = os_info
        self.entries: list[RepoEntry] = []
        self.view: list[int] = []
        self.filter_text = ""
        self.sort_mode = SortMode.FILE

    @property
    def stanza_format_enabled(self) -> bool:
        return supports_stanza_format(self.os_info)

    def source_files(self) -> list[Path]:
        """Files to parse, in load order: the main list, then the directory sorted by name."""
        files: list[Path] = []
        if self.paths.sources_list.is_file():
            files.append(self.paths.sources_list)
        if self.paths.sources_dir.is_dir():
            for path in sorted(self.paths.sources_dir.iterdir()):
                if not path.is_file():
                    continue
                if path.suffix == ONE_LINE_SUFFIX:
                    files.append(path)
                elif path.suffix == STANZA_SUFFIX and self.stanza_format_enabled:
                    files.append(path)
        return files

    def _parse_file(self, path: Path) -> list[RepoEntry]:
        try:
            text = path.read_text(encoding="utf-8", errors="surrogateescape")
        except OSError as e:
            logger.warning("Skipping unreadable source file", path=str(path), error=str(e))
            return []
        if path.suffix == STANZA_SUFFIX:
            return parse_stanza_text(text, path)
        return parse_one_line_text(text, path)

    def load_all(self) -> list[RepoEntry]:
        """Re-read every source file and rebuild the view with the current filter and sort."""
        entries: list[RepoEntry] = []
        for path in self.source_files():
            entries.extend(self._parse_file(path))
        self.entries = entries
        self.rebuild_view()
        logger.info(
            "Repositories loaded",
            count=len(self.entries),
            stanza_format=self.stanza_format_enabled,
        )
        return self.entries

    def rebuild_view(self, filter_text: str | None = None, sort_mode: SortMode | None = None) -> list[int]:
        """Recompute the ordered indices of entries matching the filter.

        Args:
            filter_text: Case-insensitive substring; empty keeps everything.
                None keeps the previous filter.
            sort_mode: Ordering; None keeps the previous mode.

        Returns:
            Indices into `entries`. Entries that compare equal keep load order.
        """
        if filter_text is not None:
            self.filter_text = filter_text
        if sort_mode is not None:
            self.sort_mode = sort_mode

        needle = self.filter_text.lower()
        kept = [i for i, e in enumerate(self.entries) if not needle or needle in e.display.lower()]
        kept.sort(key=lambda i: _sort_key(self.sort_mode, self.entries[i]))
        self.view = kept
        return self.view

    def view_entries(self) -> list[RepoEntry]:
        return [self.entries[i] for i in self.view]

    def get(self, index: int) -> RepoEntry | None:
        """Entry at a master-list position, or None when out of range."""
        if 0 <= index < len(self.entries):
            return self.entries[index]
        return None
