"""Sources manager: the operations a user interface calls.

Every mutating operation returns an `OperationResult` carrying exactly one
human-readable status message, and reloads the store from disk afterwards
whether it succeeded or not.
"""

from collections.abc import Callable
from datetime import datetime
from pathlib import Path

from relix.config import get_config
from relix.exceptions import (
    AppBaseError,
    ReadOnlyError,
    ResourceNotFoundError,
    StaleTargetError,
    ValidationError,
)
from relix.logger import get_logger
from relix.models.config import RelixConfig
from relix.models.repository import OperationResult, RepoEntry, SortMode
from relix.models.system import OSInfo
from relix.services.i18n import translate
from relix.services.sources.editor import delete_entry, toggle_entry
from relix.services.sources.parsers import DISABLE_MARKER, KEYWORD, split_lines
from relix.services.sources.pipeline import MutationPipeline
from relix.services.sources.store import RepositoryStore
from relix.services.system import detect_os, is_root

logger = get_logger(__name__)

EXPORT_HEADER = "# APT Repository Export - relix"


class SourcesManager:
    """Owns the repository store and the mutation pipeline.

    Usage:
        manager = SourcesManager()
        manager.load_all()
        result = manager.toggle(manager.store.entries[0])
    """

    def __init__(
        self,
        config: RelixConfig | None = None,
        os_info: OSInfo | None = None,
        read_only: bool | None = None,
    ) -> None:
        self.config = config or get_config()
        self.os_info = os_info or detect_os(self.config.paths.os_release)
        self.read_only = (not is_root()) if read_only is None else read_only
        self.store = RepositoryStore(self.config.paths, self.os_info)
        self.store.sort_mode = self.config.view.sort_mode
        self.pipeline = MutationPipeline(self.config.paths.backup_dir, self.config.advanced.undo_capacity)

    # ------------------------------------------------------------------
    # Read paths
    # ------------------------------------------------------------------

    def load_all(self) -> list[RepoEntry]:
        return self.store.load_all()

    def rebuild_view(self, filter_text: str | None = None, sort_mode: SortMode | str | None = None) -> list[int]:
        """Filter and sort the view.

        Raises:
            ValidationError: If `sort_mode` is not a known mode
        """
        if isinstance(sort_mode, str) and not isinstance(sort_mode, SortMode):
            try:
                sort_mode = SortMode(sort_mode)
            except ValueError:
                raise ValidationError("sources.sort.invalid", mode=sort_mode) from None
        return self.store.rebuild_view(filter_text, sort_mode)

    def get_entry(self, entry_id: int) -> RepoEntry:
        """Entry by master-list position.

        Raises:
            ResourceNotFoundError: If no entry has that id
        """
        entry = self.store.get(entry_id)
        if entry is None:
            raise ResourceNotFoundError("sources.entry.not_found", id=entry_id)
        return entry

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def _failure(self, operation_key: str, error: AppBaseError) -> OperationResult:
        return OperationResult(
            ok=False,
            message=translate("sources.failed", operation=translate(operation_key), error=str(error)),
            status_code=error.status_code,
        )

    def _mutate(
        self,
        operation_key: str,
        path: Path,
        edit: Callable[[list[str]], list[str]],
        success_message: str,
        missing_ok: bool = False,
    ) -> OperationResult:
        if self.read_only:
            return self._failure(operation_key, ReadOnlyError())

        try:
            backup_error = self.pipeline.mutate(path, edit, missing_ok=missing_ok)
        except FileNotFoundError:
            result = self._failure(operation_key, StaleTargetError("sources.stale.file_missing", file=str(path)))
        except AppBaseError as e:
            logger.warning("Mutation aborted", operation=operation_key, path=str(path), error=str(e))
            result = self._failure(operation_key, e)
        except OSError as e:
            logger.error("Mutation failed", operation=operation_key, path=str(path), error=str(e))
            result = self._failure(
                operation_key, AppBaseError("sources.write.failed", path=str(path), error=e.strerror or str(e))
            )
        else:
            warning = translate("sources.backup_skipped", error=backup_error) if backup_error else None
            result = OperationResult(ok=True, message=success_message, warning=warning)

        self.load_all()
        return result

    def toggle(self, entry: RepoEntry) -> OperationResult:
        """Enable a disabled entry or disable an enabled one.

        For stanza entries every entry of the same stanza flips with it.
        """
        return self._mutate(
            "sources.toggle.name",
            entry.source_file,
            lambda lines: toggle_entry(lines, entry),
            translate("sources.toggle.done"),
        )

    def delete(self, entry: RepoEntry) -> OperationResult:
        """Remove the entry's line, or its whole stanza."""
        return self._mutate(
            "sources.delete.name",
            entry.source_file,
            lambda lines: delete_entry(lines, entry),
            translate("sources.delete.done"),
        )

    def add(self, target_file: Path | str | None, raw_line: str) -> OperationResult:
        """Append a one-line repository declaration to `target_file`.

        An empty target means the main sources.list. A missing target file
        is created.
        """
        line = raw_line.rstrip("\r\n")
        if "\n" in line:
            return self._failure("sources.add.name", ValidationError("sources.add.multiline"))
        if not line.strip().startswith(KEYWORD):
            return self._failure("sources.add.name", ValidationError("sources.add.invalid"))

        target = Path(target_file) if target_file else self.config.paths.sources_list
        return self._mutate(
            "sources.add.name",
            target,
            lambda lines: [*lines, line],
            translate("sources.add.done", file=str(target)),
            missing_ok=True,
        )

    def undo(self) -> OperationResult:
        """Restore the file changed by the most recent mutation."""
        if self.read_only:
            return self._failure("sources.undo.name", ReadOnlyError())

        try:
            snapshot = self.pipeline.undo()
        except AppBaseError as e:
            result = OperationResult(ok=False, message=str(e), status_code=e.status_code)
        else:
            result = OperationResult(ok=True, message=translate("sources.undo.applied", file=str(snapshot.file)))

        self.load_all()
        return result

    # ------------------------------------------------------------------
    # Export / import
    # ------------------------------------------------------------------

    def export_entries(self, path: Path | str) -> OperationResult:
        """Write every loaded entry to a plain one-line list, annotated with its source file."""
        path = Path(path)
        out = [
            EXPORT_HEADER,
            f"# Generated: {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}",
            "",
        ]
        for entry in self.store.entries:
            line = f"{'' if entry.enabled else '# '}deb {entry.uri} {entry.suite}"
            if entry.components:
                line += f" {entry.components}"
            out.append(f"{line}  # from: {entry.source_file}")

        try:
            path.write_text("\n".join(out) + "\n", encoding="utf-8")
        except OSError as e:
            logger.error("Export failed", path=str(path), error=str(e))
            error = AppBaseError("sources.write.failed", path=str(path), error=e.strerror or str(e))
            return self._failure("sources.export.name", error)

        logger.info("Repositories exported", path=str(path), count=len(self.store.entries))
        return OperationResult(
            ok=True, message=translate("sources.export.done", count=len(self.store.entries), path=str(path))
        )

    def import_entries(self, path: Path | str) -> OperationResult:
        """Append the deb lines of `path` that are not already configured to the main sources.list."""
        path = Path(path)
        try:
            text = path.read_text(encoding="utf-8", errors="surrogateescape")
        except OSError:
            error = ResourceNotFoundError("sources.import.not_found", path=str(path))
            return self._failure("sources.import.name", error)

        known = [e.raw_text.strip().lower() for e in self.store.entries]
        new_lines: list[str] = []
        for raw in split_lines(text):
            line = raw.strip()
            if not line.startswith(KEYWORD):
                continue
            # Drops the "# from: <file>" annotation written by export_entries
            line = line.split(DISABLE_MARKER, 1)[0].rstrip()
            needle = line[len(KEYWORD) + 1 :].lower()
            if any(needle in existing for existing in known):
                continue
            new_lines.append(line)
            known.append(line.lower())

        if not new_lines:
            return OperationResult(ok=True, message=translate("sources.import.none"))

        return self._mutate(
            "sources.import.name",
            self.config.paths.sources_list,
            lambda lines: [*lines, *new_lines],
            translate("sources.import.done", count=len(new_lines)),
            missing_ok=True,
        )
