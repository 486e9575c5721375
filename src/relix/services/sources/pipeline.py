"""Crash-safe mutation pipeline for APT source files.

Every change to a repository file goes through `MutationPipeline.mutate`:

1. read the file into lines,
2. compute the new lines in memory (the caller's edit function),
3. push an undo snapshot of the old lines,
4. copy the file into the backup directory (failure is only a warning),
5. write the new lines to ``<file>.relix.tmp`` beside the target, flush,
   fsync, and rename it over the target.

The edit function runs before anything is recorded, so an edit that finds
its target missing leaves no snapshot, no backup and no temporary file.
The target is never opened for writing; readers such as apt see either the
old file or the new one.
"""

import os
import shutil
from collections import deque
from collections.abc import Callable
from datetime import datetime
from pathlib import Path

from relix.exceptions import UndoEmptyError, WriteFailedError
from relix.logger import get_logger
from relix.models.repository import UndoSnapshot
from relix.services.sources.parsers import split_lines

logger = get_logger(__name__)

TMP_SUFFIX = ".relix.tmp"
BACKUP_TIMESTAMP_FORMAT = "%Y%m%d_%H%M%S"
DEFAULT_UNDO_CAPACITY = 20

# Bytes that are not valid UTF-8 survive a read/write cycle unchanged
_ENCODING = "utf-8"
_ERRORS = "surrogateescape"


def read_lines(path: Path, missing_ok: bool = False) -> list[str]:
    """Read a file as a list of lines.

    Args:
        path: File to read
        missing_ok: Return an empty list instead of raising when the file does not exist

    Raises:
        FileNotFoundError: If the file is missing and `missing_ok` is False
    """
    try:
        text = path.read_text(encoding=_ENCODING, errors=_ERRORS)
    except FileNotFoundError:
        if missing_ok:
            return []
        raise
    return split_lines(text)


def atomic_write_lines(path: Path, lines: list[str]) -> None:
    """Replace `path` with `lines` via a temporary file and a rename.

    Raises:
        WriteFailedError: If the temporary file cannot be written or renamed.
            The temporary file is removed and the target is left untouched.
    """
    tmp_path = path.with_name(path.name + TMP_SUFFIX)
    try:
        with open(tmp_path, "w", encoding=_ENCODING, errors=_ERRORS, newline="\n") as f:
            for line in lines:
                f.write(line + "\n")
            f.flush()
            os.fsync(f.fileno())
        if path.exists():
            shutil.copymode(path, tmp_path)
        os.replace(tmp_path, path)
    except OSError as e:
        try:
            tmp_path.unlink(missing_ok=True)
        except OSError as cleanup_error:
            logger.warning("Temporary file not removed", path=str(tmp_path), error=str(cleanup_error))
        logger.error("Atomic write failed", path=str(path), error=str(e))
        raise WriteFailedError("sources.write.failed", path=str(path), error=e.strerror or str(e)) from e


def backup_name(src: Path, now: datetime | None = None) -> str:
    """Backup file name: path separators replaced, timestamp appended."""
    stamp = (now or datetime.now()).strftime(BACKUP_TIMESTAMP_FORMAT)
    return f"{str(src).replace('/', '_')}.{stamp}.bak"


def backup_file(src: Path, backup_dir: Path) -> Path:
    """Copy `src` verbatim into `backup_dir`.

    Returns:
        Path of the backup copy

    Raises:
        OSError: If the directory cannot be created or the copy fails
    """
    backup_dir.mkdir(parents=True, exist_ok=True)
    dest = backup_dir / backup_name(src)
    shutil.copyfile(src, dest)
    return dest


class UndoStack:
    """Bounded last-in-first-out stack of file snapshots.

    When full, pushing evicts the oldest snapshot. Lives for the process only.
    """

    def __init__(self, capacity: int = DEFAULT_UNDO_CAPACITY) -> None:
        self.capacity = capacity
        self._items: deque[UndoSnapshot] = deque(maxlen=capacity)

    def __len__(self) -> int:
        return len(self._items)

    def push(self, snapshot: UndoSnapshot) -> None:
        self._items.append(snapshot)

    def peek(self) -> UndoSnapshot:
        if not self._items:
            raise UndoEmptyError()
        return self._items[-1]

    def pop(self) -> UndoSnapshot:
        if not self._items:
            raise UndoEmptyError()
        return self._items.pop()

    def snapshots(self) -> list[UndoSnapshot]:
        """Snapshots from oldest to newest."""
        return list(self._items)


class MutationPipeline:
    """The only code path that changes repository files on disk."""

    def __init__(self, backup_dir: Path, undo_capacity: int = DEFAULT_UNDO_CAPACITY) -> None:
        self.backup_dir = backup_dir
        self.undo_stack = UndoStack(undo_capacity)

    def mutate(
        self,
        path: Path,
        edit: Callable[[list[str]], list[str]],
        missing_ok: bool = False,
    ) -> str | None:
        """Apply `edit` to the lines of `path` and replace the file atomically.

        Args:
            path: Target file
            edit: Receives the freshly read lines, returns the new lines.
                May raise to abort before anything is recorded or written.
            missing_ok: Treat a missing target as an empty file

        Returns:
            Backup error text, or None when the backup succeeded

        Raises:
            StaleTargetError: Propagated from `edit`
            WriteFailedError: If the atomic write fails
        """
        current = read_lines(path, missing_ok=missing_ok)
        new_lines = edit(list(current))

        snapshot = UndoSnapshot(file=path, lines=current)
        self.undo_stack.push(snapshot)

        warning = None
        try:
            dest = backup_file(path, self.backup_dir)
            logger.debug("Backup written", path=str(path), backup=str(dest))
        except OSError as e:
            warning = e.strerror or str(e)
            logger.warning("Backup failed, continuing", path=str(path), error=str(e))

        try:
            atomic_write_lines(path, new_lines)
        except WriteFailedError:
            # The file is unchanged, so the snapshot would restore nothing
            if len(self.undo_stack) and self.undo_stack.peek() is snapshot:
                self.undo_stack.pop()
            raise

        logger.info("File updated", path=str(path), lines_before=len(current), lines_after=len(new_lines))
        return warning

    def undo(self) -> UndoSnapshot:
        """Restore the most recent snapshot.

        Only the atomic write step runs: no new snapshot, no backup. The
        snapshot stays on the stack if the write fails.

        Returns:
            The restored snapshot

        Raises:
            UndoEmptyError: If there is nothing to undo
            WriteFailedError: If the atomic write fails
        """
        snapshot = self.undo_stack.peek()
        atomic_write_lines(snapshot.file, snapshot.lines)
        self.undo_stack.pop()
        logger.info("Undo applied", path=str(snapshot.file), remaining=len(self.undo_stack))
        return snapshot
