"""Toggle and delete edits for repository entries.

Each function takes the freshly read lines of the entry's file and returns
the new lines; none of them touch the disk. They raise `StaleTargetError`
when the entry no longer matches the file, which aborts the mutation
before anything is written.

One-line entries are located by exact equality with `RepoEntry.raw_text`.
Whitespace differences count as external changes.

Stanza entries are located by `RepoEntry.stanza_index` against stanza
ranges recomputed from the given lines. All entries that share a stanza
are toggled or deleted together.
"""

from relix.exceptions import StaleTargetError
from relix.models.repository import RepoEntry, StanzaRange
from relix.services.sources.parsers import ENABLED_FIELD, KEYWORD, strip_disable_marker

DISABLE_PREFIX = "# "
ENABLED_YES = f"{ENABLED_FIELD} yes"
ENABLED_NO = f"{ENABLED_FIELD} no"


def _find_line(lines: list[str], entry: RepoEntry) -> int:
    try:
        return lines.index(entry.raw_text)
    except ValueError:
        raise StaleTargetError(
            "sources.stale.line_not_found", file=str(entry.source_file), line=entry.raw_text
        ) from None


def enable_line(line: str) -> str:
    """Drop the ``# `` or ``#`` in front of the deb keyword, keeping indentation."""
    indent = line[: len(line) - len(line.lstrip())]
    body = strip_disable_marker(line.strip())
    if body is None:
        return line
    return indent + body


def disable_line(line: str) -> str:
    """Put ``# `` in front of the deb keyword, keeping indentation."""
    stripped = line.lstrip()
    if not stripped.startswith(KEYWORD):
        return line
    indent = line[: len(line) - len(stripped)]
    return indent + DISABLE_PREFIX + stripped


def toggle_one_line(lines: list[str], entry: RepoEntry) -> list[str]:
    """Flip the first line equal to the entry's raw text."""
    index = _find_line(lines, entry)
    lines[index] = disable_line(lines[index]) if entry.enabled else enable_line(lines[index])
    return lines


def delete_one_line(lines: list[str], entry: RepoEntry) -> list[str]:
    """Remove the first line equal to the entry's raw text."""
    index = _find_line(lines, entry)
    del lines[index]
    return lines


def compute_stanza_ranges(lines: list[str]) -> list[StanzaRange]:
    """Locate every stanza and its ``Enabled:`` line, if it has one."""
    ranges: list[StanzaRange] = []
    start = -1
    for i, line in enumerate(lines):
        blank = not line.strip()
        if not blank and start < 0:
            start = i
        elif blank and start >= 0:
            ranges.append(StanzaRange(start_line=start, end_line=i - 1))
            start = -1
    if start >= 0:
        ranges.append(StanzaRange(start_line=start, end_line=len(lines) - 1))

    for r in ranges:
        for i in range(r.start_line, r.end_line + 1):
            if lines[i].strip().startswith(ENABLED_FIELD):
                r.enabled_field_line = i
                break
    return ranges


def _stanza_range(lines: list[str], entry: RepoEntry) -> StanzaRange:
    ranges = compute_stanza_ranges(lines)
    if not 0 <= entry.stanza_index < len(ranges):
        raise StaleTargetError(
            "sources.stale.stanza_out_of_range",
            file=str(entry.source_file),
            index=entry.stanza_index,
            count=len(ranges),
        )
    return ranges[entry.stanza_index]


def toggle_stanza(lines: list[str], entry: RepoEntry) -> list[str]:
    """Set the stanza's ``Enabled:`` field to the opposite of the entry's state.

    A stanza without the field gets one right after its first line, so no
    blank line ever appears inside the stanza.
    """
    r = _stanza_range(lines, entry)
    new_value = ENABLED_NO if entry.enabled else ENABLED_YES
    if r.enabled_field_line >= 0:
        lines[r.enabled_field_line] = new_value
    else:
        lines.insert(r.start_line + 1, new_value)
    return lines


def delete_stanza(lines: list[str], entry: RepoEntry) -> list[str]:
    """Remove the whole stanza plus the blank separator right after it."""
    r = _stanza_range(lines, entry)
    end = r.end_line
    if end + 1 < len(lines) and not lines[end + 1].strip():
        end += 1
    del lines[r.start_line : end + 1]
    return lines


def toggle_entry(lines: list[str], entry: RepoEntry) -> list[str]:
    if entry.is_stanza_format:
        return toggle_stanza(lines, entry)
    return toggle_one_line(lines, entry)


def delete_entry(lines: list[str], entry: RepoEntry) -> list[str]:
    if entry.is_stanza_format:
        return delete_stanza(lines, entry)
    return delete_one_line(lines, entry)
