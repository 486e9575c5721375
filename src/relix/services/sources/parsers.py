"""Parsers for the two APT source file formats.

Both parsers are pure: they take file text and return entries. Lines or
stanzas that do not describe a repository are skipped, never reported.

One-line format (``*.list``)::

    deb http://archive.ubuntu.com/ubuntu jammy main restricted
    # deb-src http://archive.ubuntu.com/ubuntu jammy main

Stanza format (``*.sources``)::

    Types: deb
    URIs: http://deb.debian.org/debian
    Suites: bookworm bookworm-updates
    Components: main
    Enabled: no
"""

from pathlib import Path

from relix.models.repository import NO_STANZA, RepoEntry

KEYWORD = "deb"
DISABLE_MARKER = "#"
ENABLED_VALUES = ("yes", "Yes", "YES")

TYPES_FIELD = "Types:"
URIS_FIELD = "URIs:"
SUITES_FIELD = "Suites:"
COMPONENTS_FIELD = "Components:"
ENABLED_FIELD = "Enabled:"


def split_lines(text: str) -> list[str]:
    """Split file text into lines without their terminators.

    ``\\r\\n`` and ``\\n`` are both accepted. A trailing newline does not
    produce an extra empty line.
    """
    if not text:
        return []
    lines = text.replace("\r\n", "\n").split("\n")
    if lines[-1] == "":
        lines.pop()
    return lines


def strip_disable_marker(text: str) -> str | None:
    """Return `text` without a leading ``#``/``# `` if it hides a deb line.

    `text` must already be stripped. Returns None when the text is not a
    commented-out repository line.
    """
    if not text.startswith(DISABLE_MARKER):
        return None
    rest = text[1:]
    if rest.startswith(" "):
        rest = rest[1:]
    return rest if rest.startswith(KEYWORD) else None


def parse_one_line(line: str, source_file: Path) -> RepoEntry | None:
    """Parse one physical line, or return None if it is not a repository line."""
    stripped = line.strip()
    if stripped.startswith(KEYWORD):
        enabled = True
        body = stripped
    else:
        body = strip_disable_marker(stripped)
        if body is None:
            return None
        enabled = False

    words = body.split()
    return RepoEntry(
        source_file=source_file,
        raw_text=line,
        enabled=enabled,
        is_stanza_format=False,
        stanza_index=NO_STANZA,
        types=words[0],
        uri=words[1] if len(words) > 1 else "",
        suite=words[2] if len(words) > 2 else "",
        components=" ".join(words[3:]),
    )


def parse_one_line_text(text: str, source_file: Path) -> list[RepoEntry]:
    """Parse a whole one-line format file."""
    entries = []
    for line in split_lines(text):
        entry = parse_one_line(line, source_file)
        if entry is not None:
            entries.append(entry)
    return entries


def split_stanzas(lines: list[str]) -> list[list[str]]:
    """Group lines into stanzas separated by blank (whitespace-only) lines."""
    blocks: list[list[str]] = []
    current: list[str] = []
    for line in lines:
        if line.strip():
            current.append(line)
        elif current:
            blocks.append(current)
            current = []
    if current:
        blocks.append(current)
    return blocks


def _parse_stanza(block: list[str], index: int, source_file: Path) -> list[RepoEntry]:
    types = ""
    uris: list[str] = []
    suites: list[str] = []
    components = ""
    enabled = True

    for raw in block:
        line = raw.strip()
        if not line or line.startswith(DISABLE_MARKER):
            continue
        if line.startswith(TYPES_FIELD):
            types = line[len(TYPES_FIELD) :].strip()
        elif line.startswith(URIS_FIELD):
            uris = line[len(URIS_FIELD) :].split()
        elif line.startswith(SUITES_FIELD):
            suites = line[len(SUITES_FIELD) :].split()
        elif line.startswith(COMPONENTS_FIELD):
            components = line[len(COMPONENTS_FIELD) :].strip()
        elif line.startswith(ENABLED_FIELD):
            enabled = line[len(ENABLED_FIELD) :].strip() in ENABLED_VALUES

    if KEYWORD not in types or not uris or not suites:
        return []

    comps = " ".join(components.split())
    entries = []
    # One entry per (URI, suite) pair, the way apt expands the stanza
    for uri in uris:
        for suite in suites:
            display = f"{types} {uri} {suite}"
            if comps:
                display = f"{display} {comps}"
            entries.append(
                RepoEntry(
                    source_file=source_file,
                    raw_text=display,
                    enabled=enabled,
                    is_stanza_format=True,
                    stanza_index=index,
                    types=types,
                    uri=uri,
                    suite=suite,
                    components=components,
                )
            )
    return entries


def parse_stanza_text(text: str, source_file: Path) -> list[RepoEntry]:
    """Parse a whole stanza format file.

    Every stanza counts towards `stanza_index`, including stanzas that yield
    no entries, so indices match block positions in the file.
    """
    entries = []
    for index, block in enumerate(split_stanzas(split_lines(text))):
        entries.extend(_parse_stanza(block, index, source_file))
    return entries
