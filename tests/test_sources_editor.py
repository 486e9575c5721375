from pathlib import Path

import pytest

from relix.exceptions import StaleTargetError
from relix.models.repository import RepoEntry
from relix.services.sources.editor import (
    compute_stanza_ranges,
    delete_entry,
    disable_line,
    enable_line,
    toggle_entry,
)
from relix.services.sources.parsers import parse_one_line, parse_stanza_text

LIST_FILE = Path("/etc/apt/sources.list")
SOURCES_FILE = Path("/etc/apt/sources.list.d/debian.sources")

STANZAS = [
    "Types: deb",
    "URIs: http://deb.debian.test/debian",
    "Suites: bookworm",
    "Components: main",
    "",
    "Types: deb",
    "URIs: http://security.debian.test/debian-security",
    "Suites: bookworm-security",
    "Enabled: yes",
    "Components: main",
]


def _stanza_entry(index: int, enabled: bool = True) -> RepoEntry:
    return RepoEntry(
        source_file=SOURCES_FILE,
        raw_text="deb http://x.test/ x main",
        enabled=enabled,
        is_stanza_format=True,
        stanza_index=index,
    )


@pytest.mark.parametrize(
    ("line", "expected"),
    [
        ("# deb http://a.test/ x main", "deb http://a.test/ x main"),
        ("#deb http://a.test/ x main", "deb http://a.test/ x main"),
        ("  # deb http://a.test/ x main", "  deb http://a.test/ x main"),
    ],
)
def test_enable_line(line: str, expected: str) -> None:
    assert enable_line(line) == expected


def test_disable_line_keeps_indentation() -> None:
    assert disable_line("deb http://a.test/ x main") == "# deb http://a.test/ x main"
    assert disable_line("\tdeb-src http://a.test/ x main") == "\t# deb-src http://a.test/ x main"


def test_toggle_one_line_changes_only_the_matching_line() -> None:
    lines = ["# header", "deb http://a.test/ x main", "deb http://b.test/ x main"]
    entry = parse_one_line(lines[2], LIST_FILE)
    assert entry is not None

    result = toggle_entry(list(lines), entry)

    assert result == ["# header", "deb http://a.test/ x main", "# deb http://b.test/ x main"]


def test_toggle_one_line_first_duplicate_wins() -> None:
    lines = ["deb http://a.test/ x main", "deb http://a.test/ x main"]
    entry = parse_one_line(lines[1], LIST_FILE)
    assert entry is not None

    assert toggle_entry(list(lines), entry) == ["# deb http://a.test/ x main", "deb http://a.test/ x main"]


def test_line_missing_is_stale() -> None:
    entry = parse_one_line("deb http://a.test/ x main", LIST_FILE)
    assert entry is not None

    with pytest.raises(StaleTargetError) as exc_info:
        toggle_entry(["deb http://a.test/ x main "], entry)
    assert exc_info.value.status_code == 409

    with pytest.raises(StaleTargetError):
        delete_entry(["# deb http://a.test/ x main"], entry)


def test_delete_one_line() -> None:
    lines = ["deb http://a.test/ x main", "", "# deb http://b.test/ x main"]
    entry = parse_one_line(lines[2], LIST_FILE)
    assert entry is not None

    assert delete_entry(list(lines), entry) == ["deb http://a.test/ x main", ""]


def test_compute_stanza_ranges() -> None:
    ranges = compute_stanza_ranges(["", *STANZAS, "", ""])

    assert [(r.start_line, r.end_line, r.enabled_field_line) for r in ranges] == [(1, 4, -1), (6, 10, 9)]


def test_toggle_stanza_inserts_enabled_after_first_line() -> None:
    result = toggle_entry(list(STANZAS), _stanza_entry(0))

    assert result[:3] == ["Types: deb", "Enabled: no", "URIs: http://deb.debian.test/debian"]
    assert result[5:] == STANZAS[4:]
    entries = parse_stanza_text("\n".join(result), SOURCES_FILE)
    assert [e.enabled for e in entries] == [False, True]


def test_toggle_stanza_replaces_existing_field() -> None:
    result = toggle_entry(list(STANZAS), _stanza_entry(1))

    assert len(result) == len(STANZAS)
    assert result[8] == "Enabled: no"

    again = toggle_entry(result, _stanza_entry(1, enabled=False))
    assert again[8] == "Enabled: yes"


def test_toggle_disabled_stanza_without_field_inserts_yes() -> None:
    result = toggle_entry(list(STANZAS), _stanza_entry(0, enabled=False))

    assert result[1] == "Enabled: yes"


def test_delete_stanza_swallows_following_blank() -> None:
    assert delete_entry(list(STANZAS), _stanza_entry(0)) == STANZAS[5:]
    assert delete_entry(list(STANZAS), _stanza_entry(1)) == STANZAS[:5]


def test_stanza_index_out_of_range_is_stale() -> None:
    with pytest.raises(StaleTargetError):
        toggle_entry(list(STANZAS), _stanza_entry(2))
    with pytest.raises(StaleTargetError):
        delete_entry(STANZAS[:4], _stanza_entry(1))
