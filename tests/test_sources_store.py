from pathlib import Path

from relix.models.config import RelixConfig
from relix.models.repository import SortMode
from relix.models.system import OSInfo
from relix.services.sources.store import RepositoryStore

STANZA = "Types: deb\nURIs: http://deb.debian.org/debian\nSuites: bookworm\nComponents: main\n"


def _write(path: Path, text: str) -> Path:
    path.write_text(text, encoding="utf-8")
    return path


def test_load_order_main_list_then_sorted_directory(apt_config: RelixConfig) -> None:
    paths = apt_config.paths
    _write(paths.sources_list, "deb http://main.test/ jammy main\n")
    _write(paths.sources_dir / "zz.list", "deb http://zz.test/ jammy main\n")
    _write(paths.sources_dir / "aa.list", "deb http://aa.test/ jammy main\n")
    _write(paths.sources_dir / "notes.txt", "deb http://ignored.test/ jammy main\n")

    store = RepositoryStore(paths, OSInfo(id="ubuntu", version=20.04))
    entries = store.load_all()

    assert [e.uri for e in entries] == ["http://main.test/", "http://aa.test/", "http://zz.test/"]


def test_stanza_files_gated_by_os_version(apt_config: RelixConfig) -> None:
    _write(apt_config.paths.sources_dir / "debian.sources", STANZA)

    old = RepositoryStore(apt_config.paths, OSInfo(id="debian", version=11))
    new = RepositoryStore(apt_config.paths, OSInfo(id="debian", version=12))

    assert old.load_all() == []
    assert len(new.load_all()) == 1
    assert new.entries[0].is_stanza_format


def test_missing_locations_load_empty(apt_config: RelixConfig, tmp_path: Path) -> None:
    paths = apt_config.paths.model_copy(
        update={"sources_list": tmp_path / "nope.list", "sources_dir": tmp_path / "nope.d"}
    )

    store = RepositoryStore(paths, OSInfo())

    assert store.load_all() == []
    assert store.view == []


def test_filter_is_case_insensitive_substring(apt_config: RelixConfig) -> None:
    _write(
        apt_config.paths.sources_list,
        "deb http://Archive.Ubuntu.com/ubuntu jammy main\n"
        "deb http://ppa.launchpad.net/x/ubuntu jammy main\n"
        "# deb http://archive.ubuntu.com/ubuntu jammy-backports main\n",
    )
    store = RepositoryStore(apt_config.paths, OSInfo())
    store.load_all()

    assert store.rebuild_view("ARCHIVE", SortMode.FILE) == [2, 0]
    assert store.rebuild_view("") == [2, 0, 1]
    assert store.rebuild_view("nothing-matches") == []


def test_sort_modes_are_stable(apt_config: RelixConfig) -> None:
    _write(apt_config.paths.sources_dir / "b.list", "deb http://b.test/ x main\n# deb http://a.test/ x main\n")
    _write(apt_config.paths.sources_dir / "a.list", "deb http://C.test/ x main\n")
    store = RepositoryStore(apt_config.paths, OSInfo())
    entries = store.load_all()
    assert [e.source_file.name for e in entries] == ["a.list", "b.list", "b.list"]

    # File mode: path, then raw text ("# deb" sorts before "deb")
    assert store.rebuild_view(sort_mode=SortMode.FILE) == [0, 2, 1]
    # Status mode: enabled first, then raw text
    assert store.rebuild_view(sort_mode=SortMode.STATUS) == [0, 1, 2]
    # Alpha mode ignores case
    assert store.rebuild_view(sort_mode=SortMode.ALPHA) == [2, 1, 0]


def test_equal_keys_keep_load_order(apt_config: RelixConfig) -> None:
    _write(apt_config.paths.sources_dir / "a.list", "deb http://same.test/ x main\n")
    _write(apt_config.paths.sources_dir / "b.list", "deb http://same.test/ x main\n")
    store = RepositoryStore(apt_config.paths, OSInfo())
    store.load_all()

    assert store.rebuild_view(sort_mode=SortMode.ALPHA) == [0, 1]
    assert store.rebuild_view(sort_mode=SortMode.STATUS) == [0, 1]


def test_view_does_not_touch_master_list(apt_config: RelixConfig) -> None:
    _write(apt_config.paths.sources_list, "deb http://z.test/ x main\ndeb http://a.test/ x main\n")
    store = RepositoryStore(apt_config.paths, OSInfo())
    store.load_all()
    before = list(store.entries)

    store.rebuild_view("a.test", SortMode.ALPHA)

    assert store.entries == before
    assert [e.uri for e in store.view_entries()] == ["http://a.test/"]
