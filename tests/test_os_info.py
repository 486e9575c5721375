from pathlib import Path

import pytest

from relix.models.system import OSInfo
from relix.services.system import detect_os, parse_os_release, supports_stanza_format

UBUNTU = """\
PRETTY_NAME="Ubuntu 22.04.4 LTS"
NAME="Ubuntu"
VERSION_ID="22.04"
VERSION="22.04.4 LTS (Jammy Jellyfish)"
ID=ubuntu
ID_LIKE=debian
"""


def test_parse_os_release() -> None:
    info = parse_os_release(UBUNTU)

    assert info.id == "ubuntu"
    assert info.version == 22.04


def test_unparsable_version_is_zero() -> None:
    info = parse_os_release('ID=debian\nVERSION_ID="trixie/sid"\n')

    assert info.id == "debian"
    assert info.version == 0.0


def test_detect_os_missing_file(tmp_path: Path) -> None:
    assert detect_os(tmp_path / "missing") == OSInfo()


def test_detect_os_reads_file(tmp_path: Path) -> None:
    path = tmp_path / "os-release"
    path.write_text(UBUNTU, encoding="utf-8")

    assert detect_os(path) == OSInfo(id="ubuntu", version=22.04)


@pytest.mark.parametrize(
    ("os_id", "version", "expected"),
    [
        ("ubuntu", 22.04, True),
        ("ubuntu", 24.04, True),
        ("ubuntu", 20.04, False),
        ("debian", 12.0, True),
        ("debian", 11.0, False),
        ("linuxmint", 21.0, False),
        ("unknown", 0.0, False),
    ],
)
def test_stanza_format_gate(os_id: str, version: float, expected: bool) -> None:
    assert supports_stanza_format(OSInfo(id=os_id, version=version)) is expected
