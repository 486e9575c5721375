import threading
import time
from pathlib import Path

import pytest

from relix.models.metadata import RepoMetadata
from relix.models.repository import RepoEntry
from relix.services.probe import prober as prober_module
from relix.services.probe.network import Reachability
from relix.services.probe.prober import HandoffCell, RepoProber, probe_target


def _entry(uri: str = "http://archive.ubuntu.test/ubuntu", suite: str = "jammy") -> RepoEntry:
    return RepoEntry(
        source_file=Path("/etc/apt/sources.list"),
        raw_text=f"deb {uri} {suite} main",
        enabled=True,
        uri=uri,
        suite=suite,
        types="deb",
    )


def _wait_for_result(prober: RepoProber, timeout: float = 5.0) -> RepoMetadata | None:
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        result = prober.poll_probe()
        if result is not None:
            return result
        time.sleep(0.01)
    return None


def test_handoff_cell_delivers_once() -> None:
    cell = HandoffCell()

    assert cell.claim("a")
    assert not cell.claim("b")
    assert cell.take() is None

    cell.publish(RepoMetadata(origin="Debian"))

    taken = cell.take()
    assert taken is not None and taken.origin == "Debian"
    assert cell.take() is None
    assert cell.claim("b")
    assert cell.target == "b"


def test_probe_target_identity() -> None:
    assert probe_target(_entry()) == "http://archive.ubuntu.test/ubuntujammy"


def test_second_request_refused_while_running(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    release = threading.Event()

    def slow_check(uri: str, timeout_ms: int) -> Reachability:
        release.wait(5)
        return Reachability(reachable=True)

    monkeypatch.setattr(prober_module, "check_reachable", slow_check)
    prober = RepoProber(timeout_ms=1000, lists_dir=tmp_path)

    assert prober.request_probe(_entry())
    assert prober.is_running
    assert not prober.request_probe(_entry(suite="jammy-updates"))
    assert prober.target == "http://archive.ubuntu.test/ubuntujammy"
    assert prober.poll_probe() is None

    release.set()
    result = _wait_for_result(prober)

    assert result is not None
    assert result.reachable
    assert not result.metadata_available
    assert result.error == "Cache not found (run apt update)"
    assert prober.poll_probe() is None
    assert not prober.is_running


def test_unreachable_error_wins(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    (tmp_path / "archive.ubuntu.test_ubuntu_dists_jammy_Release").write_text("Origin: Ubuntu\n", encoding="utf-8")
    monkeypatch.setattr(
        prober_module,
        "check_reachable",
        lambda uri, timeout_ms: Reachability(reachable=False, error="Resolving archive.ubuntu.test timed out"),
    )

    meta = RepoProber(timeout_ms=1000, lists_dir=tmp_path).probe(_entry())

    assert meta.origin == "Ubuntu"
    assert meta.metadata_available
    assert not meta.reachable
    assert meta.error == "Resolving archive.ubuntu.test timed out"


def test_crashing_probe_still_publishes(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    def broken(uri: str, timeout_ms: int) -> Reachability:
        raise RuntimeError("boom")

    monkeypatch.setattr(prober_module, "check_reachable", broken)
    prober = RepoProber(timeout_ms=1000, lists_dir=tmp_path)

    assert prober.request_probe(_entry())
    result = _wait_for_result(prober)

    assert result is not None
    assert result.error == "boom"
    assert not prober.is_running
