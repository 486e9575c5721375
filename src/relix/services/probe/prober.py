"""Background repository prober.

A probe reads the entry's cached metadata and checks that its host accepts
TCP connections, on a daemon thread so a slow resolver never stalls the
caller. The result is handed back through a `HandoffCell` that the caller
polls, typically once per UI frame:

    prober = RepoProber()
    prober.request_probe(entry)
    ...
    meta = prober.poll_probe()  # None until the probe has finished

Only one probe runs at a time. Requests made while one is running are
refused, there is no queue and no cancellation.
"""

import threading
import time
from pathlib import Path

from relix.config import get_config
from relix.logger import get_logger
from relix.models.metadata import RepoMetadata
from relix.models.repository import RepoEntry
from relix.services.probe.metadata import read_release_metadata
from relix.services.probe.network import check_reachable

logger = get_logger(__name__)


class HandoffCell:
    """Single result slot shared by the caller and the probe thread."""

    def __init__(self) -> None:
        self.lock = threading.Lock()
        self.result: RepoMetadata | None = None
        self.ready = False
        self.running = False
        self.target = ""

    def claim(self, target: str) -> bool:
        """Mark a probe for `target` as running; False if one already is."""
        with self.lock:
            if self.running:
                return False
            self.running = True
            self.ready = False
            self.target = target
            return True

    def publish(self, result: RepoMetadata) -> None:
        with self.lock:
            self.result = result
            self.ready = True
            self.running = False

    def take(self) -> RepoMetadata | None:
        """Return the finished result once and clear the ready flag."""
        with self.lock:
            if not self.ready:
                return None
            self.ready = False
            return self.result


def probe_target(entry: RepoEntry) -> str:
    return entry.uri + entry.suite


class RepoProber:
    """Runs one metadata/reachability probe at a time off the caller's thread."""

    def __init__(self, timeout_ms: int | None = None, lists_dir: Path | None = None) -> None:
        config = get_config()
        self.timeout_ms = timeout_ms if timeout_ms is not None else config.probe.timeout_ms
        self.lists_dir = lists_dir if lists_dir is not None else config.paths.apt_lists_dir
        self.cell = HandoffCell()

    @property
    def is_running(self) -> bool:
        with self.cell.lock:
            return self.cell.running

    @property
    def target(self) -> str:
        with self.cell.lock:
            return self.cell.target

    def probe(self, entry: RepoEntry) -> RepoMetadata:
        """Probe synchronously. Blocks for at most the configured deadline plus cache I/O."""
        started = time.monotonic()
        meta = read_release_metadata(entry, self.lists_dir)
        reach = check_reachable(entry.uri, self.timeout_ms)
        meta.reachable = reach.reachable
        if not reach.reachable:
            meta.error = reach.error
        logger.info(
            "Probe finished",
            uri=entry.uri,
            suite=entry.suite,
            reachable=reach.reachable,
            metadata_available=meta.metadata_available,
            elapsed_ms=int((time.monotonic() - started) * 1000),
        )
        return meta

    def request_probe(self, entry: RepoEntry) -> bool:
        """Start a background probe for `entry`.

        Returns:
            False if a probe is already running and nothing was started
        """
        if not self.cell.claim(probe_target(entry)):
            logger.debug("Probe request refused, one is already running", uri=entry.uri)
            return False

        def run() -> None:
            try:
                meta = self.probe(entry)
            except Exception as e:
                logger.error("Probe crashed", uri=entry.uri, error=str(e))
                meta = RepoMetadata(error=str(e))
            self.cell.publish(meta)

        logger.debug("Probe started", uri=entry.uri, timeout_ms=self.timeout_ms)
        threading.Thread(target=run, name="repo-probe", daemon=True).start()
        return True

    def poll_probe(self) -> RepoMetadata | None:
        """Finished probe result, returned once; None while running or idle."""
        return self.cell.take()
