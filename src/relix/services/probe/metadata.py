"""Repository metadata from apt's local list cache.

After ``apt update`` every repository suite has a cached Release file,
named after the URI and suite::

    http://archive.ubuntu.com/ubuntu + jammy
      -> /var/lib/apt/lists/archive.ubuntu.com_ubuntu_dists_jammy_Release
"""

from datetime import datetime
from pathlib import Path

from relix.models.metadata import RepoMetadata
from relix.models.repository import RepoEntry
from relix.services.i18n import translate

RELEASE_FIELDS = {
    "Origin:": "origin",
    "Codename:": "codename",
    "Suite:": "suite",
    "Version:": "version",
    "Date:": "date",
    "Description:": "description",
}
LAST_UPDATE_FORMAT = "%Y-%m-%d %H:%M"


def release_cache_path(lists_dir: Path, uri: str, suite: str) -> Path:
    """Path of the cached Release file for a URI and suite."""
    scheme_end = uri.find("://")
    prefix = uri[scheme_end + 3 :] if scheme_end >= 0 else uri
    prefix = prefix.replace("/", "_").rstrip("_")
    return lists_dir / f"{prefix}_dists_{suite.replace('/', '_')}_Release"


def read_release_metadata(entry: RepoEntry, lists_dir: Path) -> RepoMetadata:
    """Read what the local cache knows about `entry`.

    A missing cache is reported through `error` and `metadata_available`,
    never raised. `reachable` is left False for the network check to fill.
    """
    meta = RepoMetadata()
    if not entry.uri or not entry.suite:
        meta.error = translate("probe.cache_missing")
        return meta

    path = release_cache_path(lists_dir, entry.uri, entry.suite)
    try:
        mtime = path.stat().st_mtime
        text = path.read_text(encoding="utf-8", errors="replace")
    except OSError:
        meta.error = translate("probe.cache_missing")
        return meta

    meta.last_update = datetime.fromtimestamp(mtime).strftime(LAST_UPDATE_FORMAT)
    for line in text.splitlines():
        for prefix, field in RELEASE_FIELDS.items():
            if line.startswith(prefix):
                setattr(meta, field, line[len(prefix) :].strip())
                break
        # Release files end their header at the first checksum list
        if line.startswith(("MD5Sum:", "SHA256:", "SHA1:", "SHA512:")):
            break
    meta.metadata_available = True
    return meta
