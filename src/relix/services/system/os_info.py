"""Host operating system detection.

The APT stanza (deb822 ``.sources``) format is only honoured where the
distribution's own package manager defaults to it: Ubuntu 22.04 and newer,
Debian 12 and newer. Older releases ignore ``.sources`` files entirely.
"""

import os
from pathlib import Path

from relix.logger import get_logger
from relix.models.system import OSInfo

logger = get_logger(__name__)

# Minimum version per distribution at which stanza files are parsed
STANZA_FORMAT_MIN_VERSION: dict[str, float] = {
    "ubuntu": 22.04,
    "debian": 12.0,
}


def _unquote(value: str) -> str:
    return value.strip().replace('"', "")


def parse_os_release(text: str) -> OSInfo:
    """Extract ID and VERSION_ID from os-release content.

    An unparsable version is reported as 0.0.
    """
    info = OSInfo()
    for line in text.splitlines():
        if line.startswith("ID="):
            info.id = _unquote(line[3:])
        elif line.startswith("VERSION_ID="):
            try:
                info.version = float(_unquote(line[11:]))
            except ValueError:
                pass
    return info


def detect_os(os_release: Path = Path("/etc/os-release")) -> OSInfo:
    """Read the host OS identity; unknown/0.0 when the file is unreadable."""
    try:
        text = os_release.read_text(encoding="utf-8", errors="replace")
    except OSError as e:
        logger.warning("os-release not readable", path=str(os_release), error=str(e))
        return OSInfo()
    return parse_os_release(text)


def supports_stanza_format(os_info: OSInfo) -> bool:
    """Whether stanza-format files are parsed on this OS."""
    threshold = STANZA_FORMAT_MIN_VERSION.get(os_info.id)
    return threshold is not None and os_info.version >= threshold


def is_root() -> bool:
    """Whether the process runs with an effective uid of 0."""
    return hasattr(os, "geteuid") and os.geteuid() == 0
