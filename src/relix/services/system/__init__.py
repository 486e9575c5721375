"""Host system services."""

from .os_info import detect_os, is_root, parse_os_release, supports_stanza_format

__all__ = ["detect_os", "is_root", "parse_os_release", "supports_stanza_format"]
