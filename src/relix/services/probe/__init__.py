"""Repository reachability and metadata probing."""

from .metadata import read_release_metadata, release_cache_path
from .network import Reachability, check_reachable, parse_host_port
from .prober import HandoffCell, RepoProber

__all__ = [
    "HandoffCell",
    "Reachability",
    "RepoProber",
    "check_reachable",
    "parse_host_port",
    "read_release_metadata",
    "release_cache_path",
]
