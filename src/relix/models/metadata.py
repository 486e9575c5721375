"""Reachability probe result model."""

from pydantic import BaseModel


class RepoMetadata(BaseModel):
    """Metadata for one repository, produced once per probe request.

    Values come from the package manager's cached Release file. `reachable`
    is filled in by the TCP check independently of the cache read.
    """

    origin: str = ""
    codename: str = ""
    suite: str = ""
    version: str = ""
    date: str = ""
    description: str = ""
    last_update: str = ""
    reachable: bool = False
    metadata_available: bool = False
    error: str = ""
