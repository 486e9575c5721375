"""Configuration data models for relix."""

from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field, field_validator

from relix.models.repository import SortMode


class ServerConfig(BaseModel):
    """Server configuration."""

    port: int = 8750
    host: str = "127.0.0.1"


class PathsConfig(BaseModel):
    """Locations of the APT files relix reads and writes."""

    sources_list: Path = Path("/etc/apt/sources.list")
    sources_dir: Path = Path("/etc/apt/sources.list.d")
    apt_lists_dir: Path = Path("/var/lib/apt/lists")
    backup_dir: Path = Path("/var/backups/relix")
    os_release: Path = Path("/etc/os-release")

    @field_validator("sources_list", "sources_dir", "apt_lists_dir", "backup_dir", "os_release", mode="before")
    @classmethod
    def expand_path(cls, v: str | Path) -> Path:
        """Expand user path."""
        if isinstance(v, str):
            return Path(v).expanduser()
        return v


class ViewConfig(BaseModel):
    """List view preferences."""

    sort_mode: SortMode = SortMode.FILE
    confirm_toggle: bool = False


class ProbeConfig(BaseModel):
    """Reachability probe configuration."""

    timeout_ms: int = Field(default=3000, gt=0)


class AdvancedConfig(BaseModel):
    """Advanced configuration."""

    log_level: Literal["INFO", "DEBUG", "TRACE"] = "INFO"
    undo_capacity: int = Field(default=20, gt=0)


class RelixConfig(BaseModel):
    """Application configuration."""

    server: ServerConfig = Field(default_factory=ServerConfig)
    paths: PathsConfig = Field(default_factory=PathsConfig)
    view: ViewConfig = Field(default_factory=ViewConfig)
    probe: ProbeConfig = Field(default_factory=ProbeConfig)
    advanced: AdvancedConfig = Field(default_factory=AdvancedConfig)
