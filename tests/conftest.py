import os
import tempfile
from pathlib import Path

# Keep the user's real ~/.config/relix/config.yaml out of the tests
os.environ.setdefault("RELIX_CONFIG_PATH", str(Path(tempfile.gettempdir()) / "relix-tests-missing" / "config.yaml"))

import pytest  # noqa: E402

from relix.models.config import PathsConfig, RelixConfig  # noqa: E402
from relix.models.system import OSInfo  # noqa: E402
from relix.services.sources import SourcesManager  # noqa: E402


@pytest.fixture
def apt_config(tmp_path: Path) -> RelixConfig:
    """Config whose APT paths all live under tmp_path."""
    apt_dir = tmp_path / "etc" / "apt"
    (apt_dir / "sources.list.d").mkdir(parents=True)
    return RelixConfig(
        paths=PathsConfig(
            sources_list=apt_dir / "sources.list",
            sources_dir=apt_dir / "sources.list.d",
            apt_lists_dir=tmp_path / "var" / "lib" / "apt" / "lists",
            backup_dir=tmp_path / "backups",
            os_release=tmp_path / "os-release",
        )
    )


@pytest.fixture
def make_manager(apt_config: RelixConfig):
    """Build a writable SourcesManager for a given OS and load it."""

    def _make(os_id: str = "debian", version: float = 12.0, read_only: bool = False) -> SourcesManager:
        manager = SourcesManager(apt_config, OSInfo(id=os_id, version=version), read_only=read_only)
        manager.load_all()
        return manager

    return _make
