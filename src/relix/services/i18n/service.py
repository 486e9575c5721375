"""Internationalization service for relix."""

import json
from pathlib import Path
from typing import Any, cast

from relix.logger import get_logger

logger = get_logger(__name__)


class I18nService:
    """
    Loads and provides localized strings from i18n.json.

    Messages are addressed by dot-path and hold one string per language:
    {
        "sources": {
            "undo": {
                "applied": { "en": "Undo applied to {file}" }
            }
        }
    }
    """

    def __init__(self, i18n_file: Path) -> None:
        """
        Initialize I18n service.

        Args:
            i18n_file: Path to i18n.json file
        """
        self.i18n_file = i18n_file
        self._data: dict[str, Any] = {}
        self._load()

    def _load(self) -> None:
        """Load i18n data from file."""
        try:
            if self.i18n_file.exists():
                with open(self.i18n_file, encoding="utf-8") as f:
                    self._data = json.load(f)
                logger.debug(f"Loaded i18n data from {self.i18n_file}")
            else:
                logger.warning(f"I18n file not found: {self.i18n_file}")
                self._data = {}
        except Exception as e:
            logger.error(f"Failed to load i18n file: {e}")
            self._data = {}

    def _lookup(self, path: str, lang: str) -> str | None:
        node: Any = self._data
        for part in path.split("."):
            if not isinstance(node, dict) or part not in node:
                return None
            node = node[part]
        if not isinstance(node, dict):
            return None
        text = node.get(lang) or node.get("en")
        return cast(str, text) if text else None

    def translate(self, key: str, /, lang: str = "en", default: str | None = None, **params: object) -> str:
        """
        Translate a dot-path message and format it with params.

        Args:
            key: Dot-path of the message (e.g., "sources.undo.applied")
            lang: Language code
            default: Returned when the key is missing; the key itself otherwise
            **params: Values substituted into the message; any name but `lang` and `default`

        Returns:
            Localized, formatted message
        """
        text = self._lookup(key, lang)
        if text is None:
            return default if default is not None else key

        try:
            return text.format(**params)
        except (KeyError, IndexError, ValueError):
            return text

    def reload(self) -> None:
        """Reload i18n data from file."""
        self._load()
