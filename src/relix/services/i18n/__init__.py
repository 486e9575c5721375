"""Internationalization services."""

from pathlib import Path

from .service import I18nService

# Bundled messages: src/relix/resources/i18n.json
I18N_FILE = Path(__file__).resolve().parents[2] / "resources" / "i18n.json"

_instance: I18nService | None = None


def get_i18n_service() -> I18nService:
    """Get the global I18nService instance."""
    global _instance
    if _instance is None:
        _instance = I18nService(I18N_FILE)
    return _instance


def translate(key: str, /, lang: str = "en", default: str | None = None, **params: object) -> str:
    """Translate a message through the global I18nService."""
    return get_i18n_service().translate(key, lang=lang, default=default, **params)


__all__ = ["I18N_FILE", "I18nService", "get_i18n_service", "translate"]
