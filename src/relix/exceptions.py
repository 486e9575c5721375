"""Centralized exception hierarchy for relix.

Supports i18n keys for user-facing messages and English for internal logging.
"""


class AppBaseError(Exception):
    """Base exception for all application-specific errors."""

    def __init__(
        self,
        i18n_key: str,
        status_code: int = 500,
        retriable: bool = False,
        **params: object,
    ) -> None:
        """
        Initialize the error.

        Args:
            i18n_key: Dot-path in i18n.json (e.g., 'sources.toggle.line_not_found')
            status_code: Recommended HTTP status code
            retriable: Whether the operation can be retried
            **params: Parameters for string formatting in translations
        """
        super().__init__(i18n_key)
        self.i18n_key = i18n_key
        self.status_code = status_code
        self.retriable = retriable
        self.params = params

    def __str__(self) -> str:
        """Returns the English version of the error message for logging."""
        try:
            # Lazy import to avoid circular dependencies
            from relix.services.i18n import get_i18n_service

            i18n = get_i18n_service()

            translated = i18n.translate(self.i18n_key, lang="en", **self.params)
            return str(translated) if translated else self.i18n_key
        except Exception:
            # Fallback if i18n service is not available or fails
            params_str = ", ".join(f"{k}={v}" for k, v in self.params.items())
            return f"[{self.i18n_key}] {params_str} (retriable: {self.retriable})"


class ResourceNotFoundError(AppBaseError):
    """Raised when a requested resource (entry, import file, etc.) is not found."""

    def __init__(self, i18n_key: str, **params: object) -> None:
        super().__init__(i18n_key, status_code=404, **params)


class ValidationError(AppBaseError):
    """Raised when input validation fails."""

    def __init__(self, i18n_key: str, **params: object) -> None:
        super().__init__(i18n_key, status_code=400, **params)


class StaleTargetError(AppBaseError):
    """Raised when the line or stanza an entry points at is gone from its file.

    The file was rewritten by someone else after the entry was loaded. Nothing
    has been written when this is raised.
    """

    def __init__(self, i18n_key: str, **params: object) -> None:
        super().__init__(i18n_key, status_code=409, retriable=True, **params)


class WriteFailedError(AppBaseError):
    """Raised when the temporary file cannot be written or renamed onto the target.

    The target file is untouched when this is raised.
    """

    def __init__(self, i18n_key: str, **params: object) -> None:
        super().__init__(i18n_key, status_code=500, **params)


class ReadOnlyError(AppBaseError):
    """Raised when a mutation is attempted without root privileges."""

    def __init__(self, i18n_key: str = "sources.read_only", **params: object) -> None:
        super().__init__(i18n_key, status_code=403, **params)


class UndoEmptyError(AppBaseError):
    """Raised when undo is requested with nothing on the undo stack."""

    def __init__(self, i18n_key: str = "sources.undo.empty", **params: object) -> None:
        super().__init__(i18n_key, status_code=409, **params)
