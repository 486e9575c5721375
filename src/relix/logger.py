import sys

import structlog

# structlog has no TRACE level of its own; 5 sits below DEBUG
LEVELS = {
    "INFO": 20,
    "DEBUG": 10,
    "TRACE": 5,
}

_configured_level: int | None = None


def configure_logging(level_name: str) -> None:
    """(Re)configure structlog for the given level name.

    Output goes to stderr as JSON lines so it never mixes with CLI output.
    """
    global _configured_level
    level = LEVELS.get(level_name.upper(), 20)
    structlog.configure(
        processors=[
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=False,  # level can change on config reload
    )
    _configured_level = level


def get_logger(name: str) -> structlog.BoundLogger:
    """Get a structured logger bound to `name`.

    The first call configures structlog from ``advanced.log_level``.

    Args:
        name: Logger name, usually ``__name__``

    Returns:
        Configured logger instance
    """
    if _configured_level is None:
        from relix.config import get_config

        configure_logging(get_config().advanced.log_level)

    # Lazy proxy, resolved against the current configuration on every call
    return structlog.get_logger(name, logger_name=name)
