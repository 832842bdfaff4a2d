"""structlog setup for the dovetail CLI and for applications embedding it.

Library modules log through ``get_logger(...)``: structlog bound loggers
wrapping stdlib loggers under the ``dovetail`` namespace, which carries a
NullHandler. An application that configures nothing sees no output. One
that configures stdlib logging gets dovetail events through its own
handlers. configure_logging() installs a stderr handler with a console or
JSON renderer; the CLI calls it once at startup.
"""

import logging
import sys

import structlog

LOGGER_NAMESPACE = "dovetail"

logging.getLogger(LOGGER_NAMESPACE).addHandler(logging.NullHandler())

_installed_handler: logging.Handler | None = None


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Structlog logger writing to the stdlib logger ``name``."""
    return structlog.wrap_logger(
        logging.getLogger(name), wrapper_class=structlog.stdlib.BoundLogger
    )


def configure_logging(verbose: bool = False, use_json: bool = False) -> None:
    """Send dovetail events to stderr.

    Args:
        verbose: Emit debug events (resolved handlers, validation failures).
        use_json: One JSON object per line instead of the colored console renderer.
    """
    global _installed_handler

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=False,
    )

    if use_json:
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            processors=[structlog.stdlib.ProcessorFormatter.remove_processors_meta, renderer]
        )
    )

    logger = logging.getLogger(LOGGER_NAMESPACE)
    if _installed_handler is not None:
        logger.removeHandler(_installed_handler)
    logger.addHandler(handler)
    logger.setLevel(logging.DEBUG if verbose else logging.WARNING)
    logger.propagate = False
    _installed_handler = handler


def reset_logging() -> None:
    """Undo configure_logging(): remove the stderr handler and restore structlog defaults."""
    global _installed_handler

    logger = logging.getLogger(LOGGER_NAMESPACE)
    if _installed_handler is not None:
        logger.removeHandler(_installed_handler)
        _installed_handler = None
    logger.setLevel(logging.NOTSET)
    logger.propagate = True
    structlog.reset_defaults()
