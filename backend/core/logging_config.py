"""
core/logging_config.py
──────────────────────
Process-wide logging setup.

Modules never configure handlers themselves; they only do
``logger = logging.getLogger(__name__)``.  :func:`app.main.create_app` calls
:func:`configure_logging` when it builds the application.
"""

import logging

LOG_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"

# Chatty third-party loggers that only matter when debugging transport issues.
_NOISY_LOGGERS = ("httpx", "httpcore", "hpack")


def configure_logging(level: str = "INFO") -> None:
    """
    Configure the root logger with a single console handler.

    Args:
        level: Log level name (``"DEBUG"``, ``"INFO"``…).  Unknown names
               fall back to ``INFO``.
    """
    log_level = getattr(logging, level.upper(), logging.INFO)

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)

    if not any(getattr(h, "_ivan_prints", False) for h in root_logger.handlers):
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        handler._ivan_prints = True  # type: ignore[attr-defined]
        root_logger.addHandler(handler)

    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(log_level, logging.WARNING))

    logging.getLogger(__name__).debug("Logging configured at %s", logging.getLevelName(log_level))
