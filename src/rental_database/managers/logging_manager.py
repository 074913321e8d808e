"""
# Logging Manager

Thin layer over the standard `logging` module that gives every component a named logger with an
optional bracketed prefix (`[DATABASE]`, `[INDEXES]`, ...), so log lines from concurrent
initialization stages stay easy to tell apart.

```python
from rental_database.managers.logging_manager import get_logger

logger = get_logger(prefix="[LANGUAGE_SYNC]")
logger.info("Initializing %s...", "locations")
# 2026-01-01 12:00:00,000 - RentalDatabase - INFO - [LANGUAGE_SYNC] Initializing locations...
```

The root handler is installed once, on the first `get_logger()` call. Its level comes from
`settings.LOG_LEVEL`.
"""

import logging
import sys
from typing import Any, MutableMapping, Tuple

DEFAULT_LOGGER_NAME = "RentalDatabase"
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

_configured = False


class PrefixedLoggerAdapter(logging.LoggerAdapter):
    """Logger adapter that prepends a fixed prefix to every message."""

    def __init__(self, logger: logging.Logger, prefix: str = ""):
        super().__init__(logger, {})
        self.prefix = prefix

    def process(self, msg: Any, kwargs: MutableMapping[str, Any]) -> Tuple[Any, MutableMapping[str, Any]]:
        if self.prefix:
            return f"{self.prefix} {msg}", kwargs
        return msg, kwargs


def _configure_root(name: str) -> None:
    global _configured
    if _configured:
        return

    # Imported lazily: config must stay importable without logging side effects
    from rental_database.config import settings

    logger = logging.getLogger(name)
    if not logger.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(handler)
    logger.setLevel(getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO))
    _configured = True


def get_logger(name: str = DEFAULT_LOGGER_NAME, prefix: str = "") -> PrefixedLoggerAdapter:
    """
    Return a logger for `name`, optionally prefixing every message with `prefix`.

    Args:
        name: Logger name. Child names (`RentalDatabase.cli`) inherit the root handler.
        prefix: Text prepended to each message, conventionally `[COMPONENT]`.

    Returns:
        PrefixedLoggerAdapter: Adapter exposing the usual `debug/info/warning/error` API.
    """
    _configure_root(DEFAULT_LOGGER_NAME)
    return PrefixedLoggerAdapter(logging.getLogger(name), prefix)
