"""
Logging setup for the API process.

Everything is written through the root logger: application modules use
``logging.getLogger(__name__)`` and the uvicorn loggers are made to
propagate to the root, so server and request logs share one format and
one set of handlers.  ``LOG_FILE`` adds a file next to the console.
"""

import logging
from pathlib import Path
from typing import List, Optional

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Loggers uvicorn configures with handlers of its own.
SERVER_LOGGERS = ("uvicorn", "uvicorn.error", "uvicorn.access")

_handlers: List[logging.Handler] = []


def _build_handlers(logfile: Optional[str]) -> List[logging.Handler]:
    formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT)
    handlers: List[logging.Handler] = [logging.StreamHandler()]
    if logfile:
        path = Path(logfile).resolve()
        path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(path, encoding="utf-8"))
    for handler in handlers:
        handler.setFormatter(formatter)
    return handlers


def setup_logging(level: str = "INFO", logfile: Optional[str] = None) -> None:
    """Attach the bank's handlers to the root logger.

    Handlers are installed on the first call only; later calls (one per
    ``create_app``) just apply ``level``.  Unknown level names fall back
    to ``INFO``.
    """
    root = logging.getLogger()
    root.setLevel(getattr(logging, level.upper(), logging.INFO))

    if not _handlers:
        _handlers.extend(_build_handlers(logfile))
        for handler in _handlers:
            root.addHandler(handler)

    for name in SERVER_LOGGERS:
        server_logger = logging.getLogger(name)
        server_logger.handlers.clear()
        server_logger.propagate = True
