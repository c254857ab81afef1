"""
logging.py — Application-Wide Logging Configuration

Purpose:
- Configure a standardized logging format for the entire backend.
- Ensure consistency across API requests, wizard sessions and submissions.
- Keep the Supabase client stack (httpx, postgrest, storage3) from flooding
  INFO output with one line per HTTP request.

Conventions:
- Recovered failures (asset uploads, placeholder company fallbacks,
  unreadable drafts) log at WARNING and never block a submission.
- Fatal submission failures log at ERROR with the traceback.
"""

import logging
from typing import Optional

from app.core.config import settings

# -----------------------------------------------------------------------------
# Log Format
# -----------------------------------------------------------------------------

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"

# Third-party loggers capped at WARNING unless the app itself runs at DEBUG
NOISY_LOGGERS = ("httpx", "httpcore", "hpack", "postgrest", "storage3", "gotrue")

# -----------------------------------------------------------------------------
# Root Logger Initialization
# -----------------------------------------------------------------------------

def configure_logging(level: Optional[str] = None) -> None:
    """
    Configure root logging for the backend.

    Parameters:
        level (str): "DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL".
            Defaults to settings.LOG_LEVEL.

    Should be called ONCE, in `main.py` at app startup. Uvicorn's own
    loggers are pointed at the root handler so access lines share the format.
    """
    level = (level or settings.LOG_LEVEL).upper()
    numeric = getattr(logging, level, logging.INFO)

    logging.basicConfig(level=numeric, format=LOG_FORMAT)

    for name in ("uvicorn", "uvicorn.error", "uvicorn.access"):
        uvicorn_logger = logging.getLogger(name)
        uvicorn_logger.handlers.clear()
        uvicorn_logger.propagate = True

    if numeric > logging.DEBUG:
        for name in NOISY_LOGGERS:
            logging.getLogger(name).setLevel(logging.WARNING)

    logging.getLogger(__name__).info(f"Logging initialized with level {level}")

# -----------------------------------------------------------------------------
# Logger Access Helper
# -----------------------------------------------------------------------------

def get_logger(name: str) -> logging.Logger:
    """Return the module logger: `logger = get_logger(__name__)`."""
    return logging.getLogger(name)
