"""
Logging setup
"""
import logging

from techmate.core.config import settings

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s | %(message)s"


def setup_logging(level: str = None) -> None:
    root = logging.getLogger()
    root.setLevel((level or settings.LOG_LEVEL).upper())

    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(LOG_FORMAT))

    # avoid duplicate handlers on reload
    root.handlers = [handler]

    # httpx logs every request line at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)


def truncate(text: str, limit: int = 100) -> str:
    """Shorten free text before it goes into a log line"""
    if text is None:
        return ""
    return text if len(text) <= limit else text[:limit] + "..."
