"""Logging setup for the API process and CLI scripts."""
import logging
import sys

from lesmateriaal.core.config import settings

_LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def setup_logging(level: str | None = None) -> None:
    """Configure the root logger once (idempotent)."""
    root = logging.getLogger()
    resolved = (level or settings.log_level or "INFO").upper()
    root.setLevel(resolved)

    if any(getattr(h, "_lesmateriaal", False) for h in root.handlers):
        return

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(_LOG_FORMAT))
    handler._lesmateriaal = True  # type: ignore[attr-defined]
    root.addHandler(handler)

    # APScheduler is chatty at INFO (one line per job add/remove)
    logging.getLogger("apscheduler").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)
