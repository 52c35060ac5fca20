"""
Logging setup

Modules log through ``logging.getLogger(__name__)``; this only wires the root
handlers once at process start (API server or CLI).
"""

import logging
from pathlib import Path
from typing import Optional


def setup_logger(
    log_level: str = "INFO", log_file: Optional[str] = "logs/voice_journal.log"
) -> None:
    """
    Configure root logging

    Args:
        log_level: Log level name (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Log file path, parent directories are created. None logs to
            stderr only.
    """
    handlers: list[logging.Handler] = [logging.StreamHandler()]
    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        handlers.insert(0, logging.FileHandler(log_path, encoding="utf-8"))

    logging.basicConfig(
        level=getattr(logging, log_level.upper()),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=handlers,
    )
    # Per-request access lines drown out entry and audit logs
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
