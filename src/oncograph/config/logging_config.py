"""Logging configuration for OncoGraph.

Levels used across the app:
- Knowledge graph loading (INFO for counts, ERROR for malformed data)
- Subgraph extraction (INFO for results, DEBUG for cap decisions)
- Claude requests (INFO for token usage, ERROR for failures)

Streamlit re-executes app.py on every interaction, so setup_logging may run
many times per process. Handlers it installed earlier are replaced, never
duplicated.
"""

import logging
import sys
from pathlib import Path
from typing import Optional

DEFAULT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

# Attribute marking handlers owned by setup_logging
_HANDLER_TAG = "_oncograph_handler"

QUIET_LOGGERS = ("urllib3", "httpx", "httpcore", "anthropic", "matplotlib")


def _tagged(handler: logging.Handler) -> logging.Handler:
    setattr(handler, _HANDLER_TAG, True)
    return handler


def setup_logging(
    level: str = "INFO",
    log_file: Optional[Path] = None,
    format_string: Optional[str] = None,
) -> None:
    """Configure application logging.

    Args:
        level: Logging level name (DEBUG, INFO, WARNING, ERROR); unknown names fall back to INFO
        log_file: Optional file path for log output
        format_string: Optional custom format string

    Example:
        >>> setup_logging(level="DEBUG", log_file=Path("logs/oncograph.log"))
    """
    formatter = logging.Formatter(format_string or DEFAULT_FORMAT)
    root = logging.getLogger()
    root.setLevel(getattr(logging, level.upper(), logging.INFO))

    for handler in root.handlers[:]:
        if getattr(handler, _HANDLER_TAG, False):
            root.removeHandler(handler)
            handler.close()

    stream_handler = _tagged(logging.StreamHandler(sys.stdout))
    stream_handler.setFormatter(formatter)
    root.addHandler(stream_handler)

    if log_file:
        log_file = Path(log_file)
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = _tagged(logging.FileHandler(log_file, encoding="utf-8"))
        file_handler.setFormatter(formatter)
        root.addHandler(file_handler)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    logging.getLogger(__name__).debug("Logging configured at %s", level.upper())
