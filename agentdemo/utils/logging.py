"""Logging setup for the agent chat demos."""

import logging
from typing import Optional, Dict
from pathlib import Path

# Record attributes every format string may reference
CONTEXT_FIELDS = ("demo", "chat_id")
CONTEXT_PLACEHOLDER = "-"

DEFAULT_FORMAT = (
    "%(asctime)s - %(name)s - %(levelname)s - "
    "[%(demo)s/%(chat_id)s] %(message)s"
)


class ContextFilter(logging.Filter):
    """
    Stamp the current chat context onto every record passing a handler.

    Fields in CONTEXT_FIELDS are always present on the record (as "-" when
    unset), so format strings can reference them unconditionally.
    """

    def __init__(self):
        super().__init__()
        self.context: Dict[str, str] = {}

    def filter(self, record: logging.LogRecord) -> bool:
        for key in CONTEXT_FIELDS:
            setattr(record, key, self.context.get(key, CONTEXT_PLACEHOLDER))
        for key, value in self.context.items():
            setattr(record, key, value)
        return True


_context_filter = ContextFilter()


def setup_logging(
    level: str = "INFO",
    log_format: str = DEFAULT_FORMAT,
    log_file: Optional[str] = None
) -> logging.Logger:
    """
    Configure the root logger with a console handler and optional file output.

    Chat messages are printed to stdout; log records go to stderr (and the
    log file when given), each tagged with the active demo and chat id.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_format: Format string; may use %(demo)s and %(chat_id)s
        log_file: Optional path to log file

    Returns:
        Configured root logger
    """
    numeric_level = getattr(logging, level.upper(), logging.INFO)

    root_logger = logging.getLogger()
    root_logger.setLevel(numeric_level)
    for handler in list(root_logger.handlers):
        if getattr(handler, "_agentdemo", False):
            root_logger.removeHandler(handler)
            handler.close()

    handlers = [logging.StreamHandler()]
    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_path))

    formatter = logging.Formatter(log_format)
    for handler in handlers:
        handler._agentdemo = True
        handler.setLevel(numeric_level)
        handler.setFormatter(formatter)
        handler.addFilter(_context_filter)
        root_logger.addHandler(handler)

    # botocore is chatty at DEBUG
    logging.getLogger("botocore").setLevel(max(numeric_level, logging.INFO))

    return root_logger


def set_context(**kwargs: str):
    """
    Replace the chat context attached to subsequent log records.

    Example:
        set_context(demo="copy-review", chat_id="3f2a")
        logger.info("Starting chat")  # ... [copy-review/3f2a] Starting chat
    """
    _context_filter.context = {key: str(value) for key, value in kwargs.items()}


def clear_context():
    """Reset every context field to the placeholder."""
    _context_filter.context = {}
