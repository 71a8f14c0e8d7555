"""
Logging setup utilities for ComplexityTracker.
"""
import logging
import sys

# Per-file and per-suggestion chatter stays hidden unless debugging
CHATTY_LOGGERS = (
    'complexitytracker.ignore_patterns',
    'complexitytracker.ast_analysis.analyzer',
    'complexitytracker.refactoring_advisor',
    'uvicorn.access',
)

BRIEF_FORMAT = '%(message)s'
DETAILED_FORMAT = '%(asctime)s - %(short_name)s - %(levelname)s - %(message)s'
DEBUG_FORMAT = '%(asctime)s - %(threadName)s - %(short_name)s - %(levelname)s - %(message)s'


class ShortNameFormatter(logging.Formatter):
    """Formatter exposing the last component of the logger name as ``short_name``."""

    def format(self, record):
        record.short_name = record.name.rpartition('.')[2]
        return super().format(record)


def setup_logging(level: str = "WARNING") -> logging.Logger:
    """
    Route all logging to stderr at the given level.

    INFO prints bare messages since it doubles as the verbose CLI output.
    DEBUG adds the thread name so parallel file workers can be told apart.
    """
    level = level.upper()
    if level == "INFO":
        fmt = BRIEF_FORMAT
    elif level == "DEBUG":
        fmt = DEBUG_FORMAT
    else:
        fmt = DETAILED_FORMAT

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(ShortNameFormatter(fmt))

    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, level))
    root_logger.handlers = [handler]

    quiet_level = logging.NOTSET if level == "DEBUG" else logging.WARNING
    for name in CHATTY_LOGGERS:
        logging.getLogger(name).setLevel(quiet_level)
    return root_logger
