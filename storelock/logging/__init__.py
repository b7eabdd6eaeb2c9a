"""
Async structured logging for storelock.

Entries are msgspec structs. A Logger keeps one LoggerContext per name, and
each context owns a LoggerStream that writes templated lines to stdout/stderr
or JSON lines to a logfile.
"""

from .config import LoggingConfig, StreamType
from .models import Entry, Log, LogLevel, LogLevelName
from .streams import Logger, LoggerContext, LoggerStream

__all__ = [
    "Entry",
    "Log",
    "LogLevel",
    "LogLevelName",
    "Logger",
    "LoggerContext",
    "LoggerStream",
    "LoggingConfig",
    "StreamType",
]
