from __future__ import annotations
from enum import Enum
from typing import Literal

LogLevelName = Literal[
    'trace',
    'debug',
    'info',
    'warn',
    'error',
    'critical',
    'fatal'
]


class LogLevel(Enum):
    """Entry severity, declared from least to most severe."""
    TRACE = "TRACE"
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARN = "WARN"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"
    FATAL = "FATAL"

    @property
    def severity(self) -> int:
        return _SEVERITY[self]

    def at_least(self, threshold: LogLevel) -> bool:
        return self.severity >= threshold.severity

    @classmethod
    def to_level(cls, level_name: str) -> LogLevel | None:
        """Look up a level by case-insensitive name. Unknown names give None."""
        try:
            return cls(level_name.upper())

        except ValueError:
            return None


_SEVERITY = {level: rank for rank, level in enumerate(LogLevel)}
