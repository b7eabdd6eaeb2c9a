import contextvars
from typing import Literal

from storelock.logging.models import LogLevel, LogLevelName
from .stream_type import StreamType


LogOutput = Literal['stdout', 'stderr']

_global_log_level = contextvars.ContextVar("_global_log_level", default=LogLevel.INFO)
_global_log_output_type = contextvars.ContextVar("_global_log_output_type", default=StreamType.STDERR)
_global_logging_directory = contextvars.ContextVar("_global_logging_directory", default=None)


class LoggingConfig:
    """
    Process-wide logging settings held in context variables, so a task can
    change them for itself and anything it spawns afterwards.
    """

    def __init__(self) -> None:
        self._log_level: contextvars.ContextVar[LogLevel] = _global_log_level
        self._log_output_type: contextvars.ContextVar[StreamType] = _global_log_output_type
        self._log_directory: contextvars.ContextVar[str | None] = _global_logging_directory

    def update(
        self,
        log_directory: str | None = None,
        log_level: LogLevelName | None = None,
        log_output: LogOutput | None = None,
    ):
        if log_level:
            level = LogLevel.to_level(log_level)
            if level is None:
                raise ValueError(f"Err. - unknown log level {log_level}")

            self._log_level.set(level)

        if log_output:
            self._log_output_type.set(StreamType.from_name(log_output))

        if log_directory:
            self._log_directory.set(log_directory)

    def enabled(self, log_level: LogLevel) -> bool:
        return log_level.at_least(self._log_level.get())

    @property
    def level(self):
        return self._log_level.get()

    @property
    def output(self):
        return self._log_output_type.get()

    @property
    def directory(self):
        return self._log_directory.get()
