from .logging_config import LoggingConfig, LogOutput
from .stream_type import StreamType

__all__ = [
    "LoggingConfig",
    "LogOutput",
    "StreamType",
]
