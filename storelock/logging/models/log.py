from __future__ import annotations

import datetime
import threading
from types import FrameType

import msgspec

from .entry import Entry


def _utc_now() -> str:
    return datetime.datetime.now(datetime.UTC).isoformat()


class Log(msgspec.Struct, kw_only=True):
    """
    An entry plus where and when it was logged. This is the document written
    to JSON logfiles, one per line.
    """
    entry: Entry
    logger_name: str
    filename: str
    function_name: str
    line_number: int
    thread_id: int = msgspec.field(default_factory=threading.get_native_id)
    timestamp: str = msgspec.field(default_factory=_utc_now)

    @classmethod
    def from_frame(
        cls,
        entry: Entry,
        logger_name: str,
        frame: FrameType,
    ) -> Log:
        return cls(
            entry=entry,
            logger_name=logger_name,
            filename=frame.f_code.co_filename,
            function_name=frame.f_code.co_name,
            line_number=frame.f_lineno,
        )

    def template_context(self) -> dict[str, str | int]:
        return {
            "logger_name": self.logger_name,
            "filename": self.filename,
            "function_name": self.function_name,
            "line_number": self.line_number,
            "thread_id": self.thread_id,
            "timestamp": self.timestamp,
        }
