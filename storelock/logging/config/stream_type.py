import sys
from enum import Enum
from typing import TextIO


class StreamType(Enum):
    STDOUT = "stdout"
    STDERR = "stderr"

    @classmethod
    def from_name(cls, name: str) -> "StreamType":
        return cls.STDOUT if name == "stdout" else cls.STDERR

    def resolve(self) -> TextIO:
        # Looked up per write so redirected or captured streams are honored.
        return sys.stdout if self == StreamType.STDOUT else sys.stderr
