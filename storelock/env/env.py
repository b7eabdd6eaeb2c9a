from typing import Callable, Dict, Literal, Union

from pydantic import BaseModel, StrictInt, StrictStr

PrimaryType = Union[str, int, float, bytes, bool]


class Env(BaseModel):
    STORELOCK_REACQUISITION_TIME: StrictInt = 100
    STORELOCK_TIMEOUT_TIME: StrictInt = 1000
    STORELOCK_LOG_LEVEL: StrictStr = "info"
    STORELOCK_LOG_OUTPUT: Literal["stdout", "stderr"] = "stderr"
    STORELOCK_LOGS_DIRECTORY: StrictStr | None = None

    @classmethod
    def types_map(cls) -> Dict[str, Callable[[str], PrimaryType]]:
        return {
            "STORELOCK_REACQUISITION_TIME": int,
            "STORELOCK_TIMEOUT_TIME": int,
            "STORELOCK_LOG_LEVEL": str,
            "STORELOCK_LOG_OUTPUT": str,
            "STORELOCK_LOGS_DIRECTORY": str,
        }
