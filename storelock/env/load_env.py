import os
from typing import Any, Callable, Dict, Iterable, Tuple, TypeVar

from dotenv import dotenv_values

from .env import Env

T = TypeVar("T", bound=Env)


def _typed_values(
    pairs: Iterable[Tuple[str, str | None]],
    types_map: Dict[str, Callable[[str], Any]],
) -> Dict[str, Any]:
    return {
        name: types_map[name](raw)
        for name, raw in pairs
        if name in types_map and raw
    }


def load_env(
    default: type[T],
    env_file: str | None = ".env",
    override: T | None = None,
) -> T:
    """
    Build ``default`` from, in increasing precedence, the process
    environment, ``env_file`` (if it exists) and the fields explicitly set
    on ``override``. Unset variables fall back to the model defaults.
    """
    types_map = default.types_map()

    values = _typed_values(
        ((name, os.getenv(name)) for name in types_map),
        types_map,
    )

    if env_file and os.path.exists(env_file):
        values.update(
            _typed_values(dotenv_values(dotenv_path=env_file).items(), types_map)
        )

    model = default
    if override is not None:
        values.update(override.model_dump(exclude_unset=True, exclude_none=True))
        model = type(override)

    return model(**values)
