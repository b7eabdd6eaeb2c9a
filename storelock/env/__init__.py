from .env import Env
from .load_env import load_env

__all__ = ["Env", "load_env"]
