import pytest

from storelock.logging import LoggingConfig
from storelock.logging.models import Entry, LogLevel


@pytest.fixture(autouse=True)
def configure_log_level():
    config = LoggingConfig()
    config.update(log_level="debug", log_output="stderr")
    yield
    config.update(log_level="info", log_output="stderr")


@pytest.fixture
def temp_log_directory(tmp_path) -> str:
    return str(tmp_path)


@pytest.fixture
def sample_entry() -> Entry:
    return Entry(
        message="Test log message",
        level=LogLevel.INFO,
    )
