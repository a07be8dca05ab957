import pytest

from courier.config import SettingsManager


@pytest.fixture(scope="session", autouse=True)
def setup_test_logging():
    """Configure logging for tests."""
    from loguru import logger
    from courier.logging_setup import configure_logging

    configure_logging("DEBUG")

    yield

    # Cleanup
    logger.remove()


@pytest.fixture(autouse=True)
def reset_singleton():
    """Reset singleton before and after each test."""
    SettingsManager.reset_instance()
    yield
    SettingsManager.reset_instance()


@pytest.fixture
def settings():
    """Settings manager isolated from os.environ, with DEBUG logging enabled."""
    return SettingsManager(properties={}, overrides={}, debug_enabled=lambda: True)


@pytest.fixture
def recorder():
    """Listener recording every changed key."""
    return ChangeRecorder()


class ChangeRecorder:
    """Listener object collecting changed keys."""

    def __init__(self):
        self.keys = []

    def config_changed(self, key: str) -> None:
        self.keys.append(key)
