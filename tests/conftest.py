"""
Pytest configuration and fixtures for test isolation.
"""
import logging
import os

import pytest

from multiformatter.config.schema import default_settings
from multiformatter.config.store import SettingsStore
from multiformatter.formatters.guard import formatting_guard
from multiformatter.formatters.registry import FormatterRegistry
from multiformatter.host.document import TextDocument
from multiformatter.utils.logging_config import logging_config


@pytest.fixture(autouse=True)
def isolate_tests(tmp_path, monkeypatch):
    """
    Automatically isolate each test by:
    1. Pointing the global settings directory at a temporary directory
    2. Removing settings overrides inherited from the environment
    3. Resetting the process-wide recursion guard
    """
    config_home = tmp_path / "config_home"
    monkeypatch.setenv("MULTIFORMATTER_CONFIG_HOME", str(config_home))
    for name in ("MULTIFORMATTER_FORMATTER_DELAY", "MULTIFORMATTER_SAVE_AFTER_EACH",
                 "MULTIFORMATTER_DEBUG", "MULTIFORMATTER_LOG_FILE"):
        monkeypatch.delenv(name, raising=False)

    formatting_guard.reset()
    yield
    formatting_guard.reset()


@pytest.fixture(autouse=True)
def reset_logging():
    """Restore the root log level changed by debug mode toggles."""
    root = logging.getLogger()
    level = root.level
    configured_level = logging_config.level
    yield
    logging_config._level = configured_level
    root.setLevel(level)


@pytest.fixture(autouse=True, scope="function")
def reset_environment():
    """Reset environment variables between tests."""
    original_env = os.environ.copy()
    yield
    # Restore original environment
    os.environ.clear()
    os.environ.update(original_env)


@pytest.fixture
def no_sleep():
    """Sleep function that records requested delays instead of waiting."""
    calls = []

    def sleep(seconds):
        calls.append(seconds)

    sleep.calls = calls
    return sleep


@pytest.fixture
def make_store():
    """Build an in-memory settings store with system defaults."""
    def _make(global_values=None, workspace_values=None, folder_values=None, overrides=None):
        return SettingsStore.from_dicts(
            global_values=global_values,
            workspace_values=workspace_values,
            folder_values=folder_values,
            defaults=default_settings(),
            overrides=overrides,
        )
    return _make


@pytest.fixture
def registry():
    """Registry with a few deterministic formatters."""
    registry = FormatterRegistry()
    registry.register("upper", lambda text: text.upper())
    registry.register("strip", lambda text: text.strip() + "\n")
    registry.register("exclaim", lambda text: text.rstrip("\n") + "!\n")
    registry.register("identity", lambda text: text)
    return registry


@pytest.fixture
def dirty_document():
    """Python document with unsaved changes."""
    return TextDocument("  hello world  ", language_id="python",
                        uri="file:///work/main.py", persisted_text="")
