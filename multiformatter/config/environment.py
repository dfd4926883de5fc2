"""
Environment variable integration for Multi Formatter.

This module centralizes the environment variable names read by the
configuration system and turns them into settings overrides.
"""

import os
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Tuple

from .schema import (
    KEY_DEBUG_MODE,
    KEY_FORMATTER_DELAY,
    KEY_SAVE_AFTER_EACH,
    as_bool,
)


_VALID_LOG_LEVELS = ('debug', 'info', 'warning', 'error', 'critical')
_BOOL_SPELLINGS = ('1', '0', 'true', 'false', 'yes', 'no', 'on', 'off')


class EnvironmentVariables:
    """Centralized environment variable definitions and utilities."""

    CONFIG_HOME = "MULTIFORMATTER_CONFIG_HOME"
    LOG_LEVEL = "MULTIFORMATTER_LOG_LEVEL"
    LOG_FILE = "MULTIFORMATTER_LOG_FILE"

    # Settings overrides
    FORMATTER_DELAY = "MULTIFORMATTER_FORMATTER_DELAY"
    SAVE_AFTER_EACH = "MULTIFORMATTER_SAVE_AFTER_EACH"
    DEBUG = "MULTIFORMATTER_DEBUG"

    @classmethod
    def config_home(cls, environ: Optional[Mapping[str, str]] = None) -> Path:
        """Directory of the global settings file."""
        environ = os.environ if environ is None else environ
        value = environ.get(cls.CONFIG_HOME)
        if value:
            return Path(value).expanduser()
        return Path.home() / ".multiformatter"

    @classmethod
    def settings_overrides(cls, environ: Optional[Mapping[str, str]] = None) -> Dict[str, Any]:
        """Settings overrides taken from the environment.

        Values that cannot be parsed are skipped; validate_environment_setup
        reports them.
        """
        environ = os.environ if environ is None else environ
        overrides: Dict[str, Any] = {}

        delay = environ.get(cls.FORMATTER_DELAY)
        if delay:
            try:
                overrides[KEY_FORMATTER_DELAY] = int(delay)
            except ValueError:
                pass

        save_after_each = environ.get(cls.SAVE_AFTER_EACH)
        if save_after_each and save_after_each.strip().lower() in _BOOL_SPELLINGS:
            overrides[KEY_SAVE_AFTER_EACH] = as_bool(save_after_each)

        debug = environ.get(cls.DEBUG)
        if debug and debug.strip().lower() in _BOOL_SPELLINGS:
            overrides[KEY_DEBUG_MODE] = as_bool(debug)

        return overrides

    @classmethod
    def validate_environment_setup(
        cls, environ: Optional[Mapping[str, str]] = None
    ) -> Tuple[List[str], List[str]]:
        """
        Validate current environment variable setup.

        Returns:
            Tuple of (warnings, errors)
        """
        environ = os.environ if environ is None else environ
        warnings = []
        errors = []

        log_level = environ.get(cls.LOG_LEVEL)
        if log_level and log_level.lower() not in _VALID_LOG_LEVELS:
            errors.append(f"Invalid {cls.LOG_LEVEL}: '{log_level}'. "
                          f"Valid options: {', '.join(_VALID_LOG_LEVELS)}")

        delay = environ.get(cls.FORMATTER_DELAY)
        if delay:
            try:
                int(delay)
            except ValueError:
                errors.append(f"Invalid {cls.FORMATTER_DELAY}: '{delay}'. Must be an integer")

        for name in (cls.SAVE_AFTER_EACH, cls.DEBUG):
            value = environ.get(name)
            if value and value.strip().lower() not in _BOOL_SPELLINGS:
                errors.append(f"Invalid {name}: '{value}'. Use true or false")

        home = environ.get(cls.CONFIG_HOME)
        if home and Path(home).expanduser().is_file():
            warnings.append(f"{cls.CONFIG_HOME} points to a file, expected a directory")

        return warnings, errors

