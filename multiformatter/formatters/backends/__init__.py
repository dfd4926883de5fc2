"""
Formatter backends.

build_registry() registers the built-in text fixers and every external
command configured under multiformatter.commands.
"""

import logging
from typing import Callable, Optional

from multiformatter.config.schema import KEY_COMMANDS
from multiformatter.config.store import SettingsStore
from multiformatter.formatters.errors import SettingsError
from multiformatter.formatters.registry import FormatterRegistry

from .builtin import BUILTIN_FORMATTERS
from .command import DEFAULT_TIMEOUT_SECONDS, CommandFormatter


logger = logging.getLogger(__name__)


def build_registry(store: SettingsStore,
                   substitute: Optional[Callable[[str], str]] = None,
                   timeout: float = DEFAULT_TIMEOUT_SECONDS) -> FormatterRegistry:
    """Registry with the built-in formatters and the configured commands.

    Args:
        store: Settings to read multiformatter.commands from
        substitute: Expands ${VAR} references in command lines
        timeout: Per-command timeout in seconds
    """
    registry = FormatterRegistry()
    for formatter_id, func in BUILTIN_FORMATTERS.items():
        registry.register(formatter_id, func)

    commands = store.get(KEY_COMMANDS) or {}
    if not isinstance(commands, dict):
        logger.warning(f"Ignoring {KEY_COMMANDS}: expected a mapping of id to command line")
        return registry

    for formatter_id, command in commands.items():
        if not isinstance(command, str) or not command.strip():
            logger.warning(f"Ignoring empty command for formatter {formatter_id}")
            continue
        try:
            command_line = substitute(command) if substitute else command
            registry.register(str(formatter_id), CommandFormatter(str(formatter_id), command_line, timeout=timeout))
        except (SettingsError, ValueError) as e:
            logger.error(f"Cannot register formatter {formatter_id}: {e}")

    logger.debug(f"Registered formatters: {', '.join(registry.ids())}")
    return registry


__all__ = [
    "BUILTIN_FORMATTERS",
    "CommandFormatter",
    "build_registry",
]
