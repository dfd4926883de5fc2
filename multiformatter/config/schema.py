"""
Settings schema for Multi Formatter.

This module defines the setting keys read by the formatter pipeline, the
scopes settings can live in, and the system defaults:
- Keys owned by Multi Formatter (multiformatter.*)
- Keys owned by the host editor and only read here (editor.*)
- Settings scopes ranked from broadest to narrowest
- Value coercion helpers shared by the resolver and conflict detector
"""

from enum import IntEnum
from typing import Any, Dict, List, Optional


# Identifier of the orchestrator itself. A chain must never contain it.
ORCHESTRATOR_ID = "multiformatter"

SECTION = "multiformatter"

KEY_LANGUAGES = "multiformatter.languages"
KEY_FORMATTERS = "multiformatter.formatters"
KEY_FORMATTER_DELAY = "multiformatter.formatterDelay"
KEY_SAVE_AFTER_EACH = "multiformatter.saveAfterEachFormatter"
KEY_CONFLICT_WARNINGS = "multiformatter.showFormattingConflictWarnings"
KEY_DEBUG_MODE = "multiformatter.debugMode"
KEY_COMMANDS = "multiformatter.commands"
KEY_LANGUAGE_FAMILIES = "multiformatter.languageFamilies"

# Host-owned keys
KEY_DEFAULT_FORMATTER = "editor.defaultFormatter"
KEY_FORMAT_ON_SAVE = "editor.formatOnSave"

DEFAULT_FORMATTER_DELAY_MS = 300
MIN_FORMATTER_DELAY_MS = 0
MAX_FORMATTER_DELAY_MS = 5000

ACTIVATION_ATTEMPTS = 5
ACTIVATION_INTERVAL_MS = 100

# Language id -> base language consulted when the language has no formatters
DEFAULT_LANGUAGE_FAMILIES = {
    "typescriptreact": "typescript",
    "javascriptreact": "javascript",
}


class SettingsScope(IntEnum):
    """Scopes a setting can be read from or written to, broadest first."""
    GLOBAL = 1
    WORKSPACE = 2
    WORKSPACE_FOLDER = 3

    @property
    def label(self) -> str:
        return {
            SettingsScope.GLOBAL: "Global",
            SettingsScope.WORKSPACE: "Workspace",
            SettingsScope.WORKSPACE_FOLDER: "Workspace Folder",
        }[self]


def default_settings() -> Dict[str, Any]:
    """System default values, the lowest precedence layer."""
    return {
        KEY_LANGUAGES: [],
        KEY_FORMATTERS: [],
        KEY_FORMATTER_DELAY: DEFAULT_FORMATTER_DELAY_MS,
        KEY_SAVE_AFTER_EACH: True,
        KEY_CONFLICT_WARNINGS: True,
        KEY_DEBUG_MODE: False,
        KEY_COMMANDS: {},
        KEY_LANGUAGE_FAMILIES: dict(DEFAULT_LANGUAGE_FAMILIES),
        KEY_FORMAT_ON_SAVE: False,
    }


def language_block_key(language_id: str) -> str:
    """Key of the language-specific block for one language, e.g. "[python]"."""
    return f"[{language_id}]"


def parse_language_block_key(key: Any) -> List[str]:
    """Return the languages a block key applies to, or [] for ordinary keys.

    "[javascript][typescript]" applies to both languages.
    """
    if not isinstance(key, str) or not (key.startswith("[") and key.endswith("]")):
        return []
    languages = []
    for part in key[1:-1].split("]["):
        part = part.strip()
        if not part or "[" in part or "]" in part:
            return []
        languages.append(part)
    return languages


def as_bool(value: Any, default: bool = False) -> bool:
    """Coerce a settings value to bool, accepting common string spellings."""
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return value != 0
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in ("1", "true", "yes", "on"):
            return True
        if lowered in ("0", "false", "no", "off", ""):
            return False
    return default


def as_string_list(value: Any) -> List[str]:
    """Coerce a settings value to a list of strings; scalars become one item."""
    if value is None:
        return []
    if isinstance(value, str):
        return [value] if value.strip() else []
    if isinstance(value, (list, tuple)):
        return list(value)
    return []


def clamp_delay(value: Any) -> int:
    """Bound a formatter delay to the supported range, falling back to the default."""
    if value is None or isinstance(value, bool):
        return DEFAULT_FORMATTER_DELAY_MS
    try:
        delay = int(value)
    except (TypeError, ValueError):
        return DEFAULT_FORMATTER_DELAY_MS
    return max(MIN_FORMATTER_DELAY_MS, min(MAX_FORMATTER_DELAY_MS, delay))


def describe_value(value: Optional[Any]) -> str:
    return "none" if value is None else str(value)
