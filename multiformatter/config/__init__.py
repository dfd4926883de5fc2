"""Settings keys, layered settings store and configuration loading."""

from .schema import SettingsScope, ORCHESTRATOR_ID
from .store import SettingsStore, SettingsLayer, SettingsChangeEvent
from .manager import ConfigurationManager

__all__ = [
    "SettingsScope",
    "ORCHESTRATOR_ID",
    "SettingsStore",
    "SettingsLayer",
    "SettingsChangeEvent",
    "ConfigurationManager",
]
