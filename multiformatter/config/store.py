"""
Layered settings store.

Holds one settings layer per scope (global, workspace, workspace folder)
plus a defaults layer and an overrides layer, and answers reads the way an
editor does:

    overrides > language block (narrow -> broad) > general value (narrow -> broad) > defaults

Settings files may spell keys flat ("editor.defaultFormatter: x") or nested
("editor: {defaultFormatter: x}"); writes keep whichever shape the file
already uses. Language blocks are keyed "[python]" or "[javascript][typescript]".

Writes go to exactly one scope, optionally to that scope's block for one
language, are persisted to the layer's YAML file, and are announced to
change listeners.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, List, Optional, Set

from multiformatter.config.schema import (
    SettingsScope,
    language_block_key,
    parse_language_block_key,
)
from multiformatter.config.yaml_parser import ConfigurationYAMLParser
from multiformatter.formatters.errors import SettingsError


logger = logging.getLogger(__name__)

_MISSING = object()


def lookup(mapping: Dict[str, Any], key: str) -> Any:
    """Find a "section.name" key stored flat or nested; _MISSING when absent."""
    if key in mapping:
        return mapping[key]
    section, _, name = key.partition(".")
    nested = mapping.get(section)
    if name and isinstance(nested, dict) and name in nested:
        return nested[name]
    return _MISSING


def assign(mapping: Dict[str, Any], key: str, value: Any) -> None:
    section, _, name = key.partition(".")
    nested = mapping.get(section)
    if key not in mapping and name and isinstance(nested, dict):
        nested[name] = value
    else:
        mapping[key] = value


def remove(mapping: Dict[str, Any], key: str) -> bool:
    if key in mapping:
        del mapping[key]
        return True
    section, _, name = key.partition(".")
    nested = mapping.get(section)
    if name and isinstance(nested, dict) and name in nested:
        del nested[name]
        if not nested:
            del mapping[section]
        return True
    return False


@dataclass
class SettingsLayer:
    """Raw settings of one scope, as loaded from its YAML file.

    Attributes:
        scope: Scope this layer represents
        values: Raw mapping loaded from the file (flat or nested keys)
        path: Settings file backing this layer; None keeps it in memory
        existed: Whether the file existed when the layer was loaded
    """
    scope: SettingsScope
    values: Dict[str, Any] = field(default_factory=dict)
    path: Optional[Path] = None
    existed: bool = False

    def general(self, key: str) -> Any:
        return lookup(self.values, key)

    def language_value(self, key: str, language_id: str) -> Any:
        """Value from the blocks that apply to language_id, exact block first."""
        exact = self.values.get(language_block_key(language_id))
        if isinstance(exact, dict):
            value = lookup(exact, key)
            if value is not _MISSING:
                return value
        for block_key, block in self.values.items():
            if block_key == language_block_key(language_id) or not isinstance(block, dict):
                continue
            if language_id in parse_language_block_key(block_key):
                value = lookup(block, key)
                if value is not _MISSING:
                    return value
        return _MISSING

    def languages(self) -> Set[str]:
        found: Set[str] = set()
        for block_key in self.values:
            found.update(parse_language_block_key(block_key))
        return found


@dataclass(frozen=True)
class SettingsChangeEvent:
    """One settings write, as seen by change listeners."""
    key: str
    scope: SettingsScope
    language_id: Optional[str] = None

    def affects(self, *keys: str) -> bool:
        return self.key in keys


SettingsListener = Callable[[SettingsChangeEvent], None]


class SettingsStore:
    """Layered, writable settings with change notification."""

    def __init__(
        self,
        layers: Optional[Iterable[SettingsLayer]] = None,
        defaults: Optional[Dict[str, Any]] = None,
        overrides: Optional[Dict[str, Any]] = None,
    ):
        self._layers: Dict[SettingsScope, SettingsLayer] = {}
        for layer in layers or []:
            self._layers[layer.scope] = layer
        if SettingsScope.GLOBAL not in self._layers:
            self._layers[SettingsScope.GLOBAL] = SettingsLayer(SettingsScope.GLOBAL)
        self._defaults = dict(defaults or {})
        self._overrides = dict(overrides or {})
        self._listeners: List[SettingsListener] = []
        self._parser = ConfigurationYAMLParser()

    @classmethod
    def from_dicts(
        cls,
        global_values: Optional[Dict[str, Any]] = None,
        workspace_values: Optional[Dict[str, Any]] = None,
        folder_values: Optional[Dict[str, Any]] = None,
        defaults: Optional[Dict[str, Any]] = None,
        overrides: Optional[Dict[str, Any]] = None,
    ) -> "SettingsStore":
        """Build an in-memory store; a None scope is unavailable (except global)."""
        layers = [SettingsLayer(SettingsScope.GLOBAL, dict(global_values or {}))]
        if workspace_values is not None:
            layers.append(SettingsLayer(SettingsScope.WORKSPACE, dict(workspace_values)))
        if folder_values is not None:
            layers.append(SettingsLayer(SettingsScope.WORKSPACE_FOLDER, dict(folder_values)))
        return cls(layers, defaults=defaults, overrides=overrides)

    # ------------------------------------------------------------------
    # Scopes

    @property
    def scopes(self) -> List[SettingsScope]:
        return sorted(self._layers)

    def has_scope(self, scope: SettingsScope) -> bool:
        return scope in self._layers

    def narrowest_scope(self) -> SettingsScope:
        return max(self._layers)

    def layer(self, scope: SettingsScope) -> SettingsLayer:
        try:
            return self._layers[scope]
        except KeyError:
            raise SettingsError(f"Settings scope {scope.label} is not available") from None

    # ------------------------------------------------------------------
    # Reads

    def get(self, key: str, language_id: Optional[str] = None, default: Any = None) -> Any:
        """Effective value of key, optionally for one language."""
        value = lookup(self._overrides, key)
        if value is not _MISSING:
            return value
        if language_id:
            value = self._language_value(key, language_id)
            if value is not _MISSING:
                return value
        value = self._general_value(key)
        if value is not _MISSING:
            return value
        value = lookup(self._defaults, key)
        if value is not _MISSING:
            return value
        return default

    def get_language_value(self, key: str, language_id: str, default: Any = None) -> Any:
        """Value set in a language block for language_id in any scope, narrowest first."""
        value = self._language_value(key, language_id)
        return default if value is _MISSING else value

    def get_general_value(self, key: str, default: Any = None) -> Any:
        """Value set outside language blocks, falling back to defaults."""
        value = self._general_value(key)
        if value is _MISSING:
            value = lookup(self._defaults, key)
        return default if value is _MISSING else value

    def inspect(self, key: str, scope: SettingsScope, language_id: Optional[str] = None) -> Any:
        """Raw value stored at exactly one scope (and language block), or None."""
        layer = self.layer(scope)
        if language_id:
            block = layer.values.get(language_block_key(language_id))
            value = lookup(block, key) if isinstance(block, dict) else _MISSING
        else:
            value = layer.general(key)
        return None if value is _MISSING else value

    def languages_with_overrides(self) -> Set[str]:
        """Languages that have a language block in any scope."""
        found: Set[str] = set()
        for layer in self._layers.values():
            found.update(layer.languages())
        return found

    def _language_value(self, key: str, language_id: str) -> Any:
        for scope in sorted(self._layers, reverse=True):
            value = self._layers[scope].language_value(key, language_id)
            if value is not _MISSING:
                return value
        return _MISSING

    def _general_value(self, key: str) -> Any:
        for scope in sorted(self._layers, reverse=True):
            value = self._layers[scope].general(key)
            if value is not _MISSING:
                return value
        return _MISSING

    # ------------------------------------------------------------------
    # Writes

    def update(
        self,
        key: str,
        value: Any,
        scope: SettingsScope,
        language_id: Optional[str] = None,
    ) -> bool:
        """Write (or, with value None, remove) key at one scope.

        Returns:
            True if the stored value changed
        """
        layer = self.layer(scope)
        if self.inspect(key, scope, language_id) == value and (
            value is not None or not self._is_present(layer, key, language_id)
        ):
            return False

        if language_id:
            block_key = language_block_key(language_id)
            block = layer.values.get(block_key)
            if value is None:
                if isinstance(block, dict):
                    remove(block, key)
                    if not block:
                        del layer.values[block_key]
            else:
                if not isinstance(block, dict):
                    block = {}
                    layer.values[block_key] = block
                assign(block, key, value)
        elif value is None:
            remove(layer.values, key)
        else:
            assign(layer.values, key, value)

        self._persist(layer)
        logger.debug(
            f"Updated {key}{' for ' + language_id if language_id else ''} "
            f"at {scope.label} scope: {value!r}"
        )
        self._notify(SettingsChangeEvent(key=key, scope=scope, language_id=language_id))
        return True

    def _is_present(self, layer: SettingsLayer, key: str, language_id: Optional[str]) -> bool:
        if language_id:
            block = layer.values.get(language_block_key(language_id))
            return isinstance(block, dict) and lookup(block, key) is not _MISSING
        return layer.general(key) is not _MISSING

    def _persist(self, layer: SettingsLayer) -> None:
        """Write a layer back to its YAML file."""
        if layer.path is None:
            return
        path = Path(layer.path)
        try:
            if not layer.values and not layer.existed:
                # Leave no trace of a file this process created.
                if path.exists():
                    path.unlink()
                    if not any(path.parent.iterdir()):
                        path.parent.rmdir()
                return
            path.parent.mkdir(parents=True, exist_ok=True)
            with open(path, "w", encoding="utf-8") as f:
                f.write(self._parser.serialize_to_yaml(layer.values))
        except OSError as e:
            raise SettingsError(
                f"Failed to write settings file {path}: {e}",
                path=str(path),
                original_error=e,
            ) from e

    def read_file(self, scope: SettingsScope) -> Optional[bytes]:
        """Current content of a scope's settings file; None when there is no file."""
        layer = self.layer(scope)
        if layer.path is None:
            return None
        path = Path(layer.path)
        try:
            return path.read_bytes() if path.is_file() else None
        except OSError as e:
            raise SettingsError(
                f"Failed to read settings file {path}: {e}",
                path=str(path),
                original_error=e,
            ) from e

    def write_file(self, scope: SettingsScope, content: bytes) -> None:
        """Put back content taken with read_file.

        Only the file changes; the caller guarantees the content parses to
        the layer's current values.
        """
        layer = self.layer(scope)
        if layer.path is None:
            return
        path = Path(layer.path)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_bytes(content)
        except OSError as e:
            raise SettingsError(
                f"Failed to write settings file {path}: {e}",
                path=str(path),
                original_error=e,
            ) from e

    # ------------------------------------------------------------------
    # Change notification

    def on_change(self, listener: SettingsListener) -> Callable[[], None]:
        """Register a change listener; returns a function that unregisters it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self, event: SettingsChangeEvent) -> None:
        for listener in list(self._listeners):
            try:
                listener(event)
            except Exception as e:
                logger.error(f"Settings change listener failed for {event.key}: {e}")
