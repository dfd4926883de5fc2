"""
The active-formatter slot and activation confirmation.

A pipeline run borrows the "editor.defaultFormatter" setting of one
scope and one language block, points it at each formatter in turn so the
host's generic format action picks that formatter, and puts the original
raw value back when the run ends, however it ends.
"""

import copy
import logging
import time
from contextlib import contextmanager
from typing import Any, Callable, Dict, Iterator, Optional, Protocol

from multiformatter.config.schema import KEY_DEFAULT_FORMATTER, SettingsScope, describe_value
from multiformatter.config.store import SettingsStore
from multiformatter.formatters.base import ChainOptions
from multiformatter.formatters.errors import SettingsError


logger = logging.getLogger(__name__)


class ActiveFormatterSlot:
    """The default-formatter setting a run owns for its duration.

    Attributes:
        store: Settings store holding the slot
        language_id: Language block the slot lives in
        scope: Scope written to (narrowest available by default)
        original: Raw value captured before the run (None when unset)
        restore_error: Error raised while restoring, if restoration failed
    """

    def __init__(self, store: SettingsStore, language_id: str, scope: Optional[SettingsScope] = None):
        self.store = store
        self.language_id = language_id
        self.scope = scope if scope is not None else store.narrowest_scope()
        self.original: Any = None
        self.restore_error: Optional[SettingsError] = None
        self._captured = False
        self._file_content: Optional[bytes] = None
        self._layer_values: Dict[str, Any] = {}

    def capture(self) -> Any:
        """Remember the raw value of the slot; never the effective value.

        The settings file itself is remembered too, so that restoring puts
        back the user's file as written, comments included.
        """
        self.original = self.store.inspect(KEY_DEFAULT_FORMATTER, self.scope, self.language_id)
        try:
            self._file_content = self.store.read_file(self.scope)
        except SettingsError as e:
            logger.warning(f"Cannot keep a copy of the {self.scope.label} settings file: {e}")
            self._file_content = None
        self._layer_values = copy.deepcopy(self.store.layer(self.scope).values)
        self._captured = True
        logger.info(f"Using {self.scope.label} scope for [{self.language_id}]")
        logger.info(f"Original default formatter: {describe_value(self.original)}")
        return self.original

    def activate(self, formatter_id: str) -> None:
        self.store.update(KEY_DEFAULT_FORMATTER, formatter_id, self.scope, self.language_id)

    def restore(self) -> None:
        """Put the captured value back; an unset original removes the key."""
        if not self._captured:
            return
        self.store.update(KEY_DEFAULT_FORMATTER, self.original, self.scope, self.language_id)
        if self._file_content is not None and self.store.layer(self.scope).values == self._layer_values:
            self.store.write_file(self.scope, self._file_content)
            logger.debug(f"Restored {self.scope.label} settings file as written")
        logger.info(f"Restored default formatter: {describe_value(self.original)}")

    @contextmanager
    def owned(self) -> Iterator["ActiveFormatterSlot"]:
        """Capture on entry, restore on every exit path.

        A failed restore is logged and kept in restore_error so that it
        never masks the error that ended the block.
        """
        self.capture()
        try:
            yield self
        finally:
            try:
                self.restore()
            except SettingsError as e:
                self.restore_error = e
                logger.error(f"Failed to restore default formatter for [{self.language_id}]: {e}")


class ActivationConfirmer(Protocol):
    """Waits until the host reports a formatter as the active one."""

    def wait(self, formatter_id: str, language_id: str, options: ChainOptions) -> bool:
        ...


class PollingActivationConfirmer:
    """Polls the effective default formatter until it matches."""

    def __init__(self, store: SettingsStore, sleep: Optional[Callable[[float], None]] = None):
        self.store = store
        self.sleep = sleep or time.sleep

    def wait(self, formatter_id: str, language_id: str, options: ChainOptions) -> bool:
        attempts = max(1, options.activation_attempts)
        for attempt in range(attempts):
            current = self.store.get(KEY_DEFAULT_FORMATTER, language_id)
            if current == formatter_id:
                logger.debug(f"Formatter {formatter_id} active after {attempt + 1} check(s)")
                return True
            if attempt < attempts - 1:
                self.sleep(options.activation_interval_ms / 1000.0)

        logger.warning(
            f"Formatter {formatter_id} was not confirmed active for [{language_id}] "
            f"after {attempts} attempts, running it anyway"
        )
        return False
