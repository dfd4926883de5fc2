"""
Multi Formatter service.

Ties the pipeline together behind the operations a host exposes:

- format_document: resolve the chain for a document and run it
- format_selection: same, after telling the user ranges are not supported
- scan_conflicts: check the host's format-on-save setup
- toggle_debug: flip multiformatter.debugMode

start() and shutdown() own the lifecycle of the process-wide pieces: the
recursion guard is cleared, the conflict record is loaded and saved, and
settings changes trigger conflict scans. Scans requested while a run holds
the guard (the run's own slot writes) are deferred until the run ends.
"""

import logging
from typing import Callable, List, Optional

from multiformatter.config.schema import (
    KEY_CONFLICT_WARNINGS,
    KEY_DEBUG_MODE,
    KEY_DEFAULT_FORMATTER,
    KEY_FORMAT_ON_SAVE,
    KEY_LANGUAGES,
    ORCHESTRATOR_ID,
    SettingsScope,
    as_bool,
)
from multiformatter.config.store import SettingsChangeEvent, SettingsStore
from multiformatter.formatters.backends import build_registry
from multiformatter.formatters.base import EditResult, SkipReason
from multiformatter.formatters.cancellation import CancellationToken
from multiformatter.formatters.conflicts import ConflictDetector, ConflictRecord, ConflictScanResult
from multiformatter.formatters.executor import PipelineExecutor
from multiformatter.formatters.guard import RecursionGuard, formatting_guard
from multiformatter.formatters.registry import FormatAction, FormatterRegistry
from multiformatter.formatters.resolver import SettingsResolver
from multiformatter.formatters.slot import ActivationConfirmer
from multiformatter.host.languages import DEFAULT_LANGUAGES
from multiformatter.host.notifications import LoggingNotifier, Notifier
from multiformatter.utils.logging_config import logging_config


logger = logging.getLogger(__name__)

NO_DOCUMENT_MESSAGE = "No active editor to format."
NOT_DIRTY_MESSAGE = "Document has no unsaved changes, skipping formatting."
FORMATTED_MESSAGE = "Document formatted with multiple formatters."
UNCHANGED_MESSAGE = "No formatting changes applied."
CANCELLED_MESSAGE = "Formatting cancelled."
RANGE_MESSAGE = "Range formatting not fully implemented yet. Formatting entire document instead."

CONFLICT_KEYS = (
    KEY_DEFAULT_FORMATTER,
    KEY_FORMAT_ON_SAVE,
    KEY_LANGUAGES,
    KEY_CONFLICT_WARNINGS,
)


class MultiFormatterService:
    """Formats documents with formatter chains and watches for conflicts."""

    def __init__(
        self,
        store: SettingsStore,
        registry: Optional[FormatterRegistry] = None,
        notifier: Optional[Notifier] = None,
        guard: Optional[RecursionGuard] = None,
        record: Optional[ConflictRecord] = None,
        confirmer: Optional[ActivationConfirmer] = None,
        sleep: Optional[Callable[[float], None]] = None,
        self_id: str = ORCHESTRATOR_ID,
    ):
        self.store = store
        self.registry = registry if registry is not None else build_registry(store)
        self.notifier = notifier or LoggingNotifier()
        self.guard = guard if guard is not None else formatting_guard
        self.record = record if record is not None else ConflictRecord()
        self.resolver = SettingsResolver(store, self_id)
        self.format_action = FormatAction(store, self.registry)
        self.executor = PipelineExecutor(store, self.format_action, self.guard, confirmer, sleep)
        self.conflicts = ConflictDetector(store, self.record, self.notifier, self_id)
        self._unsubscribe: Optional[Callable[[], None]] = None
        self._scan_pending = False
        self._base_log_level = logging_config.level

    # ------------------------------------------------------------------
    # Lifecycle

    @property
    def started(self) -> bool:
        return self._unsubscribe is not None

    def start(self, scan: bool = True) -> None:
        """Clear the guard, watch settings changes and run the first conflict scan."""
        if self.started:
            return
        self.guard.reset()
        self._base_log_level = logging_config.level
        self._unsubscribe = self.store.on_change(self._on_settings_changed)
        if as_bool(self.store.get(KEY_DEBUG_MODE), False):
            logging_config.set_debug(True)
        logger.debug("Multi Formatter service started")
        if scan:
            self.scan_conflicts()

    def shutdown(self) -> None:
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None
        self.guard.reset()
        self.record.close()
        self._scan_pending = False
        logger.debug("Multi Formatter service stopped")

    def __enter__(self) -> "MultiFormatterService":
        self.start()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.shutdown()

    # ------------------------------------------------------------------
    # Formatting

    def format_document(self, document, language_id: Optional[str] = None,
                        token: Optional[CancellationToken] = None) -> EditResult:
        """Format document with the chain resolved for its language.

        Args:
            document: Document to format, or None when nothing is open
            language_id: Language to resolve the chain for (defaults to the document's)
            token: Cancellation token checked between formatters
        """
        if document is None:
            self.notifier.info(NO_DOCUMENT_MESSAGE)
            return EditResult.skip(SkipReason.NO_DOCUMENT)

        if language_id and language_id != document.language_id:
            logger.debug(f"Formatting {document.uri} as {language_id} (detected {document.language_id})")
            document.language_id = language_id
        language_id = document.language_id

        if not document.is_dirty:
            self.notifier.info(NOT_DIRTY_MESSAGE)
            return EditResult.skip(SkipReason.NOT_DIRTY)

        if not self.resolver.is_language_enabled(language_id):
            logger.info(f"Multi-Formatter is not enabled for {language_id}")
            return EditResult.skip(SkipReason.LANGUAGE_NOT_ENABLED)

        problem = self.resolver.validate(language_id)
        if problem:
            self.notifier.warning(problem)
            return EditResult.skip(SkipReason.MISCONFIGURED)

        chain = self.resolver.resolve(language_id)
        options = self.resolver.resolve_options(language_id)

        try:
            with logging_config.timed(f"Formatting {document.uri}"):
                result = self.executor.run(document, chain, options, token=token, language_id=language_id)
        finally:
            self._run_deferred_scan()

        self._notify_result(result)
        return result

    def format_selection(self, document, start_line: Optional[int] = None,
                         end_line: Optional[int] = None, language_id: Optional[str] = None,
                         token: Optional[CancellationToken] = None) -> EditResult:
        """Format a line range; degrades to formatting the whole document."""
        if document is None:
            self.notifier.info(NO_DOCUMENT_MESSAGE)
            return EditResult.skip(SkipReason.NO_DOCUMENT)
        logger.debug(f"Selection requested: lines {start_line}-{end_line}")
        self.notifier.info(RANGE_MESSAGE)
        return self.format_document(document, language_id=language_id, token=token)

    def _notify_result(self, result: EditResult) -> None:
        if result.skipped is not None:
            return

        for step in result.step_errors:
            self.notifier.warning(f"Formatter {step.formatter_id} failed: {step.error}")

        if result.failure is not None:
            where = f" (formatter: {result.failure.formatter_id})" if result.failure.formatter_id else ""
            self.notifier.error(f"Error formatting document: {result.failure.message}{where}")
        elif result.cancelled:
            self.notifier.info(CANCELLED_MESSAGE)
        elif result.changed:
            self.notifier.info(FORMATTED_MESSAGE)
        else:
            self.notifier.info(UNCHANGED_MESSAGE)

    # ------------------------------------------------------------------
    # Conflicts

    def scan_conflicts(self) -> ConflictScanResult:
        self._scan_pending = False
        return self.conflicts.scan()

    def _on_settings_changed(self, event: SettingsChangeEvent) -> None:
        if event.affects(KEY_DEBUG_MODE):
            self._apply_debug_mode()
        if not event.affects(*CONFLICT_KEYS):
            return
        if self.guard.is_held:
            self._scan_pending = True
            return
        self.scan_conflicts()

    def _run_deferred_scan(self) -> None:
        if self._scan_pending and self.started and not self.guard.is_held:
            logger.debug("Running deferred conflict scan")
            self.scan_conflicts()

    # ------------------------------------------------------------------
    # Debug mode

    def toggle_debug(self, enabled: Optional[bool] = None,
                     scope: SettingsScope = SettingsScope.GLOBAL) -> bool:
        """Set or flip multiformatter.debugMode; returns the new value."""
        current = as_bool(self.store.get(KEY_DEBUG_MODE), False)
        new_value = (not current) if enabled is None else bool(enabled)
        self.store.update(KEY_DEBUG_MODE, new_value, scope)
        if not self.started:
            self._apply_debug_mode()
        self.notifier.info(f"Multi-Formatter debug mode {'enabled' if new_value else 'disabled'}.")
        return new_value

    def _apply_debug_mode(self) -> None:
        enabled = as_bool(self.store.get(KEY_DEBUG_MODE), False)
        logging_config.set_debug(enabled, fallback_level=self._base_log_level)

    # ------------------------------------------------------------------
    # Languages

    def configured_languages(self) -> List[str]:
        """Allow-list plus languages with settings blocks, in a stable order."""
        languages = list(self.resolver.supported_languages())
        for language in sorted(self.store.languages_with_overrides()):
            if language not in languages:
                languages.append(language)
        return languages

    def command_languages(self) -> List[str]:
        """Languages that get a dedicated format command."""
        return self.configured_languages() or list(DEFAULT_LANGUAGES)
