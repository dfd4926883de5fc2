"""
Pipeline executor.

Runs a formatter chain against one live document:

    guard -> preflight -> steps -> restore slot -> finalize -> release guard

Each step points the active-formatter slot at its formatter, waits for the
host to pick it up, invokes the generic format action and fingerprints the
result. A formatter that fails (FormatterError) is logged and the chain
goes on; anything else stops the run. The slot is restored and the guard
released on every exit path.
"""

import logging
import time
from typing import Callable, Optional

from multiformatter.config.store import SettingsStore
from multiformatter.formatters.base import (
    ChainOptions,
    EditResult,
    FormatterChain,
    SkipReason,
    StepFailure,
    StepResult,
    TextEdit,
)
from multiformatter.formatters.cancellation import CancellationToken
from multiformatter.formatters.errors import FormatterError
from multiformatter.formatters.fingerprint import changed, fingerprint
from multiformatter.formatters.guard import RecursionGuard, formatting_guard
from multiformatter.formatters.slot import (
    ActivationConfirmer,
    ActiveFormatterSlot,
    PollingActivationConfirmer,
)


logger = logging.getLogger(__name__)

NOT_DIRTY_MESSAGE = "Document is not dirty, skipping formatting."


class PipelineExecutor:
    """Runs formatter chains one step at a time.

    Args:
        store: Settings store holding the active-formatter slot
        format_action: Formats a document with the active formatter
        guard: Recursion guard (process-wide guard by default)
        confirmer: Activation confirmation strategy (polling by default)
        sleep: Sleep function taking seconds
    """

    def __init__(
        self,
        store: SettingsStore,
        format_action: Callable[[object], object],
        guard: Optional[RecursionGuard] = None,
        confirmer: Optional[ActivationConfirmer] = None,
        sleep: Optional[Callable[[float], None]] = None,
    ):
        self.store = store
        self.format_action = format_action
        self.guard = guard if guard is not None else formatting_guard
        self.sleep = sleep or time.sleep
        self.confirmer = confirmer or PollingActivationConfirmer(store, self.sleep)

    def run(
        self,
        document,
        chain: FormatterChain,
        options: Optional[ChainOptions] = None,
        token: Optional[CancellationToken] = None,
        language_id: Optional[str] = None,
    ) -> EditResult:
        """Format document with chain.

        Returns:
            EditResult with no edits or one full-document replacement
        """
        options = options or ChainOptions()
        language_id = language_id or chain.language_id or document.language_id

        with self.guard.hold() as acquired:
            if not acquired:
                logger.info("Formatting already in progress, skipping")
                return EditResult.skip(SkipReason.ALREADY_RUNNING, chain)
            return self._run(document, chain, options, token, language_id)

    def _run(self, document, chain: FormatterChain, options: ChainOptions,
             token: Optional[CancellationToken], language_id: str) -> EditResult:
        if not document.is_dirty:
            logger.info(NOT_DIRTY_MESSAGE)
            return EditResult.skip(SkipReason.NOT_DIRTY, chain)

        if not chain:
            logger.info(f"No formatters configured for {language_id}")
            return EditResult.skip(SkipReason.NO_FORMATTERS, chain)

        logger.info(f"Starting multi-formatter for {document.uri}")
        logger.info(f"Language: {language_id}")
        logger.info(f"Formatters: {chain.describe()}")

        original = document.text
        result = EditResult(chain=chain, original_fingerprint=fingerprint(original))

        slot = ActiveFormatterSlot(self.store, language_id)
        with slot.owned():
            self._run_steps(document, chain, options, token, slot, result)

        if slot.restore_error is not None and result.failure is None:
            result.failure = StepFailure(
                message=str(slot.restore_error),
                error_type=type(slot.restore_error).__name__,
            )

        self._finalize(document, options, original, result)
        return result

    def _run_steps(self, document, chain: FormatterChain, options: ChainOptions,
                   token: Optional[CancellationToken], slot: ActiveFormatterSlot,
                   result: EditResult) -> None:
        previous = result.original_fingerprint
        total = len(chain)

        for index, step in enumerate(chain):
            if token is not None and token.is_cancelled():
                logger.info(
                    f"Formatting cancelled before {step.formatter_id}: {token.cancel_reason or 'user request'}"
                )
                result.cancelled = True
                return

            step_result = StepResult(formatter_id=step.formatter_id, index=index)
            result.steps.append(step_result)
            logger.info(f"Running formatter {index + 1}/{total}: {step.formatter_id}")

            try:
                slot.activate(step.formatter_id)
                self._settle(options)
                step_result.activated = self.confirmer.wait(step.formatter_id, slot.language_id, options)

                try:
                    self.format_action(document)
                except FormatterError as e:
                    step_result.error = str(e)
                    logger.error(f"Error running formatter {step.formatter_id}: {e}")
                    continue

                self._settle(options)

                current = fingerprint(document.text)
                step_result.changed = changed(previous, current)
                logger.info(
                    f"Fingerprint {previous:016x} -> {current:016x}: "
                    f"{step.formatter_id} {'changed' if step_result.changed else 'did not change'} the document"
                )
                previous = current

                if options.save_after_each and document.is_dirty:
                    document.save()
                    logger.info(f"Saved document after {step.formatter_id}")
            except Exception as e:
                logger.error(f"Unexpected failure in formatter {step.formatter_id}: {e}")
                result.failure = StepFailure(
                    message=str(e),
                    error_type=type(e).__name__,
                    formatter_id=step.formatter_id,
                )
                return

    def _finalize(self, document, options: ChainOptions, original: str, result: EditResult) -> None:
        if not options.save_after_each and document.is_dirty:
            try:
                document.save()
                logger.info("Saved document after all formatters")
            except Exception as e:
                logger.error(f"Failed to save document: {e}")
                if result.failure is None:
                    result.failure = StepFailure(
                        message=f"Failed to save document: {e}",
                        error_type=type(e).__name__,
                    )

        final = document.text
        result.final_fingerprint = fingerprint(final)
        logger.info(f"Original length: {len(original)}, final length: {len(final)}")

        if final != original:
            result.edits = [TextEdit.full_document(original, final)]
            logger.info("Multi-formatter complete")
        else:
            logger.info("No formatting changes")

    def _settle(self, options: ChainOptions) -> None:
        if options.formatter_delay_ms > 0:
            self.sleep(options.formatter_delay_ms / 1000.0)
