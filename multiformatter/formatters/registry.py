"""
Formatter capability lookup and the generic "format now" action.

The pipeline never knows what a formatter id means. It writes the id into
the active-formatter slot and invokes FormatAction, which looks the id up
here and runs whatever backend is registered under it.
"""

import inspect
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Dict, List, Optional, Protocol, Union, runtime_checkable

from multiformatter.config.schema import KEY_DEFAULT_FORMATTER, ORCHESTRATOR_ID
from multiformatter.config.store import SettingsStore
from multiformatter.formatters.errors import (
    FormatterError,
    FormatterExecutionError,
    FormatterNotFoundError,
)


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FormattingContext:
    """What a backend knows about the document it formats."""

    formatter_id: str
    language_id: str
    uri: str
    path: Optional[Path] = None


@runtime_checkable
class Formatter(Protocol):
    """A formatting backend: text in, formatted text out."""

    def format(self, text: str, context: FormattingContext) -> str:
        ...


class FunctionFormatter:
    """Adapts a plain callable taking (text) or (text, context)."""

    def __init__(self, func: Callable[..., str], name: Optional[str] = None):
        self.func = func
        self.name = name or getattr(func, "__name__", "formatter")
        try:
            self._takes_context = len(inspect.signature(func).parameters) >= 2
        except (TypeError, ValueError):
            self._takes_context = False

    def format(self, text: str, context: FormattingContext) -> str:
        if self._takes_context:
            return self.func(text, context)
        return self.func(text)

    def __repr__(self) -> str:
        return f"FunctionFormatter({self.name!r})"


FormatterLike = Union[Formatter, Callable[..., str]]


class FormatterRegistry:
    """Maps formatter ids to backends."""

    def __init__(self):
        self._formatters: Dict[str, Formatter] = {}

    def register(self, formatter_id: str, formatter: FormatterLike) -> None:
        """Register a backend; a later registration replaces an earlier one."""
        if not formatter_id or not formatter_id.strip():
            raise ValueError("Formatter id must be a non-empty string")
        if formatter_id == ORCHESTRATOR_ID:
            raise ValueError(f"'{ORCHESTRATOR_ID}' is reserved and cannot be registered")
        if not isinstance(formatter, Formatter):
            if not callable(formatter):
                raise TypeError(f"Formatter {formatter_id} must be callable or define format()")
            formatter = FunctionFormatter(formatter, name=formatter_id)
        if formatter_id in self._formatters:
            logger.debug(f"Replacing formatter {formatter_id}")
        self._formatters[formatter_id] = formatter

    def unregister(self, formatter_id: str) -> bool:
        return self._formatters.pop(formatter_id, None) is not None

    def get(self, formatter_id: str) -> Formatter:
        """
        Raises:
            FormatterNotFoundError: If nothing is registered under formatter_id
        """
        try:
            return self._formatters[formatter_id]
        except KeyError:
            raise FormatterNotFoundError(
                f"Formatter '{formatter_id}' is not registered", formatter_id=formatter_id
            ) from None

    def ids(self) -> List[str]:
        return sorted(self._formatters)

    def __contains__(self, formatter_id: object) -> bool:
        return formatter_id in self._formatters

    def __len__(self) -> int:
        return len(self._formatters)


class FormatAction:
    """Formats a document with whichever formatter is currently active.

    "Active" means the effective editor.defaultFormatter for the document's
    language, exactly as a host editor's format command would pick it.
    """

    def __init__(self, store: SettingsStore, registry: FormatterRegistry):
        self.store = store
        self.registry = registry

    def active_formatter(self, language_id: str) -> Optional[str]:
        value = self.store.get(KEY_DEFAULT_FORMATTER, language_id)
        return value if isinstance(value, str) and value.strip() else None

    def __call__(self, document) -> bool:
        """Run the active formatter on document.

        Returns:
            Whether the document text changed

        Raises:
            FormatterError: If no formatter is active, it is unknown, or it fails
        """
        formatter_id = self.active_formatter(document.language_id)
        if formatter_id is None:
            raise FormatterNotFoundError(f"No formatter is active for {document.language_id}")
        if formatter_id == ORCHESTRATOR_ID:
            raise FormatterError(
                f"'{ORCHESTRATOR_ID}' cannot format as a single formatter", formatter_id=formatter_id
            )

        formatter = self.registry.get(formatter_id)
        context = FormattingContext(
            formatter_id=formatter_id,
            language_id=document.language_id,
            uri=document.uri,
            path=document.path,
        )

        try:
            formatted = formatter.format(document.text, context)
        except FormatterError:
            raise
        except Exception as e:
            raise FormatterExecutionError(
                f"Formatter '{formatter_id}' failed: {e}",
                formatter_id=formatter_id,
                original_error=e,
            ) from e

        if not isinstance(formatted, str):
            raise FormatterExecutionError(
                f"Formatter '{formatter_id}' returned {type(formatted).__name__}, expected text",
                formatter_id=formatter_id,
            )

        return document.replace_text(formatted)
