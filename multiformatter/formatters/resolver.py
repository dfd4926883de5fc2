"""
Settings resolver.

Turns layered settings into the ordered formatter chain for one language:

1. The language must be allowed by multiformatter.languages (empty list
   allows every language); otherwise the chain is empty.
2. The language's effective editor.defaultFormatter, unless it is the
   orchestrator itself, becomes step 0.
3. multiformatter.formatters is taken from the language's own block, else
   from its family base language's block (typescriptreact -> typescript),
   else from the general value.
4. The orchestrator's own id is dropped wherever it appears.

Missing configuration is never an error: it resolves to an empty chain.
"""

import logging
from typing import Any, Dict, List, Optional, Tuple

from multiformatter.config.schema import (
    DEFAULT_LANGUAGE_FAMILIES,
    KEY_DEFAULT_FORMATTER,
    KEY_FORMATTER_DELAY,
    KEY_FORMATTERS,
    KEY_LANGUAGE_FAMILIES,
    KEY_LANGUAGES,
    KEY_SAVE_AFTER_EACH,
    ORCHESTRATOR_ID,
    as_bool,
    as_string_list,
    clamp_delay,
)
from multiformatter.config.store import SettingsStore
from multiformatter.formatters.base import ChainOptions, ChainSource, FormatterChain


logger = logging.getLogger(__name__)

NO_FORMATTERS_MESSAGE = (
    "Multi-Formatter is set as the default formatter, but no formatters are configured."
)


class SettingsResolver:
    """Resolves formatter chains and run options from a settings store."""

    def __init__(self, store: SettingsStore, self_id: str = ORCHESTRATOR_ID):
        self.store = store
        self.self_id = self_id

    # ------------------------------------------------------------------
    # Languages

    def supported_languages(self) -> List[str]:
        """The allow-list; empty means every language is allowed."""
        return self._clean_ids(self.store.get(KEY_LANGUAGES), KEY_LANGUAGES)

    def language_families(self) -> Dict[str, str]:
        families = dict(DEFAULT_LANGUAGE_FAMILIES)
        configured = self.store.get(KEY_LANGUAGE_FAMILIES)
        if isinstance(configured, dict):
            families.update(
                {str(k): str(v) for k, v in configured.items() if isinstance(v, str) and v.strip()}
            )
        return families

    def family_of(self, language_id: str) -> Optional[str]:
        """Base language a language falls back to, if any."""
        base = self.language_families().get(language_id)
        if base and base != language_id:
            return base
        return None

    def is_language_enabled(self, language_id: str) -> bool:
        allowed = self.supported_languages()
        if not allowed:
            return True
        if language_id in allowed:
            return True
        family = self.family_of(language_id)
        return family is not None and family in allowed

    # ------------------------------------------------------------------
    # Chains

    def resolve(self, language_id: str) -> FormatterChain:
        """Ordered formatter chain for language_id (possibly empty)."""
        if not self.is_language_enabled(language_id):
            logger.debug(f"Language {language_id} is not in {KEY_LANGUAGES}, nothing to run")
            return FormatterChain(language_id)

        formatter_ids: List[str] = []

        default_formatter = self.default_formatter(language_id)
        if default_formatter and default_formatter != self.self_id:
            formatter_ids.append(default_formatter)

        configured, source = self._configured_formatters(language_id)
        formatter_ids.extend(configured)

        chain = FormatterChain.of(language_id, formatter_ids, source)
        logger.debug(f"Resolved chain for {language_id} from {source.value} settings: {chain.describe()}")
        return chain

    def _configured_formatters(self, language_id: str) -> Tuple[List[str], ChainSource]:
        own = self._clean_ids(self.store.get_language_value(KEY_FORMATTERS, language_id), KEY_FORMATTERS)
        if own:
            return own, ChainSource.LANGUAGE

        family = self.family_of(language_id)
        if family:
            inherited = self._clean_ids(self.store.get_language_value(KEY_FORMATTERS, family), KEY_FORMATTERS)
            if inherited:
                return inherited, ChainSource.FAMILY

        general = self._clean_ids(self.store.get_general_value(KEY_FORMATTERS), KEY_FORMATTERS)
        if general:
            return general, ChainSource.GLOBAL

        return [], ChainSource.NONE

    def _clean_ids(self, value: Any, key: str) -> List[str]:
        """Drop the orchestrator's id, blanks and non-strings from an id list."""
        cleaned = []
        for entry in as_string_list(value):
            if not isinstance(entry, str) or not entry.strip():
                logger.warning(f"Ignoring invalid entry in {key}: {entry!r}")
                continue
            entry = entry.strip()
            if entry == self.self_id:
                continue
            cleaned.append(entry)
        return cleaned

    # ------------------------------------------------------------------
    # Default formatter

    def default_formatter(self, language_id: str) -> Optional[str]:
        """Effective editor.defaultFormatter for a language."""
        value = self.store.get(KEY_DEFAULT_FORMATTER, language_id)
        if isinstance(value, str) and value.strip():
            return value.strip()
        return None

    def is_orchestrator_default(self, language_id: str) -> bool:
        return self.default_formatter(language_id) == self.self_id

    def validate(self, language_id: str) -> Optional[str]:
        """Problem that prevents formatting language_id, or None."""
        if self.is_orchestrator_default(language_id) and not self.resolve(language_id):
            return NO_FORMATTERS_MESSAGE
        return None

    # ------------------------------------------------------------------
    # Options

    def resolve_options(self, language_id: Optional[str] = None) -> ChainOptions:
        """Run options, with language blocks consulted when a language is given."""
        return ChainOptions(
            formatter_delay_ms=clamp_delay(self.store.get(KEY_FORMATTER_DELAY, language_id)),
            save_after_each=as_bool(self.store.get(KEY_SAVE_AFTER_EACH, language_id), True),
        )
