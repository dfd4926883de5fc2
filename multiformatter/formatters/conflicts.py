"""
Conflict detection.

A language is in conflict when its effective editor.defaultFormatter is
some other formatter and editor.formatOnSave is on for it: the host would
then run that formatter on save on top of the chain. Language blocks beat
general values and narrower scopes beat broader ones, so a per-language
formatOnSave: false suppresses a global true.

Each language is warned about once when its conflict appears and gets one
notice when it clears; steady states are silent.
"""

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Set

from multiformatter.config.schema import (
    KEY_CONFLICT_WARNINGS,
    KEY_DEFAULT_FORMATTER,
    KEY_FORMAT_ON_SAVE,
    KEY_LANGUAGES,
    ORCHESTRATOR_ID,
    as_bool,
    as_string_list,
)
from multiformatter.config.store import SettingsStore
from multiformatter.host.notifications import Notifier


logger = logging.getLogger(__name__)


class ConflictRecord:
    """Languages currently known to be in conflict.

    With a path, the record is loaded from and saved to a JSON file so that
    separate CLI invocations do not warn twice about the same conflict.
    """

    def __init__(self, languages: Iterable[str] = (), path: Optional[Path] = None):
        self._languages: Set[str] = set(languages)
        self.path = Path(path) if path else None

    @classmethod
    def load(cls, path: Path) -> "ConflictRecord":
        """Read a persisted record; a missing or unreadable file is an empty record."""
        path = Path(path)
        languages: List[str] = []
        if path.exists():
            try:
                data = json.loads(path.read_text(encoding="utf-8"))
                languages = [lang for lang in data.get("languages", []) if isinstance(lang, str)]
            except (OSError, ValueError, AttributeError) as e:
                logger.warning(f"Ignoring unreadable conflict record {path}: {e}")
        return cls(languages, path=path)

    def save(self) -> None:
        if self.path is None:
            return
        try:
            if not self._languages:
                if self.path.exists():
                    self.path.unlink()
                return
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(json.dumps({"languages": self.languages}, indent=2), encoding="utf-8")
        except OSError as e:
            logger.warning(f"Failed to save conflict record {self.path}: {e}")

    def close(self) -> None:
        self.save()

    def add(self, language_id: str) -> None:
        self._languages.add(language_id)

    def discard(self, language_id: str) -> None:
        self._languages.discard(language_id)

    def clear(self) -> None:
        self._languages.clear()

    @property
    def languages(self) -> List[str]:
        return sorted(self._languages)

    def __contains__(self, language_id: object) -> bool:
        return language_id in self._languages

    def __len__(self) -> int:
        return len(self._languages)

    def __bool__(self) -> bool:
        return bool(self._languages)


@dataclass
class ConflictScanResult:
    """What one scan found.

    Attributes:
        new: Languages that started conflicting (warned)
        resolved: Languages whose conflict cleared (notified)
        active: Every language in conflict after the scan
        errors: Languages that could not be scanned, with the error
        skipped: Whether warnings are disabled and nothing was scanned
    """
    new: List[str] = field(default_factory=list)
    resolved: List[str] = field(default_factory=list)
    active: List[str] = field(default_factory=list)
    errors: Dict[str, str] = field(default_factory=dict)
    skipped: bool = False


def conflict_warning(language_id: str, formatter_id: str) -> str:
    return (
        f"Formatting conflict for {language_id}: format on save is enabled with "
        f"'{formatter_id}' as the default formatter. It will run on save in addition "
        f"to Multi-Formatter. Set editor.formatOnSave to false for [{language_id}] "
        f"or make Multi-Formatter the default formatter."
    )


def conflict_resolved(language_id: str) -> str:
    return f"Formatting conflict for {language_id} resolved."


class ConflictDetector:
    """Scans settings for conflicts with the host's format-on-save."""

    def __init__(self, store: SettingsStore, record: ConflictRecord, notifier: Notifier,
                 self_id: str = ORCHESTRATOR_ID):
        self.store = store
        self.record = record
        self.notifier = notifier
        self.self_id = self_id

    def languages_to_scan(self) -> List[str]:
        """Allow-list, or every language with a settings block, plus recorded conflicts."""
        allowed = [lang for lang in as_string_list(self.store.get(KEY_LANGUAGES))
                   if isinstance(lang, str) and lang.strip()]
        languages = allowed if allowed else sorted(self.store.languages_with_overrides())
        for language in self.record.languages:
            if language not in languages:
                languages.append(language)
        return languages

    def conflicting_formatter(self, language_id: str) -> Optional[str]:
        """The default formatter that would also run on save, if any."""
        default = self.store.get(KEY_DEFAULT_FORMATTER, language_id)
        if not isinstance(default, str) or not default.strip() or default == self.self_id:
            return None
        if not as_bool(self.store.get(KEY_FORMAT_ON_SAVE, language_id), False):
            return None
        return default

    def scan(self) -> ConflictScanResult:
        result = ConflictScanResult()

        if not as_bool(self.store.get(KEY_CONFLICT_WARNINGS), True):
            logger.debug("Conflict warnings disabled, clearing conflict record")
            self.record.clear()
            self.record.save()
            result.skipped = True
            return result

        for language_id in self.languages_to_scan():
            try:
                formatter_id = self.conflicting_formatter(language_id)
                if formatter_id is not None:
                    result.active.append(language_id)
                    if language_id not in self.record:
                        self.record.add(language_id)
                        result.new.append(language_id)
                        logger.warning(f"Conflict found for {language_id}: {formatter_id} runs on save")
                        self.notifier.warning(conflict_warning(language_id, formatter_id))
                elif language_id in self.record:
                    self.record.discard(language_id)
                    result.resolved.append(language_id)
                    logger.info(f"Conflict resolved for {language_id}")
                    self.notifier.info(conflict_resolved(language_id))
            except Exception as e:
                logger.error(f"Conflict scan failed for {language_id}: {e}")
                result.errors[language_id] = str(e)

        self.record.save()
        return result
