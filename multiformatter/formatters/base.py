"""
Core data classes of the formatter pipeline.

Defines the chain a document is formatted with, the options the chain
runs under, and the results a run reports.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Iterator, List, Optional, Sequence, Tuple

from multiformatter.config.schema import (
    ACTIVATION_ATTEMPTS,
    ACTIVATION_INTERVAL_MS,
    DEFAULT_FORMATTER_DELAY_MS,
    ORCHESTRATOR_ID,
)


class ChainSource(str, Enum):
    """Which settings layer produced the formatters list of a chain."""

    LANGUAGE = "language"
    FAMILY = "family"
    GLOBAL = "global"
    NONE = "none"


class SkipReason(str, Enum):
    """Why a format request did not run the chain."""

    ALREADY_RUNNING = "already-running"
    NOT_DIRTY = "not-dirty"
    NO_FORMATTERS = "no-formatters"
    LANGUAGE_NOT_ENABLED = "language-not-enabled"
    MISCONFIGURED = "misconfigured"
    NO_DOCUMENT = "no-document"


@dataclass(frozen=True)
class FormatterStep:
    """One formatter in a chain, identified by its formatter id."""

    formatter_id: str

    def __post_init__(self) -> None:
        if not isinstance(self.formatter_id, str) or not self.formatter_id.strip():
            raise ValueError("Formatter id must be a non-empty string")

    def __str__(self) -> str:
        return self.formatter_id


@dataclass(frozen=True)
class FormatterChain:
    """Ordered formatters for one language.

    Built fresh for every format request. Never contains the
    orchestrator's own id.

    Attributes:
        language_id: Language the chain was resolved for
        steps: Formatters in execution order (duplicates allowed)
        source: Settings layer the formatters list came from
    """

    language_id: str
    steps: Tuple[FormatterStep, ...] = ()
    source: ChainSource = ChainSource.NONE

    def __post_init__(self) -> None:
        for step in self.steps:
            if step.formatter_id == ORCHESTRATOR_ID:
                raise ValueError(f"A formatter chain cannot contain '{ORCHESTRATOR_ID}' itself")

    @classmethod
    def of(cls, language_id: str, formatter_ids: Sequence[str],
           source: ChainSource = ChainSource.NONE) -> "FormatterChain":
        return cls(language_id, tuple(FormatterStep(f) for f in formatter_ids), source)

    @property
    def formatter_ids(self) -> List[str]:
        return [step.formatter_id for step in self.steps]

    def __iter__(self) -> Iterator[FormatterStep]:
        return iter(self.steps)

    def __len__(self) -> int:
        return len(self.steps)

    def __bool__(self) -> bool:
        return bool(self.steps)

    def describe(self) -> str:
        return " -> ".join(self.formatter_ids) if self.steps else "(empty)"


@dataclass(frozen=True)
class ChainOptions:
    """Options a chain runs under.

    Attributes:
        formatter_delay_ms: Settle delay before and after each formatter
        save_after_each: Save after every step instead of once at the end
        activation_attempts: Activation confirmation polls per step
        activation_interval_ms: Delay between activation polls
    """

    formatter_delay_ms: int = DEFAULT_FORMATTER_DELAY_MS
    save_after_each: bool = True
    activation_attempts: int = ACTIVATION_ATTEMPTS
    activation_interval_ms: int = ACTIVATION_INTERVAL_MS


@dataclass(frozen=True)
class TextEdit:
    """Replacement of the text between two offsets."""

    start: int
    end: int
    new_text: str

    @classmethod
    def full_document(cls, original: str, new_text: str) -> "TextEdit":
        """Edit replacing the whole of original with new_text."""
        return cls(0, len(original), new_text)

    def apply(self, text: str) -> str:
        return text[:self.start] + self.new_text + text[self.end:]


@dataclass
class StepResult:
    """Outcome of one formatter step.

    Attributes:
        formatter_id: Formatter the step ran
        index: Position in the chain
        activated: Whether activation was confirmed before invoking
        changed: Whether the document fingerprint changed
        error: Message of a recovered formatter error, if any
    """

    formatter_id: str
    index: int
    activated: bool = False
    changed: bool = False
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass(frozen=True)
class StepFailure:
    """Unexpected failure that stopped a run."""

    message: str
    error_type: str
    formatter_id: Optional[str] = None


@dataclass
class EditResult:
    """Result of a format request.

    Attributes:
        edits: No edits, or exactly one full-document replacement
        chain: Chain the request resolved, if any
        steps: Per-step outcomes in execution order
        skipped: Why the chain did not run, if it did not
        cancelled: Whether a cancellation stopped the run between steps
        failure: Unexpected failure that stopped the run, if any
        original_fingerprint: Fingerprint of the text before the run
        final_fingerprint: Fingerprint of the text after the run
    """

    edits: List[TextEdit] = field(default_factory=list)
    chain: Optional[FormatterChain] = None
    steps: List[StepResult] = field(default_factory=list)
    skipped: Optional[SkipReason] = None
    cancelled: bool = False
    failure: Optional[StepFailure] = None
    original_fingerprint: Optional[int] = None
    final_fingerprint: Optional[int] = None

    @classmethod
    def skip(cls, reason: SkipReason, chain: Optional[FormatterChain] = None) -> "EditResult":
        return cls(chain=chain, skipped=reason)

    @property
    def changed(self) -> bool:
        return bool(self.edits)

    @property
    def succeeded(self) -> bool:
        return self.failure is None and not self.cancelled

    @property
    def step_errors(self) -> List[StepResult]:
        return [step for step in self.steps if step.error is not None]
