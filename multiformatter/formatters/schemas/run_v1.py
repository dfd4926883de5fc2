"""
RunReportV1 Pydantic schema for formatting run reports.

A run report records what one format request did: the chain it resolved,
the outcome of every step, and whether the document changed. It is
written by ``multi-formatter format --report``.
"""

from datetime import datetime, timezone
from typing import List, Optional

from pydantic import BaseModel, Field, field_serializer

from multiformatter.formatters.base import EditResult


class StepReport(BaseModel):
    """Outcome of one formatter step."""

    formatter_id: str = Field(
        ...,
        description="Formatter the step ran"
    )
    index: int = Field(
        ...,
        ge=0,
        description="Position of the step in the chain"
    )
    activated: bool = Field(
        default=False,
        description="Whether activation was confirmed before invoking"
    )
    changed: bool = Field(
        default=False,
        description="Whether the step changed the document fingerprint"
    )
    error: Optional[str] = Field(
        default=None,
        description="Recovered formatter error, if the step failed"
    )


class FailureReport(BaseModel):
    """Unexpected failure that stopped a run."""

    message: str
    error_type: str
    formatter_id: Optional[str] = None


class RunReportV1(BaseModel):
    """Schema for formatting run reports.

    Attributes:
        report_version: Schema version (always "v1")
        document: URI of the formatted document
        language_id: Language the chain was resolved for
        chain: Formatter ids in execution order
        chain_source: Settings layer the formatters list came from
        steps: Per-step outcomes
        skipped: Why the chain did not run, if it did not
        cancelled: Whether the run was cancelled between steps
        failure: Unexpected failure, if any
        changed: Whether the run produced an edit
        original_fingerprint: Fingerprint before the run (hex)
        final_fingerprint: Fingerprint after the run (hex)
        timestamp: When the run finished
    """

    report_version: str = Field(
        default="v1",
        description="Schema version identifier"
    )
    document: str = Field(
        ...,
        description="URI of the formatted document"
    )
    language_id: str = Field(
        ...,
        description="Language the chain was resolved for"
    )
    chain: List[str] = Field(
        default_factory=list,
        description="Formatter ids in execution order"
    )
    chain_source: Optional[str] = Field(
        default=None,
        description="Settings layer the formatters list came from (language, family, global, none)"
    )
    steps: List[StepReport] = Field(
        default_factory=list,
        description="Per-step outcomes"
    )
    skipped: Optional[str] = Field(
        default=None,
        description="Skip reason (already-running, not-dirty, no-formatters, ...)"
    )
    cancelled: bool = False
    failure: Optional[FailureReport] = None
    changed: bool = False
    original_fingerprint: Optional[str] = None
    final_fingerprint: Optional[str] = None
    timestamp: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="UTC timestamp of the run"
    )

    @field_serializer('timestamp')
    def serialize_timestamp(self, timestamp: datetime) -> str:
        """Serialize timestamp to ISO format."""
        return timestamp.isoformat()

    @classmethod
    def from_result(cls, result: EditResult, document: str, language_id: str) -> "RunReportV1":
        """Build a report from an executor result."""
        chain = result.chain
        return cls(
            document=document,
            language_id=language_id,
            chain=chain.formatter_ids if chain is not None else [],
            chain_source=chain.source.value if chain is not None else None,
            steps=[
                StepReport(
                    formatter_id=step.formatter_id,
                    index=step.index,
                    activated=step.activated,
                    changed=step.changed,
                    error=step.error,
                )
                for step in result.steps
            ],
            skipped=result.skipped.value if result.skipped is not None else None,
            cancelled=result.cancelled,
            failure=(
                FailureReport(
                    message=result.failure.message,
                    error_type=result.failure.error_type,
                    formatter_id=result.failure.formatter_id,
                )
                if result.failure is not None
                else None
            ),
            changed=result.changed,
            original_fingerprint=_hex(result.original_fingerprint),
            final_fingerprint=_hex(result.final_fingerprint),
        )


def _hex(value: Optional[int]) -> Optional[str]:
    return None if value is None else f"{value:016x}"
