"""
Pydantic schemas for formatter run data.

Contains the RunReportV1 schema written by ``format --report``.
"""

from multiformatter.formatters.schemas.run_v1 import (
    FailureReport,
    RunReportV1,
    StepReport,
)

__all__ = [
    "FailureReport",
    "RunReportV1",
    "StepReport",
]
