"""Audit trail models for calculation transparency.

Engines record every intermediate step of a calculation so a generated
budget can be explained line by line.
"""

from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel, Field


def _utc_now() -> datetime:
    """Return current UTC datetime with timezone info."""
    return datetime.now(timezone.utc)


class AuditEntry(BaseModel):
    """Single calculation step.

    Attributes:
        timestamp: When this entry was created (UTC)
        step: Name of the calculation step (e.g., "available_income")
        input_value: Inputs the step consumed, as display text
        output_value: Result of the step, as display text
        source: Rule or constant the step applied
        notes: Additional context
    """

    timestamp: datetime = Field(default_factory=_utc_now)
    step: str
    input_value: str
    output_value: str
    source: str
    notes: Optional[str] = None
