"""
Bug Pydantic schemas for responses.

Request bodies for bugs are plain dicts run through utils.bug_validation so
that every field error is reported at once with its own message.
"""

from pydantic import BaseModel, Field
from typing import Optional, Dict
from datetime import datetime

from models import BugStatus, BugPriority, BugSeverity


class BugSchema(BaseModel):
    """Response schema for a bug. Serialized with camelCase keys."""
    id: str
    title: str
    description: str
    status: BugStatus
    priority: BugPriority
    severity: BugSeverity
    created_by: str = Field(serialization_alias="createdBy")
    creator_id: Optional[str] = Field(None, serialization_alias="creatorId")
    created_at: datetime = Field(serialization_alias="createdAt")
    updated_at: datetime = Field(serialization_alias="updatedAt")
    age_in_days: int = Field(0, serialization_alias="ageInDays")

    model_config = {"from_attributes": True}

    def to_json(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)


class BugStats(BaseModel):
    """Aggregate counts. Values that never occur are absent, not zero."""
    total: int
    by_status: Dict[str, int] = Field(default_factory=dict, serialization_alias="byStatus")
    by_priority: Dict[str, int] = Field(default_factory=dict, serialization_alias="byPriority")
    by_severity: Dict[str, int] = Field(default_factory=dict, serialization_alias="bySeverity")

    def to_json(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)
