from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from bunktrack.engine.attendance import AttendanceStats
from bunktrack.engine.store import Subject


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class SubjectCreate(CamelModel):
    """Request model for registering a subject."""

    subject_name: str = Field(..., description="Name of the subject")
    total: int = Field(..., ge=0, description="Classes held so far")
    attended: int = Field(..., ge=0, description="Classes attended so far")
    required_percent: Optional[float] = Field(
        None, gt=0, le=100, description="Target attendance; server default when omitted"
    )

    @field_validator("subject_name")
    @classmethod
    def _strip_name(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("subjectName must not be empty")
        return value


class SubjectUpdate(SubjectCreate):
    """Full replacement of a subject; every field is required."""

    required_percent: float = Field(..., gt=0, le=100, description="Target attendance")


class CalculateRequest(CamelModel):
    """Request model for a one-off calculation without storing anything."""

    attended: float = Field(..., description="Classes attended")
    total: float = Field(..., description="Classes held")
    required_percent: Optional[float] = Field(None, description="Target attendance")


class StatsOut(CamelModel):
    current_percent: float
    can_bunk: int
    need_to_attend: Optional[int] = Field(
        ..., description="Null when the target can no longer be reached"
    )
    message: str
    safe: bool
    reachable: bool

    @classmethod
    def from_stats(cls, stats: AttendanceStats) -> "StatsOut":
        return cls(**stats.to_dict())


class SubjectOut(CamelModel):
    id: str
    subject_name: str
    total: int
    attended: int
    required_percent: float
    created_at: datetime
    updated_at: datetime
    stats: StatsOut

    @classmethod
    def from_subject(cls, subject: Subject) -> "SubjectOut":
        return cls(
            id=subject.id,
            subject_name=subject.subject_name,
            total=subject.total,
            attended=subject.attended,
            required_percent=subject.required_percent,
            created_at=subject.created_at,
            updated_at=subject.updated_at,
            stats=StatsOut.from_stats(subject.stats),
        )


class ChartOut(BaseModel):
    graph: str = Field(..., description="Base64 encoded PNG")
