"""
Relief mission data models for Renfort.

A mission is a time-bounded staffing request published by a client
establishment, with a location and the skills/diplomas it requires.
"""

from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from renfort.utils.constants import MissionStatus, MissionUrgency

from .base import BaseDocument, PyObjectId


def _clean_terms(values: list[str]) -> list[str]:
    """Strip whitespace, drop blanks and duplicates while keeping order."""
    cleaned: list[str] = []
    for value in values:
        value = value.strip()
        if value and value not in cleaned:
            cleaned.append(value)
    return cleaned


class Mission(BaseDocument):
    """
    Main relief mission model.

    Coordinates are optional at creation time but must be present before
    candidates can be matched.
    """

    client_id: PyObjectId
    title: str = Field(..., min_length=1, max_length=200)
    job_title: str = Field(..., min_length=1, max_length=200)
    description: str = ""
    hourly_rate: float = Field(..., ge=0)
    is_night_shift: bool = False
    urgency_level: MissionUrgency = MissionUrgency.HIGH

    # Schedule
    start_date: datetime
    end_date: datetime

    # Location
    city: str
    postal_code: str
    address: str
    latitude: Optional[float] = Field(default=None, ge=-90, le=90)
    longitude: Optional[float] = Field(default=None, ge=-180, le=180)
    radius_km: Optional[float] = Field(default=30.0, gt=0)

    # Requirements (free text)
    required_skills: list[str] = Field(default_factory=list)
    required_diplomas: list[str] = Field(default_factory=list)

    status: MissionStatus = MissionStatus.OPEN
    assigned_talent_id: Optional[PyObjectId] = None

    @property
    def has_coordinates(self) -> bool:
        """Whether the mission can be located on a map."""
        return self.latitude is not None and self.longitude is not None

    @property
    def is_open(self) -> bool:
        """Check if the mission still accepts applications."""
        return self.status == MissionStatus.OPEN

    @property
    def is_critical(self) -> bool:
        return MissionUrgency(self.urgency_level) == MissionUrgency.CRITICAL

    class Settings:
        """MongoDB collection settings."""

        name = "missions"
        indexes = [
            "client_id",
            "status",
            "urgency_level",
            "start_date",
            "created_at",
        ]


class MissionCreate(BaseModel):
    """Schema for creating a new relief mission."""

    job_title: str = Field(..., min_length=1, max_length=200)
    title: Optional[str] = Field(None, max_length=200)
    hourly_rate: float = Field(..., ge=0)
    is_night_shift: bool = False
    urgency_level: MissionUrgency = MissionUrgency.HIGH
    description: Optional[str] = None
    start_date: datetime
    end_date: Optional[datetime] = None
    city: str = Field(..., min_length=1)
    postal_code: str = Field(..., min_length=1)
    address: Optional[str] = None
    latitude: Optional[float] = Field(None, ge=-90, le=90)
    longitude: Optional[float] = Field(None, ge=-180, le=180)
    radius_km: Optional[float] = Field(None, gt=0)
    required_skills: list[str] = Field(default_factory=list)
    required_diplomas: list[str] = Field(default_factory=list)

    @field_validator("required_skills", "required_diplomas")
    @classmethod
    def clean_terms(cls, v: list[str]) -> list[str]:
        return _clean_terms(v)

    @field_validator("start_date", "end_date")
    @classmethod
    def assume_utc(cls, v: Optional[datetime]) -> Optional[datetime]:
        """Naive datetimes are UTC, as pymongo stores them."""
        if v is not None and v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        return v

    @model_validator(mode="after")
    def check_schedule(self) -> "MissionCreate":
        """Reject an end date that does not follow the start date."""
        if self.end_date is not None and self.end_date <= self.start_date:
            raise ValueError("end_date must be after start_date")
        return self
