"""
Platform user and candidate profile models for Renfort.

Talents are stored in the ``users`` collection with an embedded profile
holding their location, specialties, diplomas and availability slots.
"""

import re
from datetime import date, datetime
from typing import Optional

from bson import ObjectId
from pydantic import EmailStr, Field, field_validator, model_validator

from renfort.utils.constants import UserRole, UserStatus

from .base import BaseDocument, EmbeddedModel, PyObjectId

_TIME_PATTERN = re.compile(r"^([01]\d|2[0-3]):[0-5]\d$")


class AvailabilitySlot(EmbeddedModel):
    """
    A recurring weekly slot or a one-off dated slot.

    Exactly one of ``day_of_week`` (0 = Sunday ... 6 = Saturday) and
    ``specific_date`` is set.
    """

    day_of_week: Optional[int] = Field(default=None, ge=0, le=6)
    specific_date: Optional[date] = None
    start_time: str = "08:00"  # HH:MM
    end_time: str = "18:00"
    is_active: bool = True

    @field_validator("specific_date", mode="before")
    @classmethod
    def strip_stored_time(cls, v):
        """MongoDB hands dates back as midnight datetimes."""
        if isinstance(v, datetime):
            return v.date()
        return v

    @field_validator("start_time", "end_time")
    @classmethod
    def validate_time(cls, v: str) -> str:
        """Validate 24h HH:MM format."""
        if not _TIME_PATTERN.match(v):
            raise ValueError(f"Invalid time of day: {v!r} (expected HH:MM)")
        return v

    @model_validator(mode="after")
    def check_recurrence(self) -> "AvailabilitySlot":
        if (self.day_of_week is None) == (self.specific_date is None):
            raise ValueError("Set exactly one of day_of_week or specific_date")
        return self

    @property
    def start_hour(self) -> int:
        return int(self.start_time.split(":")[0])


class Diploma(EmbeddedModel):
    """A diploma or certification held by a talent."""

    name: str
    year: Optional[int] = Field(default=None, ge=1900, le=2100)


class CandidateProfile(EmbeddedModel):
    """Public profile of a talent, used for matching."""

    id: PyObjectId = Field(default_factory=ObjectId)
    first_name: str
    last_name: str
    headline: Optional[str] = None
    avatar_url: Optional[str] = None

    latitude: Optional[float] = Field(default=None, ge=-90, le=90)
    longitude: Optional[float] = Field(default=None, ge=-180, le=180)

    specialties: list[str] = Field(default_factory=list)
    diplomas: list[Diploma] = Field(default_factory=list)
    hourly_rate: Optional[float] = Field(default=None, ge=0)
    average_rating: float = Field(default=0.0, ge=0, le=5)
    total_missions: int = Field(default=0, ge=0)
    availability_slots: list[AvailabilitySlot] = Field(default_factory=list)

    @property
    def diploma_names(self) -> list[str]:
        return [d.name for d in self.diplomas]


class User(BaseDocument):
    """
    Platform account.

    Only users with role ``talent``, status ``verified`` and a profile are
    candidates for matching.
    """

    email: EmailStr
    role: UserRole = UserRole.TALENT
    status: UserStatus = UserStatus.PENDING
    profile: Optional[CandidateProfile] = None

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        return v.lower()

    @property
    def is_matchable(self) -> bool:
        return (
            self.role == UserRole.TALENT
            and self.status == UserStatus.VERIFIED
            and self.profile is not None
        )

    class Settings:
        """MongoDB collection settings."""

        name = "users"
        indexes = [
            "email",
            "role",
            "status",
            "profile.specialties",
        ]
