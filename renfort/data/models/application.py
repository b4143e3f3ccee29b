"""
Mission application models for Renfort.

At most one application exists per (mission, talent) pair; the storage
layer enforces this with a unique compound index.
"""

from typing import Optional

from pydantic import BaseModel, Field

from renfort.utils.constants import ApplicationStatus

from .base import BaseDocument, PyObjectId
from .mission import Mission


class MissionApplication(BaseDocument):
    """A talent's application to a relief mission."""

    mission_id: PyObjectId
    talent_id: PyObjectId
    status: ApplicationStatus = ApplicationStatus.PENDING
    cover_letter: Optional[str] = Field(default=None, max_length=5000)
    proposed_rate: Optional[float] = Field(default=None, ge=0)

    class Settings:
        """MongoDB collection settings."""

        name = "mission_applications"
        indexes = [
            [("mission_id", 1), ("talent_id", 1)],
            "talent_id",
            "status",
            "created_at",
        ]


class MissionWithApplications(BaseModel):
    """A mission together with its applications, newest first."""

    mission: Mission
    applications: list[MissionApplication] = Field(default_factory=list)

    @property
    def application_count(self) -> int:
        return len(self.applications)
