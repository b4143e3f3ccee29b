"""
Mission application repository for Renfort.

The ``(mission_id, talent_id)`` unique index makes ``create`` raise
``pymongo.errors.DuplicateKeyError`` on a concurrent duplicate.
"""

from typing import Optional

from bson import ObjectId

from renfort.data.models.application import MissionApplication
from renfort.utils.logger import get_logger

from .base import BaseRepository

logger = get_logger(__name__)


class ApplicationRepository(BaseRepository[MissionApplication]):
    """Repository for mission application document operations."""

    @property
    def collection_name(self) -> str:
        return "mission_applications"

    @property
    def model_class(self) -> type[MissionApplication]:
        return MissionApplication

    def get_by_mission_and_talent(
        self,
        mission_id: str | ObjectId,
        talent_id: str | ObjectId,
    ) -> Optional[MissionApplication]:
        """Get the application of a talent to a mission, if any."""
        return self.find_one(
            {
                "mission_id": self._to_object_id(mission_id),
                "talent_id": self._to_object_id(talent_id),
            }
        )

    def get_by_mission(
        self,
        mission_id: str | ObjectId,
        skip: int = 0,
        limit: int = 0,
    ) -> list[MissionApplication]:
        """Get all applications for a mission, newest first. A limit of 0 means no limit."""
        return self.find(
            {"mission_id": self._to_object_id(mission_id)},
            skip=skip,
            limit=limit,
            sort_by="created_at",
            sort_order=-1,
        )


# Singleton instance
_application_repository: Optional[ApplicationRepository] = None


def get_application_repository() -> ApplicationRepository:
    """Get the application repository singleton instance."""
    global _application_repository
    if _application_repository is None:
        _application_repository = ApplicationRepository()
    return _application_repository
