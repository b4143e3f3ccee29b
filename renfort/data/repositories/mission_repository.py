"""
Mission repository for Renfort.

Provides data access operations for relief mission documents.
"""

from typing import Any, Optional

from bson import ObjectId

from renfort.data.models.mission import Mission
from renfort.utils.constants import MissionStatus
from renfort.utils.logger import get_logger

from .base import BaseRepository

logger = get_logger(__name__)


class MissionRepository(BaseRepository[Mission]):
    """Repository for relief mission document operations."""

    @property
    def collection_name(self) -> str:
        return "missions"

    @property
    def model_class(self) -> type[Mission]:
        return Mission

    def update_status(
        self,
        id_value: str | ObjectId,
        status: MissionStatus,
        extra: Optional[dict[str, Any]] = None,
    ) -> Optional[Mission]:
        """Update mission status, optionally with additional fields."""
        update_data = {"status": status.value}
        if extra:
            update_data.update(extra)
        return self.update(id_value, update_data)


# Singleton instance
_mission_repository: Optional[MissionRepository] = None


def get_mission_repository() -> MissionRepository:
    """Get the mission repository singleton instance."""
    global _mission_repository
    if _mission_repository is None:
        _mission_repository = MissionRepository()
    return _mission_repository
