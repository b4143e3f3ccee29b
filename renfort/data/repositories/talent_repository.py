"""
Talent repository for Renfort.

Read access to platform users and their candidate profiles, including the
geographic candidate query used by the matching engine.
"""

from typing import Any, Iterable, Optional

from bson import ObjectId

from renfort.core.geo import BoundingBox
from renfort.data.models.talent import User
from renfort.utils.constants import UserRole, UserStatus
from renfort.utils.logger import get_logger

from .base import BaseRepository

logger = get_logger(__name__)


class TalentRepository(BaseRepository[User]):
    """Repository for user/talent document operations."""

    @property
    def collection_name(self) -> str:
        return "users"

    @property
    def model_class(self) -> type[User]:
        return User

    # -------------------------------------------------------------------------
    # Query Operations
    # -------------------------------------------------------------------------

    def get_email(self, user_id: str | ObjectId) -> Optional[str]:
        """Get the contact e-mail of any user."""
        user = self.get_by_id(user_id)
        return user.email if user else None

    @staticmethod
    def build_candidate_query(
        box: BoundingBox, required_skills: Iterable[str]
    ) -> dict[str, Any]:
        """
        Build the candidate prefilter.

        Verified talents whose profile lies inside the bounding box and whose
        specialties contain every required skill.
        """
        query: dict[str, Any] = {
            "role": UserRole.TALENT.value,
            "status": UserStatus.VERIFIED.value,
            "profile": {"$ne": None},
            "profile.latitude": {"$gte": box.min_lat, "$lte": box.max_lat},
            "profile.longitude": {"$gte": box.min_lng, "$lte": box.max_lng},
        }
        skills = list(required_skills)
        if skills:
            query["profile.specialties"] = {"$all": skills}
        return query

    def find_by_bounding_box_and_skills(
        self,
        box: BoundingBox,
        required_skills: Iterable[str],
        limit: int,
    ) -> list[User]:
        """Fetch up to ``limit`` candidate talents inside ``box``."""
        query = self.build_candidate_query(box, required_skills)
        logger.debug(f"Candidate query: {query} (limit={limit})")
        return self.find(query, limit=limit)


# Singleton instance
_talent_repository: Optional[TalentRepository] = None


def get_talent_repository() -> TalentRepository:
    """Get the talent repository singleton instance."""
    global _talent_repository
    if _talent_repository is None:
        _talent_repository = TalentRepository()
    return _talent_repository
