"""
Application-wide constants for Renfort.

Scoring weights, geographic constants and the enums shared by the
data models and the matching engine.
"""

from enum import Enum
from typing import Final


# =============================================================================
# Application Constants
# =============================================================================

APP_NAME: Final[str] = "renfort"
VERSION: Final[str] = "0.1.0"


# =============================================================================
# Geographic Constants
# =============================================================================

EARTH_RADIUS_KM: Final[float] = 6371.0

# Flat-earth approximation used by the bounding box prefilter
KM_PER_DEGREE: Final[float] = 111.0

# Lower bound for cos(latitude) so longitude spans stay finite near the poles
MIN_COS_LATITUDE: Final[float] = 0.0001


# =============================================================================
# Matching Constants
# =============================================================================

DEFAULT_SEARCH_RADIUS_KM: Final[float] = 30.0
DEFAULT_CANDIDATE_LIMIT: Final[int] = 10
MIN_SEARCH_RADIUS_KM: Final[float] = 1.0
MAX_SEARCH_RADIUS_KM: Final[float] = 200.0
MAX_CANDIDATE_LIMIT: Final[int] = 50

# Default weights for the composite match score (sum to 1.0)
DEFAULT_SCORING_WEIGHTS: Final[dict[str, float]] = {
    "distance": 0.20,
    "skills": 0.25,
    "diplomas": 0.25,
    "availability": 0.15,
    "rating": 0.10,
    "experience": 0.05,
}

# Partial credit given to candidates without a matching availability slot
UNAVAILABLE_SCORE: Final[float] = 0.3

MAX_RATING: Final[float] = 5.0

# Number of completed missions at which the experience sub-score saturates
EXPERIENCE_CAP_MISSIONS: Final[int] = 50

# Night window: a slot starting at or after NIGHT_START_HOUR, or before
# NIGHT_END_HOUR, covers a night shift
NIGHT_START_HOUR: Final[int] = 18
NIGHT_END_HOUR: Final[int] = 6

DEFAULT_MISSION_TITLE_PREFIX: Final[str] = "Renfort - "


# =============================================================================
# Enums
# =============================================================================


class MissionUrgency(str, Enum):
    """Urgency of a relief mission, ordered from LOW to CRITICAL."""

    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    CRITICAL = "CRITICAL"

    @property
    def rank(self) -> int:
        return _URGENCY_ORDER.index(self)

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, MissionUrgency):
            return NotImplemented
        return self.rank < other.rank

    def __le__(self, other: object) -> bool:
        if not isinstance(other, MissionUrgency):
            return NotImplemented
        return self.rank <= other.rank

    def __gt__(self, other: object) -> bool:
        if not isinstance(other, MissionUrgency):
            return NotImplemented
        return self.rank > other.rank

    def __ge__(self, other: object) -> bool:
        if not isinstance(other, MissionUrgency):
            return NotImplemented
        return self.rank >= other.rank


_URGENCY_ORDER: Final[tuple[MissionUrgency, ...]] = (
    MissionUrgency.LOW,
    MissionUrgency.MEDIUM,
    MissionUrgency.HIGH,
    MissionUrgency.CRITICAL,
)


class MissionStatus(str, Enum):
    """Lifecycle status of a relief mission."""

    OPEN = "OPEN"
    ASSIGNED = "ASSIGNED"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"


class ApplicationStatus(str, Enum):
    """Status of a talent's application to a mission."""

    PENDING = "PENDING"
    ACCEPTED = "ACCEPTED"
    REJECTED = "REJECTED"
    WITHDRAWN = "WITHDRAWN"


class UserRole(str, Enum):
    """Platform actor roles."""

    TALENT = "talent"
    CLIENT = "client"
    ADMIN = "admin"


class UserStatus(str, Enum):
    """Account verification status."""

    PENDING = "pending"
    VERIFIED = "verified"
    SUSPENDED = "suspended"


class AuditAction(str, Enum):
    """Types of actions that can be audited."""

    MISSION_CREATED = "mission_created"
    MISSION_STATUS_CHANGED = "mission_status_changed"
    CANDIDATES_MATCHED = "candidates_matched"
    APPLICATION_CREATED = "application_created"
    CRITICAL_ALERT_SENT = "critical_alert_sent"
