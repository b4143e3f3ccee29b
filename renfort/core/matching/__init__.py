"""Mission-to-talent matching engine module."""

from .matching_engine import (
    MatchingEngine,
    get_matching_engine,
)
from .scoring import (
    calculate_diplomas_match,
    calculate_match_score,
    calculate_skills_match,
    check_availability,
)

__all__ = [
    "MatchingEngine",
    "get_matching_engine",
    "calculate_diplomas_match",
    "calculate_match_score",
    "calculate_skills_match",
    "check_availability",
]
