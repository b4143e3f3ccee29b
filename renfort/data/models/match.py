"""
Candidate matching request/response schemas for Renfort.

Match results are ephemeral: they are computed fresh for every request
and never persisted.
"""

from typing import Optional

from pydantic import BaseModel, Field, field_validator

from renfort.utils.constants import (
    MAX_CANDIDATE_LIMIT,
    MAX_SEARCH_RADIUS_KM,
    MIN_SEARCH_RADIUS_KM,
)

from .talent import Diploma


class FindCandidatesOptions(BaseModel):
    """Optional knobs for a candidate search."""

    skills: list[str] = Field(default_factory=list)  # extra required skills
    radius_km: Optional[float] = Field(
        default=None, ge=MIN_SEARCH_RADIUS_KM, le=MAX_SEARCH_RADIUS_KM
    )
    # None falls back to the configured default
    limit: Optional[int] = Field(default=None, ge=1, le=MAX_CANDIDATE_LIMIT)

    @field_validator("skills")
    @classmethod
    def drop_blank_skills(cls, v: list[str]) -> list[str]:
        return [s.strip() for s in v if s and s.strip()]


class MatchResult(BaseModel):
    """A scored candidate for a mission."""

    id: str  # profile id
    user_id: str
    first_name: str
    last_name: str
    avatar_url: Optional[str] = None
    headline: Optional[str] = None
    specialties: list[str] = Field(default_factory=list)
    diplomas: list[Diploma] = Field(default_factory=list)
    hourly_rate: Optional[float] = None
    average_rating: float = 0.0
    total_missions: int = 0

    distance: float  # km, one decimal
    match_score: int = Field(..., ge=0, le=100)
    is_available: bool


class MatchingResult(BaseModel):
    """Ranked candidates returned by a search."""

    candidates: list[MatchResult] = Field(default_factory=list)
    total_found: int = 0  # survivors before truncation
    search_radius: float
    mission_id: str
