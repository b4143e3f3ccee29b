"""
Pure scoring functions for candidate matching.

Nothing here touches the database: every function takes plain values and
can be unit tested on its own.
"""

import math
from datetime import datetime
from typing import Iterable, Optional

from renfort.data.models.talent import AvailabilitySlot
from renfort.utils.constants import (
    DEFAULT_SCORING_WEIGHTS,
    EXPERIENCE_CAP_MISSIONS,
    MAX_RATING,
    NIGHT_END_HOUR,
    NIGHT_START_HOUR,
    UNAVAILABLE_SCORE,
)


def round_half_up(value: float, ndigits: int = 0) -> float:
    """Round halves away from zero for positive values (0.5 -> 1), unlike round()."""
    factor = 10 ** ndigits
    return math.floor(value * factor + 0.5) / factor


# -----------------------------------------------------------------------------
# Overlap
# -----------------------------------------------------------------------------


def containment_ratio(required: Iterable[str], available: Iterable[str]) -> float:
    """
    Share of required terms matched by at least one available term.

    A required term matches when, case-insensitively, it contains an
    available term or is contained in one. Nothing required is a full match.
    """
    required_lower = [term.lower() for term in required]
    if not required_lower:
        return 1.0

    available_lower = [term.lower() for term in available]
    hits = sum(
        1
        for term in required_lower
        if any(avail in term or term in avail for avail in available_lower)
    )
    return hits / len(required_lower)


def calculate_skills_match(required: Iterable[str], specialties: Iterable[str]) -> float:
    """Skill overlap between mission requirements and talent specialties."""
    return containment_ratio(required, specialties)


def calculate_diplomas_match(required: Iterable[str], diploma_names: Iterable[str]) -> float:
    """Diploma overlap between mission requirements and talent diploma names."""
    return containment_ratio(required, (name or "" for name in diploma_names))


# -----------------------------------------------------------------------------
# Availability
# -----------------------------------------------------------------------------


def day_of_week(moment: datetime) -> int:
    """Day index with 0 = Sunday ... 6 = Saturday."""
    return (moment.weekday() + 1) % 7


def is_night_slot(slot: AvailabilitySlot) -> bool:
    return slot.start_hour >= NIGHT_START_HOUR or slot.start_hour < NIGHT_END_HOUR


def check_availability(
    slots: Optional[list[AvailabilitySlot]],
    mission_date: datetime,
    is_night_shift: bool,
) -> bool:
    """
    Decide whether a talent can cover a mission starting at ``mission_date``.

    Precedence: no slots at all means available; otherwise active weekly
    slots for the mission's weekday decide (a night shift needs one of them
    to start in the night window); with no weekly slot for that day, any
    active dated slot on the mission's calendar date makes the talent
    available.
    """
    if not slots:
        return True

    weekday = day_of_week(mission_date)
    day_slots = [slot for slot in slots if slot.is_active and slot.day_of_week == weekday]

    if not day_slots:
        mission_day = mission_date.date()
        return any(
            slot.is_active and slot.specific_date is not None and slot.specific_date == mission_day
            for slot in slots
        )

    if is_night_shift:
        return any(is_night_slot(slot) for slot in day_slots)

    return True


# -----------------------------------------------------------------------------
# Sub-scores and composite score
# -----------------------------------------------------------------------------


def distance_score(distance_km: float, max_distance_km: float) -> float:
    """1.0 at the mission point, falling linearly to 0.0 at the search radius."""
    if max_distance_km <= 0:
        return 0.0
    return max(0.0, 1 - distance_km / max_distance_km)


def availability_score(is_available: bool) -> float:
    return 1.0 if is_available else UNAVAILABLE_SCORE


def rating_score(average_rating: Optional[float]) -> float:
    return (average_rating or 0.0) / MAX_RATING


def experience_score(total_missions: Optional[int]) -> float:
    return min((total_missions or 0) / EXPERIENCE_CAP_MISSIONS, 1.0)


def calculate_match_score(
    distance: float,
    skills: float,
    diplomas: float,
    availability: float,
    rating: float,
    experience: float,
    weights: Optional[dict[str, float]] = None,
) -> int:
    """
    Weighted sum of the six sub-scores, scaled to an integer in [0, 100].

    Args:
        distance: Distance sub-score in [0, 1]
        skills: Skills overlap in [0, 1]
        diplomas: Diplomas overlap in [0, 1]
        availability: Availability sub-score in [0, 1]
        rating: Normalized rating in [0, 1]
        experience: Normalized experience in [0, 1]
        weights: Optional custom weights keyed like DEFAULT_SCORING_WEIGHTS

    Returns:
        Rounded composite score
    """
    weights = weights or DEFAULT_SCORING_WEIGHTS

    score = (
        distance * weights["distance"]
        + skills * weights["skills"]
        + diplomas * weights["diplomas"]
        + availability * weights["availability"]
        + rating * weights["rating"]
        + experience * weights["experience"]
    )

    return int(min(100, max(0, round_half_up(score * 100))))
