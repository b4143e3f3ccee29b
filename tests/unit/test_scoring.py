"""
Tests for renfort.core.matching.scoring — sub-scores and the composite score.
"""

from datetime import date, datetime, timezone

import pytest

from renfort.core.matching.scoring import (
    availability_score,
    calculate_diplomas_match,
    calculate_match_score,
    calculate_skills_match,
    check_availability,
    containment_ratio,
    day_of_week,
    distance_score,
    experience_score,
    rating_score,
    round_half_up,
)
from renfort.data.models import AvailabilitySlot

MONDAY = datetime(2026, 10, 19, 10, 0, tzinfo=timezone.utc)


def weekly(day: int, start: str = "08:00", end: str = "18:00", active: bool = True) -> AvailabilitySlot:
    return AvailabilitySlot(day_of_week=day, start_time=start, end_time=end, is_active=active)


def dated(on: date, active: bool = True) -> AvailabilitySlot:
    return AvailabilitySlot(specific_date=on, is_active=active)


# ── round_half_up ────────────────────────────────────────────────────────────


class TestRoundHalfUp:
    def test_half_rounds_up(self):
        assert round_half_up(2.5) == 3
        assert round(2.5) == 2

    def test_one_decimal(self):
        assert round_half_up(12.25, 1) == pytest.approx(12.3)

    def test_below_half(self):
        assert round_half_up(7.49) == 7


# ── skills / diplomas ────────────────────────────────────────────────────────


class TestSkillsMatch:
    def test_empty_requirements_is_full_match(self):
        assert calculate_skills_match([], []) == 1.0
        assert calculate_skills_match([], ["Aide-soignant"]) == 1.0

    def test_exact_match(self):
        assert calculate_skills_match(["Aide-soignant"], ["Aide-soignant"]) == 1.0

    def test_case_insensitive(self):
        assert calculate_skills_match(["AIDE-SOIGNANT"], ["aide-soignant"]) == 1.0

    def test_partial_ratio(self):
        score = calculate_skills_match(["Gériatrie", "Pédiatrie"], ["Gériatrie"])
        assert score == 0.5

    def test_no_match(self):
        assert calculate_skills_match(["Pédiatrie"], ["Gériatrie"]) == 0.0

    def test_required_contains_available(self):
        assert containment_ratio(["Soins palliatifs"], ["palliatifs"]) == 1.0

    def test_available_contains_required(self):
        assert containment_ratio(["soins"], ["Soins palliatifs"]) == 1.0


class TestDiplomasMatch:
    def test_substring_diploma(self):
        assert calculate_diplomas_match(["PSC1"], ["Premiers secours PSC1"]) == 1.0

    def test_missing_diploma(self):
        assert calculate_diplomas_match(["DEAS"], ["Premiers secours PSC1"]) == 0.0

    def test_no_required_diplomas(self):
        assert calculate_diplomas_match([], []) == 1.0

    def test_candidate_without_diplomas(self):
        assert calculate_diplomas_match(["PSC1"], []) == 0.0


# ── availability ─────────────────────────────────────────────────────────────


class TestDayOfWeek:
    def test_sunday_is_zero(self):
        assert day_of_week(datetime(2026, 10, 18)) == 0

    def test_monday_is_one(self):
        assert day_of_week(MONDAY) == 1

    def test_saturday_is_six(self):
        assert day_of_week(datetime(2026, 10, 17)) == 6


class TestCheckAvailability:
    def test_no_slots_is_available(self):
        assert check_availability([], MONDAY, is_night_shift=False) is True
        assert check_availability(None, MONDAY, is_night_shift=True) is True

    def test_matching_weekday(self):
        assert check_availability([weekly(1)], MONDAY, is_night_shift=False) is True

    def test_other_weekday_only(self):
        assert check_availability([weekly(2)], MONDAY, is_night_shift=False) is False

    def test_inactive_weekday_slot_ignored(self):
        assert check_availability([weekly(1, active=False)], MONDAY, is_night_shift=False) is False

    def test_night_shift_needs_evening_slot(self):
        assert check_availability([weekly(1, "08:00")], MONDAY, is_night_shift=True) is False
        assert check_availability([weekly(1, "20:00", "23:59")], MONDAY, is_night_shift=True) is True

    def test_night_window_boundaries(self):
        assert check_availability([weekly(1, "18:00")], MONDAY, is_night_shift=True) is True
        assert check_availability([weekly(1, "05:00")], MONDAY, is_night_shift=True) is True
        assert check_availability([weekly(1, "06:00")], MONDAY, is_night_shift=True) is False

    def test_specific_date_fallback(self):
        slots = [weekly(3), dated(date(2026, 10, 19))]
        assert check_availability(slots, MONDAY, is_night_shift=False) is True

    def test_specific_date_other_day(self):
        assert check_availability([dated(date(2026, 10, 20))], MONDAY, is_night_shift=False) is False

    def test_inactive_specific_date(self):
        assert check_availability([dated(date(2026, 10, 19), active=False)], MONDAY, is_night_shift=False) is False

    def test_specific_date_ignores_night_rule(self):
        assert check_availability([dated(date(2026, 10, 19))], MONDAY, is_night_shift=True) is True

    def test_weekday_slot_takes_precedence_over_date(self):
        # A day slot exists, so the night rule decides even with a matching dated slot
        slots = [weekly(1, "08:00"), dated(date(2026, 10, 19))]
        assert check_availability(slots, MONDAY, is_night_shift=True) is False


# ── sub-scores ───────────────────────────────────────────────────────────────


class TestSubScores:
    def test_distance_score_at_center(self):
        assert distance_score(0, 10) == 1.0

    def test_distance_score_at_radius(self):
        assert distance_score(10, 10) == 0.0

    def test_distance_score_halfway(self):
        assert distance_score(5, 10) == pytest.approx(0.5)

    def test_distance_score_zero_radius(self):
        assert distance_score(0, 0) == 0.0

    def test_availability_score(self):
        assert availability_score(True) == 1.0
        assert availability_score(False) == 0.3

    def test_rating_score(self):
        assert rating_score(5) == 1.0
        assert rating_score(None) == 0.0
        assert rating_score(2.5) == pytest.approx(0.5)

    def test_experience_score_capped(self):
        assert experience_score(25) == pytest.approx(0.5)
        assert experience_score(50) == 1.0
        assert experience_score(400) == 1.0
        assert experience_score(None) == 0.0


# ── calculate_match_score ────────────────────────────────────────────────────


class TestCalculateMatchScore:
    def test_perfect(self):
        assert calculate_match_score(1, 1, 1, 1, 1, 1) == 100

    def test_nothing(self):
        assert calculate_match_score(0, 0, 0, 0, 0, 0) == 0

    def test_weights_applied(self):
        # distance 0.2 + skills 0.25
        assert calculate_match_score(1, 1, 0, 0, 0, 0) == 45

    def test_returns_int(self):
        score = calculate_match_score(0.37, 0.5, 1, 0.3, 0.84, 0.12)
        assert isinstance(score, int)
        assert 0 <= score <= 100

    def test_clamped(self):
        assert calculate_match_score(2, 2, 2, 2, 2, 2) == 100
        assert calculate_match_score(-1, 0, 0, 0, 0, 0) == 0

    def test_custom_weights(self):
        weights = {
            "distance": 1.0,
            "skills": 0.0,
            "diplomas": 0.0,
            "availability": 0.0,
            "rating": 0.0,
            "experience": 0.0,
        }
        assert calculate_match_score(0.5, 1, 1, 1, 1, 1, weights=weights) == 50

    @pytest.mark.parametrize(
        "subscores",
        [
            (0.0, 1.0, 0.0, 0.3, 0.2, 0.02),
            (0.99, 0.33, 0.66, 1.0, 0.9, 0.5),
            (0.5, 0.5, 0.5, 0.5, 0.5, 0.5),
        ],
    )
    def test_always_in_range(self, subscores):
        assert 0 <= calculate_match_score(*subscores) <= 100
