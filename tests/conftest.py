"""
Shared test fixtures for the Renfort test suite.

Sets environment variables before any renfort imports so logging stays on
the console, then provides in-memory repositories standing in for MongoDB
and factory fixtures for talents and missions.
"""

import os

# === Set environment BEFORE any renfort imports ===
os.environ.setdefault("APP_ENVIRONMENT", "testing")
os.environ.setdefault("DB_NAME", "renfort_test")
os.environ.setdefault("LOG_FILE_OUTPUT", "false")

from datetime import date, datetime, timezone
from typing import Any, Optional

import pytest
from bson import ObjectId
from pymongo.errors import DuplicateKeyError

from renfort.core.geo import BoundingBox
from renfort.core.matching.matching_engine import MatchingEngine
from renfort.data.models import (
    AvailabilitySlot,
    CandidateProfile,
    Diploma,
    Mission,
    MissionApplication,
    User,
)
from renfort.data.models.base import utcnow
from renfort.utils.config import MatchingSettings
from renfort.utils.constants import MissionStatus, UserRole, UserStatus

PARIS = (48.8566, 2.3522)

# Monday 19 October 2026, 10:00 UTC
MONDAY_MORNING = datetime(2026, 10, 19, 10, 0, tzinfo=timezone.utc)


def _oid(value: Any) -> Optional[ObjectId]:
    if isinstance(value, ObjectId):
        return value
    if isinstance(value, str) and ObjectId.is_valid(value):
        return ObjectId(value)
    return None


# ---------------------------------------------------------------------------
# In-memory repositories
# ---------------------------------------------------------------------------


class InMemoryMissionRepository:
    """Mission store keyed by ObjectId."""

    def __init__(self) -> None:
        self.missions: dict[ObjectId, Mission] = {}
        self.fail_on_create: Optional[Exception] = None

    def create(self, mission: Mission) -> Mission:
        if self.fail_on_create is not None:
            raise self.fail_on_create
        now = utcnow()
        mission.created_at = now
        mission.updated_at = now
        mission.id = ObjectId()
        self.missions[mission.id] = mission
        return mission

    def add(self, mission: Mission) -> Mission:
        if mission.id is None:
            mission.id = ObjectId()
        self.missions[mission.id] = mission
        return mission

    def get_by_id(self, id_value: Any) -> Optional[Mission]:
        oid = _oid(id_value)
        return self.missions.get(oid) if oid else None

    def update_status(
        self, id_value: Any, status: MissionStatus, extra: Optional[dict[str, Any]] = None
    ) -> Optional[Mission]:
        mission = self.get_by_id(id_value)
        if mission is None:
            return None
        update = {"status": status.value, "updated_at": utcnow(), **(extra or {})}
        updated = mission.model_copy(update=update)
        self.missions[updated.id] = updated
        return updated


class InMemoryTalentRepository:
    """User store applying the same prefilter as the MongoDB candidate query."""

    def __init__(self) -> None:
        self.users: list[User] = []
        self.queries: list[dict[str, Any]] = []

    def add(self, user: User) -> User:
        if user.id is None:
            user.id = ObjectId()
        self.users.append(user)
        return user

    def get_email(self, user_id: Any) -> Optional[str]:
        oid = _oid(user_id)
        for user in self.users:
            if user.id == oid:
                return user.email
        return None

    def find_by_bounding_box_and_skills(
        self, box: BoundingBox, required_skills: list[str], limit: int
    ) -> list[User]:
        self.queries.append({"box": box, "skills": list(required_skills), "limit": limit})

        matched = []
        for user in self.users:
            profile = user.profile
            if user.role != UserRole.TALENT.value or user.status != UserStatus.VERIFIED.value:
                continue
            if profile is None or profile.latitude is None or profile.longitude is None:
                continue
            if not (box.min_lat <= profile.latitude <= box.max_lat):
                continue
            if not (box.min_lng <= profile.longitude <= box.max_lng):
                continue
            if not all(skill in profile.specialties for skill in required_skills):
                continue
            matched.append(user)
        return matched[:limit]


class InMemoryApplicationRepository:
    """Application store enforcing the unique (mission_id, talent_id) pair."""

    def __init__(self) -> None:
        self.applications: list[MissionApplication] = []
        self.skip_lookup = False

    def get_by_mission_and_talent(self, mission_id: Any, talent_id: Any) -> Optional[MissionApplication]:
        if self.skip_lookup:
            return None
        for application in self.applications:
            if application.mission_id == _oid(mission_id) and application.talent_id == _oid(talent_id):
                return application
        return None

    def create(self, application: MissionApplication) -> MissionApplication:
        for existing in self.applications:
            if (existing.mission_id, existing.talent_id) == (application.mission_id, application.talent_id):
                raise DuplicateKeyError("E11000 duplicate key error", code=11000)
        application.id = ObjectId()
        application.created_at = utcnow()
        self.applications.append(application)
        return application

    def get_by_mission(self, mission_id: Any) -> list[MissionApplication]:
        found = [a for a in self.applications if a.mission_id == _oid(mission_id)]
        return sorted(found, key=lambda a: a.created_at, reverse=True)


class RecordingNotificationService:
    """Collects dispatched alerts instead of sending e-mail."""

    def __init__(self) -> None:
        self.alerts: list = []
        self.error: Optional[Exception] = None

    def dispatch_critical_mission_alert(self, alert):
        if self.error is not None:
            raise self.error
        self.alerts.append(alert)


# ---------------------------------------------------------------------------
# Engine fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def mission_repository():
    return InMemoryMissionRepository()


@pytest.fixture
def talent_repository():
    return InMemoryTalentRepository()


@pytest.fixture
def application_repository():
    return InMemoryApplicationRepository()


@pytest.fixture
def notification_service():
    return RecordingNotificationService()


@pytest.fixture
def matching_engine(mission_repository, talent_repository, application_repository, notification_service):
    """MatchingEngine wired to in-memory stores."""
    return MatchingEngine(
        mission_repository=mission_repository,
        talent_repository=talent_repository,
        application_repository=application_repository,
        notification_service=notification_service,
        matching_settings=MatchingSettings(),
    )


# ---------------------------------------------------------------------------
# Factory fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def make_talent(talent_repository):
    """Factory that builds a verified talent and stores it in the talent repository."""

    def _factory(
        latitude: Optional[float] = PARIS[0],
        longitude: Optional[float] = PARIS[1],
        first_name: str = "Camille",
        last_name: str = "Martin",
        specialties: Optional[list[str]] = None,
        diplomas: Optional[list[dict[str, Any]]] = None,
        slots: Optional[list[dict[str, Any]]] = None,
        average_rating: float = 4.0,
        total_missions: int = 10,
        status: UserStatus = UserStatus.VERIFIED,
        role: UserRole = UserRole.TALENT,
        store: bool = True,
    ) -> User:
        profile = CandidateProfile(
            first_name=first_name,
            last_name=last_name,
            latitude=latitude,
            longitude=longitude,
            specialties=specialties if specialties is not None else ["Aide-soignant"],
            diplomas=[Diploma(**d) for d in (diplomas or [])],
            availability_slots=[AvailabilitySlot(**s) for s in (slots or [])],
            average_rating=average_rating,
            total_missions=total_missions,
        )
        user = User(
            email=f"{first_name}.{last_name}@renfort.fr".lower(),
            role=role,
            status=status,
            profile=profile,
        )
        if store:
            talent_repository.add(user)
        return user

    return _factory


@pytest.fixture
def make_mission(mission_repository):
    """Factory that builds a mission and stores it in the mission repository."""

    def _factory(
        latitude: Optional[float] = PARIS[0],
        longitude: Optional[float] = PARIS[1],
        radius_km: Optional[float] = 10.0,
        required_skills: Optional[list[str]] = None,
        required_diplomas: Optional[list[str]] = None,
        status: MissionStatus = MissionStatus.OPEN,
        start_date: datetime = MONDAY_MORNING,
        is_night_shift: bool = False,
        assigned_talent_id: Optional[ObjectId] = None,
    ) -> Mission:
        mission = Mission(
            client_id=ObjectId(),
            title="Renfort - Aide-soignant",
            job_title="Aide-soignant",
            hourly_rate=25.0,
            is_night_shift=is_night_shift,
            start_date=start_date,
            end_date=start_date.replace(hour=18),
            city="Paris",
            postal_code="75001",
            address="1 rue de Rivoli",
            latitude=latitude,
            longitude=longitude,
            radius_km=radius_km,
            required_skills=required_skills or [],
            required_diplomas=required_diplomas or [],
            status=status,
            assigned_talent_id=assigned_talent_id,
        )
        return mission_repository.add(mission)

    return _factory


@pytest.fixture
def mission_payload():
    """Valid create_mission input."""
    return {
        "job_title": "Infirmier",
        "hourly_rate": 32.5,
        "start_date": MONDAY_MORNING,
        "city": "Lyon",
        "postal_code": "69001",
        "latitude": 45.7640,
        "longitude": 4.8357,
        "required_skills": ["Soins palliatifs", "  ", "Soins palliatifs"],
        "required_diplomas": ["DE Infirmier"],
    }


@pytest.fixture
def monday_morning() -> datetime:
    return MONDAY_MORNING


@pytest.fixture
def monday() -> date:
    return MONDAY_MORNING.date()
