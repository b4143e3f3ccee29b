"""
Mission-to-talent matching engine.

Finds verified talents around a relief mission and ranks them on distance,
skills, diplomas, availability, rating and experience. Also owns the thin
mission layer around matching: creation, applications and status changes.
"""

from datetime import timedelta
from typing import Any, Iterable, Optional, TypeVar

from bson import ObjectId
from pydantic import BaseModel, ValidationError
from pymongo.errors import DuplicateKeyError

from renfort.core.exceptions import (
    AlreadyAppliedError,
    BadRequestError,
    InternalError,
    InvalidTransitionError,
    MissionClosedError,
    NotFoundError,
)
from renfort.core.geo import GeoPoint, bounding_box, haversine_distance
from renfort.core.lifecycle import MissionStateMachine
from renfort.core.matching.scoring import (
    availability_score,
    calculate_diplomas_match,
    calculate_match_score,
    calculate_skills_match,
    check_availability,
    distance_score,
    experience_score,
    rating_score,
    round_half_up,
)
from renfort.data.models import (
    FindCandidatesOptions,
    MatchingResult,
    MatchResult,
    Mission,
    MissionApplication,
    MissionCreate,
    MissionWithApplications,
    PyObjectId,
    User,
)
from renfort.data.repositories import (
    ApplicationRepository,
    MissionRepository,
    TalentRepository,
    get_application_repository,
    get_mission_repository,
    get_talent_repository,
)
from renfort.services.notification_service import (
    CriticalMissionAlert,
    NotificationService,
    get_notification_service,
)
from renfort.utils.config import MatchingSettings, get_settings
from renfort.utils.constants import (
    DEFAULT_MISSION_TITLE_PREFIX,
    DEFAULT_SCORING_WEIGHTS,
    ApplicationStatus,
    AuditAction,
    MissionStatus,
)
from renfort.utils.logger import audit_log, get_logger

logger = get_logger(__name__)

M = TypeVar("M", bound=BaseModel)

MISSING_COORDINATES_MESSAGE = "La mission doit contenir des coordonnées GPS pour trouver des talents"


def merge_terms(*groups: Iterable[str]) -> list[str]:
    """Union of term lists, deduplicated, blanks dropped, first occurrence kept."""
    merged: list[str] = []
    for group in groups:
        for term in group or []:
            if term and term not in merged:
                merged.append(term)
    return merged


class MatchingEngine:
    """
    Engine for finding and ranking candidates for relief missions.

    Each search is stateless: one mission lookup, one bounded candidate
    fetch, then scoring and sorting in memory. Repositories and the
    notification service are injected so the engine runs without MongoDB
    in tests.
    """

    def __init__(
        self,
        mission_repository: Optional[MissionRepository] = None,
        talent_repository: Optional[TalentRepository] = None,
        application_repository: Optional[ApplicationRepository] = None,
        notification_service: Optional[NotificationService] = None,
        weights: Optional[dict[str, float]] = None,
        matching_settings: Optional[MatchingSettings] = None,
    ):
        """
        Initialize the matching engine.

        Args:
            mission_repository: Mission store (defaults to the MongoDB repository)
            talent_repository: Candidate store
            application_repository: Application store
            notification_service: Sink for critical-mission alerts
            weights: Optional custom scoring weights
            matching_settings: Optional matching defaults
        """
        self._missions = mission_repository or get_mission_repository()
        self._talents = talent_repository or get_talent_repository()
        self._applications = application_repository or get_application_repository()
        self._notifications = notification_service
        self._settings = matching_settings or get_settings().matching
        self._state_machine = MissionStateMachine()
        self.weights = weights or DEFAULT_SCORING_WEIGHTS

    @property
    def notifications(self) -> NotificationService:
        if self._notifications is None:
            self._notifications = get_notification_service()
        return self._notifications

    # -------------------------------------------------------------------------
    # Missions
    # -------------------------------------------------------------------------

    def create_mission(
        self, data: MissionCreate | dict[str, Any], client_id: str | ObjectId
    ) -> Mission:
        """
        Create an OPEN relief mission for a client.

        Missing optional fields get their defaults (title, end date, address,
        radius). A CRITICAL mission also triggers a background alert e-mail.
        """
        data = self._validate(MissionCreate, data)
        mission = self._build_mission(data, client_id)

        try:
            mission = self._missions.create(mission)
        except Exception as e:
            logger.exception(f"create_mission failed for client {client_id}: {e}")
            raise InternalError("Erreur lors de la création de la mission", cause=e) from e

        logger.info(f"Mission created: {mission.id} by client {client_id}")
        audit_log(
            AuditAction.MISSION_CREATED.value,
            {
                "mission_id": str(mission.id),
                "client_id": str(client_id),
                "urgency": mission.urgency_level,
            },
        )

        if mission.is_critical:
            self._notify_critical_mission(mission, client_id)

        return mission

    def _build_mission(self, data: MissionCreate, client_id: str | ObjectId) -> Mission:
        end_date = data.end_date
        if end_date is None:
            end_date = data.start_date + timedelta(hours=self._settings.default_mission_hours)

        try:
            return Mission(
                client_id=client_id,
                title=data.title or f"{DEFAULT_MISSION_TITLE_PREFIX}{data.job_title}",
                job_title=data.job_title,
                description=data.description or "",
                hourly_rate=data.hourly_rate,
                is_night_shift=data.is_night_shift,
                urgency_level=data.urgency_level,
                start_date=data.start_date,
                end_date=end_date,
                city=data.city,
                postal_code=data.postal_code,
                address=data.address or data.city,
                latitude=data.latitude,
                longitude=data.longitude,
                radius_km=data.radius_km or self._settings.default_radius_km,
                required_skills=data.required_skills,
                required_diplomas=data.required_diplomas,
                status=MissionStatus.OPEN,
            )
        except ValidationError as e:
            raise BadRequestError("Données de mission invalides", errors=e.errors()) from e

    def _notify_critical_mission(self, mission: Mission, client_id: str | ObjectId) -> None:
        """Best effort: a failed alert never fails mission creation."""
        try:
            client_email = self._talents.get_email(client_id)
            self.notifications.dispatch_critical_mission_alert(
                CriticalMissionAlert(
                    title=mission.title,
                    job_title=mission.job_title,
                    city=mission.city,
                    start_date=mission.start_date,
                    client_email=client_email,
                )
            )
        except Exception as e:
            logger.error(f"Critical alert for mission {mission.id} not dispatched: {e}")

    def get_mission_with_applications(self, mission_id: str | ObjectId) -> MissionWithApplications:
        """Get a mission and its applications, newest first."""
        try:
            mission = self._get_mission_or_raise(mission_id)
            applications = self._applications.get_by_mission(mission.id)
            return MissionWithApplications(mission=mission, applications=applications)
        except NotFoundError:
            raise
        except Exception as e:
            logger.exception(f"get_mission_with_applications failed for mission {mission_id}: {e}")
            raise InternalError("Erreur lors de la récupération", cause=e) from e

    # -------------------------------------------------------------------------
    # Candidate search
    # -------------------------------------------------------------------------

    def find_candidates(
        self,
        mission_id: str | ObjectId,
        options: FindCandidatesOptions | dict[str, Any] | None = None,
    ) -> MatchingResult:
        """
        Find and rank candidates for a mission.

        Args:
            mission_id: Mission to staff
            options: Extra required skills, radius override and result limit

        Returns:
            MatchingResult with at most ``limit`` candidates, best first

        Raises:
            NotFoundError: the mission does not exist
            BadRequestError: the mission has no GPS coordinates
            InternalError: any other failure
        """
        options = self._validate(FindCandidatesOptions, options or {})

        try:
            mission = self._get_mission_or_raise(mission_id)

            if not mission.has_coordinates:
                raise BadRequestError(MISSING_COORDINATES_MESSAGE)

            logger.info(f"Finding candidates for mission: {mission.title}")

            search_radius = self._resolve_radius(options, mission)
            limit = options.limit or self._settings.default_limit
            mission_point = GeoPoint(mission.latitude, mission.longitude)

            # Stage 1: loose rectangular prefilter, evaluated by the database
            box = bounding_box(mission_point, search_radius)

            required_skills = merge_terms(mission.required_skills, options.skills)
            required_diplomas = merge_terms(mission.required_diplomas)
            fetch_size = max(limit * self._settings.fetch_multiplier, limit)

            talents = self._talents.find_by_bounding_box_and_skills(
                box, required_skills, fetch_size
            )

            # Stage 2: exact radius check and scoring
            candidates: list[MatchResult] = []
            for talent in talents:
                result = self._score_candidate(
                    talent,
                    mission,
                    mission_point,
                    search_radius,
                    required_skills,
                    required_diplomas,
                )
                if result is not None:
                    candidates.append(result)

            ranked = self.rank_candidates(candidates)[:limit]

            logger.info(f"Found {len(ranked)} candidates for mission {mission_id}")
            audit_log(
                AuditAction.CANDIDATES_MATCHED.value,
                {
                    "mission_id": str(mission.id),
                    "fetched": len(talents),
                    "total_found": len(candidates),
                    "returned": len(ranked),
                    "search_radius": search_radius,
                },
                audit_type="MATCHING",
            )

            return MatchingResult(
                candidates=ranked,
                total_found=len(candidates),
                search_radius=search_radius,
                mission_id=str(mission.id),
            )
        except (NotFoundError, BadRequestError):
            raise
        except Exception as e:
            logger.exception(f"find_candidates failed for mission {mission_id}: {e}")
            raise InternalError("Erreur lors de la recherche de candidats", cause=e) from e

    def _resolve_radius(self, options: FindCandidatesOptions, mission: Mission) -> float:
        if options.radius_km is not None:
            return options.radius_km
        if mission.radius_km is not None:
            return mission.radius_km
        return self._settings.default_radius_km

    def _score_candidate(
        self,
        talent: User,
        mission: Mission,
        mission_point: GeoPoint,
        search_radius: float,
        required_skills: list[str],
        required_diplomas: list[str],
    ) -> Optional[MatchResult]:
        """Score one talent, or None when it cannot be matched or lies outside the radius."""
        if not talent.is_matchable:
            return None
        profile = talent.profile

        distance = haversine_distance(
            mission_point, GeoPoint.from_coordinates(profile.latitude, profile.longitude)
        )
        if distance > search_radius:
            return None

        skills_match = calculate_skills_match(required_skills, profile.specialties)
        diplomas_match = calculate_diplomas_match(required_diplomas, profile.diploma_names)
        is_available = check_availability(
            profile.availability_slots, mission.start_date, mission.is_night_shift
        )

        match_score = calculate_match_score(
            distance=distance_score(distance, search_radius),
            skills=skills_match,
            diplomas=diplomas_match,
            availability=availability_score(is_available),
            rating=rating_score(profile.average_rating),
            experience=experience_score(profile.total_missions),
            weights=self.weights,
        )

        return MatchResult(
            id=str(profile.id),
            user_id=str(talent.id),
            first_name=profile.first_name,
            last_name=profile.last_name,
            avatar_url=profile.avatar_url,
            headline=profile.headline,
            specialties=profile.specialties,
            diplomas=profile.diplomas,
            hourly_rate=profile.hourly_rate,
            average_rating=profile.average_rating,
            total_missions=profile.total_missions,
            distance=round_half_up(distance, 1),
            match_score=match_score,
            is_available=is_available,
        )

    def rank_candidates(self, candidates: list[MatchResult]) -> list[MatchResult]:
        """
        Rank candidates by match score, highest first.

        Equal scores keep their fetch order.
        """
        return sorted(candidates, key=lambda c: c.match_score, reverse=True)

    # -------------------------------------------------------------------------
    # Applications
    # -------------------------------------------------------------------------

    def apply_to_mission(
        self,
        mission_id: str | ObjectId,
        talent_id: str | ObjectId,
        cover_letter: Optional[str] = None,
        proposed_rate: Optional[float] = None,
    ) -> MissionApplication:
        """
        Record a talent's PENDING application to an OPEN mission.

        Raises:
            NotFoundError: the mission does not exist
            MissionClosedError: the mission is no longer OPEN
            AlreadyAppliedError: the talent already applied
        """
        try:
            mission = self._get_mission_or_raise(mission_id)

            if not mission.is_open:
                raise MissionClosedError()

            application = self._validate(
                MissionApplication,
                {
                    "mission_id": mission.id,
                    "talent_id": talent_id,
                    "cover_letter": cover_letter,
                    "proposed_rate": proposed_rate,
                    "status": ApplicationStatus.PENDING,
                },
            )

            if self._applications.get_by_mission_and_talent(mission.id, application.talent_id):
                raise AlreadyAppliedError()

            try:
                application = self._applications.create(application)
            except DuplicateKeyError as e:
                # Lost a race against a concurrent identical application
                raise AlreadyAppliedError() from e

            logger.info(f"Application created for mission {mission_id} by talent {talent_id}")
            audit_log(
                AuditAction.APPLICATION_CREATED.value,
                {
                    "mission_id": str(mission.id),
                    "talent_id": str(talent_id),
                    "proposed_rate": proposed_rate,
                },
            )
            return application
        except (NotFoundError, BadRequestError) as e:
            logger.warning(f"apply_to_mission rejected for mission {mission_id}, talent {talent_id}: {e}")
            raise
        except Exception as e:
            logger.exception(f"apply_to_mission failed for mission {mission_id}, talent {talent_id}: {e}")
            raise InternalError("Erreur lors de la candidature", cause=e) from e

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    def assign_mission(self, mission_id: str | ObjectId, talent_id: str | ObjectId) -> Mission:
        """Mark a mission ASSIGNED once its contract is signed. An existing assignee is kept."""
        return self._transition(mission_id, MissionStatus.ASSIGNED, talent_id=talent_id)

    def start_mission(self, mission_id: str | ObjectId) -> Mission:
        return self._transition(mission_id, MissionStatus.IN_PROGRESS)

    def complete_mission(self, mission_id: str | ObjectId) -> Mission:
        return self._transition(mission_id, MissionStatus.COMPLETED)

    def cancel_mission(self, mission_id: str | ObjectId) -> Mission:
        return self._transition(mission_id, MissionStatus.CANCELLED)

    def _transition(
        self,
        mission_id: str | ObjectId,
        target: MissionStatus,
        talent_id: str | ObjectId | None = None,
    ) -> Mission:
        try:
            mission = self._get_mission_or_raise(mission_id)
            extra: dict[str, Any] = {}

            if target == MissionStatus.ASSIGNED:
                assignee = mission.assigned_talent_id or self._parse_id(talent_id, "talent_id")
                mission = mission.model_copy(update={"assigned_talent_id": assignee})
                extra["assigned_talent_id"] = assignee

            errors = self._state_machine.validate(mission, target)
            if errors:
                raise InvalidTransitionError(errors[0], errors=errors)

            previous = mission.status
            updated = self._missions.update_status(mission.id, target, extra or None)
            if updated is None:
                raise NotFoundError(f"Mission {mission_id} non trouvée")

            logger.info(f"Mission {mission_id} moved from {previous} to {target.value}")
            audit_log(
                AuditAction.MISSION_STATUS_CHANGED.value,
                {"mission_id": str(mission.id), "from": previous, "to": target.value},
            )
            return updated
        except (NotFoundError, BadRequestError):
            raise
        except Exception as e:
            logger.exception(f"Transition to {target.value} failed for mission {mission_id}: {e}")
            raise InternalError("Erreur lors du changement de statut", cause=e) from e

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    def _get_mission_or_raise(self, mission_id: str | ObjectId) -> Mission:
        mission = self._missions.get_by_id(mission_id)
        if mission is None:
            raise NotFoundError(f"Mission {mission_id} non trouvée")
        return mission

    @staticmethod
    def _parse_id(value: str | ObjectId | None, field_name: str) -> ObjectId:
        try:
            return PyObjectId.validate(value)
        except ValueError as e:
            raise BadRequestError(f"Identifiant invalide pour {field_name} : {value}") from e

    @staticmethod
    def _validate(model_class: type[M], data: Any) -> M:
        """Coerce input into ``model_class``; validation failures become BadRequestError."""
        if isinstance(data, model_class):
            return data
        try:
            return model_class.model_validate(data)
        except ValidationError as e:
            raise BadRequestError(
                f"Données invalides ({e.error_count()} erreur(s))", errors=e.errors()
            ) from e


# Singleton instance
_matching_engine: Optional[MatchingEngine] = None


def get_matching_engine() -> MatchingEngine:
    """Get the matching engine singleton instance."""
    global _matching_engine
    if _matching_engine is None:
        _matching_engine = MatchingEngine()
    return _matching_engine
