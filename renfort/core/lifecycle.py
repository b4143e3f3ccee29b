"""Mission lifecycle state machine.

Transitions are fail-closed: any transition not explicitly listed is rejected.
"""

from renfort.data.models.mission import Mission
from renfort.utils.constants import MissionStatus


# Legal transitions: (from_status, to_status)
_TRANSITIONS: set[tuple[MissionStatus, MissionStatus]] = {
    (MissionStatus.OPEN, MissionStatus.ASSIGNED),
    (MissionStatus.ASSIGNED, MissionStatus.IN_PROGRESS),
    (MissionStatus.IN_PROGRESS, MissionStatus.COMPLETED),
    (MissionStatus.OPEN, MissionStatus.CANCELLED),
}


class MissionStateMachine:
    """Validates mission status changes."""

    def allowed_targets(self, current: MissionStatus) -> set[MissionStatus]:
        current = MissionStatus(current)
        return {target for source, target in _TRANSITIONS if source == current}

    def can_transition(self, current: MissionStatus, target: MissionStatus) -> bool:
        return MissionStatus(target) in self.allowed_targets(current)

    def validate(self, mission: Mission, target: MissionStatus) -> list[str]:
        """Check a mission against a target status.

        Returns a list of validation errors. Empty list means the caller
        may apply the change.
        """
        errors: list[str] = []
        current = MissionStatus(mission.status)
        target = MissionStatus(target)

        if not self.can_transition(current, target):
            errors.append(
                f"Transition interdite : {current.value} -> {target.value}"
            )
            return errors

        if target == MissionStatus.ASSIGNED and mission.assigned_talent_id is None:
            errors.append(f"Mission {mission.id} : aucun talent assigné")

        return errors
