"""Appointment lifecycle rules.

Decides whether an actor may move an appointment to a requested status and
what has to be written when it does. Nothing here touches storage.

Happy path::

    scheduled -> waiting -> in_progress -> completed

``cancelled`` is reachable from ``scheduled`` and ``waiting``. Nothing leaves
``completed`` or ``cancelled``.
"""

from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any

from clinic.core.exceptions import ForbiddenException, InvalidTransitionException
from clinic.schemas.appointments import TERMINAL_STATUSES, AppointmentStatus
from clinic.schemas.auth import Actor
from clinic.schemas.common import UserRole


class TransitionRoute(str, Enum):
    """Entry point a transition request came through."""

    CHECK_IN = "check_in"
    START = "start"
    STATUS_UPDATE = "status_update"


@dataclass(frozen=True)
class TransitionPlan:
    """Values to persist for an accepted transition."""

    status: AppointmentStatus
    values: dict[str, Any] = field(default_factory=dict)
    creates_evolution: bool = False


_ALLOWED_ROLES: dict[AppointmentStatus, frozenset[UserRole]] = {
    AppointmentStatus.WAITING: frozenset(
        {UserRole.PHYSICIAN, UserRole.RECEPTIONIST, UserRole.ADMIN}
    ),
    AppointmentStatus.IN_PROGRESS: frozenset({UserRole.PHYSICIAN}),
    AppointmentStatus.COMPLETED: frozenset({UserRole.PHYSICIAN}),
    AppointmentStatus.CANCELLED: frozenset({UserRole.RECEPTIONIST, UserRole.ADMIN}),
}

# Targets only the physician assigned to the appointment may reach
_OWNER_ONLY = frozenset({AppointmentStatus.IN_PROGRESS, AppointmentStatus.COMPLETED})

_SOURCES: dict[AppointmentStatus, frozenset[AppointmentStatus]] = {
    # waiting -> waiting re-queues the patient at the current time
    AppointmentStatus.WAITING: frozenset({AppointmentStatus.SCHEDULED, AppointmentStatus.WAITING}),
    AppointmentStatus.IN_PROGRESS: frozenset({AppointmentStatus.WAITING}),
    AppointmentStatus.COMPLETED: frozenset({AppointmentStatus.IN_PROGRESS}),
    AppointmentStatus.CANCELLED: frozenset(
        {AppointmentStatus.SCHEDULED, AppointmentStatus.WAITING}
    ),
}

_ROUTE_TARGETS: dict[TransitionRoute, AppointmentStatus] = {
    TransitionRoute.CHECK_IN: AppointmentStatus.WAITING,
    TransitionRoute.START: AppointmentStatus.IN_PROGRESS,
}

_CHECK_IN_SOURCES = frozenset({AppointmentStatus.SCHEDULED})


def parse_status(value: str | AppointmentStatus) -> AppointmentStatus:
    """
    Parse a requested status.

    Raises:
        InvalidTransitionException: If the value is not a known status
    """
    try:
        return AppointmentStatus(value)
    except ValueError:
        raise InvalidTransitionException(f"Unknown appointment status '{value}'") from None


def plan_transition(
    appointment: Mapping[str, Any],
    requested: str | AppointmentStatus,
    actor: Actor,
    now: datetime,
    route: TransitionRoute = TransitionRoute.STATUS_UPDATE,
) -> TransitionPlan:
    """
    Validate a status change and describe its side effects.

    Checks run in order: status validity, role, ownership, then the
    precondition on the current status.

    Args:
        appointment: Current appointment record
        requested: Requested status
        actor: Caller performing the change
        now: Current naive UTC time
        route: Entry point of the request

    Returns:
        Plan with the status and column values to write

    Raises:
        InvalidTransitionException: Unknown status or disallowed current -> requested pair
        ForbiddenException: Role or ownership check failed
    """
    target = parse_status(requested)

    route_target = _ROUTE_TARGETS.get(route)
    if route_target is not None and target != route_target:
        raise InvalidTransitionException(f"{route.value} cannot set status '{target.value}'")

    if target == AppointmentStatus.SCHEDULED:
        raise InvalidTransitionException("An appointment cannot return to 'scheduled'")

    if actor.role not in _ALLOWED_ROLES[target]:
        raise ForbiddenException(f"Role '{actor.role.value}' cannot set status '{target.value}'")

    if target in _OWNER_ONLY and (
        actor.professional_id is None or actor.professional_id != appointment["professional_id"]
    ):
        raise ForbiddenException(
            "Only the physician assigned to this appointment can start or complete it"
        )

    current = AppointmentStatus(appointment["status"])
    if current in TERMINAL_STATUSES:
        raise InvalidTransitionException(f"Appointment is already '{current.value}'")

    sources = _CHECK_IN_SOURCES if route == TransitionRoute.CHECK_IN else _SOURCES[target]
    if current not in sources:
        raise InvalidTransitionException(
            f"Cannot move appointment from '{current.value}' to '{target.value}'"
        )

    values: dict[str, Any] = {"status": target.value}
    if target == AppointmentStatus.WAITING:
        values["checked_in_at"] = now
    elif target == AppointmentStatus.CANCELLED:
        values["cancelled_at"] = now
    elif target == AppointmentStatus.COMPLETED:
        values["completed_at"] = now

    return TransitionPlan(
        status=target,
        values=values,
        creates_evolution=target == AppointmentStatus.COMPLETED,
    )
