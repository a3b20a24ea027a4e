"""Appointment lifecycle.

    pending -> confirmed -> completed
       |          |------> no-show
       +----------+------> cancelled

``cancelled``, ``completed`` and ``no-show`` are terminal. Every permitted
move is listed once in ``TRANSITIONS`` together with the roles allowed to
make it.
"""

from enum import Enum

from backend.core.errors import AuthorizationError, ValidationError


class AppointmentStatus(str, Enum):
    PENDING = 'pending'
    CONFIRMED = 'confirmed'
    CANCELLED = 'cancelled'
    COMPLETED = 'completed'
    NO_SHOW = 'no-show'


class ActorRole(str, Enum):
    PATIENT = 'patient'
    DOCTOR = 'doctor'


INITIAL_STATUS = AppointmentStatus.PENDING

TERMINAL_STATUSES = frozenset({
    AppointmentStatus.CANCELLED,
    AppointmentStatus.COMPLETED,
    AppointmentStatus.NO_SHOW,
})

# Appointments in these states hold their slot.
BLOCKING_STATUSES = frozenset({AppointmentStatus.PENDING, AppointmentStatus.CONFIRMED})

TRANSITIONS: dict[tuple[AppointmentStatus, AppointmentStatus], frozenset[ActorRole]] = {
    (AppointmentStatus.PENDING, AppointmentStatus.CONFIRMED): frozenset({ActorRole.DOCTOR}),
    (AppointmentStatus.PENDING, AppointmentStatus.CANCELLED): frozenset({ActorRole.PATIENT, ActorRole.DOCTOR}),
    (AppointmentStatus.CONFIRMED, AppointmentStatus.COMPLETED): frozenset({ActorRole.DOCTOR}),
    (AppointmentStatus.CONFIRMED, AppointmentStatus.NO_SHOW): frozenset({ActorRole.DOCTOR}),
    (AppointmentStatus.CONFIRMED, AppointmentStatus.CANCELLED): frozenset({ActorRole.PATIENT, ActorRole.DOCTOR}),
}

ROLE_TARGETS: dict[ActorRole, frozenset[AppointmentStatus]] = {
    role: frozenset(target for (_, target), roles in TRANSITIONS.items() if role in roles)
    for role in ActorRole
}

ROLE_TARGET_ERRORS = {
    ActorRole.PATIENT: 'Patients can only cancel appointments',
    ActorRole.DOCTOR: 'Invalid status change for doctor',
}


def parse_status(value: str | AppointmentStatus) -> AppointmentStatus:
    try:
        return AppointmentStatus((value or '').strip().lower() if isinstance(value, str) else value)
    except ValueError as exc:
        raise ValidationError('Invalid status') from exc


def actor_role_for(patient_id: int, doctor_id: int, actor_id: int) -> ActorRole:
    """Resolve how ``actor_id`` relates to an appointment, or deny access."""
    if actor_id == doctor_id:
        return ActorRole.DOCTOR
    if actor_id == patient_id:
        return ActorRole.PATIENT
    raise AuthorizationError('Access denied')


def is_terminal(status: AppointmentStatus) -> bool:
    return status in TERMINAL_STATUSES


def transition(
    current: str | AppointmentStatus,
    requested: str | AppointmentStatus,
    role: ActorRole,
) -> AppointmentStatus:
    current_status = parse_status(current)
    requested_status = parse_status(requested)

    if requested_status not in ROLE_TARGETS[role]:
        raise ValidationError(ROLE_TARGET_ERRORS[role])

    if is_terminal(current_status):
        raise ValidationError(f'Cannot change status of a {current_status.value} appointment')

    allowed_roles = TRANSITIONS.get((current_status, requested_status))
    if not allowed_roles or role not in allowed_roles:
        raise ValidationError(
            f'Cannot change status from {current_status.value} to {requested_status.value}'
        )

    return requested_status


def can_delete(status: str | AppointmentStatus) -> bool:
    return parse_status(status) == AppointmentStatus.PENDING
