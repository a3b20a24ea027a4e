import pytest

from backend.core.errors import AuthorizationError, ValidationError
from backend.scheduling.lifecycle import (
    ActorRole,
    AppointmentStatus,
    actor_role_for,
    can_delete,
    is_terminal,
    parse_status,
    transition,
)


@pytest.mark.parametrize(
    ('current', 'requested', 'role'),
    [
        ('pending', 'confirmed', ActorRole.DOCTOR),
        ('pending', 'cancelled', ActorRole.DOCTOR),
        ('pending', 'cancelled', ActorRole.PATIENT),
        ('confirmed', 'completed', ActorRole.DOCTOR),
        ('confirmed', 'no-show', ActorRole.DOCTOR),
        ('confirmed', 'cancelled', ActorRole.DOCTOR),
        ('confirmed', 'cancelled', ActorRole.PATIENT),
    ],
)
def test_transition_allows_listed_moves(current: str, requested: str, role: ActorRole) -> None:
    assert transition(current, requested, role) == AppointmentStatus(requested)


def test_patient_cannot_complete_appointment() -> None:
    with pytest.raises(ValidationError) as exception_info:
        transition('confirmed', 'completed', ActorRole.PATIENT)

    assert exception_info.value.message == 'Patients can only cancel appointments'


def test_doctor_cannot_move_back_to_pending() -> None:
    with pytest.raises(ValidationError) as exception_info:
        transition('confirmed', 'pending', ActorRole.DOCTOR)

    assert exception_info.value.message == 'Invalid status change for doctor'


def test_no_show_requires_confirmation_first() -> None:
    with pytest.raises(ValidationError) as exception_info:
        transition('pending', 'no-show', ActorRole.DOCTOR)

    assert exception_info.value.message == 'Cannot change status from pending to no-show'


def test_pending_cannot_jump_to_completed() -> None:
    with pytest.raises(ValidationError):
        transition('pending', 'completed', ActorRole.DOCTOR)


def test_confirmed_cannot_be_confirmed_again() -> None:
    with pytest.raises(ValidationError):
        transition('confirmed', 'confirmed', ActorRole.DOCTOR)


@pytest.mark.parametrize('terminal', ['cancelled', 'completed', 'no-show'])
@pytest.mark.parametrize(
    ('requested', 'role'),
    [('confirmed', ActorRole.DOCTOR), ('cancelled', ActorRole.DOCTOR), ('cancelled', ActorRole.PATIENT)],
)
def test_terminal_states_allow_no_transition(terminal: str, requested: str, role: ActorRole) -> None:
    with pytest.raises(ValidationError):
        transition(terminal, requested, role)


def test_unknown_status_is_rejected() -> None:
    with pytest.raises(ValidationError) as exception_info:
        transition('pending', 'rescheduled', ActorRole.DOCTOR)

    assert exception_info.value.message == 'Invalid status'


def test_parse_status_normalizes_case() -> None:
    assert parse_status(' Confirmed ') == AppointmentStatus.CONFIRMED
    assert parse_status(AppointmentStatus.NO_SHOW) == AppointmentStatus.NO_SHOW


def test_actor_role_for_resolves_participants() -> None:
    assert actor_role_for(patient_id=1, doctor_id=2, actor_id=2) == ActorRole.DOCTOR
    assert actor_role_for(patient_id=1, doctor_id=2, actor_id=1) == ActorRole.PATIENT


def test_actor_role_for_denies_outsiders() -> None:
    with pytest.raises(AuthorizationError):
        actor_role_for(patient_id=1, doctor_id=2, actor_id=3)


def test_terminal_and_deletable_states() -> None:
    assert is_terminal(AppointmentStatus.CANCELLED)
    assert not is_terminal(AppointmentStatus.CONFIRMED)
    assert can_delete('pending')
    assert not can_delete('confirmed')
    assert not can_delete('completed')
