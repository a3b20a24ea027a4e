import pytest
from sqlalchemy.exc import OperationalError

from backend.core.errors import AuthorizationError, InternalError, ValidationError
from backend.models.availability import WorkingHours
from backend.scheduling.timeslots import TimeInterval
from backend.services import working_hours


def test_replace_template_stores_one_row_per_day(db, doctor) -> None:
    template = working_hours.replace_template(
        db,
        doctor,
        [('Tuesday', '13:00', '18:00'), ('monday', '08:00', '12:00')],
    )

    assert template['monday'] == TimeInterval.from_strings('08:00', '12:00')
    assert db.query(WorkingHours).filter(WorkingHours.doctor_id == doctor.id).count() == 2
    assert working_hours.template_entries(template) == [
        {'day': 'monday', 'startTime': '08:00', 'endTime': '12:00'},
        {'day': 'tuesday', 'startTime': '13:00', 'endTime': '18:00'},
    ]


def test_replace_template_overwrites_previous_entries(db, doctor) -> None:
    working_hours.replace_template(db, doctor, [('monday', '08:00', '12:00'), ('friday', '08:00', '12:00')])
    working_hours.replace_template(db, doctor, [('wednesday', '10:00', '14:00')])

    assert list(working_hours.load_template(db, doctor.id)) == ['wednesday']


def test_replace_template_is_doctor_only(db, patient) -> None:
    with pytest.raises(AuthorizationError):
        working_hours.replace_template(db, patient, [('monday', '08:00', '12:00')])


def test_replace_template_rejects_bad_entries_without_touching_store(db, doctor) -> None:
    working_hours.replace_template(db, doctor, [('monday', '08:00', '12:00')])

    with pytest.raises(ValidationError):
        working_hours.replace_template(db, doctor, [('monday', '12:00', '08:00')])

    assert list(working_hours.load_template(db, doctor.id)) == ['monday']


def test_load_template_for_unconfigured_doctor_is_empty(db, doctor) -> None:
    assert working_hours.load_template(db, doctor.id) == {}


def test_replace_template_store_failure_keeps_previous_hours(db, doctor, monkeypatch) -> None:
    working_hours.replace_template(db, doctor, [('monday', '08:00', '12:00')])

    def failing_commit() -> None:
        raise OperationalError('COMMIT', {}, Exception('disk I/O error'))

    monkeypatch.setattr(db, 'commit', failing_commit)

    with pytest.raises(InternalError) as exception_info:
        working_hours.replace_template(db, doctor, [('friday', '10:00', '14:00')])

    assert exception_info.value.message == 'Could not save working hours'
    assert list(working_hours.load_template(db, doctor.id)) == ['monday']
