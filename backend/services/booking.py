"""Store-backed booking operations.

The conflict check and the insert for one ``(doctor, date)`` run under
:func:`booking_guard`, which serialises bookings for that partition only:
an in-process lock per partition and, on PostgreSQL, a transaction-scoped
advisory lock so several workers agree as well.
"""

import logging
from contextlib import contextmanager
from datetime import date, datetime
from threading import Lock
from weakref import WeakValueDictionary

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from backend.core import config
from backend.core.errors import (
    AuthorizationError,
    ConflictError,
    InternalError,
    NotFoundError,
    ValidationError,
)
from backend.models.appointment import Appointment
from backend.models.user import ADMIN_ROLE, DOCTOR_ROLE, PATIENT_ROLE, User
from backend.scheduling import lifecycle
from backend.scheduling.calendar import resolve_window
from backend.scheduling.conflicts import ConflictCheck, check_conflict as check_interval_conflict, find_conflict
from backend.scheduling.slots import generate_slots
from backend.scheduling.timeslots import TimeInterval
from backend.services import notifications
from backend.services.working_hours import load_template

logger = logging.getLogger(__name__)

APPOINTMENT_TYPES = ('in-person', 'telemedicine', 'follow-up', 'consultation')
DEFAULT_APPOINTMENT_TYPE = 'consultation'

_partition_locks: "WeakValueDictionary[tuple[int, date], Lock]" = WeakValueDictionary()
_partition_locks_guard = Lock()


def _partition_lock(doctor_id: int, day: date) -> Lock:
    with _partition_locks_guard:
        return _partition_locks.setdefault((doctor_id, day), Lock())


def partition_key(doctor_id: int, day: date) -> int:
    return doctor_id * 1_000_000 + day.toordinal()


@contextmanager
def booking_guard(db: Session, doctor_id: int, day: date):
    lock = _partition_lock(doctor_id, day)
    with lock:
        if db.get_bind().dialect.name == 'postgresql':
            db.execute(text('SELECT pg_advisory_xact_lock(:key)'), {'key': partition_key(doctor_id, day)})
        yield


def default_window() -> TimeInterval:
    return TimeInterval.from_strings(config.DEFAULT_WORKDAY_START, config.DEFAULT_WORKDAY_END)


def get_doctor(db: Session, doctor_id: int) -> User:
    doctor = db.query(User).filter(User.id == doctor_id).first()
    if doctor is None or doctor.role != DOCTOR_ROLE:
        raise NotFoundError('Doctor not found')
    return doctor


def get_appointment(db: Session, appointment_id: int) -> Appointment:
    appointment = db.query(Appointment).filter(Appointment.id == appointment_id).first()
    if appointment is None:
        raise NotFoundError('Appointment not found')
    return appointment


def appointment_interval(appointment: Appointment) -> TimeInterval:
    return TimeInterval.from_strings(appointment.start_time, appointment.end_time)


def booked_intervals(
    db: Session,
    doctor_id: int,
    day: date,
    exclude_id: int | None = None,
) -> list[TimeInterval]:
    query = db.query(Appointment).filter(
        Appointment.doctor_id == doctor_id,
        Appointment.date == day,
        Appointment.status.in_([blocking.value for blocking in lifecycle.BLOCKING_STATUSES]),
    )
    if exclude_id is not None:
        query = query.filter(Appointment.id != exclude_id)

    return [appointment_interval(appointment) for appointment in query.all()]


def check_conflict(db: Session, doctor_id: int, day: date, candidate: TimeInterval) -> ConflictCheck:
    return check_interval_conflict(candidate, booked_intervals(db, doctor_id, day))


def available_slots(
    db: Session,
    doctor_id: int,
    day: date,
    now: datetime | None = None,
) -> tuple[User, list[TimeInterval]]:
    doctor = get_doctor(db, doctor_id)
    now = now or datetime.now()

    if day < now.date():
        return doctor, []

    template = load_template(db, doctor_id)
    window = resolve_window(template, day, default=None if template else default_window())
    if window is None:
        return doctor, []

    slots = generate_slots(window, booked_intervals(db, doctor_id, day), config.SLOT_DURATION_MINUTES)

    if day == now.date():
        current_minutes = now.hour * 60 + now.minute
        slots = [slot for slot in slots if slot.start.minutes > current_minutes]

    return doctor, slots


def _start_datetime(day: date, interval: TimeInterval) -> datetime:
    hours, minutes = divmod(interval.start.minutes, 60)
    return datetime(day.year, day.month, day.day, hours, minutes)


def book_appointment(
    db: Session,
    patient: User,
    doctor_id: int,
    day: date,
    time_slot: TimeInterval,
    appointment_type: str = DEFAULT_APPOINTMENT_TYPE,
    reason: str | None = None,
    special_requirements: dict | None = None,
    duration_minutes: int | None = None,
    now: datetime | None = None,
) -> Appointment:
    now = now or datetime.now()

    if doctor_id is None or day is None or time_slot is None:
        raise ValidationError('Missing required fields')

    if patient.id == doctor_id:
        raise ValidationError('Cannot book appointment with yourself')

    if patient.role != PATIENT_ROLE:
        raise AuthorizationError('Only patients can book appointments')

    if appointment_type not in APPOINTMENT_TYPES:
        raise ValidationError('Invalid appointment type')

    if duration_minutes is None:
        duration_minutes = time_slot.span_minutes
    elif duration_minutes != time_slot.span_minutes:
        raise ValidationError('Duration must match the length of the time slot')

    doctor = get_doctor(db, doctor_id)

    if _start_datetime(day, time_slot) <= now:
        raise ValidationError('Cannot book appointments in the past')

    logger.info('Checking for conflicts: doctor=%s, date=%s, timeSlot=%s', doctor_id, day, time_slot)

    try:
        with booking_guard(db, doctor_id, day):
            existing = booked_intervals(db, doctor_id, day)
            clash = find_conflict(time_slot, existing)
            if clash is not None:
                logger.info('Conflict found for doctor %s on %s: %s overlaps %s', doctor_id, day, time_slot, clash)
                raise ConflictError('Time slot not available')

            appointment = Appointment(
                patient_id=patient.id,
                doctor_id=doctor_id,
                date=day,
                start_time=time_slot.start_time,
                end_time=time_slot.end_time,
                duration_minutes=duration_minutes,
                appointment_type=appointment_type,
                status=lifecycle.INITIAL_STATUS.value,
                reason=reason,
                special_requirements=special_requirements,
            )
            db.add(appointment)
            db.flush()

            # Another writer outside this process may have committed since the read.
            if find_conflict(time_slot, booked_intervals(db, doctor_id, day, exclude_id=appointment.id)):
                logger.warning('Overlapping booking detected after insert for doctor %s on %s', doctor_id, day)
                raise ConflictError('Time slot not available')

            if config.SEND_BOOKING_NOTIFICATIONS:
                notifications.notify_parties(db, appointment, notifications.APPOINTMENT_BOOKED, patient, doctor)
            notifications.schedule_reminders(db, appointment, patient, doctor, now=now)

            db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception('Failed to store appointment for doctor %s on %s', doctor_id, day)
        raise InternalError('Could not save appointment') from exc
    except Exception:
        db.rollback()
        raise

    db.refresh(appointment)
    logger.info('Appointment created: %s by patient %s', appointment.id, patient.id)
    return appointment


def update_appointment_status(
    db: Session,
    appointment_id: int,
    actor: User,
    status: str,
    notes: str | None = None,
) -> Appointment:
    appointment = get_appointment(db, appointment_id)
    role = lifecycle.actor_role_for(appointment.patient_id, appointment.doctor_id, actor.id)
    new_status = lifecycle.transition(appointment.status, status, role)

    try:
        appointment.status = new_status.value
        if notes:
            appointment.notes = notes

        event = notifications.STATUS_EVENTS.get(new_status.value)
        if event:
            patient = db.query(User).filter(User.id == appointment.patient_id).first()
            doctor = db.query(User).filter(User.id == appointment.doctor_id).first()
            notifications.notify_parties(db, appointment, event, patient, doctor)

        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception('Failed to update status of appointment %s', appointment_id)
        raise InternalError('Could not update appointment') from exc
    except Exception:
        db.rollback()
        raise

    db.refresh(appointment)
    logger.info('Appointment %s status updated to %s by %s %s', appointment.id, new_status.value, role.value, actor.id)
    return appointment


def delete_appointment(db: Session, appointment_id: int, actor: User) -> None:
    appointment = get_appointment(db, appointment_id)
    role = lifecycle.actor_role_for(appointment.patient_id, appointment.doctor_id, actor.id)

    if not lifecycle.can_delete(appointment.status):
        raise ValidationError('Can only delete pending appointments')

    try:
        notifications.discard_notifications(db, appointment.id)
        db.delete(appointment)
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception('Failed to delete appointment %s', appointment_id)
        raise InternalError('Could not delete appointment') from exc
    except Exception:
        db.rollback()
        raise

    logger.info('Appointment %s deleted by %s %s', appointment_id, role.value, actor.id)


def _paginate(query, page: int, limit: int) -> tuple[list[Appointment], int]:
    total = query.count()
    items = query.offset((page - 1) * limit).limit(limit).all()
    return items, total


def list_user_appointments(
    db: Session,
    user: User,
    status: str | None = None,
    upcoming: bool = False,
    page: int = 1,
    limit: int = 10,
    today: date | None = None,
) -> tuple[list[Appointment], int]:
    query = db.query(Appointment)
    if user.role == DOCTOR_ROLE:
        query = query.filter(Appointment.doctor_id == user.id)
    else:
        query = query.filter(Appointment.patient_id == user.id)

    if status:
        query = query.filter(Appointment.status == lifecycle.parse_status(status).value)

    if upcoming:
        query = query.filter(
            Appointment.date >= (today or date.today()),
            Appointment.status.in_([blocking.value for blocking in lifecycle.BLOCKING_STATUSES]),
        ).order_by(Appointment.date.asc(), Appointment.start_time.asc())
    else:
        query = query.order_by(Appointment.date.desc(), Appointment.start_time.asc())

    return _paginate(query, page, limit)


def list_all_appointments(
    db: Session,
    actor: User,
    status: str | None = None,
    doctor_id: int | None = None,
    patient_id: int | None = None,
    day: date | None = None,
    page: int = 1,
    limit: int = 10,
) -> tuple[list[Appointment], int]:
    if actor.role != ADMIN_ROLE:
        raise AuthorizationError('Only admins can view all appointments')

    query = db.query(Appointment)
    if status:
        query = query.filter(Appointment.status == lifecycle.parse_status(status).value)
    if doctor_id is not None:
        query = query.filter(Appointment.doctor_id == doctor_id)
    if patient_id is not None:
        query = query.filter(Appointment.patient_id == patient_id)
    if day is not None:
        query = query.filter(Appointment.date == day)

    return _paginate(query.order_by(Appointment.date.desc(), Appointment.start_time.asc()), page, limit)
