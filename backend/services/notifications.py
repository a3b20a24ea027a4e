"""In-app notifications for appointment events.

Rows are added to the caller's session and never committed here, so they
land in the same transaction as the appointment change that caused them.
Delivery over email/SMS picks up unsent rows elsewhere.
"""

import logging
from datetime import datetime, timedelta

from sqlalchemy.orm import Session

from backend.core import config
from backend.models.appointment import Appointment
from backend.models.notification import Notification
from backend.models.user import User

logger = logging.getLogger(__name__)

APPOINTMENT_BOOKED = 'appointment_booked'
APPOINTMENT_CONFIRMED = 'appointment_confirmed'
APPOINTMENT_CANCELLED = 'appointment_cancelled'
APPOINTMENT_REMINDER = 'appointment_reminder'
APPOINTMENT_COMPLETED = 'appointment_completed'

IN_APP_CHANNEL = 'in_app'

# Status changes that notify both parties.
STATUS_EVENTS = {
    'confirmed': APPOINTMENT_CONFIRMED,
    'cancelled': APPOINTMENT_CANCELLED,
}


def notification_title(event: str, recipient: str = 'patient') -> str:
    titles = {
        APPOINTMENT_BOOKED: 'New Appointment Booked' if recipient == 'doctor' else 'Appointment Booked',
        APPOINTMENT_CONFIRMED: 'Appointment Confirmed',
        APPOINTMENT_CANCELLED: 'Appointment Cancelled',
        APPOINTMENT_REMINDER: 'Appointment Reminder',
        APPOINTMENT_COMPLETED: 'Appointment Completed',
    }
    return titles.get(event, 'Notification')


def notification_message(event: str, details: dict, recipient: str = 'patient') -> str:
    when = f"{details['date']} at {details['time']}"
    if event == APPOINTMENT_BOOKED:
        if recipient == 'doctor':
            return f"New appointment booked with {details['patient_name']} on {when}"
        return f"Your appointment with {details['doctor_name']} has been booked for {when}"
    if event == APPOINTMENT_CONFIRMED:
        return f"Your appointment with {details['doctor_name']} on {when} has been confirmed"
    if event == APPOINTMENT_CANCELLED:
        if recipient == 'doctor':
            return f"Your appointment with {details['patient_name']} on {when} has been cancelled"
        return f"Your appointment with {details['doctor_name']} on {when} has been cancelled"
    if event == APPOINTMENT_REMINDER:
        return f"Reminder: Your appointment with {details['doctor_name']} is scheduled for {when}"
    if event == APPOINTMENT_COMPLETED:
        return f"Your appointment with {details['doctor_name']} has been completed"
    return 'You have a new notification'


def appointment_details(appointment: Appointment, patient: User | None, doctor: User | None) -> dict:
    return {
        'patient_name': (patient.name if patient else None) or 'your patient',
        'doctor_name': (doctor.name if doctor else None) or 'your doctor',
        'date': appointment.date.isoformat(),
        'time': f'{appointment.start_time} - {appointment.end_time}',
    }


def appointment_start(appointment: Appointment) -> datetime:
    hours, minutes = (int(part) for part in appointment.start_time.split(':')[:2])
    return datetime.combine(appointment.date, datetime.min.time()) + timedelta(hours=hours, minutes=minutes)


def notify_parties(
    db: Session,
    appointment: Appointment,
    event: str,
    patient: User | None,
    doctor: User | None,
) -> list[Notification]:
    details = appointment_details(appointment, patient, doctor)
    notifications = [
        Notification(
            user_id=user_id,
            appointment_id=appointment.id,
            type=event,
            channel=IN_APP_CHANNEL,
            title=notification_title(event, recipient),
            message=notification_message(event, details, recipient),
        )
        for user_id, recipient in ((appointment.patient_id, 'patient'), (appointment.doctor_id, 'doctor'))
    ]
    db.add_all(notifications)

    logger.info('Queued %s notifications for appointment %s', event, appointment.id)
    return notifications


def schedule_reminders(
    db: Session,
    appointment: Appointment,
    patient: User | None,
    doctor: User | None,
    now: datetime | None = None,
) -> list[Notification]:
    """Schedule patient reminders ahead of the start; reminders already due are skipped."""
    now = now or datetime.now()
    start = appointment_start(appointment)
    details = appointment_details(appointment, patient, doctor)

    reminders: list[Notification] = []
    for hours in config.REMINDER_OFFSETS_HOURS:
        remind_at = start - timedelta(hours=hours)
        if remind_at <= now:
            continue
        reminders.append(
            Notification(
                user_id=appointment.patient_id,
                appointment_id=appointment.id,
                type=APPOINTMENT_REMINDER,
                channel=IN_APP_CHANNEL,
                title=notification_title(APPOINTMENT_REMINDER),
                message=notification_message(APPOINTMENT_REMINDER, details),
                scheduled_for=remind_at,
            )
        )

    db.add_all(reminders)

    logger.info('Scheduled %d reminders for appointment %s', len(reminders), appointment.id)
    return reminders


def discard_notifications(db: Session, appointment_id: int) -> int:
    return db.query(Notification).filter(
        Notification.appointment_id == appointment_id,
    ).delete(synchronize_session=False)
