import logging

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from backend.core.errors import AuthorizationError, InternalError
from backend.models.availability import WorkingHours
from backend.models.user import DOCTOR_ROLE, User
from backend.scheduling.calendar import WEEKDAYS, build_template
from backend.scheduling.timeslots import TimeInterval

logger = logging.getLogger(__name__)


def load_template(db: Session, doctor_id: int) -> dict[str, TimeInterval]:
    rows = db.query(WorkingHours).filter(WorkingHours.doctor_id == doctor_id).all()
    return build_template((row.day_of_week, row.start_time, row.end_time) for row in rows)


def replace_template(db: Session, doctor: User, entries) -> dict[str, TimeInterval]:
    """Replace the doctor's weekly template with ``(day, start, end)`` entries."""
    if doctor.role != DOCTOR_ROLE:
        raise AuthorizationError('Only doctors can set working hours')

    doctor_id = doctor.id
    template = build_template(entries)

    try:
        db.query(WorkingHours).filter(WorkingHours.doctor_id == doctor_id).delete(synchronize_session=False)
        db.add_all(
            WorkingHours(
                doctor_id=doctor_id,
                day_of_week=day,
                start_time=interval.start_time,
                end_time=interval.end_time,
            )
            for day, interval in template.items()
        )
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception('Failed to store working hours for doctor %s', doctor_id)
        raise InternalError('Could not save working hours') from exc
    except Exception:
        db.rollback()
        raise

    logger.info('Working hours updated for doctor %s: %s', doctor.id, ', '.join(template))
    return template


def template_entries(template: dict[str, TimeInterval]) -> list[dict[str, str]]:
    return [
        {'day': day, **template[day].to_dict()}
        for day in WEEKDAYS
        if day in template
    ]
