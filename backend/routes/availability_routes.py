from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, field_validator
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from backend.auth.dependencies import get_current_user
from backend.core.errors import ValidationError as BookingValidationError
from backend.core.responses import api_response
from backend.database import ensure_working_hours_schema, get_db
from backend.models.user import User
from backend.scheduling.calendar import normalize_weekday
from backend.scheduling.timeslots import parse
from backend.services import booking, working_hours

router = APIRouter(tags=['availability'])


class WorkingHoursEntry(BaseModel):
    day: str
    startTime: str
    endTime: str

    @field_validator('day')
    @classmethod
    def validate_day(cls, value: str) -> str:
        try:
            return normalize_weekday(value)
        except BookingValidationError as exc:
            raise ValueError(exc.message) from exc

    @field_validator('startTime', 'endTime')
    @classmethod
    def validate_time(cls, value: str) -> str:
        try:
            return str(parse(value))
        except BookingValidationError as exc:
            raise ValueError(exc.message) from exc


class UpdateWorkingHoursRequest(BaseModel):
    availability: list[WorkingHoursEntry]


def ensure_database_ready() -> None:
    try:
        ensure_working_hours_schema()
    except SQLAlchemyError as exc:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail='Database unavailable. Verify DATABASE_URL and Postgres credentials.',
        ) from exc


@router.get('/{doctor_id}/working-hours')
def get_working_hours(
    doctor_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    del current_user
    ensure_database_ready()

    doctor = booking.get_doctor(db, doctor_id)
    template = working_hours.load_template(db, doctor.id)

    return api_response(
        'Working hours retrieved successfully',
        {
            'doctor': {'id': doctor.id, 'name': doctor.name},
            'usesDefaultHours': not template,
            'availability': working_hours.template_entries(template),
        },
    )


@router.put('/working-hours')
def update_working_hours(
    data: UpdateWorkingHoursRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    ensure_database_ready()

    template = working_hours.replace_template(
        db,
        doctor=current_user,
        entries=[(entry.day, entry.startTime, entry.endTime) for entry in data.availability],
    )

    return api_response(
        'Working hours updated successfully',
        {
            'doctor': {'id': current_user.id, 'name': current_user.name},
            'usesDefaultHours': not template,
            'availability': working_hours.template_entries(template),
        },
    )
