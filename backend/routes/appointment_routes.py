from datetime import date, datetime

from fastapi import APIRouter, Depends, HTTPException, Query, status
from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from backend.auth.dependencies import get_current_user
from backend.core import config
from backend.core.errors import ValidationError as BookingValidationError
from backend.core.responses import api_response
from backend.database import ensure_appointment_schema, ensure_working_hours_schema, get_db
from backend.models.appointment import Appointment
from backend.models.user import User
from backend.scheduling.timeslots import TimeInterval, parse
from backend.services import booking

router = APIRouter(tags=['appointments'])

MAX_PAGE_SIZE = 100


class TimeSlotPayload(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    start_time: str = Field(alias='startTime')
    end_time: str = Field(alias='endTime')

    @field_validator('start_time', 'end_time')
    @classmethod
    def validate_time(cls, value: str) -> str:
        try:
            return str(parse(value))
        except BookingValidationError as exc:
            raise ValueError(exc.message) from exc

    def to_interval(self) -> TimeInterval:
        return TimeInterval.from_strings(self.start_time, self.end_time)


class SpecialRequirements(BaseModel):
    language: str | None = None
    accessibility: str | None = None
    other: str | None = None


class CreateAppointmentRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    doctor_id: int = Field(alias='doctorId')
    date: date
    time_slot: TimeSlotPayload = Field(alias='timeSlot')
    appointment_type: str = Field(default=booking.DEFAULT_APPOINTMENT_TYPE, alias='appointmentType')
    reason: str | None = None
    special_requirements: SpecialRequirements | None = Field(default=None, alias='specialRequirements')
    duration: int | None = None

    @field_validator('appointment_type')
    @classmethod
    def validate_appointment_type(cls, value: str) -> str:
        normalized = value.strip().lower()
        if normalized not in booking.APPOINTMENT_TYPES:
            raise ValueError('Invalid appointment type.')
        return normalized

    @field_validator('reason')
    @classmethod
    def validate_reason(cls, value: str | None) -> str | None:
        if value is None:
            return None

        normalized = value.strip()
        if not normalized:
            return None

        if len(normalized) > config.MAX_REASON_LENGTH:
            raise ValueError(f'Reason must be {config.MAX_REASON_LENGTH} characters or fewer.')

        return normalized


class UpdateStatusRequest(BaseModel):
    status: str
    notes: str | None = None

    @field_validator('status')
    @classmethod
    def validate_status(cls, value: str) -> str:
        return value.strip().lower()

    @field_validator('notes')
    @classmethod
    def validate_notes(cls, value: str | None) -> str | None:
        if value is None:
            return None

        normalized = value.strip()
        if not normalized:
            return None

        if len(normalized) > config.MAX_NOTES_LENGTH:
            raise ValueError(f'Notes must be {config.MAX_NOTES_LENGTH} characters or fewer.')

        return normalized


class AppointmentResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True, alias_generator=to_camel)

    id: int
    patient_id: int
    doctor_id: int
    date: date
    time_slot: TimeSlotPayload
    duration_minutes: int
    appointment_type: str
    status: str
    reason: str | None = None
    notes: str | None = None
    special_requirements: dict | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


def serialize_appointment(appointment: Appointment) -> dict:
    return AppointmentResponse(
        id=appointment.id,
        patient_id=appointment.patient_id,
        doctor_id=appointment.doctor_id,
        date=appointment.date,
        time_slot=TimeSlotPayload(start_time=appointment.start_time, end_time=appointment.end_time),
        duration_minutes=appointment.duration_minutes or config.DEFAULT_APPOINTMENT_DURATION_MINUTES,
        appointment_type=appointment.appointment_type or booking.DEFAULT_APPOINTMENT_TYPE,
        status=appointment.status,
        reason=appointment.reason,
        notes=appointment.notes,
        special_requirements=appointment.special_requirements,
        created_at=appointment.created_at,
        updated_at=appointment.updated_at,
    ).model_dump(by_alias=True, mode='json')


def paginated(appointments: list[Appointment], total: int, page: int, limit: int) -> dict:
    return {
        'appointments': [serialize_appointment(appointment) for appointment in appointments],
        'pagination': {
            'currentPage': page,
            'totalPages': (total + limit - 1) // limit,
            'totalAppointments': total,
        },
    }


def ensure_database_ready() -> None:
    try:
        ensure_appointment_schema()
        ensure_working_hours_schema()
    except SQLAlchemyError as exc:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail='Database unavailable. Verify DATABASE_URL and Postgres credentials.',
        ) from exc


@router.post('', status_code=status.HTTP_201_CREATED)
def create_appointment(
    data: CreateAppointmentRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    ensure_database_ready()

    special_requirements = None
    if data.special_requirements:
        special_requirements = data.special_requirements.model_dump(exclude_none=True)

    appointment = booking.book_appointment(
        db,
        patient=current_user,
        doctor_id=data.doctor_id,
        day=data.date,
        time_slot=data.time_slot.to_interval(),
        appointment_type=data.appointment_type,
        reason=data.reason,
        special_requirements=special_requirements,
        duration_minutes=data.duration,
    )

    return api_response('Appointment booked successfully', serialize_appointment(appointment))


@router.get('')
def list_appointments(
    status_filter: str | None = Query(default=None, alias='status'),
    doctor_id: int | None = Query(default=None, alias='doctorId'),
    patient_id: int | None = Query(default=None, alias='patientId'),
    appointment_date: date | None = Query(default=None, alias='date'),
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=10, ge=1, le=MAX_PAGE_SIZE),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    ensure_database_ready()

    appointments, total = booking.list_all_appointments(
        db,
        actor=current_user,
        status=status_filter,
        doctor_id=doctor_id,
        patient_id=patient_id,
        day=appointment_date,
        page=page,
        limit=limit,
    )

    return api_response('Appointments retrieved successfully', paginated(appointments, total, page, limit))


@router.get('/my')
def list_my_appointments(
    status_filter: str | None = Query(default=None, alias='status'),
    upcoming: bool = Query(default=False),
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=10, ge=1, le=MAX_PAGE_SIZE),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    ensure_database_ready()

    appointments, total = booking.list_user_appointments(
        db,
        user=current_user,
        status=status_filter,
        upcoming=upcoming,
        page=page,
        limit=limit,
    )

    return api_response('Appointments retrieved successfully', paginated(appointments, total, page, limit))


@router.get('/available/{doctor_id}/{appointment_date}')
def get_available_slots(
    doctor_id: int,
    appointment_date: date,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    del current_user
    ensure_database_ready()

    doctor, slots = booking.available_slots(db, doctor_id, appointment_date)

    return api_response(
        'Available slots retrieved successfully',
        {
            'date': appointment_date.isoformat(),
            'doctor': {'id': doctor.id, 'name': doctor.name},
            'availableSlots': [slot.to_dict() for slot in slots],
        },
    )


@router.patch('/{appointment_id}/status')
def update_appointment_status(
    appointment_id: int,
    data: UpdateStatusRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    ensure_database_ready()

    appointment = booking.update_appointment_status(
        db,
        appointment_id=appointment_id,
        actor=current_user,
        status=data.status,
        notes=data.notes,
    )

    return api_response('Appointment updated successfully', serialize_appointment(appointment))


@router.delete('/{appointment_id}')
def delete_appointment(
    appointment_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    ensure_database_ready()

    booking.delete_appointment(db, appointment_id=appointment_id, actor=current_user)

    return api_response('Appointment deleted successfully')
