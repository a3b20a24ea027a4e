import os
from datetime import date, datetime

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

os.environ.setdefault('DATABASE_URL', 'sqlite:///./test.db')

from backend.database import Base  # noqa: E402
from backend.models.appointment import Appointment  # noqa: E402
from backend.models.availability import WorkingHours  # noqa: E402
from backend.models.notification import Notification  # noqa: E402
from backend.models.user import User  # noqa: E402

TABLES = [User.__table__, Appointment.__table__, WorkingHours.__table__, Notification.__table__]


@pytest.fixture
def db():
    engine = create_engine('sqlite:///:memory:')
    testing_session_local = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    Base.metadata.create_all(bind=engine, tables=TABLES)

    session = testing_session_local()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine, tables=list(reversed(TABLES)))


@pytest.fixture
def make_user(db):
    def _make_user(role: str = 'patient', name: str | None = None, email: str | None = None) -> User:
        user = User(
            email=email or f'{role}-{db.query(User).count() + 1}@example.com',
            name=name or role.title(),
            hashed_password='',
            role=role,
        )
        db.add(user)
        db.commit()
        db.refresh(user)
        return user

    return _make_user


@pytest.fixture
def doctor(make_user) -> User:
    return make_user('doctor', name='Dr. Grey')


@pytest.fixture
def patient(make_user) -> User:
    return make_user('patient', name='Pat Doe')


@pytest.fixture
def make_appointment(db):
    def _make_appointment(
        patient: User,
        doctor: User,
        day: date,
        start_time: str,
        end_time: str,
        status: str = 'pending',
    ) -> Appointment:
        appointment = Appointment(
            patient_id=patient.id,
            doctor_id=doctor.id,
            date=day,
            start_time=start_time,
            end_time=end_time,
            duration_minutes=30,
            appointment_type='consultation',
            status=status,
            created_at=datetime(2026, 1, 1, 8, 0),
        )
        db.add(appointment)
        db.commit()
        db.refresh(appointment)
        return appointment

    return _make_appointment
