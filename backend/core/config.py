import os

from dotenv import load_dotenv


load_dotenv()


def _get_bool(value: str | None, default: bool = False) -> bool:
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _get_int_list(value: str | None, default: list[int]) -> list[int]:
    if value is None or not value.strip():
        return default
    return [int(part) for part in value.split(",") if part.strip()]


def _get_list(value: str | None, default: list[str]) -> list[str]:
    if value is None or not value.strip():
        return default
    return [part.strip() for part in value.split(",") if part.strip()]

APP_ENV = os.getenv("APP_ENV", "development")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

DATABASE_URL = os.getenv("DATABASE_URL")

CORS_ORIGINS = _get_list(os.getenv("CORS_ORIGINS"), ["http://localhost:3000"])

JWT_SECRET_KEY = os.getenv("JWT_SECRET_KEY", "change-me")
JWT_ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")
JWT_EXPIRES_MINUTES = int(os.getenv("JWT_EXPIRES_MINUTES", "60"))

# Used for doctors that have never configured a weekly template.
DEFAULT_WORKDAY_START = os.getenv("DEFAULT_WORKDAY_START", "09:00")
DEFAULT_WORKDAY_END = os.getenv("DEFAULT_WORKDAY_END", "17:00")
SLOT_DURATION_MINUTES = int(os.getenv("SLOT_DURATION_MINUTES", "30"))
DEFAULT_APPOINTMENT_DURATION_MINUTES = int(os.getenv("DEFAULT_APPOINTMENT_DURATION_MINUTES", "30"))

REMINDER_OFFSETS_HOURS = _get_int_list(os.getenv("REMINDER_OFFSETS_HOURS"), [24, 2])
SEND_BOOKING_NOTIFICATIONS = _get_bool(os.getenv("SEND_BOOKING_NOTIFICATIONS"), default=True)

MAX_REASON_LENGTH = int(os.getenv("MAX_REASON_LENGTH", "500"))
MAX_NOTES_LENGTH = int(os.getenv("MAX_NOTES_LENGTH", "600"))


def is_development() -> bool:
    return APP_ENV.lower() == "development"


def validate_runtime_config() -> None:
    if APP_ENV.lower() == "production" and JWT_SECRET_KEY == "change-me":
        raise RuntimeError("JWT_SECRET_KEY must be set in production.")

    # Imported lazily so the config module stays importable on its own.
    from backend.scheduling.timeslots import TimeInterval

    TimeInterval.from_strings(DEFAULT_WORKDAY_START, DEFAULT_WORKDAY_END)

    if SLOT_DURATION_MINUTES <= 0:
        raise RuntimeError("SLOT_DURATION_MINUTES must be a positive number of minutes.")
