import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from backend.core import config
from backend.core.errors import BookingError
from backend.core.responses import error_response
from backend.database import engine, ensure_appointment_schema, ensure_working_hours_schema
from backend.models import appointment, availability, notification, user
from backend.routes import appointment_routes, availability_routes


def configure_logging() -> None:
    logging.basicConfig(
        level=config.LOG_LEVEL.upper(),
        format='%(asctime)s %(levelname)s [%(name)s] %(message)s',
    )


configure_logging()
logger = logging.getLogger(__name__)

app = FastAPI(title='Doctor Appointment Booking API')

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=['*'],
    allow_headers=['*'],
)


@app.on_event('startup')
def initialize_database() -> None:
    config.validate_runtime_config()
    try:
        user.Base.metadata.create_all(bind=engine)
        appointment.Base.metadata.create_all(bind=engine)
        availability.Base.metadata.create_all(bind=engine)
        notification.Base.metadata.create_all(bind=engine)
        ensure_appointment_schema()
        ensure_working_hours_schema()
    except SQLAlchemyError:
        logger.exception('Database initialization failed. Check DATABASE_URL and Postgres credentials.')


def request_validation_message(exc: RequestValidationError) -> str:
    errors = exc.errors()
    if any(error.get('type') == 'missing' for error in errors):
        return 'Missing required fields'
    if not errors:
        return 'Invalid request'

    first = errors[0]
    field = '.'.join(str(part) for part in first.get('loc', ()) if part not in ('body', 'query', 'path'))
    message = str(first.get('msg', 'Invalid value')).removeprefix('Value error, ')
    return f'{field}: {message}' if field else message


@app.exception_handler(BookingError)
async def booking_error_handler(request: Request, exc: BookingError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error('%s %s failed: %s', request.method, request.url.path, exc.message)
    return JSONResponse(status_code=exc.status_code, content=error_response(exc.message))


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content=error_response(str(exc.detail)),
        headers=getattr(exc, 'headers', None),
    )


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return JSONResponse(status_code=400, content=error_response(request_validation_message(exc)))


@app.exception_handler(SQLAlchemyError)
async def database_error_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    logger.exception('Database error during %s %s', request.method, request.url.path, exc_info=exc)
    return JSONResponse(
        status_code=503,
        content=error_response('Database unavailable. Verify DATABASE_URL and Postgres credentials.'),
    )


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception('Unhandled error during %s %s', request.method, request.url.path, exc_info=exc)
    message = f'Internal server error: {exc}' if config.is_development() else 'Internal server error'
    return JSONResponse(status_code=500, content=error_response(message))


@app.get('/')
def root():
    return {'status': 'Doctor Appointment Booking API Running'}


app.include_router(appointment_routes.router, prefix='/appointments')
app.include_router(availability_routes.router, prefix='/availability')
