import logging

import uvicorn
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException

from appointment_backend.core import config
from appointment_backend.core.errors import AppointmentAppError, AuthRejectedError
from appointment_backend.database import Base, engine, ensure_appointment_schema
from appointment_backend.models import appointment, user  # noqa: F401
from appointment_backend.routes import appointment_routes, auth_routes

logging.basicConfig(
    level=config.LOG_LEVEL.upper(),
    format='%(asctime)s %(levelname)s %(name)s: %(message)s',
)

app = FastAPI(title='Appointment API')

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=['GET', 'POST', 'DELETE', 'OPTIONS'],
    allow_headers=['Authorization', 'Content-Type'],
)

logger = logging.getLogger(__name__)


def error_response(status_code: int, message: str, headers: dict | None = None) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={'error': message}, headers=headers)


@app.exception_handler(AppointmentAppError)
async def handle_appointment_error(_request: Request, exc: AppointmentAppError) -> JSONResponse:
    headers = {'WWW-Authenticate': 'Bearer'} if isinstance(exc, AuthRejectedError) else None
    return error_response(exc.status_code, exc.message, headers=headers)


@app.exception_handler(HTTPException)
async def handle_http_exception(_request: Request, exc: HTTPException) -> JSONResponse:
    message = exc.detail if isinstance(exc.detail, str) else 'Invalid request.'
    return error_response(exc.status_code, message, headers=getattr(exc, 'headers', None))


@app.exception_handler(RequestValidationError)
async def handle_request_validation(_request: Request, exc: RequestValidationError) -> JSONResponse:
    messages = []
    for error in exc.errors():
        field = '.'.join(str(part) for part in error.get('loc', ()) if part != 'body')
        message = f"{field}: {error.get('msg')}" if field else str(error.get('msg'))
        if message not in messages:
            messages.append(message)
    return error_response(status.HTTP_400_BAD_REQUEST, '; '.join(messages) or 'Validation failed.')


@app.exception_handler(SQLAlchemyError)
async def handle_database_error(_request: Request, exc: SQLAlchemyError) -> JSONResponse:
    logger.error('Database error: %s', exc)
    return error_response(
        status.HTTP_503_SERVICE_UNAVAILABLE,
        'Database unavailable. Verify DATABASE_URL.',
    )


@app.on_event('startup')
def initialize_database() -> None:
    config.validate_runtime_config()
    try:
        Base.metadata.create_all(bind=engine)
        ensure_appointment_schema()
    except SQLAlchemyError:
        logger.exception('Database initialization failed. Check DATABASE_URL.')


@app.get('/')
def root():
    return {'status': 'Appointment API Running'}


app.include_router(auth_routes.router, prefix='/auth')
app.include_router(appointment_routes.router, prefix='/appointments')


def run() -> None:
    uvicorn.run(app, host=config.API_HOST, port=config.API_PORT, log_level=config.LOG_LEVEL.lower())


if __name__ == '__main__':
    run()
