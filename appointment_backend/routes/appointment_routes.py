import logging
from datetime import date

from fastapi import APIRouter, Depends, Query, Request, status
from fastapi.responses import Response
from pydantic import BaseModel, Field, ValidationError

from appointment_backend.auth.dependencies import get_current_principal, get_store, get_today
from appointment_backend.auth.gate import Principal
from appointment_backend.core.errors import AppointmentValidationError
from appointment_backend.services.appointment_store import AppointmentStore
from appointment_backend.services.export_engine import export_appointments, parse_range_bounds
from appointment_backend.services.validator import validate_appointment

router = APIRouter(tags=['appointments'])

logger = logging.getLogger(__name__)

# Fixed paths under /appointments that would shadow GET /appointments/{id}.
RESERVED_APPOINTMENT_IDS = frozenset({'upcoming', 'previous', 'range', 'export'})


class CreateAppointmentRequest(BaseModel):
    appointment_id: str | None = Field(default=None, alias='appointmentId')
    appointment_date: str | None = Field(default=None, alias='appointmentDate')
    description: str | None = None


class AppointmentResponse(BaseModel):
    appointment_id: str = Field(serialization_alias='appointmentId')
    appointment_date: date = Field(serialization_alias='appointmentDate')
    description: str

    class Config:
        from_attributes = True


@router.get('', response_model=list[AppointmentResponse])
def list_appointments(store: AppointmentStore = Depends(get_store)):
    return store.list_all()


@router.get('/upcoming', response_model=list[AppointmentResponse])
def list_upcoming_appointments(
    store: AppointmentStore = Depends(get_store),
    today: date = Depends(get_today),
):
    return store.list_upcoming(today)


@router.get('/previous', response_model=list[AppointmentResponse])
def list_previous_appointments(
    store: AppointmentStore = Depends(get_store),
    today: date = Depends(get_today),
):
    return store.list_previous(today)


@router.get('/range', response_model=list[AppointmentResponse])
def list_appointments_in_range(
    start: str | None = Query(default=None),
    end: str | None = Query(default=None),
    store: AppointmentStore = Depends(get_store),
):
    start_date, end_date = parse_range_bounds(start, end)
    return store.query_range(start_date, end_date)


@router.get('/export')
def export(
    format: str = Query(default='csv'),
    scope: str = Query(default='all'),
    start: str | None = Query(default=None),
    end: str | None = Query(default=None),
    store: AppointmentStore = Depends(get_store),
    today: date = Depends(get_today),
):
    result = export_appointments(store, format, scope, start=start, end=end, today=today)
    return Response(
        content=result.content,
        media_type=result.media_type,
        headers={'Content-Disposition': f'attachment; filename={result.filename}'},
    )


async def read_create_request(
    request: Request,
    _principal: Principal = Depends(get_current_principal),
) -> CreateAppointmentRequest:
    # Parsed here rather than as a body parameter so the token is checked first.
    try:
        payload = await request.json()
    except ValueError as exc:
        raise AppointmentValidationError('Request body must be a JSON object.') from exc

    if not isinstance(payload, dict):
        raise AppointmentValidationError('Request body must be a JSON object.')

    try:
        return CreateAppointmentRequest.model_validate(payload)
    except ValidationError as exc:
        messages = [f"{'.'.join(str(part) for part in error['loc'])}: {error['msg']}" for error in exc.errors()]
        raise AppointmentValidationError('; '.join(messages)) from exc


@router.get('/{appointment_id:path}', response_model=AppointmentResponse)
def get_appointment(appointment_id: str, store: AppointmentStore = Depends(get_store)):
    return store.get(appointment_id)


@router.post('', response_model=AppointmentResponse, status_code=status.HTTP_201_CREATED)
def create_appointment(
    data: CreateAppointmentRequest = Depends(read_create_request),
    store: AppointmentStore = Depends(get_store),
    principal: Principal = Depends(get_current_principal),
):
    validated = validate_appointment(data.appointment_id, data.appointment_date, data.description)
    if validated.appointment_id in RESERVED_APPOINTMENT_IDS:
        raise AppointmentValidationError(f'Appointment ID "{validated.appointment_id}" is reserved.')

    appointment = store.create(validated)
    logger.info('Appointment %s created by %s', appointment.appointment_id, principal.email)
    return appointment


@router.delete('/{appointment_id:path}', status_code=status.HTTP_204_NO_CONTENT)
def delete_appointment(
    appointment_id: str,
    store: AppointmentStore = Depends(get_store),
    principal: Principal = Depends(get_current_principal),
):
    store.delete(appointment_id)
    logger.info('Appointment %s deleted by %s', appointment_id, principal.email)
