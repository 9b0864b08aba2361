"""Render a scoped selection of appointments as a CSV or JSON download."""

import csv
import io
import json
import logging
from dataclasses import dataclass
from datetime import date
from enum import Enum

from appointment_backend.core.errors import AppointmentValidationError, InvalidRangeError
from appointment_backend.models.appointment import Appointment
from appointment_backend.services.appointment_store import AppointmentStore
from appointment_backend.services.validator import parse_iso_date

logger = logging.getLogger(__name__)

CSV_HEADER = ('appointmentId', 'appointmentDate', 'description')


class ExportFormat(str, Enum):
    CSV = 'csv'
    JSON = 'json'


class ExportScope(str, Enum):
    ALL = 'all'
    UPCOMING = 'upcoming'
    PREVIOUS = 'previous'
    RANGE = 'range'


MEDIA_TYPES = {
    ExportFormat.CSV: 'text/csv',
    ExportFormat.JSON: 'application/json',
}


@dataclass(frozen=True)
class ExportResult:
    content: bytes
    media_type: str
    filename: str


def parse_format(value: str | None) -> ExportFormat:
    try:
        return ExportFormat((value or '').strip().lower())
    except ValueError as exc:
        raise AppointmentValidationError('Unsupported export format. Use csv or json.') from exc


def parse_scope(value: str | None) -> ExportScope:
    try:
        return ExportScope((value or '').strip().lower())
    except ValueError as exc:
        raise AppointmentValidationError('Unsupported scope. Use all|upcoming|previous|range.') from exc


def parse_range_bounds(start: str | None, end: str | None) -> tuple[date, date]:
    if not (start or '').strip() or not (end or '').strip():
        raise InvalidRangeError('Range export requires start and end query parameters.')

    try:
        start_date = parse_iso_date(start)
        end_date = parse_iso_date(end)
    except ValueError as exc:
        raise InvalidRangeError('Invalid range bounds. Dates must use yyyy-MM-dd.') from exc

    if not start_date < end_date:
        raise InvalidRangeError()

    return start_date, end_date


def render_csv(appointments: list[Appointment]) -> bytes:
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator='\n')
    writer.writerow(CSV_HEADER)
    for appointment in appointments:
        writer.writerow((
            appointment.appointment_id,
            appointment.appointment_date.isoformat(),
            appointment.description,
        ))
    return buffer.getvalue().encode('utf-8')


def render_json(appointments: list[Appointment]) -> bytes:
    payload = [appointment.to_dict() for appointment in appointments]
    return json.dumps(payload, ensure_ascii=False).encode('utf-8')


RENDERERS = {
    ExportFormat.CSV: render_csv,
    ExportFormat.JSON: render_json,
}


def export_appointments(
    store: AppointmentStore,
    export_format: str | ExportFormat,
    scope: str | ExportScope,
    start: str | None = None,
    end: str | None = None,
    today: date | None = None,
) -> ExportResult:
    resolved_format = parse_format(export_format.value if isinstance(export_format, ExportFormat) else export_format)
    resolved_scope = parse_scope(scope.value if isinstance(scope, ExportScope) else scope)
    today = today or date.today()

    if resolved_scope is ExportScope.RANGE:
        start_date, end_date = parse_range_bounds(start, end)
        appointments = store.query_range(start_date, end_date)
    elif resolved_scope is ExportScope.UPCOMING:
        appointments = store.list_upcoming(today)
    elif resolved_scope is ExportScope.PREVIOUS:
        appointments = store.list_previous(today)
    else:
        appointments = store.list_all()

    filename = f'appointments-{resolved_scope.value}.{resolved_format.value}'
    logger.info('Exporting %d appointments as %s', len(appointments), filename)
    return ExportResult(
        content=RENDERERS[resolved_format](appointments),
        media_type=MEDIA_TYPES[resolved_format],
        filename=filename,
    )
