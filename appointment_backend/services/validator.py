"""Field rules applied to an appointment before the store accepts it.

Rules run in a fixed order and the first one violated decides the reported
reason. Dates are compared as ``YYYY-MM-DD`` strings, which only orders
correctly because the shape check rejects anything that is not exactly that
width.
"""

import re
from dataclasses import dataclass
from datetime import date

from appointment_backend.core.errors import AppointmentValidationError

MAX_APPOINTMENT_ID_LENGTH = 10
MAX_DESCRIPTION_LENGTH = 50
EARLIEST_APPOINTMENT_DATE = '2000-01-01'

ISO_DATE_PATTERN = re.compile(r'^\d{4}-\d{2}-\d{2}$')


@dataclass(frozen=True)
class ValidatedAppointment:
    appointment_id: str
    appointment_date: date
    description: str


def _clean(value: str | None) -> str:
    return (value or '').strip()


def parse_iso_date(value: str | None) -> date:
    """Parse a strict ``YYYY-MM-DD`` string, raising ``ValueError`` otherwise."""
    normalized = _clean(value)
    if not ISO_DATE_PATTERN.match(normalized):
        raise ValueError(f'{value!r} is not a yyyy-MM-dd date.')
    return date.fromisoformat(normalized)


def validate_appointment(
    appointment_id: str | None,
    appointment_date: str | None,
    description: str | None,
) -> ValidatedAppointment:
    normalized_id = _clean(appointment_id)
    normalized_date = _clean(appointment_date)
    normalized_description = _clean(description)

    if not normalized_id or not normalized_date or not normalized_description:
        raise AppointmentValidationError('Appointment ID, date, and description are required.')

    if len(normalized_id) > MAX_APPOINTMENT_ID_LENGTH:
        raise AppointmentValidationError(
            f'Appointment ID must be 1-{MAX_APPOINTMENT_ID_LENGTH} characters.'
        )

    if len(normalized_description) > MAX_DESCRIPTION_LENGTH:
        raise AppointmentValidationError(
            f'Description must be 1-{MAX_DESCRIPTION_LENGTH} characters.'
        )

    if not ISO_DATE_PATTERN.match(normalized_date):
        raise AppointmentValidationError('Appointment date must use yyyy-MM-dd.')

    try:
        parsed_date = date.fromisoformat(normalized_date)
    except ValueError as exc:
        raise AppointmentValidationError('Appointment date is not a valid calendar date.') from exc

    if normalized_date < EARLIEST_APPOINTMENT_DATE:
        raise AppointmentValidationError(
            f'Appointment date cannot be before {EARLIEST_APPOINTMENT_DATE}.'
        )

    return ValidatedAppointment(
        appointment_id=normalized_id,
        appointment_date=parsed_date,
        description=normalized_description,
    )
