import csv
import io
import json
from datetime import date

import pytest

from appointment_backend.core.errors import AppointmentValidationError, InvalidRangeError
from appointment_backend.services.export_engine import ExportFormat, ExportScope, export_appointments
from appointment_backend.services.validator import validate_appointment

TODAY = date(2024, 4, 1)


@pytest.fixture
def seeded_store(store):
    for appointment_id, appointment_date, description in [
        ('A1', '2024-01-01', 'New year'),
        ('A2', '2024-01-15', 'Follow-up, fasting'),
        ('A3', '2024-01-31', 'Said "hello"'),
        ('A4', '2024-06-01', 'Checkup'),
    ]:
        store.create(validate_appointment(appointment_id, appointment_date, description))
    return store


def test_csv_export_has_header_and_quotes_special_fields(seeded_store) -> None:
    result = export_appointments(seeded_store, 'csv', 'all', today=TODAY)

    assert result.media_type == 'text/csv'
    assert result.filename == 'appointments-all.csv'
    assert result.content.decode('utf-8') == (
        'appointmentId,appointmentDate,description\n'
        'A1,2024-01-01,New year\n'
        'A2,2024-01-15,"Follow-up, fasting"\n'
        'A3,2024-01-31,"Said ""hello"""\n'
        'A4,2024-06-01,Checkup\n'
    )


def test_csv_export_parses_back_with_csv_reader(seeded_store) -> None:
    result = export_appointments(seeded_store, ExportFormat.CSV, ExportScope.PREVIOUS, today=TODAY)

    rows = list(csv.DictReader(io.StringIO(result.content.decode('utf-8'))))

    assert [row['appointmentId'] for row in rows] == ['A3', 'A2', 'A1']
    assert rows[1]['description'] == 'Follow-up, fasting'


def test_json_export_round_trips_upcoming_records(seeded_store) -> None:
    result = export_appointments(seeded_store, 'json', 'upcoming', today=TODAY)

    assert result.media_type == 'application/json'
    assert result.filename == 'appointments-upcoming.json'
    assert json.loads(result.content) == [
        appointment.to_dict() for appointment in seeded_store.list_upcoming(TODAY)
    ]
    assert json.loads(result.content) == [
        {'appointmentId': 'A4', 'appointmentDate': '2024-06-01', 'description': 'Checkup'},
    ]


def test_range_export_excludes_bounds(seeded_store) -> None:
    result = export_appointments(seeded_store, 'json', 'range', start='2024-01-01', end='2024-01-31')

    assert result.filename == 'appointments-range.json'
    assert [record['appointmentId'] for record in json.loads(result.content)] == ['A2']


def test_export_is_byte_identical_without_mutation(seeded_store) -> None:
    first = export_appointments(seeded_store, 'csv', 'all', today=TODAY)
    second = export_appointments(seeded_store, 'csv', 'all', today=TODAY)

    assert first.content == second.content


def test_format_and_scope_are_case_insensitive(seeded_store) -> None:
    result = export_appointments(seeded_store, 'JSON', 'All', today=TODAY)

    assert result.filename == 'appointments-all.json'


def test_empty_store_exports_header_only(store) -> None:
    assert export_appointments(store, 'csv', 'all').content == b'appointmentId,appointmentDate,description\n'
    assert export_appointments(store, 'json', 'all').content == b'[]'


@pytest.mark.parametrize(
    ('start', 'end', 'error_message'),
    [
        ('2024-01-10', '2024-01-10', 'Start date must be before end date.'),
        ('2024-02-01', '2024-01-10', 'Start date must be before end date.'),
        (None, '2024-01-10', 'Range export requires start and end query parameters.'),
        ('2024-01-01', '', 'Range export requires start and end query parameters.'),
        ('2024-01-01', '2024-02-30', 'Invalid range bounds. Dates must use yyyy-MM-dd.'),
        ('01/01/2024', '2024-02-01', 'Invalid range bounds. Dates must use yyyy-MM-dd.'),
    ],
)
def test_range_export_rejects_bad_bounds(seeded_store, start, end, error_message: str) -> None:
    with pytest.raises(InvalidRangeError) as exception_info:
        export_appointments(seeded_store, 'csv', 'range', start=start, end=end)

    assert exception_info.value.message == error_message


def test_unsupported_format_and_scope_are_rejected(seeded_store) -> None:
    with pytest.raises(AppointmentValidationError, match='Unsupported export format'):
        export_appointments(seeded_store, 'xml', 'all')

    with pytest.raises(AppointmentValidationError, match='Unsupported scope'):
        export_appointments(seeded_store, 'csv', 'tomorrow')
