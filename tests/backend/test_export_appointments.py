import json

from appointment_backend import export_appointments
from appointment_backend.services.validator import validate_appointment


def test_main_writes_export_to_output_file(store, tmp_path) -> None:
    store.create(validate_appointment('A1', '2024-01-15', 'Checkup'))
    output = tmp_path / 'january.json'

    exit_code = export_appointments.main(
        ['--format', 'json', '--scope', 'range', '--start', '2024-01-01', '--end', '2024-01-31', '--output', str(output)],
        store=store,
    )

    assert exit_code == 0
    assert json.loads(output.read_text()) == [
        {'appointmentId': 'A1', 'appointmentDate': '2024-01-15', 'description': 'Checkup'},
    ]


def test_main_reports_invalid_range(store, capsys) -> None:
    exit_code = export_appointments.main(['--scope', 'range', '--start', '2024-01-10'], store=store)

    assert exit_code == 1
    assert 'Range export requires start and end query parameters.' in capsys.readouterr().err
