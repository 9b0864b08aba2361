"""Write an appointment export to stdout or a file.

Usage:
    python -m appointment_backend.export_appointments --format csv --scope all
    python -m appointment_backend.export_appointments --format json --scope range \
        --start 2024-01-01 --end 2024-01-31 --output january.json
"""
import argparse
import sys

from appointment_backend.core.errors import AppointmentAppError
from appointment_backend.database import Base, SessionLocal, engine
from appointment_backend.models import appointment  # noqa: F401
from appointment_backend.services.appointment_store import AppointmentStore
from appointment_backend.services.export_engine import ExportFormat, ExportScope, export_appointments


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Export appointments as CSV or JSON")
    parser.add_argument(
        "--format",
        default=ExportFormat.CSV.value,
        choices=[option.value for option in ExportFormat],
    )
    parser.add_argument(
        "--scope",
        default=ExportScope.ALL.value,
        choices=[option.value for option in ExportScope],
    )
    parser.add_argument("--start", help="Exclusive lower bound (yyyy-MM-dd), range scope only")
    parser.add_argument("--end", help="Exclusive upper bound (yyyy-MM-dd), range scope only")
    parser.add_argument("--output", help="File to write instead of stdout")
    return parser


def main(argv: list[str] | None = None, store: AppointmentStore | None = None) -> int:
    args = build_parser().parse_args(argv)

    if store is None:
        Base.metadata.create_all(bind=engine)
        store = AppointmentStore(SessionLocal)

    try:
        result = export_appointments(store, args.format, args.scope, start=args.start, end=args.end)
    except AppointmentAppError as exc:
        print(f"Export failed: {exc.message}", file=sys.stderr)
        return 1

    if args.output:
        with open(args.output, "wb") as handle:
            handle.write(result.content)
    else:
        sys.stdout.buffer.write(result.content)
    return 0


if __name__ == "__main__":
    sys.exit(main())
