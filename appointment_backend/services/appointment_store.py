import logging
from contextlib import contextmanager
from datetime import date
from threading import Lock
from typing import Iterator

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, sessionmaker

from appointment_backend.core.errors import DuplicateIdError, InvalidRangeError, NotFoundError
from appointment_backend.models.appointment import Appointment
from appointment_backend.services.validator import ValidatedAppointment

logger = logging.getLogger(__name__)

UPCOMING = 'upcoming'
PREVIOUS = 'previous'


def classify(appointment: Appointment, today: date) -> str:
    return UPCOMING if appointment.appointment_date >= today else PREVIOUS


class AppointmentStore:
    """Appointment collection backed by a SQLAlchemy session factory.

    Writes are serialized through a single lock and committed in one
    transaction, so the duplicate check never races another create and
    readers only ever see fully committed rows. Reads take no lock.
    """

    def __init__(self, session_factory: sessionmaker) -> None:
        self._session_factory = session_factory
        self._write_lock = Lock()

    @contextmanager
    def _session(self) -> Iterator[Session]:
        db = self._session_factory()
        try:
            yield db
        finally:
            db.close()

    def create(self, validated: ValidatedAppointment) -> Appointment:
        with self._write_lock, self._session() as db:
            if db.get(Appointment, validated.appointment_id) is not None:
                raise DuplicateIdError()

            appointment = Appointment(
                appointment_id=validated.appointment_id,
                appointment_date=validated.appointment_date,
                description=validated.description,
            )
            db.add(appointment)
            try:
                db.commit()
            except IntegrityError as exc:
                db.rollback()
                raise DuplicateIdError() from exc
            except Exception:
                db.rollback()
                raise

            db.refresh(appointment)
            db.expunge(appointment)

        logger.info('Created appointment %s on %s', appointment.appointment_id, appointment.appointment_date)
        return appointment

    def delete(self, appointment_id: str) -> None:
        with self._write_lock, self._session() as db:
            appointment = db.get(Appointment, appointment_id)
            if appointment is None:
                raise NotFoundError()

            db.delete(appointment)
            try:
                db.commit()
            except Exception:
                db.rollback()
                raise

        logger.info('Deleted appointment %s', appointment_id)

    def get(self, appointment_id: str) -> Appointment:
        with self._session() as db:
            appointment = db.get(Appointment, appointment_id)
            if appointment is None:
                raise NotFoundError()
            db.expunge(appointment)
            return appointment

    def _fetch(self, *criteria, newest_first: bool = False) -> list[Appointment]:
        date_order = Appointment.appointment_date.desc() if newest_first else Appointment.appointment_date.asc()
        with self._session() as db:
            appointments = db.query(Appointment).filter(*criteria).order_by(
                date_order,
                Appointment.created_at.asc(),
                Appointment.appointment_id.asc(),
            ).all()
            db.expunge_all()
            return appointments

    def list_all(self) -> list[Appointment]:
        return self._fetch()

    def list_upcoming(self, today: date) -> list[Appointment]:
        return self._fetch(Appointment.appointment_date >= today)

    def list_previous(self, today: date) -> list[Appointment]:
        return self._fetch(Appointment.appointment_date < today, newest_first=True)

    def query_range(self, start: date, end: date) -> list[Appointment]:
        """Appointments strictly between ``start`` and ``end``."""
        if start is None or end is None:
            raise InvalidRangeError('Start and end dates are required.')
        if not start < end:
            raise InvalidRangeError()

        return self._fetch(
            Appointment.appointment_date > start,
            Appointment.appointment_date < end,
        )
