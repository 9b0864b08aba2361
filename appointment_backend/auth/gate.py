"""Registration, login and token verification for write access.

Reads stay public; only creating and deleting appointments require a
principal obtained from :meth:`AuthGate.verify`.
"""

import logging
import re
from dataclasses import dataclass

import jwt
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import sessionmaker

from appointment_backend.auth import jwt_handler, passwords
from appointment_backend.core.errors import (
    AppointmentValidationError,
    EmailInUseError,
    InvalidCredentialsError,
    InvalidTokenError,
    WeakPasswordError,
)
from appointment_backend.models.user import User

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 8
EMAIL_PATTERN = re.compile(r'^[^@\s]+@[^@\s]+\.[^@\s]+$')


@dataclass(frozen=True)
class Principal:
    email: str


def normalize_email(email: str | None) -> str:
    return (email or '').strip().lower()


class AuthGate:
    def __init__(self, session_factory: sessionmaker) -> None:
        self._session_factory = session_factory

    def register(self, email: str, password: str) -> None:
        normalized_email = normalize_email(email)
        if not EMAIL_PATTERN.match(normalized_email):
            raise AppointmentValidationError('Email must be a well-formed email address.')

        password = password or ''
        if len(password) < MIN_PASSWORD_LENGTH:
            raise WeakPasswordError(f'Password must be at least {MIN_PASSWORD_LENGTH} characters.')
        if len(password.encode('utf-8')) > passwords.MAX_PASSWORD_BYTES:
            raise WeakPasswordError(f'Password must be at most {passwords.MAX_PASSWORD_BYTES} bytes.')

        db = self._session_factory()
        try:
            if db.query(User).filter(User.email == normalized_email).first() is not None:
                raise EmailInUseError()

            db.add(User(email=normalized_email, hashed_password=passwords.hash_password(password)))
            try:
                db.commit()
            except IntegrityError as exc:
                db.rollback()
                raise EmailInUseError() from exc
        finally:
            db.close()

        logger.info('Registered user %s', normalized_email)

    def login(self, email: str, password: str) -> str:
        normalized_email = normalize_email(email)

        db = self._session_factory()
        try:
            user = db.query(User).filter(User.email == normalized_email).first()
        finally:
            db.close()

        hashed_password = user.hashed_password if user is not None else None
        if not passwords.verify_password(password or '', hashed_password):
            logger.warning('Rejected login attempt')
            raise InvalidCredentialsError()

        logger.info('User %s logged in', normalized_email)
        return jwt_handler.create_access_token(subject=normalized_email)

    def verify(self, token: str | None) -> Principal:
        if not token:
            raise InvalidTokenError()

        try:
            payload = jwt_handler.decode_access_token(token)
        except jwt.PyJWTError as exc:
            raise InvalidTokenError() from exc

        subject = payload.get('sub')
        if not isinstance(subject, str) or not subject:
            raise InvalidTokenError()
        return Principal(email=subject)
