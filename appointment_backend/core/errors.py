"""Error types raised by the appointment services.

Every error carries the HTTP status it maps to; ``main`` renders them as
``{"error": message}`` bodies.
"""

from fastapi import status


class AppointmentAppError(Exception):
    """Base class for recoverable, caller-facing failures."""

    status_code = status.HTTP_400_BAD_REQUEST
    default_message = 'Invalid request.'

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class AppointmentValidationError(AppointmentAppError):
    default_message = 'Validation failed.'


class DuplicateIdError(AppointmentAppError):
    status_code = status.HTTP_409_CONFLICT
    default_message = 'Appointment ID already exists.'


class NotFoundError(AppointmentAppError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = 'Appointment ID does not exist.'


class InvalidRangeError(AppointmentAppError):
    default_message = 'Start date must be before end date.'


class AuthRejectedError(AppointmentAppError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = 'Authentication required.'


class InvalidCredentialsError(AuthRejectedError):
    default_message = 'Invalid email or password.'


class InvalidTokenError(AuthRejectedError):
    default_message = 'Invalid or expired token.'


class EmailInUseError(AppointmentAppError):
    status_code = status.HTTP_409_CONFLICT
    default_message = 'Email already registered.'


class WeakPasswordError(AppointmentAppError):
    default_message = 'Password must be at least 8 characters.'
