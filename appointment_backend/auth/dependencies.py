from datetime import date

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from appointment_backend.auth.gate import AuthGate, Principal
from appointment_backend.core.errors import AuthRejectedError
from appointment_backend.database import SessionLocal
from appointment_backend.services.appointment_store import AppointmentStore

security = HTTPBearer(auto_error=False)

_store = AppointmentStore(SessionLocal)
_auth_gate = AuthGate(SessionLocal)


def get_store() -> AppointmentStore:
    return _store


def get_auth_gate() -> AuthGate:
    return _auth_gate


def get_today() -> date:
    return date.today()


def get_current_principal(
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
    auth_gate: AuthGate = Depends(get_auth_gate),
) -> Principal:
    if credentials is None or credentials.scheme.lower() != "bearer":
        raise AuthRejectedError()
    return auth_gate.verify(credentials.credentials)
