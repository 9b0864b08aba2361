import os

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

os.environ.setdefault('DATABASE_URL', 'sqlite://')

from appointment_backend.auth import dependencies  # noqa: E402
from appointment_backend.auth.gate import AuthGate  # noqa: E402
from appointment_backend.core import config  # noqa: E402
from appointment_backend.database import Base  # noqa: E402
from appointment_backend.main import app  # noqa: E402
from appointment_backend.models.appointment import Appointment  # noqa: E402
from appointment_backend.models.user import User  # noqa: E402
from appointment_backend.services.appointment_store import AppointmentStore  # noqa: E402


@pytest.fixture(autouse=True)
def fast_password_hashing(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(config, 'BCRYPT_ROUNDS', 4)


@pytest.fixture
def session_factory():
    engine = create_engine(
        'sqlite://',
        connect_args={'check_same_thread': False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine, tables=[User.__table__, Appointment.__table__])
    try:
        yield sessionmaker(autocommit=False, autoflush=False, expire_on_commit=False, bind=engine)
    finally:
        Base.metadata.drop_all(bind=engine, tables=[Appointment.__table__, User.__table__])
        engine.dispose()


@pytest.fixture
def store(session_factory) -> AppointmentStore:
    return AppointmentStore(session_factory)


@pytest.fixture
def auth_gate(session_factory) -> AuthGate:
    return AuthGate(session_factory)


@pytest.fixture
def client(store: AppointmentStore, auth_gate: AuthGate):
    app.dependency_overrides[dependencies.get_store] = lambda: store
    app.dependency_overrides[dependencies.get_auth_gate] = lambda: auth_gate
    try:
        with TestClient(app) as test_client:
            yield test_client
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def auth_headers(auth_gate: AuthGate) -> dict[str, str]:
    auth_gate.register('writer@example.com', 'correct-horse')
    token = auth_gate.login('writer@example.com', 'correct-horse')
    return {'Authorization': f'Bearer {token}'}
