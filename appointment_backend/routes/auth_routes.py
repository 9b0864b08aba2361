from fastapi import APIRouter, Depends, status
from pydantic import BaseModel

from appointment_backend.auth.dependencies import get_auth_gate, get_current_principal
from appointment_backend.auth.gate import AuthGate, Principal

router = APIRouter(tags=['auth'])


class CredentialsRequest(BaseModel):
    email: str
    password: str


class TokenResponse(BaseModel):
    token: str
    token_type: str = 'bearer'


@router.post('/register', status_code=status.HTTP_201_CREATED)
def register(data: CredentialsRequest, auth_gate: AuthGate = Depends(get_auth_gate)):
    auth_gate.register(data.email, data.password)
    return {'message': 'Registration successful.'}


@router.post('/login', response_model=TokenResponse)
def login(data: CredentialsRequest, auth_gate: AuthGate = Depends(get_auth_gate)):
    token = auth_gate.login(data.email, data.password)
    return TokenResponse(token=token)


@router.get('/me')
def me(principal: Principal = Depends(get_current_principal)):
    return {'email': principal.email}
