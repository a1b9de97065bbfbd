"""
Registration and login by phone + password.

Both return a session token (Bearer JWT, 7 days) and the public user record.
"""
from fastapi import APIRouter, Depends, HTTPException, Request

from backend.app.api.deps import get_store
from backend.app.core.auth import create_user_jwt
from backend.app.core.exceptions import ServiceError
from backend.app.core.limiter import AUTH_RATE_LIMIT, limiter
from backend.app.core.store import RecordStore
from backend.app.schemas import AuthResponse, LoginRequest, RegisterRequest
from backend.app.services.users import UserService

router = APIRouter()


def _handle_service_error(e: ServiceError):
    """Convert service exceptions to HTTP exceptions."""
    raise HTTPException(status_code=e.status_code, detail=e.message)


@router.post("/register", response_model=AuthResponse)
@limiter.limit(AUTH_RATE_LIMIT)
async def register(
    request: Request,
    data: RegisterRequest,
    store: RecordStore = Depends(get_store),
):
    """
    Register a new user.

    `ref` is an optional referral code; an unknown code is silently ignored.
    """
    service = UserService(store)
    try:
        user = await service.register(
            phone=data.phone,
            password=data.password,
            name=data.name,
            ref=data.ref,
        )
    except ServiceError as e:
        _handle_service_error(e)

    return {"token": create_user_jwt(user.id), "user": user.public()}


@router.post("/login", response_model=AuthResponse)
@limiter.limit(AUTH_RATE_LIMIT)
async def login(
    request: Request,
    data: LoginRequest,
    store: RecordStore = Depends(get_store),
):
    service = UserService(store)
    try:
        user = await service.login(phone=data.phone, password=data.password)
    except ServiceError as e:
        _handle_service_error(e)

    return {"token": create_user_jwt(user.id), "user": user.public()}
