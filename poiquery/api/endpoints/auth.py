"""Registration, login, logout and profile endpoints."""

import logging

from fastapi import APIRouter, Request

from poiquery.api.deps import CurrentUserId, UserServiceDep
from poiquery.core.config import settings
from poiquery.middleware.rate_limit import limiter
from poiquery.schemas.auth import AuthResponse, LoginRequest, RegisterRequest, UserResponse
from poiquery.schemas.common import MessageResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["Auth"])


@router.post(
    "/register",
    response_model=AuthResponse,
    summary="Register",
    description="Create an account and return it with a bearer token.",
)
@limiter.limit(settings.AUTH_RATE_LIMIT)
async def register(
    request: Request,
    body: RegisterRequest,
    users: UserServiceDep,
) -> AuthResponse:
    user, token = await users.register(body)
    return AuthResponse(user=UserResponse.model_validate(user), token=token)


@router.post(
    "/login",
    response_model=AuthResponse,
    summary="Login",
    description="Exchange email and password for a bearer token.",
)
@limiter.limit(settings.AUTH_RATE_LIMIT)
async def login(
    request: Request,
    body: LoginRequest,
    users: UserServiceDep,
) -> AuthResponse:
    user, token = await users.login(body.email, body.password)
    return AuthResponse(user=UserResponse.model_validate(user), token=token)


@router.post(
    "/logout",
    response_model=MessageResponse,
    summary="Logout",
    description="Acknowledge a logout. Tokens stay valid until they expire.",
)
async def logout(user_id: CurrentUserId) -> MessageResponse:
    logger.info(f"User {user_id} logged out")
    return MessageResponse(message="Logged out successfully")


@router.get(
    "/profile",
    response_model=UserResponse,
    summary="Profile",
    description="Return the authenticated user's account.",
)
async def profile(user_id: CurrentUserId, users: UserServiceDep) -> UserResponse:
    user = await users.get_profile(user_id)
    return UserResponse.model_validate(user)
