"""Auth + profile API router: signup, login, refresh, /users/me/profile.

All endpoints return ApiResponse. request_id is read from request.state
(injected by RequestLogMiddleware).
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from config.settings import settings
from src.am_common.database import get_db_session
from src.am_common.response import ApiResponse, wrap
from src.am_gateway.auth.dependencies import get_current_user
from src.am_gateway.user.db_models import ProfileModel, UserModel
from src.am_gateway.user.schemas import (
    LoginRequest,
    LoginResponse,
    ProfileFields,
    ProfileResponse,
    RefreshRequest,
    RefreshResponse,
    SignupRequest,
    SignupResponse,
    UserInfo,
)
from src.am_gateway.user.service import UserService

router = APIRouter(tags=["auth"])
_service = UserService()


def _profile_response(user: UserModel, profile: ProfileModel) -> ProfileResponse:
    return ProfileResponse(
        user_id=str(user.id),
        email=user.email,
        full_name=profile.full_name,
        phone=profile.phone,
        address=profile.address,
        city=profile.city,
        state=profile.state,
        pincode=profile.pincode,
    )


@router.post(
    "/auth/signup",
    status_code=status.HTTP_201_CREATED,
    response_model=ApiResponse,
    summary="Provision a user and profile",
)
async def signup(
    request: Request,
    body: SignupRequest,
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    user = await _service.signup(body.email, body.password, body.profile, db)
    data = SignupResponse(user_id=str(user.id))
    return wrap(request, data.model_dump(), message="User registered successfully")


@router.post("/auth/login", response_model=ApiResponse, summary="User login")
async def login(
    request: Request,
    body: LoginRequest,
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    user, access_token, refresh_token = await _service.login(body.email, body.password, db)
    data = LoginResponse(
        access_token=access_token,
        refresh_token=refresh_token,
        expires_in=settings.JWT_EXPIRE_MINUTES * 60,
        user=UserInfo(user_id=str(user.id), email=user.email, is_admin=user.is_admin),
    )
    return wrap(request, data.model_dump(), message="Login successful")


@router.post("/auth/refresh", response_model=ApiResponse, summary="Refresh access token")
async def refresh_token(
    request: Request,
    body: RefreshRequest,
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    new_access_token = await _service.refresh(body.refresh_token, db)
    data = RefreshResponse(
        access_token=new_access_token,
        expires_in=settings.JWT_EXPIRE_MINUTES * 60,
    )
    return wrap(request, data.model_dump(), message="Token refreshed")


@router.get("/users/me/profile", response_model=ApiResponse)
async def get_profile(
    request: Request,
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    profile = await _service.get_profile(current_user.id, db)
    return wrap(request, _profile_response(current_user, profile).model_dump())


@router.patch("/users/me/profile", response_model=ApiResponse)
async def update_profile(
    request: Request,
    body: ProfileFields,
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    profile = await _service.update_profile(current_user.id, body, db)
    return wrap(request, _profile_response(current_user, profile).model_dump())
