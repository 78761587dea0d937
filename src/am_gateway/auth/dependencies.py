"""FastAPI dependencies: get_current_user, get_optional_user, require_admin.

Usage in any protected router:
    from src.am_gateway.auth.dependencies import get_current_user

    @router.post("/protected")
    async def protected(user: UserModel = Depends(get_current_user)):
        ...
"""

import uuid

from fastapi import Depends
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.ext.asyncio import AsyncSession

from src.am_common.database import get_db_session
from src.am_common.errors import (
    AccountDisabledError,
    AuthenticationRequiredError,
    ForbiddenError,
)
from src.am_gateway.auth.jwt_handler import decode_token
from src.am_gateway.user.db_models import UserModel

# auto_error=False: a missing header must surface as AuthenticationRequiredError
# (envelope body), not FastAPI's bare HTTPException.
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/v1/auth/login", auto_error=False)


async def _load_user(token: str, db: AsyncSession) -> UserModel:
    payload = decode_token(token, expected_type="access")
    try:
        user_id = uuid.UUID(str(payload.get("sub")))
    except ValueError:
        raise AuthenticationRequiredError() from None

    user = await db.get(UserModel, user_id)
    if user is None:
        raise AuthenticationRequiredError()
    if not user.is_active:
        raise AccountDisabledError()
    return user


async def get_current_user(
    token: str | None = Depends(oauth2_scheme),
    db: AsyncSession = Depends(get_db_session),
) -> UserModel:
    """Validate the Bearer token and return the UserModel.

    Raises AuthenticationRequiredError (401) when the token is missing,
    invalid or expired, AccountDisabledError (403) for disabled accounts.
    """
    if not token:
        raise AuthenticationRequiredError()
    return await _load_user(token, db)


async def get_optional_user(
    token: str | None = Depends(oauth2_scheme),
    db: AsyncSession = Depends(get_db_session),
) -> UserModel | None:
    """Like get_current_user but anonymous requests yield None (public reads)."""
    if not token:
        return None
    return await _load_user(token, db)


async def require_admin(
    current_user: UserModel = Depends(get_current_user),
) -> UserModel:
    """Raises ForbiddenError (403) unless the caller is an administrator."""
    if not current_user.is_admin:
        raise ForbiddenError("Administrator privileges required")
    return current_user
