"""User domain service: signup provisioning, login, refresh, profile.

Signup inserts the identity (users) and the profile row inside ONE
transaction owned by this service: if the profile insert fails the user row
is rolled back with it, so no orphaned identity can remain.
"""

import logging
import uuid

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from src.am_common.errors import (
    AccountDisabledError,
    EmailExistsError,
    InvalidCredentialsError,
    InvalidRefreshTokenError,
    NotFoundError,
    ProfileProvisioningError,
)
from src.am_gateway.auth.jwt_handler import (
    create_access_token,
    create_refresh_token,
    decode_token,
)
from src.am_gateway.auth.password import hash_password, verify_password
from src.am_gateway.user.db_models import ProfileModel, UserModel
from src.am_gateway.user.schemas import ProfileFields

logger = logging.getLogger("am.gateway")


class UserService:
    """Stateless service — instantiate once, reuse across requests."""

    async def signup(
        self,
        email: str,
        password: str,
        profile: ProfileFields,
        db: AsyncSession,
    ) -> UserModel:
        email = email.lower()
        result = await db.execute(select(UserModel).where(UserModel.email == email))
        if result.scalar_one_or_none() is not None:
            raise EmailExistsError()

        user = UserModel(
            email=email,
            password_hash=hash_password(password),
            is_active=True,
            is_admin=False,
        )
        db.add(user)
        try:
            await db.flush()  # Get user.id without committing
        except IntegrityError:
            # Lost a race with a concurrent signup for the same e-mail
            await db.rollback()
            raise EmailExistsError() from None

        try:
            db.add(ProfileModel(user_id=user.id, **profile.model_dump()))
            await db.flush()
            await db.commit()
        except SQLAlchemyError as exc:
            await db.rollback()
            logger.error("Profile provisioning failed for %s: %s", email, exc)
            raise ProfileProvisioningError(type(exc).__name__) from exc

        logger.info("Provisioned user %s", user.id)
        return user

    async def login(
        self,
        email: str,
        password: str,
        db: AsyncSession,
    ) -> tuple[UserModel, str, str]:
        """Authenticate and return (user, access_token, refresh_token).

        Unknown e-mail and wrong password both raise InvalidCredentialsError.
        """
        result = await db.execute(select(UserModel).where(UserModel.email == email.lower()))
        user = result.scalar_one_or_none()

        if not verify_password(password, user.password_hash if user else None):
            raise InvalidCredentialsError()
        assert user is not None

        if not user.is_active:
            raise AccountDisabledError()

        return (
            user,
            create_access_token(str(user.id), user.is_admin),
            create_refresh_token(str(user.id)),
        )

    async def refresh(self, refresh_token: str, db: AsyncSession) -> str:
        payload = decode_token(refresh_token, expected_type="refresh")
        try:
            user_id = uuid.UUID(str(payload.get("sub")))
        except ValueError:
            raise InvalidRefreshTokenError() from None
        user = await db.get(UserModel, user_id)
        if user is None or not user.is_active:
            raise AccountDisabledError()
        return create_access_token(str(user.id), user.is_admin)

    async def get_profile(self, user_id: uuid.UUID, db: AsyncSession) -> ProfileModel:
        result = await db.execute(select(ProfileModel).where(ProfileModel.user_id == user_id))
        profile = result.scalar_one_or_none()
        if profile is None:
            raise NotFoundError("Profile", str(user_id))
        return profile

    async def update_profile(
        self, user_id: uuid.UUID, fields: ProfileFields, db: AsyncSession
    ) -> ProfileModel:
        """Partial update: only fields present in the request body are written."""
        profile = await self.get_profile(user_id, db)
        for name, value in fields.model_dump(exclude_unset=True).items():
            setattr(profile, name, value)
        try:
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        return profile
