"""Unit tests for user service (mocked DB)."""

import uuid
from unittest.mock import AsyncMock, MagicMock

import pytest
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from src.am_common.errors import (
    AccountDisabledError,
    EmailExistsError,
    InvalidCredentialsError,
    InvalidRefreshTokenError,
    NotFoundError,
    ProfileProvisioningError,
)
from src.am_gateway.auth.jwt_handler import create_access_token, create_refresh_token
from src.am_gateway.auth.password import hash_password
from src.am_gateway.user.db_models import ProfileModel, UserModel
from src.am_gateway.user.schemas import ProfileFields
from src.am_gateway.user.service import UserService


def _make_user(is_active: bool = True, is_admin: bool = False) -> UserModel:
    user = UserModel()
    user.id = uuid.uuid4()
    user.email = "alice@example.com"
    user.password_hash = hash_password("Pass1word")
    user.is_active = is_active
    user.is_admin = is_admin
    return user


def _scalar(value) -> MagicMock:
    result = MagicMock()
    result.scalar_one_or_none.return_value = value
    return result


@pytest.fixture
def mock_db() -> AsyncMock:
    db = AsyncMock()
    db.add = MagicMock()
    return db


@pytest.fixture
def service() -> UserService:
    return UserService()


PROFILE = ProfileFields(full_name="Alice", city="Pune", pincode="411001")


class TestSignup:
    async def test_creates_user_and_profile_in_one_commit(self, service, mock_db) -> None:
        mock_db.execute = AsyncMock(return_value=_scalar(None))

        user = await service.signup("Alice@Example.com", "Pass1word", PROFILE, mock_db)

        assert user.email == "alice@example.com"
        added = [call.args[0] for call in mock_db.add.call_args_list]
        assert isinstance(added[0], UserModel)
        assert isinstance(added[1], ProfileModel)
        assert added[1].full_name == "Alice"
        mock_db.commit.assert_awaited_once()

    async def test_duplicate_email(self, service, mock_db) -> None:
        mock_db.execute = AsyncMock(return_value=_scalar(_make_user()))
        with pytest.raises(EmailExistsError):
            await service.signup("alice@example.com", "Pass1word", PROFILE, mock_db)
        mock_db.add.assert_not_called()

    async def test_duplicate_email_race(self, service, mock_db) -> None:
        mock_db.execute = AsyncMock(return_value=_scalar(None))
        mock_db.flush = AsyncMock(side_effect=IntegrityError("INSERT", {}, Exception("dup")))
        with pytest.raises(EmailExistsError):
            await service.signup("alice@example.com", "Pass1word", PROFILE, mock_db)
        mock_db.rollback.assert_awaited_once()

    async def test_profile_failure_rolls_back_user(self, service, mock_db) -> None:
        mock_db.execute = AsyncMock(return_value=_scalar(None))
        mock_db.flush = AsyncMock(side_effect=[None, SQLAlchemyError("profiles offline")])

        with pytest.raises(ProfileProvisioningError):
            await service.signup("alice@example.com", "Pass1word", PROFILE, mock_db)

        mock_db.rollback.assert_awaited_once()
        mock_db.commit.assert_not_awaited()


class TestLogin:
    async def test_success_returns_tokens(self, service, mock_db) -> None:
        user = _make_user(is_admin=True)
        mock_db.execute = AsyncMock(return_value=_scalar(user))

        got, access, refresh = await service.login("ALICE@example.com", "Pass1word", mock_db)

        assert got is user
        assert access and refresh and access != refresh

    async def test_wrong_password(self, service, mock_db) -> None:
        mock_db.execute = AsyncMock(return_value=_scalar(_make_user()))
        with pytest.raises(InvalidCredentialsError):
            await service.login("alice@example.com", "Wrong1pass", mock_db)

    async def test_unknown_email(self, service, mock_db) -> None:
        mock_db.execute = AsyncMock(return_value=_scalar(None))
        with pytest.raises(InvalidCredentialsError):
            await service.login("ghost@example.com", "Pass1word", mock_db)

    async def test_disabled_account(self, service, mock_db) -> None:
        mock_db.execute = AsyncMock(return_value=_scalar(_make_user(is_active=False)))
        with pytest.raises(AccountDisabledError):
            await service.login("alice@example.com", "Pass1word", mock_db)


class TestRefresh:
    async def test_issues_new_access_token(self, service, mock_db) -> None:
        user = _make_user()
        mock_db.get = AsyncMock(return_value=user)
        token = await service.refresh(create_refresh_token(str(user.id)), mock_db)
        assert token

    async def test_access_token_rejected(self, service, mock_db) -> None:
        with pytest.raises(InvalidRefreshTokenError):
            await service.refresh(create_access_token(str(uuid.uuid4())), mock_db)

    async def test_non_uuid_subject(self, service, mock_db) -> None:
        with pytest.raises(InvalidRefreshTokenError):
            await service.refresh(create_refresh_token("not-a-uuid"), mock_db)


class TestProfile:
    async def test_missing_profile(self, service, mock_db) -> None:
        mock_db.execute = AsyncMock(return_value=_scalar(None))
        with pytest.raises(NotFoundError):
            await service.get_profile(uuid.uuid4(), mock_db)

    async def test_partial_update_only_touches_sent_fields(self, service, mock_db) -> None:
        profile = ProfileModel(full_name="Alice", city="Pune")
        mock_db.execute = AsyncMock(return_value=_scalar(profile))

        updated = await service.update_profile(
            uuid.uuid4(), ProfileFields(city="Mumbai"), mock_db
        )

        assert updated.city == "Mumbai"
        assert updated.full_name == "Alice"
        mock_db.commit.assert_awaited_once()
