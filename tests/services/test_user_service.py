import pytest
from unittest.mock import AsyncMock, patch

from app.qr_attendance.models.user_models import StoredUser, User, UserRole
from app.qr_attendance.services.errors import AuthorizationError, ServiceError, UserAlreadyExistsError
from app.qr_attendance.services.user_service import UserService, hash_password, verify_password


@pytest.fixture(autouse=True)
def superuser_settings():
    with patch("app.qr_attendance.services.user_service.settings") as mock_settings:
        mock_settings.SUPERUSER_EMAIL = "admin@school.test"
        mock_settings.SUPERUSER_PASSWORD = "admin-pass"
        yield mock_settings

@pytest.fixture
def service_instance():
    mock_redis_client = AsyncMock()
    mock_redis_client.get_user_account.return_value = None
    return UserService(redis_client=mock_redis_client), mock_redis_client


def test_password_hash_roundtrip_and_salt():
    first = hash_password("secret")
    second = hash_password("secret")

    assert first != second
    assert verify_password("secret", first)
    assert not verify_password("wrong", first)
    assert not verify_password("secret", "garbage")


@pytest.mark.asyncio
class TestUserService:

    async def test_superuser_login_from_settings(self, service_instance):
        service, mock_redis_client = service_instance

        user = await service.authenticate("Admin@School.test", "admin-pass")

        assert user.role == UserRole.SUPERUSER
        assert user.email == "admin@school.test"
        mock_redis_client.get_user_account.assert_not_awaited()

    async def test_superuser_wrong_password(self, service_instance):
        service, _ = service_instance
        assert await service.authenticate("admin@school.test", "nope") is None

    async def test_stored_account_login(self, service_instance):
        service, mock_redis_client = service_instance
        mock_redis_client.get_user_account.return_value = StoredUser(email="desk@school.test", password_hash=hash_password("pw"))

        user = await service.authenticate("desk@school.test", "pw")
        assert user.role == UserRole.USER
        assert await service.authenticate("desk@school.test", "bad") is None

    async def test_add_user_stores_hash_not_password(self, service_instance):
        service, mock_redis_client = service_instance

        user = await service.add_user(" Desk@School.test ", "pw")

        assert user.email == "desk@school.test"
        stored = mock_redis_client.save_user_account.call_args[0][0]
        assert stored.password_hash != "pw"
        assert verify_password("pw", stored.password_hash)

    async def test_add_existing_user_fails(self, service_instance):
        service, mock_redis_client = service_instance
        mock_redis_client.get_user_account.return_value = StoredUser(email="desk@school.test", password_hash="x")

        with pytest.raises(UserAlreadyExistsError):
            await service.add_user("desk@school.test", "pw")
        with pytest.raises(UserAlreadyExistsError):
            await service.add_user("admin@school.test", "pw")
        mock_redis_client.save_user_account.assert_not_awaited()

    async def test_add_user_requires_credentials(self, service_instance):
        service, _ = service_instance
        with pytest.raises(ServiceError):
            await service.add_user("", "pw")

    async def test_list_users_sorted(self, service_instance):
        service, mock_redis_client = service_instance
        mock_redis_client.get_user_accounts.return_value = [
            StoredUser(email="b@school.test", password_hash="x"),
            StoredUser(email="a@school.test", password_hash="y"),
        ]

        users = await service.list_users()

        assert [u.email for u in users] == ["a@school.test", "b@school.test"]
        assert not hasattr(users[0], "password_hash")

    async def test_delete_user(self, service_instance):
        service, mock_redis_client = service_instance
        mock_redis_client.delete_user_account.return_value = 1

        assert await service.delete_user("A@school.test") is True
        mock_redis_client.delete_user_account.assert_awaited_once_with("a@school.test")


def test_ensure_superuser():
    UserService.ensure_superuser(User(email="admin@school.test", role=UserRole.SUPERUSER))
    with pytest.raises(AuthorizationError):
        UserService.ensure_superuser(User(email="desk@school.test"))
