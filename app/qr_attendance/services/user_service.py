import hashlib
import hmac
import logging
import secrets
from typing import List, Optional

from ..config.config import settings
from ..db.redis_client import RedisClient
from ..models.user_models import User, StoredUser, UserRole
from .errors import AuthorizationError, ServiceError, UserAlreadyExistsError

logger = logging.getLogger(__name__)

PASSWORD_HASH_ALGO = "pbkdf2_sha256"
PASSWORD_HASH_ITERATIONS = 120_000


def hash_password(password: str, *, salt: Optional[str] = None) -> str:
    salt_value = salt or secrets.token_hex(16)
    digest = hashlib.pbkdf2_hmac(
        "sha256",
        password.encode("utf-8"),
        salt_value.encode("utf-8"),
        PASSWORD_HASH_ITERATIONS,
    ).hex()
    return f"{PASSWORD_HASH_ALGO}${PASSWORD_HASH_ITERATIONS}${salt_value}${digest}"


def verify_password(password: str, password_hash: str) -> bool:
    try:
        algo, rounds_text, salt_value, expected_digest = password_hash.split("$", 3)
        rounds = int(rounds_text)
    except (ValueError, TypeError):
        return False

    if algo != PASSWORD_HASH_ALGO or rounds <= 0:
        return False

    candidate_digest = hashlib.pbkdf2_hmac(
        "sha256",
        password.encode("utf-8"),
        salt_value.encode("utf-8"),
        rounds,
    ).hex()
    return hmac.compare_digest(candidate_digest, expected_digest)


class UserService:
    """
    Station accounts. The superuser comes from the configuration, every other
    account is stored in Redis with a salted password hash.
    """

    def __init__(self, redis_client: RedisClient):
        self.redis_client = redis_client

    @staticmethod
    def _is_superuser_email(email: str) -> bool:
        return bool(settings.SUPERUSER_EMAIL) and email.strip().lower() == settings.SUPERUSER_EMAIL.strip().lower()

    async def authenticate(self, email: str, password: str) -> Optional[User]:
        """Returns the user for valid credentials, None otherwise."""
        email = email.strip().lower()
        if self._is_superuser_email(email):
            if settings.SUPERUSER_PASSWORD and hmac.compare_digest(password.encode("utf-8"), settings.SUPERUSER_PASSWORD.encode("utf-8")):
                return User(email=email, role=UserRole.SUPERUSER)
            return None

        stored = await self.redis_client.get_user_account(email)
        if stored and verify_password(password, stored.password_hash):
            return User(email=stored.email, role=stored.role)
        return None

    @staticmethod
    def ensure_superuser(user: User) -> None:
        if user.role != UserRole.SUPERUSER:
            raise AuthorizationError("This operation is only valid for the superuser.")

    async def list_users(self) -> List[User]:
        accounts = await self.redis_client.get_user_accounts()
        return sorted((User(email=a.email, role=a.role) for a in accounts), key=lambda u: u.email)

    async def add_user(self, email: str, password: str, role: UserRole = UserRole.USER) -> User:
        email = email.strip().lower()
        if not email or not password:
            raise ServiceError("Email and password are required.")
        if self._is_superuser_email(email) or await self.redis_client.get_user_account(email):
            raise UserAlreadyExistsError("User with this email already exists.")

        account = StoredUser(email=email, role=role, password_hash=hash_password(password))
        await self.redis_client.save_user_account(account)
        logger.info(f"Station account '{email}' created.")
        return User(email=account.email, role=account.role)

    async def delete_user(self, email: str) -> bool:
        deleted = await self.redis_client.delete_user_account(email.strip().lower())
        if deleted:
            logger.info(f"Station account '{email}' deleted.")
        return bool(deleted)
