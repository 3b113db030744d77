import logging
from typing import List, Optional
import redis.asyncio as redis

from ..models.user_models import User, StoredUser

logger = logging.getLogger(__name__)

CURRENT_USER_KEY = "station:current_user"
SECRET_KEY_KEY = "station:secret_key"
ACCOUNTS_KEY = "station:accounts"


class RedisClient:
    """
    Redis client for everything the station persists across restarts:
    the logged-in user, the secret key and the station accounts.
    """

    def __init__(self, pool: redis.ConnectionPool):
        self._redis = redis.Redis(connection_pool=pool, decode_responses=True)

    # ===== Current User =====

    async def save_current_user(self, user: User):
        await self._redis.set(CURRENT_USER_KEY, user.model_dump_json())

    async def get_current_user(self) -> Optional[User]:
        user_json = await self._redis.get(CURRENT_USER_KEY)
        return User.model_validate_json(user_json) if user_json else None

    async def delete_current_user(self) -> int:
        return await self._redis.delete(CURRENT_USER_KEY)

    # ===== Secret Key =====

    async def save_secret_key(self, secret_key: str):
        await self._redis.set(SECRET_KEY_KEY, secret_key)

    async def get_secret_key(self) -> Optional[str]:
        return await self._redis.get(SECRET_KEY_KEY)

    async def delete_secret_key(self) -> int:
        return await self._redis.delete(SECRET_KEY_KEY)

    # ===== Station Accounts =====

    async def save_user_account(self, account: StoredUser):
        await self._redis.hset(ACCOUNTS_KEY, account.email, account.model_dump_json())

    async def get_user_account(self, email: str) -> Optional[StoredUser]:
        account_json = await self._redis.hget(ACCOUNTS_KEY, email)
        return StoredUser.model_validate_json(account_json) if account_json else None

    async def get_user_accounts(self) -> List[StoredUser]:
        accounts_json = await self._redis.hvals(ACCOUNTS_KEY)
        return [StoredUser.model_validate_json(a) for a in accounts_json]

    async def delete_user_account(self, email: str) -> int:
        return await self._redis.hdel(ACCOUNTS_KEY, email)

    async def clear_session(self):
        """Removes the current user and the secret key in one transaction (logout)."""
        async with self._redis.pipeline(transaction=True) as pipe:
            pipe.delete(CURRENT_USER_KEY)
            pipe.delete(SECRET_KEY_KEY)
            await pipe.execute()
