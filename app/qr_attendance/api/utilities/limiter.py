from typing import Optional

from fastapi import Request
import jwt

from slowapi import Limiter
from slowapi.util import get_remote_address

from ...config.config import settings


def _bearer_token(request: Request) -> Optional[str]:
    scheme, _, token = request.headers.get("authorization", "").partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


def get_limiter_key(request: Request) -> str:
    """
    Rate-limit bucket for a request.

    A desk signed in with a station token gets a bucket per account
    ("user:<email>"), so two desks behind the same router do not share a limit.
    Anything else, including expired or forged tokens, is bucketed by client
    address ("ip:<address>").
    """
    token = _bearer_token(request)
    if token:
        try:
            # An expired token still names the account it was issued to.
            claims = jwt.decode(
                token,
                settings.SECRET_KEY,
                algorithms=[settings.ALGORITHM],
                options={"verify_exp": False},
            )
        except jwt.PyJWTError:
            claims = {}
        email = claims.get("email")
        if isinstance(email, str) and email:
            return f"user:{email.lower()}"

    return f"ip:{get_remote_address(request)}"


limiter = Limiter(
    key_func=get_limiter_key,
    storage_uri=settings.RATE_LIMITER_REDIS_URL,
    enabled=settings.RATE_LIMIT_ENABLED,
)
