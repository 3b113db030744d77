import logging
from fastapi import APIRouter, Depends, HTTPException, status, Response, Request
from fastapi.security import OAuth2PasswordBearer, OAuth2PasswordRequestForm
from datetime import datetime, timedelta, timezone
import jwt
import httpx
from pydantic import ValidationError

from .schemas.user import Token, TokenData, LoginRequest, UserResponse, LoginResponse
from ..models.user_models import User
from ..db.redis_client import RedisClient
from ..modules.sync_client import SyncApiClient, SyncApiError
from ..services.session_state import SessionState
from ..services.errors import AuthorizationError
from ..services.sync_service import SyncService
from ..services.user_service import UserService
from ..config.config import settings
from .dependencies import get_redis_client, get_http_client, get_session_state, get_user_service
from .utilities.limiter import limiter

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/auth",
    tags=["Authentication"]
)
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/v1/auth/token")


def create_access_token(data: dict, expires_delta: timedelta):
    """Creates a signed JWT for the given data and lifetime."""
    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + expires_delta
    to_encode.update({"exp": expire})
    encoded_jwt = jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)
    return encoded_jwt


async def get_current_user(
    token: str = Depends(oauth2_scheme),
    redis_client: RedisClient = Depends(get_redis_client)
) -> User:
    """
    Decodes the token and checks it belongs to the user currently logged in
    at the station. A token issued before the last logout is rejected.
    """
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
        token_data = TokenData.model_validate(payload)
    except (jwt.PyJWTError, ValidationError) as e:
        logger.warning(f"Token validation error: {e}")
        raise credentials_exception

    if token_data.email is None:
        logger.warning(f"Token is valid but missing 'email': {payload}")
        raise credentials_exception

    current_user = await redis_client.get_current_user()
    if current_user is None or current_user.email != token_data.email:
        logger.warning(f"User '{token_data.email}' has a valid token but is not logged in at the station.")
        raise credentials_exception
    return current_user


def require_superuser(user: User = Depends(get_current_user)) -> User:
    try:
        UserService.ensure_superuser(user)
    except AuthorizationError as e:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(e))
    return user


async def _perform_login(
    email: str,
    password: str,
    user_service: UserService,
    redis_client: RedisClient,
    http_client: httpx.AsyncClient,
    state: SessionState,
) -> LoginResponse:
    logger.info(f"Login attempt for '{email}'.")
    user = await user_service.authenticate(email, password)
    if user is None:
        logger.warning(f"Login failed for '{email}' (invalid credentials).")
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid email or password.")

    await redis_client.save_current_user(user)

    secret_key = await redis_client.get_secret_key()
    if secret_key:
        # A failed sync only shows up in the sync banner, the login still succeeds.
        try:
            await SyncService(state).sync(SyncApiClient(secret_key=secret_key, http_client=http_client))
        except SyncApiError as e:
            logger.warning(f"Sync after login failed: {e}")

    access_token = create_access_token(
        data={"email": user.email},
        expires_delta=timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    )
    logger.info(f"User '{user.email}' ({user.role.value}) logged in.")
    return LoginResponse(
        token=Token(access_token=access_token, token_type="bearer"),
        user=UserResponse.model_validate(user),
        has_secret_key=bool(secret_key),
    )


@router.post("/token", response_model=Token)
@limiter.limit("20/minute")
async def login_for_access_token(
    request: Request,
    form_data: OAuth2PasswordRequestForm = Depends(),
    user_service: UserService = Depends(get_user_service),
    redis_client: RedisClient = Depends(get_redis_client),
    http_client: httpx.AsyncClient = Depends(get_http_client),
    state: SessionState = Depends(get_session_state)
):
    """Standard OAuth2 endpoint for Swagger UI."""
    login_response = await _perform_login(form_data.username, form_data.password, user_service, redis_client, http_client, state)
    return login_response.token


@router.post("/login", response_model=LoginResponse)
@limiter.limit("20/minute")
async def login(
    request: Request,
    login_request: LoginRequest,
    user_service: UserService = Depends(get_user_service),
    redis_client: RedisClient = Depends(get_redis_client),
    http_client: httpx.AsyncClient = Depends(get_http_client),
    state: SessionState = Depends(get_session_state)
):
    """Login endpoint for the station front end."""
    return await _perform_login(login_request.email, login_request.password, user_service, redis_client, http_client, state)


@router.post("/logout", status_code=status.HTTP_204_NO_CONTENT)
@limiter.limit("60/minute")
async def logout(
    request: Request,
    redis_client: RedisClient = Depends(get_redis_client),
    state: SessionState = Depends(get_session_state),
    current_user: User = Depends(get_current_user)
):
    """Forgets the user, the secret key, the roster and every ledger."""
    logger.info(f"User '{current_user.email}' logging out.")
    await redis_client.clear_session()
    async with state.mutation_lock:
        state.clear()
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/me", response_model=UserResponse)
@limiter.limit("60/minute")
async def me(request: Request, current_user: User = Depends(get_current_user)):
    return current_user
