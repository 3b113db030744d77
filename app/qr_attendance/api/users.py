import logging
from fastapi import APIRouter, Depends, HTTPException, status, Response, Request
from typing import List

from .schemas.user import CreateUserRequest, UserResponse
from ..models.user_models import User
from ..services.errors import ServiceError, UserAlreadyExistsError
from ..services.user_service import UserService
from .auth import require_superuser
from .dependencies import get_user_service
from .utilities.limiter import limiter

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/users", tags=["Station Accounts"])


@router.get("", response_model=List[UserResponse], summary="List station accounts")
@limiter.limit("60/minute")
async def list_users(request: Request, user: User = Depends(require_superuser), service: UserService = Depends(get_user_service)):
    return await service.list_users()

@router.post("", response_model=UserResponse, status_code=status.HTTP_201_CREATED, summary="Create a station account")
@limiter.limit("10/minute")
async def create_user(request: Request, create_request: CreateUserRequest, user: User = Depends(require_superuser), service: UserService = Depends(get_user_service)):
    try:
        return await service.add_user(create_request.email, create_request.password)
    except UserAlreadyExistsError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))
    except ServiceError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

@router.delete("/{email}", status_code=status.HTTP_204_NO_CONTENT, summary="Delete a station account")
@limiter.limit("10/minute")
async def delete_user(request: Request, email: str, user: User = Depends(require_superuser), service: UserService = Depends(get_user_service)):
    if not await service.delete_user(email):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found.")
    return Response(status_code=status.HTTP_204_NO_CONTENT)
