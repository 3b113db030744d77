# app/qr_attendance/models/user_models.py

from pydantic import BaseModel, Field
from enum import Enum


class UserRole(str, Enum):
    SUPERUSER = "superuser"
    USER = "user"


class User(BaseModel):
    """
    The user operating the station. Persisted in Redis as the current user.
    """
    email: str = Field(..., description="Login e-mail, unique per station")
    role: UserRole = UserRole.USER


class StoredUser(User):
    """A station account as stored in Redis. Never leaves the service layer."""
    password_hash: str
