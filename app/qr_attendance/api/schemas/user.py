# app/qr_attendance/api/schemas/user.py
from pydantic import BaseModel, ConfigDict, Field
from typing import Optional

from ...models.user_models import UserRole

class LoginRequest(BaseModel):
    email: str
    password: str

class Token(BaseModel):
    access_token: str
    token_type: str = "bearer"

class UserResponse(BaseModel):
    email: str
    role: UserRole

    model_config = ConfigDict(from_attributes=True)

class LoginResponse(BaseModel):
    token: Token
    user: UserResponse
    has_secret_key: bool = Field(description="False means the station still needs its secret key.")

class CreateUserRequest(BaseModel):
    email: str = Field(..., min_length=3)
    password: str = Field(..., min_length=1)

# Internal representation of JWT data
class TokenData(BaseModel):
    email: Optional[str] = None
