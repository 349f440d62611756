from typing import Optional
from pydantic import BaseModel, EmailStr, Field

from stockbook.schemas.common import CamelModel
from stockbook.schemas.users import UserRead


class Token(BaseModel):
    """Respuesta del flujo OAuth2 de la documentación interactiva."""

    access_token: str
    token_type: str = "bearer"


class AuthResponse(CamelModel):
    success: bool = True
    token: str
    data: Optional[UserRead] = None


class RegisterRequest(CamelModel):
    name: str = Field(min_length=1)
    email: EmailStr
    password: str = Field(min_length=6)
    phone: Optional[str] = None
    address: Optional[str] = None


class LoginRequest(CamelModel):
    email: EmailStr
    password: str = Field(min_length=1)


class UpdateDetailsRequest(CamelModel):
    name: Optional[str] = Field(default=None, min_length=1)
    email: Optional[EmailStr] = None
    phone: Optional[str] = None
    address: Optional[str] = None


class UpdatePasswordRequest(CamelModel):
    current_password: str
    new_password: str = Field(min_length=6)


class ForgotPasswordRequest(CamelModel):
    email: EmailStr


class ResetPasswordRequest(CamelModel):
    password: str = Field(min_length=6)
