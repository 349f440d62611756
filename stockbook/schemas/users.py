from datetime import datetime
from typing import Optional
from pydantic import EmailStr, Field

from stockbook.models import Role
from stockbook.schemas.common import CamelModel


class UserBase(CamelModel):
    name: str = Field(min_length=1)
    email: EmailStr
    role: Role = Role.USER
    phone: Optional[str] = None
    address: Optional[str] = None


class UserCreate(UserBase):
    password: str = Field(min_length=6)


class UserUpdate(CamelModel):
    name: Optional[str] = Field(default=None, min_length=1)
    email: Optional[EmailStr] = None
    role: Optional[Role] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    is_active: Optional[bool] = None


class PasswordSet(CamelModel):
    password: str = Field(min_length=6)


class UserRead(CamelModel):
    id: int
    name: str
    email: str
    role: Role
    phone: Optional[str] = None
    address: Optional[str] = None
    is_active: bool
    created_at: Optional[datetime] = None
