from pydantic import BaseModel, Field
from typing import Optional

from utils.permissions import Role


class SignupRequest(BaseModel):
    email: str = Field(..., min_length=3)
    password: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1)
    factory_name: Optional[str] = None
    role: Role = Role.OWNER


class LoginRequest(BaseModel):
    email: str
    password: str


class User(BaseModel):
    id: str
    email: str
    name: str
    role: Role
    factory_id: Optional[str] = None
    created_at: str


class Factory(BaseModel):
    id: str
    name: str
    currency: str = "USD"
    timezone: str = "UTC"
    created_at: str
