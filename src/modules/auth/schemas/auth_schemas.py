from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator

from modules.documents.models.user import UserRole


class RegisterRequest(BaseModel):
    email: str
    password: str = Field(min_length=6)
    name: str = Field(min_length=2)

    @field_validator('name', mode='before')
    @classmethod
    def strip_name(cls, v):
        """Trim before the length check"""
        return v.strip() if isinstance(v, str) else v


class LoginRequest(BaseModel):
    # Plain str: any email accepted at registration must be able to log in
    email: str
    password: str = Field(min_length=1)


class UserResponse(BaseModel):
    id: str
    name: str
    email: str
    role: UserRole
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class TokenResponse(BaseModel):
    token: str
    token_type: str = "bearer"
    user: UserResponse


class UserUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=2)
    password: Optional[str] = Field(default=None, min_length=6)
    role: Optional[UserRole] = None

    @field_validator('name', mode='before')
    @classmethod
    def strip_name(cls, v):
        return v.strip() if isinstance(v, str) else v


class UserListResponse(BaseModel):
    users: List[UserResponse]
    total: int
