from datetime import datetime
from pydantic import BaseModel, EmailStr, Field
from typing import Optional


class UserCreate(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    email: EmailStr
    password: str = Field(min_length=1)


class UserLogin(BaseModel):
    email: EmailStr
    password: str = Field(min_length=1)


class UserSummary(BaseModel):
    name: str
    email: EmailStr


class TokenResponse(BaseModel):
    message: str
    userId: int
    token: str
    user: UserSummary


class UserResponse(BaseModel):
    id: int
    name: str
    email: EmailStr
    avatar_color: Optional[str] = None
    created_at: datetime
    last_login: Optional[datetime] = None

    class Config:
        from_attributes = True
