from pydantic import BaseModel, EmailStr
from typing import Optional
from datetime import datetime

from app.schemas.common import ApiModel


class UserLogin(BaseModel):
    email: EmailStr
    password: str


class UserBrief(ApiModel):
    id: int
    name: str
    email: str
    department: Optional[str] = None


class UserOut(ApiModel):
    id: int
    name: str
    email: str
    role: str
    department: Optional[str] = None
    is_active: bool
    created_at: datetime


class Token(ApiModel):
    access_token: str
    token_type: str
    user: UserOut
