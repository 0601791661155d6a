import re
from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, EmailStr, field_validator

from smm_panel.models.user import UserRole, UserStatus

_USERNAME_RE = re.compile(r"^[A-Za-z0-9_]+$")


def validate_username(value: str) -> str:
    value = (value or "").strip()
    if not 3 <= len(value) <= 50:
        raise ValueError("Username must be between 3 and 50 characters")
    if not _USERNAME_RE.match(value):
        raise ValueError("Username may only contain letters, numbers and underscores")
    return value


class UserOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    username: str
    email: EmailStr
    role: UserRole
    status: UserStatus
    balance: Decimal
    last_login: Optional[datetime] = None
    created_at: Optional[datetime] = None


class UpdateProfileRequest(BaseModel):
    username: Optional[str] = None
    email: Optional[EmailStr] = None

    @field_validator("username")
    @classmethod
    def check_username(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        return validate_username(value)


class UserStatusUpdate(BaseModel):
    status: UserStatus


class UsersResponse(BaseModel):
    items: list[UserOut]
    total: int
    page: int
    page_size: int
    pages: int


class ApiKeyResponse(BaseModel):
    api_key: str


class AffiliateOut(BaseModel):
    referral_code: str
    status: str
    referrals: int = 0
