from pydantic import EmailStr, Field, field_validator
from typing import Optional
from datetime import datetime

from ..config import settings
from ..models import CustomModel


def _strip(value):
    return value.strip() if isinstance(value, str) else value


def _check_password_length(value: str, label: str = "Password") -> str:
    if len(value) < settings.PASSWORD_MIN_LENGTH:
        raise ValueError(f"{label} must be at least {settings.PASSWORD_MIN_LENGTH} characters long")
    return value


class UserBase(CustomModel):
    email: EmailStr = Field(..., json_schema_extra={"example": "user@example.com"})
    name: str = Field(..., min_length=1, max_length=50, json_schema_extra={"example": "John Doe"})

    @field_validator("email", mode="before")
    @classmethod
    def _normalise_email(cls, v):
        # 이메일은 공백 제거 후 소문자로 저장 (중복 가입 판정 기준)
        return v.strip().lower() if isinstance(v, str) else v

    @field_validator("name", mode="before")
    @classmethod
    def _strip_name(cls, v):
        return _strip(v)

class UserCreate(UserBase):
    password: str = Field(..., json_schema_extra={"example": "strongpassword123"})

    @field_validator("password")
    @classmethod
    def _password_length(cls, v):
        return _check_password_length(v)

class UserLogin(CustomModel):
    email: str = Field(..., min_length=1, json_schema_extra={"example": "user@example.com"})
    password: str = Field(..., min_length=1)

    @field_validator("email", mode="before")
    @classmethod
    def _normalise_email(cls, v):
        return v.strip().lower() if isinstance(v, str) else v

class UserUpdate(CustomModel):
    """프로필 수정. 명시적으로 전달된 필드만 반영합니다."""
    email: Optional[EmailStr] = Field(None, json_schema_extra={"example": "new_email@example.com"})
    name: Optional[str] = Field(None, min_length=1, max_length=50, json_schema_extra={"example": "Johnathan Doe"})
    bio: Optional[str] = Field(None, max_length=500)
    avatar: Optional[str] = Field(None, max_length=500)
    # 비밀번호 변경은 현재 비밀번호 재입력이 필요합니다.
    current_password: Optional[str] = None
    new_password: Optional[str] = None

    @field_validator("email", mode="before")
    @classmethod
    def _normalise_email(cls, v):
        return v.strip().lower() if isinstance(v, str) else v

    @field_validator("name", "bio", "avatar", mode="before")
    @classmethod
    def _strip_text(cls, v):
        return _strip(v)

class UserRef(CustomModel):
    id: int
    name: str

class UserSummary(UserRef):
    avatar: str = ""

class AuthorDetail(UserSummary):
    bio: str = ""

class UserPublic(AuthorDetail):
    created_at: datetime

class UserMe(UserPublic):
    email: str
    role: str
    updated_at: datetime
    last_login: Optional[datetime] = None
