from pydantic import Field

from ..models import CustomModel
from ..users.schema import UserMe


class AuthUser(CustomModel):
    """토큰에서 복원되는 인증 주체 (DB 조회 없음)"""
    user_id: int
    email: str
    name: str


class TokenResponse(CustomModel):
    user: UserMe
    token: str
    token_type: str = Field(default="bearer")
