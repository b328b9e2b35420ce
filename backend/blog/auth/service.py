import logging
from datetime import datetime, timedelta, timezone
from typing import Optional

from jose import jwt, JWTError
from sqlalchemy.ext.asyncio import AsyncSession

from ..config import settings
from ..users import service as user_service
from ..users.models import User
from .schema import AuthUser

logger = logging.getLogger(__name__)


def create_access_token(user: User) -> str:
    """
    사용자 객체를 기반으로 Access Token을 생성합니다.
    토큰에는 사용자 id(sub), email, name이 담기며 7일 후 만료됩니다.
    refresh 토큰이나 폐기(revocation) 목록은 없습니다.
    """
    expire = datetime.now(timezone.utc) + timedelta(days=settings.ACCESS_TOKEN_EXPIRE_DAYS)
    to_encode = {
        "sub": str(user.id),
        "email": user.email,
        "name": user.name,
        "exp": expire,
    }
    return jwt.encode(to_encode, settings.JWT_SECRET_KEY, algorithm=settings.JWT_ALGORITHM)


def decode_access_token(token: str) -> Optional[AuthUser]:
    """
    토큰을 검증하고 인증 주체를 복원합니다.
    서명 오류, 만료, 형식 오류 등 어떤 실패든 None을 반환합니다.
    """
    try:
        payload = jwt.decode(token, settings.JWT_SECRET_KEY, algorithms=[settings.JWT_ALGORITHM])
    except JWTError:
        return None

    sub = payload.get("sub")
    email = payload.get("email")
    name = payload.get("name")
    if sub is None or email is None or name is None:
        return None
    try:
        user_id = int(sub)
    except (TypeError, ValueError):
        return None
    return AuthUser(user_id=user_id, email=email, name=name)


async def authenticate_user(
    db: AsyncSession, email: str, password: str
) -> Optional[User]:
    """
    사용자 이메일과 비밀번호로 인증을 시도합니다.
    성공 시 User 객체를, 실패 시 None을 반환합니다.
    """
    user = await user_service.get_user_by_email(email, db)

    if not user or not await user_service.verify_password(password, user.hashed_password):
        logger.info(f"Login failed for email={email}")
        return None
    return user
