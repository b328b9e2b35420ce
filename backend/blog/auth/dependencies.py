from typing import Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer

from ..auth import service as auth_service
from .schema import AuthUser

# 헤더가 없을 때도 직접 401을 내려 응답 메시지를 통일합니다.
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/auth/login", auto_error=False)

async def get_current_user_from_access_token(
    token: Optional[str] = Depends(oauth2_scheme),
) -> AuthUser:
    user = auth_service.decode_access_token(token) if token else None

    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Unauthorized",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return user

async def get_optional_user(
    token: Optional[str] = Depends(oauth2_scheme),
) -> Optional[AuthUser]:
    """로그인하지 않은 요청도 허용하는 엔드포인트용 (draft 열람 권한 판정 등)"""
    return auth_service.decode_access_token(token) if token else None

CurrentUser = Depends(get_current_user_from_access_token)
OptionalUser = Depends(get_optional_user)
