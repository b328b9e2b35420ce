import logging
from typing import Optional

from fastapi import HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func
from sqlalchemy.exc import IntegrityError

from passlib.context import CryptContext

from ..database import fits_db_int
from .models import User as UserModel
from .schema import UserCreate, UserUpdate, _check_password_length

logger = logging.getLogger(__name__)

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

async def _commit_unique_email(db: AsyncSession, conflict_detail: str) -> None:
    # 사전 중복 검사와 INSERT/UPDATE 사이의 경합은 unique 인덱스가 잡아냄
    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=conflict_detail)

async def create_user(user_data: UserCreate, db: AsyncSession, role: str = "user") -> UserModel:
    existing_user = await get_user_by_email(user_data.email, db)
    if existing_user:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="User with this email already exists")

    hashed_password = pwd_context.hash(user_data.password)
    db_user = UserModel(
        name=user_data.name,
        email=user_data.email,
        hashed_password=hashed_password,
        role=role,
        bio="",
        avatar="",
    )
    db.add(db_user)
    await _commit_unique_email(db, "User with this email already exists")
    await db.refresh(db_user)
    logger.info(f"User created: id={db_user.id}, email={db_user.email}")
    return db_user

async def update_user(db: AsyncSession, db_user: UserModel, user_in: UserUpdate) -> UserModel:
    """사용자 정보를 수정합니다. 명시적으로 전달된 필드만 업데이트합니다."""
    update_data = user_in.model_dump(exclude_unset=True)
    current_password = update_data.pop("current_password", None)
    new_password = update_data.pop("new_password", None)

    if "email" in update_data:
        if update_data["email"] is None:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Email is required")
        existing_user = await get_user_by_email(update_data["email"], db)
        if existing_user and existing_user.id != db_user.id:
            raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Email is already taken")

    if "name" in update_data and not update_data["name"]:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Name is required")

    # 비밀번호 변경: 현재 비밀번호 재확인 후에만 허용
    if new_password:
        if not current_password:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Current password is required")
        if not await verify_password(current_password, db_user.hashed_password):
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Current password is incorrect")
        try:
            _check_password_length(new_password, label="New password")
        except ValueError as e:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
        db_user.hashed_password = pwd_context.hash(new_password)

    # bio/avatar는 null이 오면 빈 문자열로 저장
    for field, value in update_data.items():
        if field in ("bio", "avatar") and value is None:
            value = ""
        setattr(db_user, field, value)

    await _commit_unique_email(db, "Email is already taken")
    await db.refresh(db_user)
    return db_user

async def get_user_by_id(user_id: int, db: AsyncSession) -> Optional[UserModel]:
    if not fits_db_int(user_id):
        return None
    result = await db.execute(select(UserModel).where(UserModel.id == user_id))
    return result.scalar_one_or_none()

async def get_user_by_email(email: str, db: AsyncSession) -> Optional[UserModel]:
    result = await db.execute(select(UserModel).where(UserModel.email == email))
    return result.scalar_one_or_none()

async def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)

async def update_last_login(user: UserModel, db: AsyncSession) -> None:
    # DB 서버 시간 기준으로 기록
    user.last_login = func.now()
    await db.commit()
    await db.refresh(user)
