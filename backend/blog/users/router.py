from fastapi import APIRouter, HTTPException, status

from ..database import SessionDep
from ..auth.dependencies import CurrentUser
from ..auth.schema import AuthUser

from .schema import UserUpdate, UserPublic, UserMe
from . import service as user_service

router = APIRouter(prefix="/users", tags=["users"])

async def _load_current(db, current_user: AuthUser):
    # 토큰은 유효하지만 계정 레코드가 없는 경우
    user = await user_service.get_user_by_id(current_user.user_id, db)
    if not user:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    return user

@router.get("/me", response_model=UserMe)
async def read_users_me(db: SessionDep, current_user: AuthUser = CurrentUser):
    return await _load_current(db, current_user)

@router.put("/me", response_model=UserMe)
async def update_users_me(
    db: SessionDep,
    user_update_data: UserUpdate,
    current_user: AuthUser = CurrentUser,
):
    db_user = await _load_current(db, current_user)
    return await user_service.update_user(db, db_user=db_user, user_in=user_update_data)

@router.get("/{user_id}", response_model=UserPublic)
async def get_user_by_id_route(user_id: int, db: SessionDep):
    user = await user_service.get_user_by_id(user_id, db)
    if not user:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    return user
