from fastapi import APIRouter, HTTPException, status

from ..database import SessionDep
from ..users import service as user_service
from ..users.schema import UserCreate, UserLogin
from .schema import TokenResponse
from .service import authenticate_user, create_access_token

router = APIRouter(prefix="/auth", tags=["auth"])

@router.post("/signup", response_model=TokenResponse, status_code=status.HTTP_201_CREATED)
async def signup(user_data: UserCreate, db: SessionDep):
    user = await user_service.create_user(user_data, db)
    return {"user": user, "token": create_access_token(user=user)}

@router.post("/login", response_model=TokenResponse)
async def login(credentials: UserLogin, db: SessionDep):
    user = await authenticate_user(db, credentials.email, credentials.password)
    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )

    # last_login 업데이트 (로그인 성공 시)
    await user_service.update_last_login(user=user, db=db)

    return {"user": user, "token": create_access_token(user=user)}
