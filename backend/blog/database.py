from typing import Annotated, AsyncGenerator

from fastapi import Depends

from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession
from sqlalchemy.orm import declarative_base, sessionmaker

from .config import settings

Base = declarative_base()


def _engine_options(url: str) -> dict:
    # asyncpg 전용 옵션은 postgres 연결에만 적용 (sqlite 개발/테스트 환경 대비)
    if not url.startswith("postgresql"):
        return {}
    return {
        "pool_pre_ping": True,          # 연결 사전 체크
        "pool_recycle": 1800,           # 30분마다 재연결
        "connect_args": {
            "ssl": True if settings.POSTGRES_SSLMODE == "require" else False,
        },
    }


engine = create_async_engine(settings.DATABASE_URL, **_engine_options(settings.DATABASE_URL))

async_session_factory = sessionmaker(
    engine, class_=AsyncSession, expire_on_commit=False
)

async def get_db() -> AsyncGenerator[AsyncSession, None]:
    async with async_session_factory() as sess:  # async with으로 자동 close 처리
        yield sess

# Annotated 별칭: 다른 모듈에서 `db: SessionDep` 만 적으면 세션이 주입됩니다.
SessionDep = Annotated[AsyncSession, Depends(get_db)]

# DB 정수 컬럼(BIGINT) 범위. 이를 벗어난 id/offset은 드라이버에서 OverflowError가 남
MAX_DB_INT = 2**63 - 1


def fits_db_int(value: int) -> bool:
    return -MAX_DB_INT - 1 <= value <= MAX_DB_INT
