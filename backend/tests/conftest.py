import os
import sys
from pathlib import Path
import pytest

from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from httpx import AsyncClient, ASGITransport

# 테스트용 환경 변수 세팅 (blog 모듈 임포트 전에 적용)
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key")
os.environ.setdefault("LOG_LEVEL", "WARNING")

# sys.path에 backend 추가하여 'blog' 패키지 검색 가능하게 함
repo_root = Path(__file__).resolve().parents[2]
backend_path = repo_root / "backend"
if str(backend_path) not in sys.path:
    sys.path.insert(0, str(backend_path))

from blog.main import app
from blog.database import Base
from blog.database import get_db as real_get_db


@pytest.fixture()
async def test_engine():
    # 메모리 SQLite: StaticPool로 한 연결을 공유해야 테이블이 유지됨
    engine = create_async_engine("sqlite+aiosqlite:///:memory:", poolclass=StaticPool)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture()
async def db(test_engine):
    async_session = sessionmaker(test_engine, class_=AsyncSession, expire_on_commit=False)
    async with async_session() as session:
        yield session


@pytest.fixture(autouse=True)
async def override_db(db):
    async def _get_db():
        yield db
    app.dependency_overrides[real_get_db] = _get_db
    yield
    app.dependency_overrides.clear()


@pytest.fixture()
async def client():
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


def auth_headers(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture()
def signup(client):
    """회원가입 후 (token, user) 반환하는 헬퍼"""
    async def _signup(name: str, email: str, password: str = "secret123"):
        resp = await client.post("/auth/signup", json={"name": name, "email": email, "password": password})
        assert resp.status_code == 201, resp.text
        body = resp.json()
        return body["token"], body["user"]
    return _signup


@pytest.fixture()
def create_post(client):
    """게시글 작성 헬퍼: 추가 필드는 overrides로 전달"""
    async def _create_post(token: str, **overrides):
        payload = {
            "title": "Hello world",
            "content": "First post body",
            "excerpt": "Short summary",
        }
        payload.update(overrides)
        resp = await client.post("/posts", json=payload, headers=auth_headers(token))
        assert resp.status_code == 201, resp.text
        return resp.json()
    return _create_post
