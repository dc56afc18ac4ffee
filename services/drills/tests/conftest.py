"""Shared fixtures for the Drills service tests.

Settings are read from the environment, so the test environment is set up
here before any service module is imported.
"""

import os
import tempfile
import time

_tmp = tempfile.mkdtemp(prefix="drills-tests-")
os.environ["ENV"] = "test"
os.environ["DATABASE_DSN"] = f"sqlite+aiosqlite:///{_tmp}/drills.db"
os.environ["JWT_VERIFY_KEY"] = "test-secret-key-for-the-drills-service-0123456789"
os.environ["JWT_ALGORITHM"] = "HS256"
for _name in ("CACHE_URL", "OIDC_AUDIENCE", "OIDC_ISSUER"):
    os.environ.pop(_name, None)

import jwt
import pytest
from httpx import ASGITransport, AsyncClient

from packages.common.config import get_settings
from packages.schemas.drills import CreateDrill
from services.drills import repo
from services.drills.app import app


def make_token(sub: str = "user-1", roles: list[str] | None = None, ttl: int = 300, **claims) -> str:
    """Mint an HS256 token the way the identity provider would."""
    payload = {"sub": sub, "exp": int(time.time()) + ttl, "roles": roles or [], **claims}
    return jwt.encode(payload, get_settings().JWT_VERIFY_KEY, algorithm="HS256")


def bearer(sub: str = "user-1", **kwargs) -> dict[str, str]:
    return {"Authorization": f"Bearer {make_token(sub, **kwargs)}"}


def drill_payload(title: str = "JavaScript Fundamentals", difficulty: str = "easy", tags=None, n: int = 5) -> dict:
    return {
        "title": title,
        "difficulty": difficulty,
        "tags": tags if tags is not None else ["javascript", "basics"],
        "questions": [
            {"id": f"q{i}", "prompt": f"Prompt {i}?", "keywords": ["scope", "hoisting"] if i == 1 else [f"kw{i}", "block"]}
            for i in range(1, n + 1)
        ],
    }


@pytest.fixture
async def db():
    await repo.init_db()
    await app.state.drills_cache.clear()
    yield
    await repo.drop_db()


@pytest.fixture
async def client(db):
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac


@pytest.fixture
async def drill(db):
    async with repo.get_sessionmaker()() as session:
        row = await repo.create_drill(session, CreateDrill.model_validate(drill_payload()))
    return row
