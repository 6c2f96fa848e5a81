"""
Pytest configuration and fixtures for the Asset Register tests
"""
import asyncio
import os
import tempfile

# Keep the application's default engine away from the working directory
os.environ.setdefault(
    "DATABASE_URL",
    f"sqlite+aiosqlite:///{tempfile.mkdtemp()}/asset_register_test.db"
)

import pytest
from fastapi.testclient import TestClient

from asset_register.database import create_engine_for, create_session_maker, get_session, init_db
from asset_register.main import app


@pytest.fixture
def session_maker(tmp_path):
    """Session maker bound to a fresh SQLite database for one test"""
    engine = create_engine_for(f"sqlite+aiosqlite:///{tmp_path / 'register.db'}")
    asyncio.run(init_db(engine))
    yield create_session_maker(engine)
    asyncio.run(engine.dispose())


@pytest.fixture
def client(session_maker):
    """FastAPI test client using the per-test database"""
    async def override_get_session():
        async with session_maker() as session:
            yield session

    app.dependency_overrides[get_session] = override_get_session
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()
