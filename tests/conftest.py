"""
Pytest configuration for API tests

Every test gets a fresh SQLite database and an in-memory photo store.
"""

import asyncio
import os
import tempfile

_db_dir = tempfile.mkdtemp(prefix="issue-tracker-tests-")
os.environ["DATABASE_URI"] = f"sqlite+aiosqlite:///{os.path.join(_db_dir, 'test.db')}"
os.environ["TESTING"] = "true"
os.environ["SECRET_KEY"] = "test-secret-key"
os.environ["FIRST_ADMIN_EMAIL"] = "admin@community.com"
os.environ["FIRST_ADMIN_PASSWORD"] = "admin123"
os.environ["FIRST_ADMIN_NAME"] = "System Admin"
os.environ["SEED_SAMPLE_ISSUES"] = "false"

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from app.db.base_class import Base  # noqa: E402
from app.db.session import engine  # noqa: E402
from app.services.storage import StorageError, get_storage  # noqa: E402
from main import app  # noqa: E402

ADMIN_EMAIL = "admin@community.com"
ADMIN_PASSWORD = "admin123"


class FakeStorage:
    """Photo store that keeps uploads in memory."""

    def __init__(self):
        self.uploads = {}
        self.removed = []
        self.fail_uploads = False

    async def upload(self, data, filename, content_type):
        if self.fail_uploads:
            raise StorageError("bucket unavailable")
        url = f"https://storage.test/issues/{len(self.uploads) + 1}-{filename}"
        self.uploads[url] = (data, content_type)
        return url

    async def remove(self, url):
        self.removed.append(url)
        self.uploads.pop(url, None)


async def _reset_database():
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)


@pytest.fixture
def storage():
    return FakeStorage()


@pytest.fixture
def client(storage):
    asyncio.run(_reset_database())
    app.dependency_overrides[get_storage] = lambda: storage
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def admin_headers(client):
    response = client.post(
        "/api/auth/login", json={"email": ADMIN_EMAIL, "password": ADMIN_PASSWORD}
    )
    assert response.status_code == 200
    return {"Authorization": f"Bearer {response.json()['token']}"}


@pytest.fixture
def create_issue(client):
    """Factory that reports an issue through the API and returns its JSON."""

    def _create(**overrides):
        data = {
            "title": "Pothole",
            "description": "deep hole",
            "category": "Roads",
            "location": "5th Ave",
        }
        data.update(overrides)
        response = client.post("/api/issues", data=data)
        assert response.status_code == 201, response.text
        return response.json()["issue"]

    return _create
