import os
import uuid

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from tortoise import Tortoise

TEST_DB_URL = "sqlite://:memory:"
os.environ["DATABASE_URL"] = TEST_DB_URL
os.environ.pop("ADMIN_PASSWORD", None)  # Keep the default-admin bootstrap out of tests

from skillswap.core import db as db_module  # noqa: E402
from skillswap.core.relay import relay  # noqa: E402
from skillswap.core.security import hash_password  # noqa: E402
from skillswap.main import app  # noqa: E402
from skillswap.models.skill import Skill  # noqa: E402
from skillswap.models.user import User  # noqa: E402

db_module.DB_URL = TEST_DB_URL
db_module.TORTOISE_ORM["connections"]["default"] = TEST_DB_URL


async def _init_test_db() -> None:
    """
    Initialize a clean in-memory SQLite database for every test.
    Ensures tables are recreated from scratch.
    """
    if Tortoise._inited:
        await Tortoise.close_connections()
    await Tortoise.init(config=db_module.TORTOISE_ORM)
    await Tortoise.generate_schemas()


class MockWebSocket:
    """Stand-in for a Starlette WebSocket: records what the relay sends and how it closes."""

    def __init__(self):
        self.sent = []
        self.closed = None  # (code, reason) once closed

    async def send_text(self, text: str):
        if self.closed is not None:
            raise RuntimeError("socket closed")
        self.sent.append(text)

    async def close(self, code: int = 1000, reason: str = ""):
        self.closed = (code, reason)


@pytest.fixture(autouse=True)
def reset_relay():
    """The relay is a process-wide singleton; start every test with no connections."""
    relay._conns.clear()
    yield
    relay._conns.clear()


@pytest_asyncio.fixture
async def client():
    """
    Provide an HTTPX AsyncClient bound to the FastAPI app with a fresh DB.
    """
    await _init_test_db()
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://testserver") as async_client:
        yield async_client
    await Tortoise.close_connections()


@pytest_asyncio.fixture
async def create_user(client):
    """
    Factory fixture to create regular users directly via ORM.
    """

    async def _create_user(password: str = "UserPass!23", **fields) -> tuple[User, str]:
        tag = uuid.uuid4().hex[:6]
        values = {
            "username": f"user_{tag}",
            "email": f"user_{tag}@example.com",
            "full_name": f"User {tag}",
        }
        values.update(fields)
        user = await User.create(password_hash=hash_password(password), **values)
        return user, password

    return _create_user


@pytest_asyncio.fixture
async def create_admin(create_user):
    """
    Factory fixture to create admin users directly via ORM for privileged endpoints.
    """

    async def _create_admin(password: str = "AdminPass!23", **fields) -> tuple[User, str]:
        fields.setdefault("full_name", "Admin")
        return await create_user(password, is_admin=True, **fields)

    return _create_admin


@pytest_asyncio.fixture
async def create_skill(client):
    async def _create_skill(user: User, name: str, skill_type: str = "offered", **fields) -> Skill:
        return await Skill.create(user=user, name=name, skill_type=skill_type, **fields)

    return _create_skill


@pytest_asyncio.fixture
async def auth_header_factory(client):
    """
    Helper fixture to obtain Authorization headers via the login endpoint.
    """

    async def _get_headers(email: str, password: str) -> dict[str, str]:
        resp = await client.post(
            "/api/auth/login",
            json={"email": email, "password": password},
        )
        assert resp.status_code == 200, resp.text
        token = resp.json()["data"]["accessToken"]
        client.cookies.clear()  # Callers authenticate with the header only
        return {"Authorization": f"Bearer {token}"}

    return _get_headers


@pytest_asyncio.fixture
async def member(create_user, auth_header_factory):
    """Factory for a regular user plus ready-to-use auth headers."""

    async def _member(**fields) -> tuple[User, dict[str, str]]:
        user, password = await create_user(**fields)
        return user, await auth_header_factory(user.email, password)

    return _member


@pytest.fixture
def mock_ws():
    """The MockWebSocket class, for registering fake sockets with the relay."""
    return MockWebSocket
