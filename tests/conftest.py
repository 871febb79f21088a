"""
Test configuration and fixtures for the HomeVerse Listings API.
Every storage-dependent fixture runs once per backend (in-memory and SQLite).
"""

import pytest
import uuid
from io import BytesIO
from typing import Any, AsyncGenerator, Dict
from contextlib import asynccontextmanager
from httpx import ASGITransport, AsyncClient
from fastapi import FastAPI
from PIL import Image

from homeverse.config import Settings
from homeverse.database import Database
from homeverse.main import create_app
from homeverse.models.user import User, UserRole
from homeverse.models.property import Property, PropertyType, PropertyStatus
from homeverse.repositories.interface import StorageRepository
from homeverse.repositories.database import DatabaseStorage
from homeverse.repositories.memory import MemoryState, MemoryStorage


TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"
TEST_PASSWORD = "password123"


@pytest.fixture(params=["memory", "database"])
def backend(request) -> str:
    """Storage backend under test."""
    return request.param


@pytest.fixture
def settings(tmp_path, backend: str) -> Settings:
    return Settings(
        _env_file=None,
        environment="testing",
        storage_backend=backend,
        database_url=TEST_DATABASE_URL,
        upload_dir=str(tmp_path / "uploads"),
    )


@pytest.fixture
async def storage(settings: Settings) -> AsyncGenerator[StorageRepository, None]:
    """Create a fresh, empty storage backend."""
    if settings.uses_memory_storage:
        yield MemoryStorage(MemoryState())
        return

    database = Database(settings.database_url)
    await database.create_tables()
    try:
        async with database.session() as session:
            yield DatabaseStorage(session)
    finally:
        await database.dispose()


@pytest.fixture
async def app(settings: Settings) -> AsyncGenerator[FastAPI, None]:
    """
    Application under test.
    The ASGI transport skips the lifespan, so tables are created here.
    """
    application = create_app(settings)
    if application.state.database is not None:
        await application.state.database.create_tables()
    yield application
    if application.state.database is not None:
        await application.state.database.dispose()


@pytest.fixture
async def client(app: FastAPI) -> AsyncGenerator[AsyncClient, None]:
    """Async HTTP client that keeps cookies between requests."""
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://testserver") as ac:
        yield ac


@asynccontextmanager
async def app_storage(app: FastAPI):
    """Open the storage backend the application itself uses."""
    if app.state.memory_state is not None:
        yield MemoryStorage(app.state.memory_state)
        return
    async with app.state.database.session() as session:
        yield DatabaseStorage(session)


@pytest.fixture
def login_as(app: FastAPI, client: AsyncClient):
    """
    Return a coroutine that creates a user with the given role and logs the client in as them.
    Logging in again replaces the client's session cookie.
    """
    async def _login_as(role: UserRole = UserRole.BUYER, **overrides) -> Dict[str, Any]:
        async with app_storage(app) as storage:
            user = await UserFactory.create_user(storage, role=role, **overrides)

        response = await client.post(
            "/api/login",
            json={"username": user.username, "password": TEST_PASSWORD}
        )
        assert response.status_code == 200, response.text
        return response.json()

    return _login_as


# Test data factories
class UserFactory:
    """Factory for creating test users."""

    @staticmethod
    def create_user_data(**overrides) -> Dict[str, Any]:
        """Create registration data for a user."""
        suffix = uuid.uuid4().hex[:8]
        data = {
            "username": f"user_{suffix}",
            "email": f"user_{suffix}@example.com",
            "password": TEST_PASSWORD,
            "first_name": "Test",
            "last_name": "User",
            "role": UserRole.BUYER.value,
        }
        data.update(overrides)
        return data

    @staticmethod
    async def create_user(storage: StorageRepository, **overrides) -> User:
        """Store a user directly, bypassing the registration role rules."""
        data = UserFactory.create_user_data(**overrides)
        password = data.pop("password")
        data["role"] = UserRole(data["role"])
        data["hashed_password"] = User.hash_password(password)
        return await storage.create_user(data)


class PropertyFactory:
    """Factory for creating test properties."""

    @staticmethod
    def create_property_data(**overrides) -> Dict[str, Any]:
        data = {
            "title": "Test Property",
            "description": "A test property description",
            "price": 250000,
            "address": "123 Test Street",
            "city": "Austin",
            "state": "TX",
            "zip_code": "78701",
            "country": "USA",
            "property_type": PropertyType.HOUSE,
            "status": PropertyStatus.FOR_SALE,
            "bedrooms": 3,
            "bathrooms": 2,
            "area": 1500,
            "features": ["garage"],
        }
        data.update(overrides)
        return data

    @staticmethod
    def create_form_data(**overrides) -> Dict[str, str]:
        """Property fields as multipart form strings."""
        data = PropertyFactory.create_property_data(**overrides)
        form = {}
        for key, value in data.items():
            if isinstance(value, list):
                form[key] = ",".join(value)
            elif hasattr(value, "value"):
                form[key] = value.value
            else:
                form[key] = str(value)
        return form

    @staticmethod
    async def create_property(storage: StorageRepository, owner: User, **overrides) -> Property:
        data = PropertyFactory.create_property_data(**overrides)
        data["user_id"] = owner.id
        return await storage.create_property(data)


def make_image_bytes(image_format: str = "PNG", size=(24, 16)) -> bytes:
    """Encode a small solid-colour image."""
    buffer = BytesIO()
    Image.new("RGB", size, color=(200, 120, 40)).save(buffer, format=image_format)
    return buffer.getvalue()


@pytest.fixture
def user_factory() -> UserFactory:
    return UserFactory()


@pytest.fixture
def property_factory() -> PropertyFactory:
    return PropertyFactory()


@pytest.fixture
def png_bytes() -> bytes:
    return make_image_bytes("PNG")


# Test utilities
def assert_error(response, status_code: int, code: str) -> Dict[str, Any]:
    """Assert a response carries the standard error envelope."""
    assert response.status_code == status_code, response.text
    body = response.json()
    assert "error" in body
    error = body["error"]
    assert error["code"] == code
    assert error["message"]
    assert error["timestamp"]
    assert error["request_id"]
    return error
