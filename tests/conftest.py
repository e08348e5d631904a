"""Shared test fixtures for Members API tests"""

import os
import tempfile
from typing import AsyncGenerator
from unittest.mock import patch

import pytest
import pytest_asyncio

# Set test environment before importing app
os.environ["DEBUG"] = "true"
os.environ["SECRET_KEY"] = "test-secret-key-for-testing-only"
os.environ["DATABASE_PATH"] = os.path.join(tempfile.mkdtemp(), "members.json")
os.environ.pop("INITIAL_USERNAME", None)
os.environ.pop("INITIAL_PASSWORD", None)

from tests.factories import TEST_USERNAME, TEST_PASSWORD


# =============================================================================
# Database Fixtures
# =============================================================================

@pytest.fixture
def database(tmp_path):
    """Fresh TinyDB-backed database service for each test.

    Patches db_service in all modules that import it.
    """
    from members_api.services.database_service import DatabaseService

    service = DatabaseService(str(tmp_path / "members.json"))

    with patch('members_api.services.database_service.db_service', service), \
         patch('members_api.routes.auth.db_service', service), \
         patch('members_api.routes.members.db_service', service), \
         patch('members_api.main.db_service', service):
        yield service

    service.close()


@pytest.fixture
def test_user(database) -> dict:
    """A stored user with a known password"""
    return database.create_user(TEST_USERNAME, TEST_PASSWORD)


@pytest.fixture
def seeded_members(database) -> list:
    """A small member collection with one 'Lewis'"""
    return [
        database.create_member({
            "Firstname": "Lewis", "Lastname": "Carroll",
            "Email": "lewis@user.com", "Active": True,
        }),
        database.create_member({
            "Firstname": "Ada", "Lastname": "Lovelace",
            "Email": "ada@user.com", "Active": True,
        }),
        database.create_member({
            "Firstname": "Alan", "Lastname": "Turing",
            "Email": "alan@user.com", "Active": False,
        }),
    ]


# =============================================================================
# Application and Client Fixtures
# =============================================================================

@pytest_asyncio.fixture
async def app(database):
    """Get the FastAPI application bound to the test database"""
    from members_api.main import app as fastapi_app
    return fastapi_app


@pytest_asyncio.fixture
async def test_client(app) -> AsyncGenerator:
    """Create async HTTP client for testing"""
    from httpx import AsyncClient, ASGITransport

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://api.localhost") as client:
        yield client


# =============================================================================
# JWT Token Fixtures
# =============================================================================

@pytest.fixture
def jwt_token(test_user) -> str:
    """Generate a valid JWT token for the test user"""
    from members_api.auth.jwt import issue_token_for_user
    token, _ = issue_token_for_user(test_user)
    return token


@pytest.fixture
def jwt_headers(jwt_token) -> dict:
    """HTTP headers with JWT authorization"""
    return {"Authorization": f"Bearer {jwt_token}"}


# =============================================================================
# Pytest Configuration
# =============================================================================

def pytest_configure(config):
    """Configure pytest markers"""
    config.addinivalue_line("markers", "integration: marks tests as integration tests")
    config.addinivalue_line("markers", "unit: marks tests as unit tests")
