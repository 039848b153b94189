import os
import pytest
import pytest_asyncio
from unittest.mock import AsyncMock, MagicMock
from fastapi.testclient import TestClient
from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase
from billsplit.main import app
from billsplit.db import mongo as mongo_module
from billsplit.models.user import User

# Test database configuration
TEST_MONGODB_URI = os.getenv("MONGODB_URI")
TEST_MONGODB_DB = "billsplit_test"


@pytest_asyncio.fixture
async def test_db() -> AsyncIOMotorDatabase:
    """Fixture for test MongoDB database (for async repository tests)."""
    if not TEST_MONGODB_URI:
        pytest.skip("MONGODB_URI is not set")

    client = AsyncIOMotorClient(TEST_MONGODB_URI)
    db = client[TEST_MONGODB_DB]

    # Drop database before test to ensure clean state
    await client.drop_database(TEST_MONGODB_DB)

    # Same indexes as the application
    previous_db = mongo_module.mongodb.db
    mongo_module.mongodb.db = db
    try:
        await mongo_module.create_indexes()
    finally:
        mongo_module.mongodb.db = previous_db

    yield db

    # Cleanup: drop all collections after tests
    await client.drop_database(TEST_MONGODB_DB)
    client.close()


@pytest.fixture
def mock_db():
    """
    MagicMock database whose client hands out a usable session.

    `async with await db.client.start_session() as session:` and
    `async with session.start_transaction():` both work against it.
    """
    db = MagicMock()

    session = MagicMock()
    transaction = MagicMock()
    transaction.__aenter__ = AsyncMock(return_value=None)
    transaction.__aexit__ = AsyncMock(return_value=False)
    session.start_transaction = MagicMock(return_value=transaction)

    session_ctx = MagicMock()
    session_ctx.__aenter__ = AsyncMock(return_value=session)
    session_ctx.__aexit__ = AsyncMock(return_value=False)
    db.client.start_session = AsyncMock(return_value=session_ctx)

    return db


@pytest.fixture
def client():
    """
    FastAPI test client.

    Not used as a context manager, so the lifespan (and the MongoDB
    connection) never starts; tests patch the services or repositories.
    """
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def alice():
    return User(name="Alice", phone="+60111111111")


@pytest.fixture
def bob():
    return User(name="Bob", phone="+60122222222")


@pytest.fixture
def carol():
    return User(name="Carol", phone="+60133333333")


@pytest.fixture
def users_by_id(alice, bob, carol):
    return {user.id: user for user in (alice, bob, carol)}
