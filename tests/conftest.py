from unittest.mock import MagicMock

import pytest

from fakes import FakeDatabase
from rental_database.config import Settings
from rental_database.database.manager import ConnectionState, DatabaseManager


@pytest.fixture
def fake_db():
    return FakeDatabase()


@pytest.fixture
def db_manager(fake_db):
    """A manager that looks connected and talks to the in-memory database."""
    manager = DatabaseManager()
    manager.client = MagicMock()
    manager.database = fake_db
    manager.state = ConnectionState.CONNECTED
    return manager


@pytest.fixture
def test_settings():
    return Settings(
        MONGODB_URL="mongodb://localhost:27017/rental_test",
        LANGUAGES="en,fr",
        BOOKING_EXPIRE_AT=7200,
        USER_EXPIRE_AT=3600,
        TOKEN_EXPIRE_AT=1800,
        COLLECTION_CREATE_RETRIES=3,
        COLLECTION_CREATE_RETRY_DELAY_MS=0,
    )
