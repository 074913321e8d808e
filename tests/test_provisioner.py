"""
Tests for collection provisioning and its retry policy.
"""
from unittest.mock import AsyncMock, call, patch

import pytest
from pymongo.errors import OperationFailure

from rental_database.config import settings
from rental_database.database import entities
from rental_database.database.provisioner import ensure_collection, ensure_collections


@pytest.mark.asyncio
async def test_creates_missing_collection_with_declared_indexes(db_manager, fake_db):
    await ensure_collection(db_manager, entities.Booking, retries=3, base_delay_ms=0)

    assert "Booking" in await fake_db.list_collection_names()
    indexes = fake_db["Booking"].indexes
    assert {"property_1", "agency_1", "customer_1", "from_1_to_1", "status_1", "expireAt"} <= set(indexes)
    assert indexes["expireAt"]["expireAfterSeconds"] == settings.BOOKING_EXPIRE_AT


@pytest.mark.asyncio
async def test_unique_indexes_are_declared(db_manager, fake_db):
    await ensure_collection(db_manager, entities.User, retries=1, base_delay_ms=0)

    assert fake_db["User"].indexes["email_1"]["unique"] is True


@pytest.mark.asyncio
async def test_existing_collection_is_left_alone(db_manager, fake_db):
    await fake_db.create_collection("User")

    await ensure_collection(db_manager, entities.User, retries=3, base_delay_ms=0)

    assert fake_db.create_collection_calls == ["User"]
    assert list(fake_db["User"].indexes) == ["_id_"]


@pytest.mark.asyncio
async def test_text_indexes_are_not_built_by_provisioning(db_manager, fake_db):
    await ensure_collection(db_manager, entities.Property, retries=1, base_delay_ms=0)

    assert "name_text" not in fake_db["Property"].indexes


@pytest.mark.asyncio
async def test_succeeds_on_third_attempt(db_manager, fake_db):
    fake_db.fail_create["Location"] = 2

    await ensure_collection(db_manager, entities.Location, retries=3, base_delay_ms=0)

    assert fake_db.create_collection_calls == ["Location", "Location", "Location"]
    assert "Location" in await fake_db.list_collection_names()
    assert "country_1" in fake_db["Location"].indexes


@pytest.mark.asyncio
async def test_waits_with_exponential_backoff(db_manager, fake_db):
    fake_db.fail_create["Location"] = 2

    with patch("rental_database.database.provisioner.asyncio.sleep", new_callable=AsyncMock) as sleep:
        await ensure_collection(db_manager, entities.Location, retries=3, base_delay_ms=500)

    assert sleep.await_args_list == [call(0.5), call(1.0)]


@pytest.mark.asyncio
async def test_all_attempts_failing_propagates(db_manager, fake_db):
    fake_db.fail_create["Token"] = 3

    with pytest.raises(OperationFailure):
        await ensure_collection(db_manager, entities.Token, retries=3, base_delay_ms=0)

    assert len(fake_db.create_collection_calls) == 3
    assert "Token" not in await fake_db.list_collection_names()


@pytest.mark.asyncio
async def test_retry_builds_indexes_when_collection_was_created(db_manager, fake_db):
    fake_db["Notification"].fail_create_indexes = 1

    await ensure_collection(db_manager, entities.Notification, retries=2, base_delay_ms=0)

    assert fake_db.create_collection_calls == ["Notification"]
    assert {"user_1_isRead_1", "booking_1"} <= set(fake_db["Notification"].indexes)


@pytest.mark.asyncio
async def test_provisions_every_entity(db_manager, fake_db):
    await ensure_collections(db_manager)

    assert set(await fake_db.list_collection_names()) == {entity.name for entity in entities.ENTITIES}


@pytest.mark.asyncio
async def test_one_failing_entity_fails_provisioning(db_manager, fake_db):
    fake_db.fail_create["PushToken"] = 10

    with patch("rental_database.database.provisioner.asyncio.sleep", new_callable=AsyncMock):
        with pytest.raises(OperationFailure):
            await ensure_collections(db_manager)
