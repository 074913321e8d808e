"""
Tests for multilingual LocationValue synchronization.
"""
from datetime import datetime, timedelta, timezone

import pytest
from bson import ObjectId

from rental_database.database import entities
from rental_database.services.language_sync_service import LanguageSyncService


def _created_hours_ago(hours):
    return ObjectId.from_datetime(datetime.now(timezone.utc) - timedelta(hours=hours))


def _languages(fake_db, parent):
    values = fake_db["LocationValue"]
    return sorted(values.get(value_id)["language"] for value_id in parent["values"])


@pytest.fixture
def service(db_manager):
    return LanguageSyncService(db_manager, ["en", "fr"])


@pytest.mark.asyncio
async def test_backfills_missing_language_from_english(service, fake_db):
    values = fake_db["LocationValue"]
    en = values.seed(language="en", value="Paris")
    location_id = fake_db["Location"].seed(values=[en])

    assert await service.sync_languages(entities.Location, "locations") is True

    location = fake_db["Location"].get(location_id)
    assert _languages(fake_db, location) == ["en", "fr"]
    assert location["values"][0] == en
    fr = values.get(location["values"][1])
    assert fr["language"] == "fr"
    assert fr["value"] == "Paris"


@pytest.mark.asyncio
async def test_purges_unconfigured_languages(service, fake_db):
    values = fake_db["LocationValue"]
    en = values.seed(language="en", value="Germany")
    fr = values.seed(language="fr", value="Allemagne")
    de = values.seed(language="de", value="Deutschland")
    country_id = fake_db["Country"].seed(values=[en, fr, de])

    assert await service.sync_languages(entities.Country, "countries") is True

    country = fake_db["Country"].get(country_id)
    assert country["values"] == [en, fr]
    assert values.get(de) is None
    assert all(doc["language"] != "de" for doc in values.docs)


@pytest.mark.asyncio
async def test_purges_obsolete_values_of_other_parents(service, fake_db):
    values = fake_db["LocationValue"]
    orphan_es = values.seed(language="es", value="Francia")

    assert await service.sync_languages(entities.Country, "countries") is True

    assert values.get(orphan_es) is None


@pytest.mark.asyncio
async def test_parent_without_english_is_skipped(service, fake_db):
    values = fake_db["LocationValue"]
    fr = values.seed(language="fr", value="Lyon")
    location_id = fake_db["Location"].seed(values=[fr])

    assert await service.sync_languages(entities.Location, "locations") is True

    assert fake_db["Location"].get(location_id)["values"] == [fr]
    assert values.inserted == []
    assert len(values.docs) == 1


@pytest.mark.asyncio
async def test_dangling_references_are_pruned(service, fake_db):
    values = fake_db["LocationValue"]
    en = values.seed(language="en", value="Rome")
    fr = values.seed(language="fr", value="Rome")
    missing = ObjectId()
    location_id = fake_db["Location"].seed(values=[en, missing, fr])

    assert await service.sync_languages(entities.Location, "locations") is True

    assert fake_db["Location"].get(location_id)["values"] == [en, fr]


@pytest.mark.asyncio
async def test_malformed_parent_is_skipped(service, fake_db):
    values = fake_db["LocationValue"]
    en = values.seed(language="en", value="Oslo")
    good_id = fake_db["Location"].seed(values=[en])
    bad_id = fake_db["Location"].seed(values="not-a-list")

    assert await service.sync_languages(entities.Location, "locations") is True

    assert fake_db["Location"].get(bad_id)["values"] == "not-a-list"
    assert _languages(fake_db, fake_db["Location"].get(good_id)) == ["en", "fr"]


@pytest.mark.asyncio
async def test_store_failure_returns_false(service, fake_db):
    fake_db["Location"].fail_find = True

    assert await service.sync_languages(entities.Location, "locations") is False


@pytest.mark.asyncio
async def test_second_pass_changes_nothing(service, fake_db):
    values = fake_db["LocationValue"]
    location_id = fake_db["Location"].seed(values=[values.seed(language="en", value="Madrid")])
    await service.sync_languages(entities.Location, "locations")
    before = list(fake_db["Location"].get(location_id)["values"])
    inserted = len(values.inserted)

    assert await service.sync_languages(entities.Location, "locations") is True

    assert fake_db["Location"].get(location_id)["values"] == before
    assert len(values.inserted) == inserted


@pytest.mark.asyncio
async def test_language_added_to_configuration(db_manager, fake_db):
    values = fake_db["LocationValue"]
    en = values.seed(language="en", value="Lisbon")
    fr = values.seed(language="fr", value="Lisbonne")
    location_id = fake_db["Location"].seed(values=[en, fr])

    service = LanguageSyncService(db_manager, ["en", "fr", "es"])
    assert await service.initialize_locations() is True

    assert _languages(fake_db, fake_db["Location"].get(location_id)) == ["en", "es", "fr"]


@pytest.mark.asyncio
async def test_sync_all_runs_locations_and_countries(service, fake_db):
    values = fake_db["LocationValue"]
    location_id = fake_db["Location"].seed(values=[values.seed(language="en", value="Nice")])
    country_id = fake_db["Country"].seed(values=[values.seed(language="en", value="France")])

    assert await service.sync_all() == [True, True]

    assert _languages(fake_db, fake_db["Location"].get(location_id)) == ["en", "fr"]
    assert _languages(fake_db, fake_db["Country"].get(country_id)) == ["en", "fr"]


@pytest.mark.asyncio
async def test_reclaims_orphan_values(service, fake_db):
    values = fake_db["LocationValue"]
    used_by_location = values.seed(language="en", value="Porto")
    used_by_country = values.seed(language="en", value="Portugal")
    orphan = values.seed(_id=_created_hours_ago(2), language="fr", value="Porto")
    fake_db["Location"].seed(values=[used_by_location])
    fake_db["Country"].seed(values=[used_by_country])

    assert await service.reclaim_orphan_values() == 1

    assert values.get(orphan) is None
    assert values.get(used_by_location) is not None
    assert values.get(used_by_country) is not None


@pytest.mark.asyncio
async def test_no_orphans(service, fake_db):
    values = fake_db["LocationValue"]
    fake_db["Location"].seed(values=[values.seed(language="en", value="Bern")])

    assert await service.reclaim_orphan_values() == 0


@pytest.mark.asyncio
async def test_recent_unreferenced_value_is_kept(service, fake_db):
    values = fake_db["LocationValue"]
    fake_db["Location"].seed(values=[values.seed(_id=_created_hours_ago(3), language="en", value="Faro")])
    in_flight = values.seed(language="en", value="Braga")
    stale = values.seed(_id=_created_hours_ago(2), language="en", value="Evora")

    assert await service.reclaim_orphan_values(grace_seconds=3600) == 1

    assert values.get(in_flight) is not None
    assert values.get(stale) is None


@pytest.mark.asyncio
async def test_mixed_case_english_value_is_kept_as_source(service, fake_db):
    values = fake_db["LocationValue"]
    en = values.seed(language="EN", value="Paris")
    de = values.seed(language="De", value="Paris")
    location_id = fake_db["Location"].seed(values=[en, de])

    assert await service.sync_languages(entities.Location, "locations") is True

    location = fake_db["Location"].get(location_id)
    assert values.get(en) is not None
    assert values.get(de) is None
    assert location["values"][0] == en
    assert len(location["values"]) == 2
    fr = values.get(location["values"][1])
    assert fr == {"_id": fr["_id"], "language": "fr", "value": "Paris"}

    # A second pass finds nothing to change
    inserted = len(values.inserted)
    assert await service.sync_languages(entities.Location, "locations") is True
    assert fake_db["Location"].get(location_id)["values"] == location["values"]
    assert len(values.inserted) == inserted
