"""
Tests for settings validation.
"""
import pytest
from pydantic import ValidationError

from rental_database.config import Settings


def test_languages_list_is_normalized():
    config = Settings(LANGUAGES=" en, FR,es,fr ,")
    assert config.languages_list == ["en", "fr", "es"]


def test_empty_language_list_rejected():
    with pytest.raises(ValidationError):
        Settings(LANGUAGES=" , ")


@pytest.mark.parametrize("field", ["BOOKING_EXPIRE_AT", "USER_EXPIRE_AT", "TOKEN_EXPIRE_AT"])
def test_expiry_must_be_positive(field):
    with pytest.raises(ValidationError):
        Settings(**{field: 0})


def test_empty_mongodb_url_rejected():
    with pytest.raises(ValidationError):
        Settings(MONGODB_URL="  ")


def test_defaults():
    config = Settings(LANGUAGES="en,fr,es")
    assert config.COLLECTION_CREATE_RETRIES == 3
    assert config.COLLECTION_CREATE_RETRY_DELAY_MS == 500
    assert config.LOCATION_VALUE_RECLAIM_ORPHANS is True


def test_orphan_grace_period():
    assert Settings().LOCATION_VALUE_ORPHAN_GRACE_SECONDS == 3600
    with pytest.raises(ValidationError):
        Settings(LOCATION_VALUE_ORPHAN_GRACE_SECONDS=-1)
