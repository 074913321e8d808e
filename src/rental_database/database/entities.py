"""
# Entity Catalog

Declares every record kind the rental marketplace stores, the collection backing it, and the
indexes it must carry. This catalog is the single source of truth the provisioner and the index
reconcilers work from.

## Index Catalog

| Entity | Regular indexes | Text index | TTL index |
|--------|-----------------|------------|-----------|
| `Booking` | property, agency, customer, (from, to), status | | `expireAt` (`BOOKING_EXPIRE_AT`) |
| `Country` | values | | |
| `Location` | values, country | | |
| `LocationValue` | language | `value_text` on `value` | |
| `Notification` | (user, isRead), booking | | |
| `NotificationCounter` | user (unique) | | |
| `Property` | agency, location, type, available | `name_text` on `name` | |
| `PushToken` | user (unique) | | |
| `Token` | user, token | | `expireAt` (`TOKEN_EXPIRE_AT`) |
| `User` | email (unique), type | | `expireAt` (`USER_EXPIRE_AT`) |

Text indexes are left to the text reconciler: creating them with provisioning would make a
store that rejects `language_override` fail the whole collection creation.
"""

from dataclasses import dataclass, field
from typing import Any, List, Optional

from pymongo import ASCENDING, IndexModel

from rental_database.config import Settings, settings as default_settings

EXPIRE_AT_FIELD = "expireAt"

BOOKING_EXPIRE_AT_INDEX_NAME = "expireAt"
USER_EXPIRE_AT_INDEX_NAME = "expireAt"
TOKEN_EXPIRE_AT_INDEX_NAME = "expireAt"


@dataclass(frozen=True)
class TextIndexSpec:
    field: str
    name: str


@dataclass(frozen=True)
class TTLIndexSpec:
    name: str
    setting: str
    field: str = EXPIRE_AT_FIELD

    def expire_after_seconds(self, config: Settings) -> int:
        return int(getattr(config, self.setting))


@dataclass(frozen=True)
class EntitySpec:
    """
    A record kind and the collection backing it.

    Attributes:
        name: Entity kind, also the collection name.
        indexes: Regular index declarations, as `(keys, options)` pairs.
        text_index: Optional full-text index policy.
        ttl: Optional time-to-live index policy.
    """

    name: str
    indexes: List[Any] = field(default_factory=list)
    text_index: Optional[TextIndexSpec] = None
    ttl: Optional[TTLIndexSpec] = None

    @property
    def collection_name(self) -> str:
        return self.name

    def index_models(self, config: Optional[Settings] = None) -> List[IndexModel]:
        """
        Declared indexes as PyMongo `IndexModel`s, TTL index included.

        Args:
            config: Settings to read the TTL duration from. Defaults to the global settings.
        """
        config = config or default_settings
        models = [IndexModel(keys, **options) for keys, options in self.indexes]
        if self.ttl is not None:
            models.append(ttl_index_model(self.ttl, self.ttl.expire_after_seconds(config)))
        return models


def ttl_index_model(ttl: TTLIndexSpec, expire_after_seconds: int) -> IndexModel:
    return IndexModel(
        [(ttl.field, ASCENDING)], name=ttl.name, expireAfterSeconds=expire_after_seconds, background=True
    )


def _index(*keys: str, **options: Any):
    return [(key, ASCENDING) for key in keys], options


Booking = EntitySpec(
    "Booking",
    indexes=[
        _index("property"),
        _index("agency"),
        _index("customer"),
        _index("from", "to"),
        _index("status"),
    ],
    ttl=TTLIndexSpec(BOOKING_EXPIRE_AT_INDEX_NAME, "BOOKING_EXPIRE_AT"),
)
Country = EntitySpec("Country", indexes=[_index("values")])
Location = EntitySpec("Location", indexes=[_index("values"), _index("country")])
LocationValue = EntitySpec(
    "LocationValue",
    indexes=[_index("language")],
    text_index=TextIndexSpec("value", "value_text"),
)
Notification = EntitySpec("Notification", indexes=[_index("user", "isRead"), _index("booking")])
NotificationCounter = EntitySpec("NotificationCounter", indexes=[_index("user", unique=True)])
Property = EntitySpec(
    "Property",
    indexes=[_index("agency"), _index("location"), _index("type"), _index("available")],
    text_index=TextIndexSpec("name", "name_text"),
)
PushToken = EntitySpec("PushToken", indexes=[_index("user", unique=True)])
Token = EntitySpec(
    "Token",
    indexes=[_index("user"), _index("token")],
    ttl=TTLIndexSpec(TOKEN_EXPIRE_AT_INDEX_NAME, "TOKEN_EXPIRE_AT"),
)
User = EntitySpec(
    "User",
    indexes=[_index("email", unique=True), _index("type")],
    ttl=TTLIndexSpec(USER_EXPIRE_AT_INDEX_NAME, "USER_EXPIRE_AT"),
)

ENTITIES: List[EntitySpec] = [
    Booking,
    Country,
    Location,
    LocationValue,
    Notification,
    NotificationCounter,
    Property,
    PushToken,
    Token,
    User,
]

# Entities whose `values` hold LocationValue references
MULTILINGUAL_ENTITIES: List[EntitySpec] = [Location, Country]


def text_index_entities() -> List[EntitySpec]:
    return [entity for entity in ENTITIES if entity.text_index is not None]


def ttl_entities() -> List[EntitySpec]:
    return [entity for entity in ENTITIES if entity.ttl is not None]
