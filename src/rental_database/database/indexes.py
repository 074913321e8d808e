"""
# Index Reconciliation

Brings special-purpose indexes back in line with their declaration. MongoDB cannot alter index
options in place, so any drift is fixed by dropping the index and creating it again.

## Policies

- **Text indexes** (`ensure_text_index`): created with `default_language="none"` and
  `language_override="_none"`, which disables stemming and stops the server from reading a
  per-document `language` field (LocationValue documents have one, with values such as `fr`
  that are not meant for the text engine). A store that refuses these options gets a plain text
  index under the same name.
- **TTL indexes** (`ensure_ttl_index`): when the configured expiry differs from the live
  `expireAfterSeconds`, the index is dropped and recreated, then every declared index of the
  entity is rebuilt.

Both policies log and report failures as `False`; neither raises for store errors.
"""

import asyncio
from typing import List, Optional

from motor.motor_asyncio import AsyncIOMotorCollection
from pymongo import ASCENDING, TEXT

from rental_database.config import Settings, settings as default_settings
from rental_database.database.entities import EXPIRE_AT_FIELD, EntitySpec, text_index_entities, ttl_entities
from rental_database.database.manager import DatabaseManager
from rental_database.managers.logging_manager import get_logger
from rental_database.models.index_models import (
    TEXT_INDEX_DEFAULT_LANGUAGE,
    TEXT_INDEX_LANGUAGE_OVERRIDE,
    IndexDescriptor,
    find_index,
)

logger = get_logger(prefix="[INDEXES]")


async def list_index_descriptors(collection: AsyncIOMotorCollection) -> List[IndexDescriptor]:
    """Live indexes of `collection` as descriptors."""
    indexes = await collection.list_indexes().to_list(length=None)
    return [IndexDescriptor.from_index_info(index) for index in indexes]


async def ensure_text_index(db_manager: DatabaseManager, entity: EntitySpec, field: str, index_name: str) -> bool:
    """
    Create or repair the text index `index_name` on `field`.

    **Process:**
    1. Look up the live index by name.
    2. If its language options already match, stop.
    3. Otherwise drop it and create it with the language-neutral options.
    4. If that fails (e.g. `language_override` unsupported), create a plain text index.

    Returns:
        `bool`: `True` if the index is in place, `False` if even the plain index failed.
    """
    collection = db_manager.get_collection(entity.collection_name)
    fallback_options = {
        "name": index_name,
        "default_language": TEXT_INDEX_DEFAULT_LANGUAGE,
        "language_override": TEXT_INDEX_LANGUAGE_OVERRIDE,
        "background": True,
        "weights": {field: 1},
    }

    try:
        existing = find_index(await list_index_descriptors(collection), index_name)
        if existing is not None:
            if existing.is_text and existing.has_text_fallback_options():
                logger.info('ℹ️ Text index "%s" on %s already exists and is up to date', index_name, entity.name)
                return True
            await collection.drop_index(index_name)
            logger.info('✅ Dropped old text index "%s" on %s due to option mismatch', index_name, entity.name)

        await collection.create_index([(field, TEXT)], **fallback_options)
        logger.info('✅ Created text index "%s" on "%s.%s" with fallback options', index_name, entity.name, field)
        return True
    except Exception as e:
        logger.warning(
            '⚠️ Failed to use language override on %s; falling back to basic text index "%s": %s',
            entity.name,
            index_name,
            e,
        )

    try:
        await collection.create_index(
            [(field, TEXT)],
            name=index_name,
            background=True,
            weights={field: 1},
        )
        logger.info(
            '✅ Created basic text index "%s" on "%s.%s" without language override', index_name, entity.name, field
        )
        return True
    except Exception as fallback_error:
        logger.error('❌ Failed to create text index "%s" on %s: %s', index_name, entity.name, fallback_error)
        return False


async def ensure_ttl_index(
    db_manager: DatabaseManager,
    entity: EntitySpec,
    index_name: str,
    expire_after_seconds: int,
    config: Optional[Settings] = None,
) -> bool:
    """
    Recreate the TTL index `index_name` if its expiry drifted from `expire_after_seconds`.

    A drop failure is logged and does not stop the recreation. After recreating the TTL index,
    every other declared index of the entity is (re)built as well.

    Returns:
        `bool`: `True` if the index is up to date or was recreated, `False` on failure.
    """
    config = config or default_settings
    label = f"{entity.name}.{index_name}"
    field = entity.ttl.field if entity.ttl is not None else EXPIRE_AT_FIELD
    logger.info("ℹ️ Checking TTL index: %s", label)

    try:
        collection = db_manager.get_collection(entity.collection_name)
        indexes = await list_index_descriptors(collection)
        drifted = next(
            (
                index
                for index in indexes
                if index.name == index_name and index.expire_after_seconds != expire_after_seconds
            ),
            None,
        )
        if drifted is None:
            logger.info('ℹ️ TTL index "%s" is already up to date', label)
            return True

        logger.info(
            "TTL index %s expires after %s seconds, expected %d: recreating",
            label,
            drifted.expire_after_seconds,
            expire_after_seconds,
        )
        try:
            await collection.drop_index(index_name)
        except Exception as e:
            logger.error('❌ Failed to drop index "%s": %s', label, e)
        finally:
            await collection.create_index(
                [(field, ASCENDING)],
                name=index_name,
                expireAfterSeconds=expire_after_seconds,
                background=True,
            )
            others = [model for model in entity.index_models(config) if model.document["name"] != index_name]
            if others:
                await collection.create_indexes(others)

        logger.info("✅ TTL index %s now expires after %d seconds", label, expire_after_seconds)
        return True
    except Exception as e:
        logger.error("❌ Failed to update TTL index %s: %s", label, e, exc_info=True)
        return False


async def ensure_text_indexes(db_manager: DatabaseManager, entities: Optional[List[EntitySpec]] = None) -> List[bool]:
    """Reconcile the text index of every entity that declares one, concurrently."""
    entities = text_index_entities() if entities is None else entities
    return list(
        await asyncio.gather(
            *(
                ensure_text_index(db_manager, entity, entity.text_index.field, entity.text_index.name)
                for entity in entities
                if entity.text_index is not None
            )
        )
    )


async def ensure_ttl_indexes(db_manager: DatabaseManager, config: Optional[Settings] = None) -> List[bool]:
    """Reconcile the TTL index of every entity that declares one, concurrently."""
    config = config or default_settings
    return list(
        await asyncio.gather(
            *(
                ensure_ttl_index(db_manager, entity, entity.ttl.name, entity.ttl.expire_after_seconds(config), config)
                for entity in ttl_entities()
            )
        )
    )
