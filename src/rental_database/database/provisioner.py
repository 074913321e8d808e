"""
Collection provisioning.

`ensure_collection()` makes sure an entity's collection exists. A missing collection is created
together with all of its declared indexes; an existing one is left alone. Transient failures are
retried with exponential backoff and the last failure is raised to the caller.
"""

import asyncio
import time
from typing import List, Optional

from rental_database.config import Settings, settings as default_settings
from rental_database.database.entities import ENTITIES, EntitySpec
from rental_database.database.manager import DatabaseManager
from rental_database.managers.logging_manager import get_logger
from rental_database.utils.retry import backoff_delays

logger = get_logger(prefix="[PROVISIONER]")
perf_logger = get_logger(prefix="[DB_PERFORMANCE]")


async def ensure_collection(
    db_manager: DatabaseManager,
    entity: EntitySpec,
    retries: Optional[int] = None,
    base_delay_ms: Optional[int] = None,
    config: Optional[Settings] = None,
) -> None:
    """
    Create `entity`'s collection and indexes unless the collection already exists.

    Args:
        db_manager: Connected database manager.
        entity: Entity to provision.
        retries: Total attempts. Defaults to `COLLECTION_CREATE_RETRIES`.
        base_delay_ms: Delay before the second attempt, doubled for each following one.
            Defaults to `COLLECTION_CREATE_RETRY_DELAY_MS`.
        config: Settings providing the retry defaults and TTL durations.

    Raises:
        Exception: The failure of the last attempt.
    """
    config = config or default_settings
    retries = config.COLLECTION_CREATE_RETRIES if retries is None else retries
    base_delay_ms = config.COLLECTION_CREATE_RETRY_DELAY_MS if base_delay_ms is None else base_delay_ms
    delays = backoff_delays(retries, base_delay_ms)
    name = entity.collection_name
    # Set once this call created the collection, so a retry still builds the indexes
    created = False

    for attempt in range(1, retries + 1):
        start_time = time.time()
        try:
            exists = name in await db_manager.list_collection_names()
            if exists and not created:
                logger.info("ℹ️ Collection already exists: %s", name)
                return

            if not exists:
                await db_manager.create_collection(name)
                created = True
            index_models = entity.index_models(config)
            if index_models:
                await db_manager.get_collection(name).create_indexes(index_models)
            perf_logger.debug("Created collection '%s' in %.3fs", name, time.time() - start_time)
            logger.info("✅ Created collection: %s (%d indexes)", name, len(index_models))
            return
        except Exception as e:
            logger.warning("⚠️ Attempt %d/%d failed to create %s: %s", attempt, retries, name, e)
            if attempt == retries:
                logger.error("❌ Failed to create collection %s after %d attempts.", name, retries)
                raise
            delay = delays[attempt - 1]
            logger.info("Waiting %.1fs before retrying %s", delay, name)
            await asyncio.sleep(delay)


async def ensure_collections(
    db_manager: DatabaseManager,
    entities: Optional[List[EntitySpec]] = None,
    config: Optional[Settings] = None,
) -> None:
    """
    Provision every entity concurrently.

    Raises:
        Exception: The first provisioning failure; it fails the whole initialization.
    """
    entities = ENTITIES if entities is None else entities
    await asyncio.gather(*(ensure_collection(db_manager, entity, config=config) for entity in entities))
