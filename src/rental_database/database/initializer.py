"""
# Database Initialization

`DatabaseInitializer.initialize()` is the convergent startup routine. It is called once, right
after a successful `connect()`, and its boolean tells the caller whether to keep starting the
service.

## Stages

1. **Connection check**: the manager must be connected.
2. **Collections**: every entity collection provisioned concurrently. Fatal on failure.
3. **Text indexes**: `LocationValue.value_text` and `Property.name_text`, concurrently.
4. **TTL indexes**: `Booking`, `User`, `Token` expiry, concurrently.
5. **Languages**: locations and countries synchronized concurrently.
6. **Orphans**: unreferenced `LocationValue` documents reclaimed, when enabled and stage 5
   fully succeeded.

Stages 3, 4 and 6 log their failures without failing the run. The result is `True` only if
every stage-5 pass succeeded. Any raised exception closes the connection and yields `False`.

Running `initialize()` again against the same data changes nothing.
"""

import time
from typing import Optional

from rental_database.config import Settings, settings as default_settings
from rental_database.database.indexes import ensure_text_indexes, ensure_ttl_indexes
from rental_database.database.manager import DatabaseManager, db_manager as default_db_manager
from rental_database.database.provisioner import ensure_collections
from rental_database.managers.logging_manager import get_logger
from rental_database.services.language_sync_service import LanguageSyncService

logger = get_logger(prefix="[DB_INIT]")
perf_logger = get_logger(prefix="[DB_PERFORMANCE]")


class DatabaseInitializer:
    """
    Sequences provisioning, index reconciliation and language synchronization.

    Attributes:
        db_manager (DatabaseManager): Manager owned by the entry point.
        settings (Settings): Configuration (languages, TTL durations, orphan reclamation).
    """

    def __init__(self, db_manager: DatabaseManager, settings: Optional[Settings] = None):
        self.db_manager = db_manager
        self.settings = settings or default_settings
        self.language_sync = LanguageSyncService(db_manager, self.settings.languages_list)

    async def initialize(self) -> bool:
        """
        Initialize the database.

        Returns:
            `bool`: `True` if every stage succeeded, `False` otherwise.
        """
        start_time = time.time()
        try:
            if not self.db_manager.is_connected:
                raise ConnectionError("MongoDB connection is not ready")

            await ensure_collections(self.db_manager, config=self.settings)

            text_results = await ensure_text_indexes(self.db_manager)
            if not all(text_results):
                logger.warning("⚠️ Some text indexes could not be created")

            ttl_results = await ensure_ttl_indexes(self.db_manager, self.settings)
            if not all(ttl_results):
                logger.warning("⚠️ Some TTL indexes could not be updated")

            results = await self.language_sync.sync_all()
            success = all(results)

            if success:
                logger.info("✅ Database initialized successfully")
                await self._reclaim_orphans()
            else:
                logger.error("❌ Some parts of the database failed to initialize")

            perf_logger.info("Database initialization finished in %.3fs", time.time() - start_time)
            return success
        except Exception as e:
            logger.error("❌ Database initialization error: %s", e, exc_info=True)
            try:
                await self.db_manager.close()
            except Exception as close_error:
                logger.error(
                    "❌ Failed to close database connection after initialization failure: %s", close_error
                )
            return False

    async def _reclaim_orphans(self) -> None:
        if not self.settings.LOCATION_VALUE_RECLAIM_ORPHANS:
            return
        try:
            await self.language_sync.reclaim_orphan_values(
                grace_seconds=self.settings.LOCATION_VALUE_ORPHAN_GRACE_SECONDS
            )
        except Exception as e:
            logger.error("❌ Failed to reclaim orphan LocationValue documents: %s", e)


async def initialize(db_manager: Optional[DatabaseManager] = None) -> bool:
    """Initialize the database through `db_manager` (the process-wide manager by default)."""
    return await DatabaseInitializer(db_manager or default_db_manager).initialize()
