"""
Startup entry point.

`bootstrap()` is what a service awaits before it starts accepting traffic: connect, then
initialize. A `False` result means the service should abort.

```python
from rental_database.main import bootstrap

if not await bootstrap():
    raise SystemExit(1)
```
"""

from typing import Optional

from rental_database.config import settings
from rental_database.database import DatabaseManager, db_manager as default_db_manager
from rental_database.database.initializer import DatabaseInitializer
from rental_database.managers.logging_manager import get_logger

logger = get_logger()


async def bootstrap(db_manager: Optional[DatabaseManager] = None) -> bool:
    """
    Connect to MongoDB with the configured URL, TLS and debug flags, then initialize.

    Returns:
        `bool`: `True` if the database is connected and initialized.
    """
    db_manager = db_manager or default_db_manager
    logger.info("Initiating database connection...")
    if not await db_manager.connect(settings.MONGODB_URL, settings.MONGODB_SSL, settings.MONGODB_DEBUG):
        logger.error("❌ Could not connect to the database, aborting startup")
        return False

    logger.info("Creating/verifying collections, indexes and multilingual data...")
    return await DatabaseInitializer(db_manager, settings).initialize()
