"""
# Database Package

The `rental_database.database` package is the **persistence bootstrap layer** of the rental
marketplace, built on **Motor** (async MongoDB driver).

## Components

- **`manager`**: `DatabaseManager`, owner of the client and the connection state.
- **`entities`**: the fixed entity catalog and each entity's declared indexes.
- **`provisioner`**: creates missing collections and their indexes, with retries.
- **`indexes`**: text and TTL index reconciliation.
- **`initializer`**: `DatabaseInitializer`, the startup sequence.

## Usage (Application Startup)

```python
from rental_database.database import db_manager
from rental_database.database.initializer import initialize

if await db_manager.connect():
    ok = await initialize(db_manager)
```

Attributes:
    db_manager (DatabaseManager): The process-wide manager instance.
"""

from rental_database.database.manager import ConnectionState, DatabaseManager, db_manager

__all__ = ["ConnectionState", "DatabaseManager", "db_manager"]
