"""
# Database Management Module

This module provides the **MongoDB connection layer** for the rental database. It implements the
`DatabaseManager` class that owns the single shared Motor client and its lifecycle state.

## Connection Lifecycle

1.  **Instantiation** (module load): `db_manager` created, no I/O, state `DISCONNECTED`.
2.  **Connection** (startup): `connect()` builds client options (TLS, debug command logging),
    opens the client and waits for a successful `ping`. State becomes `CONNECTED`.
3.  **Operations**: `get_collection()` hands out Motor collections.
4.  **Disconnection** (shutdown or failed initialization): `close()` closes the client and
    resets the state to `DISCONNECTED`, whatever happens while closing.

`connect()` never raises: failures are logged and reported as `False`, and a second call while
connected is a no-op returning `True`.

## Usage

```python
from rental_database.database import db_manager

if await db_manager.connect():
    users = db_manager.get_collection("User")
    user = await users.find_one({"email": "alice@example.com"})
await db_manager.close()
```

## Thread Safety

The manager is designed for **asyncio** and is **not thread-safe**; use it from one event loop.

## Module Attributes

Attributes:
    db_logger (Logger): Logger for connection operations (`[DATABASE]`).
    perf_logger (Logger): Logger for timing metrics (`[DB_PERFORMANCE]`).
    health_logger (Logger): Logger for health checks (`[DB_HEALTH]`).
    db_manager (DatabaseManager): Process-wide instance, owned by the entry point.
"""

import time
from enum import Enum
from typing import Any, Dict, List, Optional

from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorCollection, AsyncIOMotorDatabase
from pymongo import monitoring
from pymongo.errors import ConnectionFailure, ServerSelectionTimeoutError

from rental_database.config import settings
from rental_database.managers.logging_manager import get_logger

db_logger = get_logger(prefix="[DATABASE]")
perf_logger = get_logger(prefix="[DB_PERFORMANCE]")
health_logger = get_logger(prefix="[DB_HEALTH]")


class ConnectionState(str, Enum):
    DISCONNECTED = "disconnected"
    CONNECTED = "connected"


class CommandLogger(monitoring.CommandListener):
    """Logs every driver command at DEBUG level when driver debugging is enabled."""

    def started(self, event: monitoring.CommandStartedEvent) -> None:
        db_logger.debug(
            "Command %s started on %s (request %s): %s",
            event.command_name,
            event.database_name,
            event.request_id,
            event.command,
        )

    def succeeded(self, event: monitoring.CommandSucceededEvent) -> None:
        db_logger.debug(
            "Command %s (request %s) succeeded in %dus", event.command_name, event.request_id, event.duration_micros
        )

    def failed(self, event: monitoring.CommandFailedEvent) -> None:
        db_logger.debug(
            "Command %s (request %s) failed in %dus: %s",
            event.command_name,
            event.request_id,
            event.duration_micros,
            event.failure,
        )


class DatabaseManager:
    """
    Owns the Motor client and the connection state.

    Attributes:
        client (`Optional[AsyncIOMotorClient]`): Motor client, `None` while disconnected.
        database (`Optional[AsyncIOMotorDatabase]`): Selected database, `None` while disconnected.
        state (`ConnectionState`): Current connection state.

    Note:
        The entry point owns one instance (`db_manager`) and passes it by reference to the
        provisioner, the reconcilers and the language synchronizer.
    """

    def __init__(self):
        self.client: Optional[AsyncIOMotorClient] = None
        self.database: Optional[AsyncIOMotorDatabase] = None
        self.state: ConnectionState = ConnectionState.DISCONNECTED

    @property
    def is_connected(self) -> bool:
        return self.state is ConnectionState.CONNECTED and self.database is not None

    def build_client_options(self, ssl: bool, debug: bool) -> Dict[str, Any]:
        """
        Build keyword arguments for `AsyncIOMotorClient`.

        Args:
            ssl: Add TLS options with the configured certificate and CA files.
            debug: Register a `CommandLogger` to trace every driver command.

        Returns:
            Dict[str, Any]: Client options.
        """
        options: Dict[str, Any] = {
            "serverSelectionTimeoutMS": settings.MONGODB_SERVER_SELECTION_TIMEOUT,
            "connectTimeoutMS": settings.MONGODB_CONNECTION_TIMEOUT,
        }
        if ssl:
            options.update(
                tls=True,
                tlsCertificateKeyFile=settings.MONGODB_SSL_CERT,
                tlsCAFile=settings.MONGODB_SSL_CA,
            )
        if debug:
            options["event_listeners"] = [CommandLogger()]
        return options

    async def connect(self, uri: Optional[str] = None, ssl: Optional[bool] = None, debug: Optional[bool] = None) -> bool:
        """
        Connect to MongoDB and wait until the server answers.

        Arguments default to `MONGODB_URL`, `MONGODB_SSL` and `MONGODB_DEBUG`.

        **Process:**
        1. Return `True` immediately if already connected.
        2. Build client options (TLS files when `ssl`, command logging when `debug`).
        3. Create the client, select the database (`MONGODB_DATABASE`, or the URI's default).
        4. `ping` the server so the connection is really open before reporting success.

        Returns:
            `bool`: `True` when connected, `False` on any failure (logged, never raised).
        """
        if self.state is ConnectionState.CONNECTED:
            return True

        uri = uri or settings.MONGODB_URL
        ssl = settings.MONGODB_SSL if ssl is None else ssl
        debug = settings.MONGODB_DEBUG if debug is None else debug

        start_time = time.time()
        db_logger.info("Starting MongoDB connection process (tls: %s, debug: %s)", ssl, debug)

        client: Optional[AsyncIOMotorClient] = None
        try:
            client = AsyncIOMotorClient(uri, **self.build_client_options(ssl, debug))
            if settings.MONGODB_DATABASE:
                database = client[settings.MONGODB_DATABASE]
            else:
                database = client.get_default_database()

            ping_start = time.time()
            await client.admin.command("ping")
            ping_duration = time.time() - ping_start
        except (ServerSelectionTimeoutError, ConnectionFailure) as e:
            perf_logger.warning("MongoDB connection failed after %.3fs", time.time() - start_time)
            db_logger.error("❌ Database connection failed: %s", e)
            self._discard_client(client)
            return False
        except Exception as e:
            db_logger.error("❌ Database connection failed: %s", e, exc_info=True)
            self._discard_client(client)
            return False

        self.client = client
        self.database = database
        self.state = ConnectionState.CONNECTED
        perf_logger.info(
            "MongoDB connection established in %.3fs (ping: %.3fs)", time.time() - start_time, ping_duration
        )
        db_logger.info("✅ Database connected: %s", database.name)
        return True

    def _discard_client(self, client: Optional[AsyncIOMotorClient]) -> None:
        if client is None:
            return
        try:
            client.close()
        except Exception as e:
            db_logger.warning("Failed to close half-open MongoDB client: %s", e)

    async def close(self, force: bool = False) -> None:
        """
        Close the connection, if any, and reset the state to `DISCONNECTED`.

        Safe to call when never connected. The state is reset even if closing raises; the
        error is logged and re-raised.

        Args:
            force: Requested by callers shutting down after a failure. Motor always closes
                every pooled socket, so it only changes the log line.
        """
        start_time = time.time()
        try:
            if self.client is not None:
                self.client.close()
                perf_logger.info("MongoDB disconnection completed in %.3fs", time.time() - start_time)
            else:
                db_logger.debug("Close called but no active MongoDB client found")
        except Exception as e:
            db_logger.error("Error during MongoDB disconnection: %s", e)
            raise
        finally:
            self.client = None
            self.database = None
            self.state = ConnectionState.DISCONNECTED
        db_logger.info("✅ Database connection closed%s", " (forced)" if force else "")

    async def disconnect(self) -> None:
        """Close database connection (alias for close)"""
        await self.close()

    async def health_check(self) -> bool:
        """
        Ping the server.

        Returns:
            `bool`: `True` if the database answers, `False` otherwise (never raises).
        """
        start_time = time.time()
        if self.client is None:
            health_logger.warning("Health check failed: No database client available")
            return False
        try:
            await self.client.admin.command("ping")
        except (ServerSelectionTimeoutError, ConnectionFailure) as e:
            health_logger.error("Database health check failed: %s", e)
            return False
        except Exception as e:
            health_logger.error("Unexpected error during health check: %s", e)
            return False
        perf_logger.debug("Database health check completed in %.3fs", time.time() - start_time)
        return True

    def get_collection(self, collection_name: str) -> AsyncIOMotorCollection:
        """
        Retrieve a collection by name.

        Raises:
            `ConnectionError`: If `connect()` has not succeeded.
        """
        if self.database is None:
            db_logger.error("Attempted to get collection '%s' without database connection", collection_name)
            raise ConnectionError("Database not connected. Call connect() first.")
        return self.database[collection_name]

    async def list_collection_names(self) -> List[str]:
        """
        Names of the collections that currently exist.

        Raises:
            `ConnectionError`: If `connect()` has not succeeded.
            `PyMongoError`: On driver failure.
        """
        if self.database is None:
            raise ConnectionError("Database not connected. Call connect() first.")
        return await self.database.list_collection_names()

    async def create_collection(self, collection_name: str) -> AsyncIOMotorCollection:
        """
        Create a collection.

        Raises:
            `ConnectionError`: If `connect()` has not succeeded.
            `PyMongoError`: On driver failure (including `CollectionInvalid` if it exists).
        """
        if self.database is None:
            raise ConnectionError("Database not connected. Call connect() first.")
        return await self.database.create_collection(collection_name)


# Global database manager instance
db_manager = DatabaseManager()

__all__ = ["CommandLogger", "ConnectionState", "DatabaseManager", "db_manager"]
