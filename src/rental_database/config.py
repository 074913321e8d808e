"""
# Configuration Module

Centralized configuration for the rental database layer, built on **pydantic-settings**.

Values are resolved in this order:

1. A config file pointed to by the `RENTAL_DATABASE_CONFIG_PATH` environment variable.
2. A `.env` file in the project root.
3. Plain environment variables (12-factor deployments).

The file, when found, is loaded with `python-dotenv` before `Settings` is instantiated, so
variables it defines win over the class defaults.

## Configuration Groups

- **MongoDB**: connection string, database name, TLS certificate files, driver debug logging,
  timeouts.
- **Languages**: the comma separated list of supported language codes (`LANGUAGES`). English
  (`en`) is the source language used to backfill the others.
- **Expiry**: TTL durations (seconds) for bookings, users and tokens.
- **Provisioning**: retry count and base delay for collection creation.
- **Orphan values**: whether unreferenced `LocationValue` documents are reclaimed, and their
  minimum age.
- **Logging**: root log level.

## Usage

```python
from rental_database.config import settings

print(settings.languages_list)  # ['en', 'fr', 'es']
```
"""

import os
from pathlib import Path
from typing import Any, List, Optional

from dotenv import load_dotenv
from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# --- Constants ---
DEFAULT_ENV_FILENAME: str = ".env"
CONFIG_ENV_VAR: str = "RENTAL_DATABASE_CONFIG_PATH"
PROJECT_ROOT: Path = Path(__file__).resolve().parent.parent.parent


# --- Config file discovery (no logging) ---
def get_config_path() -> Optional[str]:
    """
    Determines the configuration file path.

    Checks, in order, the `RENTAL_DATABASE_CONFIG_PATH` environment variable (if set and the
    file exists) and a `.env` file in the project root. Returns `None` when neither exists,
    which leaves configuration to environment variables only.

    Returns:
        Optional[str]: The path to the configuration file, or `None` if not found.
    """
    env_path: Optional[str] = os.environ.get(CONFIG_ENV_VAR)
    if env_path and os.path.exists(env_path):
        return env_path
    env_path_file: Path = PROJECT_ROOT / DEFAULT_ENV_FILENAME
    if env_path_file.exists():
        return str(env_path_file)
    return None


CONFIG_PATH: Optional[str] = get_config_path()
if CONFIG_PATH:
    load_dotenv(dotenv_path=CONFIG_PATH, override=True)


class Settings(BaseSettings):
    """
    Application configuration settings model.

    **Configuration Groups:**
    *   **MongoDB**: URL, database, TLS, debug logging and timeouts.
    *   **Languages**: supported language codes.
    *   **Expiry**: TTL index durations in seconds.
    *   **Provisioning**: collection creation retry policy.
    """

    model_config = SettingsConfigDict(
        env_file=CONFIG_PATH if CONFIG_PATH else None,
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="allow",
    )

    # MongoDB configuration
    MONGODB_URL: str = "mongodb://127.0.0.1:27017/rental?replicaSet=rs0"
    MONGODB_DATABASE: str = ""  # Empty means: use the database named in MONGODB_URL
    MONGODB_SSL: bool = False
    MONGODB_SSL_CERT: str = ""  # Client certificate + key file (PEM)
    MONGODB_SSL_CA: str = ""  # CA bundle (PEM)
    MONGODB_DEBUG: bool = False  # Log every driver command at DEBUG level
    MONGODB_CONNECTION_TIMEOUT: int = 10000
    MONGODB_SERVER_SELECTION_TIMEOUT: int = 5000

    # Supported languages (comma separated)
    LANGUAGES: str = "en,fr,es"

    # TTL durations in seconds
    BOOKING_EXPIRE_AT: int = 24 * 60 * 60
    USER_EXPIRE_AT: int = 24 * 60 * 60
    TOKEN_EXPIRE_AT: int = 24 * 60 * 60

    # Collection provisioning
    COLLECTION_CREATE_RETRIES: int = 3
    COLLECTION_CREATE_RETRY_DELAY_MS: int = 500

    # Delete LocationValue documents no Location or Country references
    LOCATION_VALUE_RECLAIM_ORPHANS: bool = True
    # Unreferenced values younger than this are left alone (the API may still be saving their parent)
    LOCATION_VALUE_ORPHAN_GRACE_SECONDS: int = 60 * 60

    # Logging
    LOG_LEVEL: str = "INFO"

    @field_validator("MONGODB_URL", mode="before")
    @classmethod
    def no_empty_urls(cls, v: Any, info: Any) -> Any:
        """
        Validates that the MongoDB URL is not empty.

        Raises:
            ValueError: If the URL is empty or whitespace.
        """
        if not v or not str(v).strip():
            raise ValueError(f"{info.field_name} must be set via environment or .env and not empty!")
        return v

    @field_validator("BOOKING_EXPIRE_AT", "USER_EXPIRE_AT", "TOKEN_EXPIRE_AT", "COLLECTION_CREATE_RETRIES", mode="before")
    @classmethod
    def validate_positive_integers(cls, v: Any, info: Any) -> int:
        """
        Validates that numeric settings are positive integers.

        Raises:
            ValueError: If the value is not a positive integer.
        """
        value = int(v)
        if value <= 0:
            raise ValueError(f"{info.field_name} must be a positive integer")
        return value

    @field_validator("LOCATION_VALUE_ORPHAN_GRACE_SECONDS", "COLLECTION_CREATE_RETRY_DELAY_MS", mode="before")
    @classmethod
    def validate_non_negative_integers(cls, v: Any, info: Any) -> int:
        """
        Validates that durations are not negative.

        Raises:
            ValueError: If the value is negative.
        """
        value = int(v)
        if value < 0:
            raise ValueError(f"{info.field_name} must not be negative")
        return value

    @field_validator("LANGUAGES", mode="before")
    @classmethod
    def validate_languages(cls, v: Any, info: Any) -> str:
        """
        Validates that at least one language code is configured.

        Raises:
            ValueError: If the list is empty.
        """
        if not [code for code in str(v or "").split(",") if code.strip()]:
            raise ValueError(f"{info.field_name} must contain at least one language code")
        return str(v)

    @property
    def languages_list(self) -> List[str]:
        """
        Supported language codes, lower-cased, de-duplicated, in configured order.

        Example:
            ```python
            settings.LANGUAGES = "en, FR,es,fr"
            settings.languages_list  # ['en', 'fr', 'es']
            ```
        """
        languages: List[str] = []
        for code in self.LANGUAGES.split(","):
            code = code.strip().lower()
            if code and code not in languages:
                languages.append(code)
        return languages


# Global settings instance
settings: Settings = Settings()
