"""
# Rental Database

Database bootstrap layer of a **rental-property marketplace** (admin panel, customer site, mobile
client) backed by **MongoDB**.

On every process start it converges the store to the expected state:

- every entity collection exists, with its declared indexes;
- full-text indexes use language-neutral options (plain text index when unsupported);
- TTL indexes match the configured expiry durations;
- every `Location` and `Country` carries exactly one `LocationValue` per configured language.

## Key Technologies

- **Motor / PyMongo**: async MongoDB driver
- **Pydantic / pydantic-settings**: document validation and configuration
- **python-dotenv**: config file loading

## Package Structure

- **`config`**: `Settings` and the global `settings` instance
- **`database`**: connection manager, entity catalog, provisioning, index reconciliation,
  initialization sequence
- **`services`**: multilingual data synchronization
- **`models`**: typed views over store documents and index descriptors
- **`managers`**: logging
- **`cli`**: `rental-database` command
"""

__version__ = "1.0.0"
