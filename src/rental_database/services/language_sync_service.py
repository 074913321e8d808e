"""
# Language Sync Service

Keeps the multilingual reference data (`Location`, `Country`) aligned with the configured
languages.

Every parent document holds an ordered `values` list of `LocationValue` ids, one per language.
A pass over an entity:

1. Loads every parent and resolves its values.
2. Skips (with a warning) parents without an English value: English is the source text.
3. Creates the value of each configured language a parent lacks, copying the English text, and
   appends its id to the freshly re-read parent.
4. Removes values in languages that are no longer configured, first from every parent
   referencing them, then from the `LocationValue` collection.

References to values that no longer exist are pruned on the way, so an interrupted pass (or two
passes deleting the same obsolete values concurrently) converges on the next run.

There are no transactions: re-reading the parent right before each append is the only guard,
which holds as long as a single initializer runs at a time.
"""

import asyncio
from datetime import datetime, timedelta, timezone
from typing import Dict, List, Optional, Set

from bson import ObjectId
from pydantic import ValidationError

from rental_database.config import settings
from rental_database.database.entities import MULTILINGUAL_ENTITIES, Country, EntitySpec, Location, LocationValue
from rental_database.database.manager import DatabaseManager
from rental_database.managers.logging_manager import get_logger
from rental_database.models.location_models import (
    LocationValueDocument,
    MultilingualDocument,
    ResolvedMultilingualDocument,
    normalize_language,
)

logger = get_logger(prefix="[LANGUAGE_SYNC]")


class LanguageSyncService:
    """
    Synchronizes `LocationValue` documents of multilingual entities with the language list.

    Attributes:
        db_manager (DatabaseManager): Connected database manager.
    """

    def __init__(self, db_manager: DatabaseManager, languages: Optional[List[str]] = None):
        """
        Args:
            db_manager: Connected database manager.
            languages: Language codes to enforce. Defaults to `settings.languages_list`, read
                at each pass so configuration reloads are picked up.
        """
        self.db_manager = db_manager
        self._languages = [normalize_language(language) for language in languages] if languages else None

    @property
    def languages(self) -> List[str]:
        return self._languages if self._languages is not None else settings.languages_list

    async def load_documents(self, entity: EntitySpec, label: str) -> List[ResolvedMultilingualDocument]:
        """
        Load every parent of `entity` with its values resolved, in reference order.

        Malformed parents are skipped with a warning. Malformed values are ignored (neither
        resolved nor treated as dangling).
        """
        collection = self.db_manager.get_collection(entity.collection_name)
        values_collection = self.db_manager.get_collection(LocationValue.collection_name)

        parents: List[MultilingualDocument] = []
        for raw in await collection.find({}).to_list(length=None):
            try:
                parents.append(MultilingualDocument.model_validate(raw))
            except ValidationError as e:
                logger.warning("⚠️ Skipping malformed %s document %s: %s", label, raw.get("_id"), e)

        value_ids = list({value_id for parent in parents for value_id in parent.values})
        found: Set[ObjectId] = set()
        values_by_id: Dict[ObjectId, LocationValueDocument] = {}
        if value_ids:
            for raw in await values_collection.find({"_id": {"$in": value_ids}}).to_list(length=None):
                found.add(raw["_id"])
                try:
                    value = LocationValueDocument.model_validate(raw)
                except ValidationError as e:
                    logger.warning("⚠️ Ignoring malformed LocationValue %s: %s", raw.get("_id"), e)
                    continue
                values_by_id[value.id] = value

        return [
            ResolvedMultilingualDocument(
                document=parent,
                values=[values_by_id[value_id] for value_id in parent.values if value_id in values_by_id],
                dangling=[value_id for value_id in parent.values if value_id not in found],
            )
            for parent in parents
        ]

    async def sync_languages(self, entity: EntitySpec, label: str) -> bool:
        """
        Run one synchronization pass over `entity`.

        Args:
            entity: A multilingual entity (`Location` or `Country`).
            label: Human-readable name used in log lines (e.g. `"locations"`).

        Returns:
            `bool`: `True` on success, `False` if anything unexpected failed (logged).
        """
        try:
            logger.info("ℹ️ Initializing %s...", label)
            languages = self.languages
            collection = self.db_manager.get_collection(entity.collection_name)
            values_collection = self.db_manager.get_collection(LocationValue.collection_name)

            documents = await self.load_documents(entity, label)
            created = 0

            for doc in documents:
                if doc.dangling:
                    await self._remove_references(entity, doc.id, set(doc.dangling))
                    logger.warning(
                        "⚠️ Removed %d dangling value reference(s) from %s %s", len(doc.dangling), label, doc.id
                    )

                english = doc.english
                if english is None:
                    logger.warning("⚠️ English value missing for %s: %s", label, doc.id)
                    continue

                for language in doc.missing_languages(languages):
                    result = await values_collection.insert_one({"language": language, "value": english.value})
                    fresh = await collection.find_one({"_id": doc.id})
                    if fresh is None:
                        logger.warning("⚠️ %s %s disappeared while adding its %s value", label, doc.id, language)
                        continue
                    values = list(fresh.get("values", [])) + [result.inserted_id]
                    await collection.update_one({"_id": doc.id}, {"$set": {"values": values}})
                    created += 1

            # Obsolete values: this entity's own, plus every value in an unconfigured language.
            # Codes are compared normalized, the same way the resolved values are.
            obsolete_ids: Set[ObjectId] = {
                value.id for doc in documents for value in doc.values if value.language not in languages
            }
            for raw in await values_collection.find({}, {"_id": 1, "language": 1}).to_list(length=None):
                if normalize_language(raw.get("language")) not in languages:
                    obsolete_ids.add(raw["_id"])

            for value_id in obsolete_ids:
                for parent in await collection.find({"values": value_id}).to_list(length=None):
                    await self._remove_references(entity, parent["_id"], {value_id})

            if obsolete_ids:
                await values_collection.delete_many({"_id": {"$in": list(obsolete_ids)}})

            logger.info(
                "✅ %s initialized (%d value(s) added, %d obsolete value(s) removed)",
                label.capitalize(),
                created,
                len(obsolete_ids),
            )
            return True
        except Exception as e:
            logger.error("❌ Failed to initialize %s: %s", label, e, exc_info=True)
            return False

    async def _remove_references(self, entity: EntitySpec, parent_id: ObjectId, value_ids: Set[ObjectId]) -> None:
        collection = self.db_manager.get_collection(entity.collection_name)
        fresh = await collection.find_one({"_id": parent_id})
        if fresh is None:
            return
        values = [value_id for value_id in fresh.get("values", []) if value_id not in value_ids]
        await collection.update_one({"_id": parent_id}, {"$set": {"values": values}})

    async def reclaim_orphan_values(
        self, parents: Optional[List[EntitySpec]] = None, grace_seconds: Optional[int] = None
    ) -> int:
        """
        Delete `LocationValue` documents no multilingual parent references.

        Orphans appear when a pass stops between creating a value and appending its id to the
        parent. Run this only after every multilingual entity synchronized successfully.

        Values younger than `grace_seconds` (by their ObjectId timestamp) are kept: the API saves
        a value before the parent that references it, so a recent unreferenced value may belong
        to a parent another instance is still writing.

        Args:
            parents: Entities whose `values` count as references. Defaults to Location and Country.
            grace_seconds: Minimum age of a reclaimable value. Defaults to
                `LOCATION_VALUE_ORPHAN_GRACE_SECONDS`.

        Returns:
            `int`: Number of deleted values.
        """
        parents = MULTILINGUAL_ENTITIES if parents is None else parents
        grace_seconds = settings.LOCATION_VALUE_ORPHAN_GRACE_SECONDS if grace_seconds is None else grace_seconds
        cutoff = ObjectId.from_datetime(datetime.now(timezone.utc) - timedelta(seconds=grace_seconds))
        values_collection = self.db_manager.get_collection(LocationValue.collection_name)

        referenced: Set[ObjectId] = set()
        for entity in parents:
            collection = self.db_manager.get_collection(entity.collection_name)
            for doc in await collection.find({}, {"values": 1}).to_list(length=None):
                referenced.update(doc.get("values", []))

        orphans = [
            raw["_id"]
            for raw in await values_collection.find({"_id": {"$lt": cutoff}}, {"_id": 1}).to_list(length=None)
            if raw["_id"] not in referenced
        ]
        if not orphans:
            logger.info("ℹ️ No orphan LocationValue documents")
            return 0

        result = await values_collection.delete_many({"_id": {"$in": orphans}})
        logger.info("✅ Reclaimed %d orphan LocationValue document(s)", result.deleted_count)
        return result.deleted_count

    async def initialize_locations(self) -> bool:
        return await self.sync_languages(Location, "locations")

    async def initialize_countries(self) -> bool:
        return await self.sync_languages(Country, "countries")

    async def sync_all(self) -> List[bool]:
        """Synchronize locations and countries concurrently."""
        return list(await asyncio.gather(self.initialize_locations(), self.initialize_countries()))
