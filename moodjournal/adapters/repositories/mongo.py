"""
MongoDB persistence for mood entries and feature entitlements.

This module provides database operations for:
- Recording, editing and deleting mood entries
- Fetching entries in a date range for the insight generators
- Per-mood counts for statistics screens and exports
- Reading the paid-feature entitlements document
"""

import os
import logging
from datetime import datetime
from typing import Dict, Iterable, List, Optional, Any

import pymongo
from pymongo import MongoClient
from pymongo.errors import ServerSelectionTimeoutError, OperationFailure, PyMongoError
import certifi

from moodjournal.core.models import MoodCategory, MoodEntry, all_categories, resolve_category, truncate_note
from moodjournal.core.reports import EntryStoreError, ProFeature

logger = logging.getLogger(__name__)


# ============================================================================
# CONSTANTS
# ============================================================================

DEFAULT_DATABASE_NAME = "mood_journal"
ENTRIES_COLLECTION_NAME = "mood_entries"
ENTITLEMENTS_COLLECTION_NAME = "entitlements"
ENTITLEMENTS_DOCUMENT_ID = "pro_features"

CONNECTION_TIMEOUT_MS = 10000


# ============================================================================
# EXCEPTIONS
# ============================================================================

class MongoDBConnectionError(EntryStoreError):
    """Raised when MongoDB connection fails."""
    pass


class MongoDBOperationError(EntryStoreError):
    """Raised when database operations fail."""
    pass


# ============================================================================
# DATABASE CONNECTION
# ============================================================================

class DatabaseConfig:
    """Journal location: MONGODB_URI plus MOODJOURNAL_DB (falls back to 'mood_journal')."""

    def __init__(self, uri: Optional[str] = None, database_name: Optional[str] = None):
        self.uri = uri or os.environ.get("MONGODB_URI")
        if not self.uri:
            raise ValueError("MONGODB_URI is required to read the mood journal")
        self.database_name = database_name or os.environ.get("MOODJOURNAL_DB", DEFAULT_DATABASE_NAME)

    def connect(self) -> MongoClient:
        """Pinged client verified against the certifi CA bundle."""
        try:
            client = MongoClient(
                self.uri,
                tlsCAFile=certifi.where(),
                serverSelectionTimeoutMS=CONNECTION_TIMEOUT_MS,
                connectTimeoutMS=CONNECTION_TIMEOUT_MS
            )
            client.admin.command('ping')
        except ServerSelectionTimeoutError:
            logger.error(f"[WARN] Journal database unreachable after {CONNECTION_TIMEOUT_MS} ms")
            raise MongoDBConnectionError("Connection timeout") from None
        except OperationFailure as e:
            logger.error(f"[WARN] Journal database rejected the credentials: {e}")
            raise MongoDBConnectionError(f"Authentication failed: {e}") from None
        except PyMongoError as e:
            logger.error(f"[WARN] Journal database connection failed: {e}")
            raise MongoDBConnectionError(str(e)) from e

        logger.info(f"[OK] Connected to journal database '{self.database_name}'")
        return client


class JournalDatabase:
    """Opens the journal database on first use; the entry store and feature gate share it."""

    def __init__(self, config: Optional[DatabaseConfig] = None):
        self._config = config
        self._database: Optional[pymongo.database.Database] = None

    def database(self) -> pymongo.database.Database:
        if self._database is None:
            try:
                config = self._config or DatabaseConfig()
            except ValueError as e:
                raise MongoDBConnectionError(str(e)) from e
            self._database = config.connect()[config.database_name]
        return self._database


_journal = JournalDatabase()


# ============================================================================
# ENTRY MANAGEMENT
# ============================================================================

class MoodEntryManager:
    """Mood entry storage and retrieval on a single collection."""

    @staticmethod
    def create_entry(collection: pymongo.collection.Collection, mood: Any,
                     text: Optional[str] = None,
                     timestamp: Optional[datetime] = None) -> MoodEntry:
        """
        Records a new entry (note truncated to 140 characters).

        Raises:
            ValueError: If the mood identifier is unknown.
            MongoDBOperationError: If the insert fails.
        """
        if resolve_category(mood) is None:
            raise ValueError(f"Unknown mood identifier: {mood!r}")

        entry = MoodEntry.create(mood, text=text, timestamp=timestamp)
        try:
            collection.insert_one(entry.to_document())
        except PyMongoError as e:
            logger.error(f"Failed to save entry: {e}")
            raise MongoDBOperationError(f"Save failed: {e}") from e

        logger.info(f"[OK] Entry recorded: {entry.mood} at {entry.timestamp:%Y-%m-%d %H:%M}")
        return entry

    @staticmethod
    def update_entry(collection: pymongo.collection.Collection, entry_id: str,
                     mood: Any = None, text: Optional[str] = None) -> bool:
        """
        Changes mood and/or note of an entry. The timestamp is never edited.

        Returns:
            True if an entry was modified.
        """
        changes: Dict[str, Any] = {}
        if mood is not None:
            category = resolve_category(mood)
            if category is None:
                raise ValueError(f"Unknown mood identifier: {mood!r}")
            changes["mood"] = category.value
        if text is not None:
            changes["text"] = truncate_note(text)
        if not changes:
            return False

        try:
            result = collection.update_one({"_id": entry_id}, {"$set": changes})
        except PyMongoError as e:
            logger.error(f"Failed to update entry {entry_id}: {e}")
            raise MongoDBOperationError(f"Update failed: {e}") from e

        if result.matched_count == 0:
            logger.warning(f"[WARN] No entry with id {entry_id}")
            return False
        logger.info(f"[OK] Entry {entry_id} updated: {sorted(changes)}")
        return True

    @staticmethod
    def delete_entry(collection: pymongo.collection.Collection, entry_id: str) -> bool:
        try:
            result = collection.delete_one({"_id": entry_id})
        except PyMongoError as e:
            logger.error(f"Failed to delete entry {entry_id}: {e}")
            raise MongoDBOperationError(f"Delete failed: {e}") from e
        return result.deleted_count > 0

    @staticmethod
    def fetch_entries(collection: pymongo.collection.Collection,
                      start: datetime, end: datetime) -> List[MoodEntry]:
        """
        Retrieves entries with start <= timestamp <= end.

        Returns:
            List of entries (chronological order: oldest to newest).

        Raises:
            MongoDBOperationError: If the query fails.
        """
        try:
            cursor = collection.find(
                {"timestamp": {"$gte": start, "$lte": end}}
            ).sort("timestamp", pymongo.ASCENDING)
            documents = list(cursor)
        except PyMongoError as e:
            logger.error(f"Failed to retrieve entries: {e}")
            raise MongoDBOperationError(f"Retrieval failed: {e}") from e

        entries = _parse_documents(documents)
        logger.info(f"[OK] Retrieved {len(entries)} entries between {start:%Y-%m-%d} and {end:%Y-%m-%d}")
        return entries

    @staticmethod
    def get_mood_statistics(collection: pymongo.collection.Collection,
                            start: Optional[datetime] = None,
                            end: Optional[datetime] = None) -> Dict[MoodCategory, int]:
        """
        Counts entries per mood, every category present (zero when absent).
        Unknown mood identifiers in the collection are ignored.
        """
        match: Dict[str, Any] = {}
        if start is not None or end is not None:
            match["timestamp"] = {}
            if start is not None:
                match["timestamp"]["$gte"] = start
            if end is not None:
                match["timestamp"]["$lte"] = end

        pipeline = [
            {"$match": match},
            {"$group": {"_id": "$mood", "count": {"$sum": 1}}},
        ]
        try:
            rows = list(collection.aggregate(pipeline))
        except PyMongoError as e:
            logger.error(f"Failed to aggregate mood statistics: {e}")
            raise MongoDBOperationError(f"Aggregation failed: {e}") from e

        counts = {mood: 0 for mood in all_categories()}
        for row in rows:
            category = resolve_category(row.get("_id"))
            if category is not None:
                counts[category] += int(row.get("count", 0))
        return counts


def _parse_documents(documents: Iterable[Dict[str, Any]]) -> List[MoodEntry]:
    entries = []
    for doc in documents:
        try:
            entries.append(MoodEntry.from_document(doc))
        except (TypeError, ValueError) as e:
            logger.warning(f"[WARN] Skipping unreadable entry document {doc.get('_id')}: {e}")
    return entries


# ============================================================================
# ENTRY STORE
# ============================================================================

class MongoEntryStore:
    """Entry store backed by the mood entries collection."""

    def __init__(self, collection: pymongo.collection.Collection):
        self.collection = collection

    @classmethod
    def from_env(cls) -> 'MongoEntryStore':
        """
        Raises:
            MongoDBConnectionError: If MONGODB_URI is missing or unreachable.
        """
        return cls(get_database()[ENTRIES_COLLECTION_NAME])

    def fetch_entries(self, start: datetime, end: datetime) -> List[MoodEntry]:
        return MoodEntryManager.fetch_entries(self.collection, start, end)

    def create_entry(self, mood: Any, text: Optional[str] = None,
                     timestamp: Optional[datetime] = None) -> MoodEntry:
        return MoodEntryManager.create_entry(self.collection, mood, text, timestamp)

    def update_entry(self, entry_id: str, mood: Any = None, text: Optional[str] = None) -> bool:
        return MoodEntryManager.update_entry(self.collection, entry_id, mood, text)

    def delete_entry(self, entry_id: str) -> bool:
        return MoodEntryManager.delete_entry(self.collection, entry_id)

    def get_mood_statistics(self, start: Optional[datetime] = None,
                            end: Optional[datetime] = None) -> Dict[MoodCategory, int]:
        return MoodEntryManager.get_mood_statistics(self.collection, start, end)


# ============================================================================
# FEATURE GATE
# ============================================================================

class MongoFeatureGate:
    """
    Reads enabled features from a single entitlements document:
    {"_id": "pro_features", "enabled": ["weekly_insights", ...]}.
    A missing document or a read failure means nothing is enabled.
    """

    def __init__(self, collection: pymongo.collection.Collection,
                 document_id: str = ENTITLEMENTS_DOCUMENT_ID):
        self.collection = collection
        self.document_id = document_id

    def is_feature_enabled(self, feature_id: str) -> bool:
        try:
            doc = self.collection.find_one({"_id": self.document_id})
        except PyMongoError as e:
            logger.warning(f"[WARN] Entitlements read failed, treating {feature_id} as locked: {e}")
            return False
        if not doc:
            return False
        enabled = doc.get("enabled") or []
        return feature_id in enabled or "all" in enabled

    def set_enabled(self, features: Iterable[ProFeature]) -> None:
        ids = [feature.value for feature in features]
        self.collection.replace_one({"_id": self.document_id}, {"_id": self.document_id, "enabled": ids},
                                    upsert=True)
        logger.info(f"[OK] Entitlements updated: {ids}")


# ============================================================================
# PUBLIC API
# ============================================================================

def get_database() -> pymongo.database.Database:
    """
    Journal database built from the environment, opened once per process.

    Raises:
        MongoDBConnectionError: If MONGODB_URI is missing or the server cannot be reached.
    """
    return _journal.database()
