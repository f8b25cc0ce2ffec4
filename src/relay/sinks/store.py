"""
Hierarchical document store sink.

Appends each AircraftReport into a single aggregate document per partition,
at the dotted path year.month.day.hex_ident. The append is one server-side
update_one with upsert, so concurrent consumers never lose each other's
entries.
"""

from typing import Any

from pymongo import MongoClient
from pymongo.collection import Collection
from pymongo.errors import PyMongoError

from src.utils import logger
from src.utils.exceptions import StoreWriteError
from src.basestation import AircraftReport, HierarchicalKey
from src.relay.config import AppendMode, StoreSettings, get_settings


_OPERATORS: dict[str, str] = {
    "push": "$push",
    "add_to_set": "$addToSet",
}


class HierarchicalStoreSink:
    """
    Writes reports into the time-hierarchical aggregate.

    Document shape:
        {"partition": "...", "2024": {"06": {"01": {"4CA2C4": [report, ...]}}}}
    """

    def __init__(
        self,
        collection: Collection,
        append_mode: AppendMode = "push",
    ):
        """
        Initialize the store sink.

        Args:
            collection: Target collection holding the aggregate documents
            append_mode: "push" appends every delivery; "add_to_set" skips an
                entry identical to one already at the path
        """
        if append_mode not in _OPERATORS:
            raise ValueError(f"Unknown append mode: {append_mode}")

        self.collection = collection
        self.append_mode = append_mode
        self._operator = _OPERATORS[append_mode]

        logger.info(
            f"HierarchicalStoreSink initialized "
            f"(collection: {collection.name}, mode: {append_mode})"
        )

    def build_update(self, key: HierarchicalKey, report: AircraftReport) -> dict[str, Any]:
        """Update document appending report at key."""
        return {self._operator: {key.path: report.to_document()}}

    def append_report(
        self,
        selector: dict[str, Any],
        key: HierarchicalKey,
        report: AircraftReport,
    ) -> None:
        """
        Append a report to the aggregate selected by selector.

        Args:
            selector: Filter choosing the aggregate document; created if absent
            key: Dotted path for the report
            report: Parsed report

        Raises:
            StoreWriteError: If the store rejects or cannot receive the update
        """
        try:
            result = self.collection.update_one(
                selector,
                self.build_update(key, report),
                upsert=True,
            )
        except PyMongoError as e:
            raise StoreWriteError(f"Failed to append report at {key.path}: {e}", path=key.path) from e

        if not result.acknowledged:
            raise StoreWriteError(f"Append at {key.path} was not acknowledged", path=key.path)

        if result.upserted_id is not None:
            logger.info(f"Created aggregate document {result.upserted_id} for {selector}")

        logger.debug(f"Appended report at {key.path}")

    def close(self) -> None:
        self.collection.database.client.close()


def create_store_sink(settings: StoreSettings | None = None) -> HierarchicalStoreSink:
    """Create a store sink connected to the configured MongoDB."""
    settings = settings or get_settings().store

    client = MongoClient(
        settings.connection_uri,
        serverSelectionTimeoutMS=settings.timeout_ms,
        connectTimeoutMS=settings.timeout_ms,
        socketTimeoutMS=settings.timeout_ms,
    )
    collection = client[settings.database][settings.collection]

    logger.info(f"Connected to MongoDB database: {settings.database}")
    return HierarchicalStoreSink(collection, append_mode=settings.append_mode)


__all__ = ["HierarchicalStoreSink", "create_store_sink"]
