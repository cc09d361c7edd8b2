"""
Key-value store with JSON-serialized values.

Every call runs in its own short session, so concurrent writers simply
overwrite each other (last write wins).
"""

import json
from typing import Any

from sqlalchemy import delete, select

from kushl.shared.database import DatabaseManager
from kushl.shared.exceptions import StorageError
from kushl.shared.logging import get_logger
from kushl.storage.models import StorageEntry

logger = get_logger(__name__)


class KeyValueStore:
    """Generic get/set over a single-device key-value table."""

    def __init__(self, database: DatabaseManager) -> None:
        """Initialize store with a database manager.

        Args:
            database: Database manager owning the engine and sessions.
        """
        self._database = database

    def get(self, key: str, default: Any = None) -> Any:
        """Read and decode the value stored under ``key``.

        Args:
            key: Storage key.
            default: Value returned when the key is absent.

        Returns:
            Decoded JSON value, or ``default``.

        Raises:
            StorageError: The stored value is not valid JSON.
        """
        with self._database.session() as session:
            raw = session.execute(
                select(StorageEntry.value).where(StorageEntry.key == key)
            ).scalar_one_or_none()
        if raw is None:
            return default
        try:
            return json.loads(raw)
        except json.JSONDecodeError as exc:
            logger.error("Stored value is not valid JSON", extra={"key": key})
            raise StorageError(
                f"Value stored under {key!r} is not valid JSON",
                details={"key": key},
            ) from exc

    def set(self, key: str, value: Any) -> None:
        """Encode ``value`` as JSON and store it under ``key``.

        Args:
            key: Storage key.
            value: Any JSON-serializable value.
        """
        try:
            encoded = json.dumps(value, ensure_ascii=False)
        except (TypeError, ValueError) as exc:
            raise StorageError(
                f"Value for {key!r} is not JSON serializable",
                details={"key": key},
            ) from exc

        with self._database.session() as session:
            entry = session.get(StorageEntry, key)
            if entry is None:
                session.add(StorageEntry(key=key, value=encoded))
            else:
                entry.value = encoded
        logger.debug("Stored value", extra={"key": key, "size": len(encoded)})

    def remove(self, key: str) -> bool:
        """Delete ``key``.

        Returns:
            True if the key existed.
        """
        with self._database.session() as session:
            result = session.execute(delete(StorageEntry).where(StorageEntry.key == key))
            return bool(result.rowcount)

    def keys(self, prefix: str = "") -> list[str]:
        """List stored keys, optionally restricted to a prefix."""
        stmt = select(StorageEntry.key).order_by(StorageEntry.key)
        if prefix:
            stmt = stmt.where(StorageEntry.key.startswith(prefix, autoescape=True))
        with self._database.session() as session:
            return list(session.execute(stmt).scalars().all())

    def __contains__(self, key: str) -> bool:
        with self._database.session() as session:
            return session.get(StorageEntry, key) is not None
