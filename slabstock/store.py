"""
Slab Store - durable persistence for slab records and the materials list.

A thin CRUD layer over SQLite (SQLAlchemy async + aiosqlite):
- slabs: keyed by combined_id, last write wins
- dictionary: fixed keys for the materials vocabulary and the baseline marker

Each call runs in its own transaction. Bulk writes are one transaction,
so either every record lands or none do. Database failures are re-raised
as StorageError and never retried.
"""

import logging
from typing import Iterable, Optional

from sqlalchemy import delete, func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from .database import create_engine, create_session_factory, init_db
from .errors import RecordValidationError, StorageError
from .models import SlabRecord
from .schemas import BASELINE_KEY, MATERIALS_KEY, DictionaryEntry, Slab

logger = logging.getLogger(__name__)

SLAB_COLUMNS = (
    "combined_id", "slab_number", "batch_number", "material", "dimensions",
    "thickness_mm", "colour_family", "location", "received_date", "notes",
    "status", "last_seen", "raw_ocr_text", "ocr_confidence", "source",
)


def _to_row(record: SlabRecord) -> Slab:
    return Slab(**record.to_dict())


def _from_row(row: Slab) -> SlabRecord:
    return SlabRecord(**{col: getattr(row, col) for col in SLAB_COLUMNS})


def _entry(key: str, values: list) -> DictionaryEntry:
    return DictionaryEntry(key=key, values=list(values))


def _bulk_entries(materials, baseline_loaded_at) -> list[tuple[str, list]]:
    entries = []
    if materials is not None:
        entries.append((MATERIALS_KEY, list(materials)))
    if baseline_loaded_at is not None:
        entries.append((BASELINE_KEY, [baseline_loaded_at]))
    return entries


def _check_ids(records: Iterable[SlabRecord]) -> list[SlabRecord]:
    records = list(records)
    for record in records:
        if not record.combined_id or not record.combined_id.strip():
            raise RecordValidationError("Combined ID is required")
    return records


class SlabStore:
    """
    Owns the engine for one local database.

    Open once per session with SlabStore.open(url), close() at shutdown.
    """

    def __init__(self, engine: AsyncEngine):
        self._engine = engine
        self._sessions: async_sessionmaker[AsyncSession] = create_session_factory(engine)

    @classmethod
    async def open(cls, url: str) -> "SlabStore":
        """Create the engine and make sure the tables exist."""
        engine = create_engine(url)
        try:
            await init_db(engine)
        except SQLAlchemyError as e:
            await engine.dispose()
            raise StorageError(f"Could not open slab store at {url}: {e}") from e
        logger.debug("Opened slab store at %s", url)
        return cls(engine)

    async def close(self):
        await self._engine.dispose()

    # === Slabs ===

    async def put(self, record: SlabRecord):
        """Insert or overwrite one record."""
        await self.put_many([record])

    async def put_many(
        self,
        records: Iterable[SlabRecord],
        materials: Optional[Iterable[str]] = None,
        baseline_loaded_at: Optional[str] = None,
    ):
        """
        Insert or overwrite many records in a single transaction.

        materials and baseline_loaded_at, when given, are written in the
        same transaction so they never disagree with the stored slabs.
        """
        records = _check_ids(records)
        entries = _bulk_entries(materials, baseline_loaded_at)
        try:
            async with self._sessions() as session:
                async with session.begin():
                    for record in records:
                        await session.merge(_to_row(record))
                    for key, values in entries:
                        await session.merge(_entry(key, values))
        except SQLAlchemyError as e:
            raise StorageError(f"Failed to save {len(records)} slab(s): {e}") from e
        logger.debug("Stored %d slab(s)", len(records))

    async def replace_all(
        self,
        records: Iterable[SlabRecord],
        materials: Optional[Iterable[str]] = None,
    ):
        """Drop every stored slab and load records (and materials), as one transaction."""
        records = _check_ids(records)
        entries = _bulk_entries(materials, None)
        try:
            async with self._sessions() as session:
                async with session.begin():
                    await session.execute(delete(Slab))
                    for record in records:
                        await session.merge(_to_row(record))
                    for key, values in entries:
                        await session.merge(_entry(key, values))
        except SQLAlchemyError as e:
            raise StorageError(f"Failed to replace slabs: {e}") from e
        logger.debug("Replaced store contents with %d slab(s)", len(records))

    async def get(self, combined_id: str) -> Optional[SlabRecord]:
        """Point lookup; None when the id is not stored."""
        try:
            async with self._sessions() as session:
                row = await session.get(Slab, combined_id)
        except SQLAlchemyError as e:
            raise StorageError(f"Failed to read slab {combined_id!r}: {e}") from e
        return _from_row(row) if row is not None else None

    async def get_all(self) -> list[SlabRecord]:
        """Every stored slab, in no particular order."""
        try:
            async with self._sessions() as session:
                result = await session.execute(select(Slab))
                rows = result.scalars().all()
        except SQLAlchemyError as e:
            raise StorageError(f"Failed to read slabs: {e}") from e
        return [_from_row(row) for row in rows]

    async def count(self) -> int:
        try:
            async with self._sessions() as session:
                result = await session.execute(select(func.count()).select_from(Slab))
                return result.scalar_one()
        except SQLAlchemyError as e:
            raise StorageError(f"Failed to count slabs: {e}") from e

    async def clear(self):
        """Remove every slab. The materials list is kept."""
        try:
            async with self._sessions() as session:
                async with session.begin():
                    await session.execute(delete(Slab))
        except SQLAlchemyError as e:
            raise StorageError(f"Failed to clear slabs: {e}") from e

    # === Dictionary ===

    async def _load_entry(self, key: str) -> list:
        try:
            async with self._sessions() as session:
                entry = await session.get(DictionaryEntry, key)
        except SQLAlchemyError as e:
            raise StorageError(f"Failed to load {key}: {e}") from e
        return list(entry.values) if entry is not None and entry.values else []

    async def _save_entry(self, key: str, values: list):
        try:
            async with self._sessions() as session:
                async with session.begin():
                    await session.merge(_entry(key, values))
        except SQLAlchemyError as e:
            raise StorageError(f"Failed to save {key}: {e}") from e

    async def load_materials(self) -> list[str]:
        return await self._load_entry(MATERIALS_KEY)

    async def save_materials(self, values: Iterable[str]):
        await self._save_entry(MATERIALS_KEY, list(values))

    async def baseline_loaded_at(self) -> Optional[str]:
        """When the bundled catalogue was loaded, or None if it never was."""
        values = await self._load_entry(BASELINE_KEY)
        return values[0] if values else None

    async def mark_baseline_loaded(self, timestamp: str):
        await self._save_entry(BASELINE_KEY, [timestamp])
