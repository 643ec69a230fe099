"""
Local fallback store.

Keeps each entity collection as one JSON list under a fixed key in the
local database. Every mutation reads the whole collection, changes it and
writes it back before returning, so a read in the same process always sees
the last write. There is no locking: two processes writing the same key
race and the last write wins.
"""

import json
import logging
import random
import string
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError

from timekeeper.infra.db import DatabaseEngine, KeyValueModel

logger = logging.getLogger(__name__)

Record = Dict[str, Any]


class StorageKeys:
    CUSTOMERS = "timeTracker_customers"
    PROJECTS = "timeTracker_projects"
    TIME_ENTRIES = "timeTracker_timeEntries"


_ID_ALPHABET = string.digits + string.ascii_lowercase


def generate_id(length: int = 7) -> str:
    """
    Short random base-36 identifier.

    Uniqueness is probabilistic; fine for a single-user cache.
    """
    return "".join(random.choices(_ID_ALPHABET, k=length))


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


class LocalStore:
    """
    Whole-collection key-value persistence on top of SQLAlchemy.

    Read failures and corrupt data are logged and read as an empty
    collection; write failures are logged and not raised.
    """

    def __init__(self, engine: DatabaseEngine, id_factory: Callable[[], str] = generate_id):
        self.engine = engine
        self.id_factory = id_factory

    async def _read(self, key: str) -> List[Record]:
        try:
            async with self.engine.get_session() as session:
                result = await session.execute(
                    select(KeyValueModel.value).where(KeyValueModel.key == key)
                )
                raw = result.scalar_one_or_none()
        except SQLAlchemyError as e:
            logger.error(f"Error reading from local storage ({key}): {e}")
            return []

        if raw is None:
            return []
        try:
            data = json.loads(raw)
        except ValueError as e:
            logger.error(f"Error reading from local storage ({key}): {e}")
            return []
        if not isinstance(data, list):
            logger.error(f"Error reading from local storage ({key}): expected a list, got {type(data).__name__}")
            return []

        records = [r for r in data if isinstance(r, dict)]
        if len(records) != len(data):
            logger.error(f"Skipping {len(data) - len(records)} malformed record(s) in local storage ({key})")
        return records

    async def _write(self, key: str, records: List[Record]) -> None:
        try:
            payload = json.dumps(records, default=str)
            async with self.engine.get_session() as session:
                model = await session.get(KeyValueModel, key)
                if model is None:
                    session.add(KeyValueModel(key=key, value=payload))
                else:
                    model.value = payload
                await session.commit()
        except (SQLAlchemyError, TypeError, ValueError) as e:
            logger.error(f"Error saving to local storage ({key}): {e}")

    async def get_all(self, key: str) -> List[Record]:
        """Full collection in insertion order"""
        return await self._read(key)

    async def filter_by(self, key: str, field: str, value: Any) -> List[Record]:
        """Records whose `field` equals `value`, in insertion order"""
        return [r for r in await self._read(key) if r.get(field) == value]

    async def get_by_id(self, key: str, record_id: str) -> Optional[Record]:
        for record in await self._read(key):
            if record.get("id") == record_id:
                return record
        return None

    async def create(self, key: str, fields: Record) -> Record:
        """Append a record with a fresh id and creation timestamp"""
        record = {**fields, "id": self.id_factory(), "created_at": _now_iso()}
        records = await self._read(key)
        records.append(record)
        await self._write(key, records)
        return record

    async def update(self, key: str, record_id: str, fields: Record) -> Optional[Record]:
        """Merge `fields` into the record with `record_id`; None if it does not exist"""
        records = await self._read(key)
        for index, record in enumerate(records):
            if record.get("id") == record_id:
                merged = {**record, **fields, "id": record_id}
                records[index] = merged
                await self._write(key, records)
                return merged
        return None

    async def delete(self, key: str, record_id: str) -> bool:
        """Remove the record with `record_id`; False if nothing was removed"""
        records = await self._read(key)
        remaining = [r for r in records if r.get("id") != record_id]
        if len(remaining) == len(records):
            return False
        await self._write(key, remaining)
        return True

    async def is_empty(self, key: str) -> bool:
        return not await self._read(key)

    async def replace_all(self, key: str, records: List[Record]) -> None:
        await self._write(key, records)
