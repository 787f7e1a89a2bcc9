"""Generic filtered CRUD over the hosted record store.

Every call is a single request/response exchange with MongoDB. Driver
errors are translated into the control panel's error taxonomy here so the
layers above never import pymongo.
"""
from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Protocol, Sequence, Tuple

from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import DESCENDING
from pymongo.errors import DuplicateKeyError, PyMongoError

from control_panel.core.errors import ConflictError, NoRowsError, StoreError

logger = logging.getLogger(__name__)

Filters = Dict[str, Any]
Order = Sequence[Tuple[str, int]]

NEWEST_FIRST: Order = (("created_at", DESCENDING),)


class RecordStore(Protocol):
    async def select(
        self,
        collection: str,
        filters: Optional[Filters] = None,
        order: Optional[Order] = None,
        columns: Optional[Sequence[str]] = None,
    ) -> List[Dict[str, Any]]: ...

    async def select_one(
        self,
        collection: str,
        filters: Filters,
        columns: Optional[Sequence[str]] = None,
    ) -> Dict[str, Any]: ...

    async def insert(self, collection: str, row: Dict[str, Any]) -> None: ...

    async def delete(self, collection: str, filters: Filters) -> int: ...

    async def count(self, collection: str, filters: Optional[Filters] = None) -> int: ...


def _projection(columns: Optional[Sequence[str]]) -> Dict[str, int]:
    projection = {"_id": 0}
    if columns:
        projection.update({column: 1 for column in columns})
    return projection


class MongoRecordStore:
    """RecordStore backed by a motor database handle."""

    def __init__(self, database: AsyncIOMotorDatabase):
        self.database = database

    async def select(self, collection, filters=None, order=None, columns=None):
        try:
            cursor = self.database[collection].find(filters or {}, _projection(columns))
            if order:
                cursor = cursor.sort(list(order))
            return [row async for row in cursor]
        except PyMongoError as e:
            logger.error(f"select on {collection} failed: {e}")
            raise StoreError(str(e)) from e

    async def select_one(self, collection, filters, columns=None):
        try:
            cursor = self.database[collection].find(filters, _projection(columns)).limit(2)
            rows = [row async for row in cursor]
        except PyMongoError as e:
            logger.error(f"select_one on {collection} failed: {e}")
            raise StoreError(str(e)) from e

        if not rows:
            raise NoRowsError(f"No rows in {collection} match {filters}", code="no_rows")
        if len(rows) > 1:
            raise StoreError(f"Multiple rows in {collection} match {filters}", code="multiple_rows")
        return rows[0]

    async def insert(self, collection, row):
        try:
            # insert_one adds _id to the document it is given
            await self.database[collection].insert_one(dict(row))
        except DuplicateKeyError as e:
            logger.warning(f"Duplicate key on insert into {collection}: {row.get('id')}")
            raise ConflictError(
                f"{row.get('id')} already exists in {collection}", code="duplicate_key"
            ) from e
        except PyMongoError as e:
            logger.error(f"insert into {collection} failed: {e}")
            raise StoreError(str(e)) from e

    async def delete(self, collection, filters):
        try:
            result = await self.database[collection].delete_many(filters)
            return result.deleted_count
        except PyMongoError as e:
            logger.error(f"delete from {collection} failed: {e}")
            raise StoreError(str(e)) from e

    async def count(self, collection, filters=None):
        try:
            return await self.database[collection].count_documents(filters or {})
        except PyMongoError as e:
            logger.error(f"count on {collection} failed: {e}")
            raise StoreError(str(e)) from e
