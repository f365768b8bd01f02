# promptadmin/services/record_store.py
import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, Iterable, List, Optional

import asyncpg

from ..exceptions import StoreError

class RecordStore(ABC):
    """Generic persistence contract for one collection of records.

    The store assigns ``id`` and ``created_at`` on insert. ``update``
    returns ``None`` and ``delete`` returns ``False`` when the record does
    not exist. Any other failure is raised as ``StoreError``.
    """

    @abstractmethod
    async def list(self, order_by: Optional[str] = None, descending: bool = False,
                   where: Optional[Dict[str, Any]] = None,
                   limit: Optional[int] = None) -> List[Dict[str, Any]]:
        """Return the records matching ``where`` in the requested order"""

    @abstractmethod
    async def get(self, record_id: Any) -> Optional[Dict[str, Any]]:
        """Return one record or None"""

    @abstractmethod
    async def insert(self, fields: Dict[str, Any]) -> Dict[str, Any]:
        """Insert a record and return it as stored"""

    @abstractmethod
    async def update(self, record_id: Any, fields: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        """Update a record and return it, or None if it does not exist"""

    @abstractmethod
    async def delete(self, record_id: Any) -> bool:
        """Delete a record, True when a row was removed"""


class PostgresRecordStore(RecordStore):
    """RecordStore backed by one PostgreSQL table through the asyncpg pool"""

    SYSTEM_COLUMNS = ('id', 'created_at', 'updated_at')

    def __init__(self, db, table: str, columns: Iterable[str]):
        self.db = db
        self.table = table
        self.columns = frozenset(columns) | frozenset(self.SYSTEM_COLUMNS)
        self.logger = logging.getLogger(__name__)

    def _check_columns(self, names: Iterable[str]):
        unknown = [name for name in names if name not in self.columns]
        if unknown:
            raise ValueError(f"Unknown column(s) for {self.table}: {', '.join(unknown)}")

    async def _run(self, method: str, query: str, *params):
        """Run one statement on a pooled connection, wrapping driver errors"""
        try:
            async with self.db.pool.acquire() as conn:
                return await getattr(conn, method)(query, *params)
        except (asyncpg.PostgresError, asyncpg.InterfaceError, OSError) as e:
            self.logger.error(f"{self.table}: {method} failed: {e}")
            raise StoreError(f"{self.table}: {e}") from e

    async def list(self, order_by: Optional[str] = None, descending: bool = False,
                   where: Optional[Dict[str, Any]] = None,
                   limit: Optional[int] = None) -> List[Dict[str, Any]]:
        query = f"SELECT * FROM {self.table}"
        params = []

        if where:
            self._check_columns(where.keys())
            conditions = []
            for key, value in where.items():
                params.append(value)
                conditions.append(f"{key} = ${len(params)}")
            query += " WHERE " + " AND ".join(conditions)

        if order_by:
            self._check_columns([order_by])
            direction = "DESC" if descending else "ASC"
            query += f" ORDER BY {order_by} {direction}, id {direction}"

        if limit is not None:
            params.append(limit)
            query += f" LIMIT ${len(params)}"

        rows = await self._run('fetch', query, *params)
        return [dict(row) for row in rows]

    async def get(self, record_id: Any) -> Optional[Dict[str, Any]]:
        row = await self._run('fetchrow', f"""
            SELECT *
            FROM {self.table}
            WHERE id = $1
        """, record_id)
        return dict(row) if row else None

    async def insert(self, fields: Dict[str, Any]) -> Dict[str, Any]:
        self._check_columns(fields.keys())
        names = list(fields.keys())
        placeholders = [f"${i}" for i in range(1, len(names) + 1)]

        row = await self._run('fetchrow', f"""
            INSERT INTO {self.table} ({', '.join(names)})
            VALUES ({', '.join(placeholders)})
            RETURNING *
        """, *fields.values())
        return dict(row)

    async def update(self, record_id: Any, fields: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        if not fields:
            return await self.get(record_id)

        self._check_columns(fields.keys())
        query_parts = []
        params = []
        param_count = 1

        for key, value in fields.items():
            if key == 'updated_at':
                continue
            query_parts.append(f"{key} = ${param_count}")
            params.append(value)
            param_count += 1

        params.append(record_id)
        row = await self._run('fetchrow', f"""
            UPDATE {self.table}
            SET {', '.join(query_parts)}, updated_at = NOW()
            WHERE id = ${param_count}
            RETURNING *
        """, *params)
        return dict(row) if row else None

    async def delete(self, record_id: Any) -> bool:
        result = await self._run('execute', f"""
            DELETE FROM {self.table}
            WHERE id = $1
        """, record_id)
        return result == "DELETE 1"
