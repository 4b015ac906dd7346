from functools import lru_cache
from typing import Any, Dict, List, Optional, Sequence, Tuple

from supabase import create_client, Client
from examly.config import settings
import logging

logger = logging.getLogger(__name__)

# Supabase Client Setup
@lru_cache(maxsize=1)
def get_supabase_admin_client() -> Client:
    """Get Supabase admin client (service role, bypasses RLS)"""
    return create_client(
        settings.supabase_url,
        settings.supabase_service_role_key.get_secret_value()
    )

# Database operations using Supabase REST API
class Database:
    """Table operations over an explicitly supplied Supabase client"""

    def __init__(self, client: Client):
        self.client = client

    def insert(self, table: str, data: dict):
        """Insert a row and return it"""
        try:
            result = self.client.table(table).insert(data).execute()
            return result.data[0] if result.data else None
        except Exception as e:
            logger.error(f"Insert error in {table}: {e}")
            raise e

    def insert_many(self, table: str, rows: List[dict]):
        """Insert several rows in one request"""
        if not rows:
            return []
        try:
            result = self.client.table(table).insert(rows).execute()
            return result.data or []
        except Exception as e:
            logger.error(f"Bulk insert error in {table}: {e}")
            raise e

    def select(
        self,
        table: str,
        columns: str = "*",
        filters: dict = None,
        in_filters: Dict[str, Sequence[Any]] = None,
        order_by: Sequence[Tuple[str, bool]] = None,
        limit: int = None,
    ):
        """Select rows from table.

        ``filters`` are equality filters, ``in_filters`` map a column to the
        allowed values and ``order_by`` is a list of ``(column, descending)``
        pairs applied in order.
        """
        try:
            query = self.client.table(table).select(columns)

            if filters:
                for key, value in filters.items():
                    query = query.eq(key, value)

            if in_filters:
                for key, values in in_filters.items():
                    query = query.in_(key, list(values))

            if order_by:
                for column, descending in order_by:
                    query = query.order(column, desc=descending)

            if limit:
                query = query.limit(limit)

            result = query.execute()
            return result.data or []
        except Exception as e:
            logger.error(f"Select error in {table}: {e}")
            raise e

    def select_one(self, table: str, columns: str = "*", filters: dict = None) -> Optional[dict]:
        rows = self.select(table, columns, filters=filters, limit=1)
        return rows[0] if rows else None

    def count(self, table: str, filters: dict = None) -> int:
        """Number of matching rows, counted by the database without fetching them"""
        try:
            query = self.client.table(table).select("id", count="exact", head=True)

            if filters:
                for key, value in filters.items():
                    query = query.eq(key, value)

            result = query.execute()
            return result.count or 0
        except Exception as e:
            logger.error(f"Count error in {table}: {e}")
            raise e

    def update(self, table: str, data: dict, filters: dict):
        """Update data in table"""
        try:
            query = self.client.table(table).update(data)

            for key, value in filters.items():
                query = query.eq(key, value)

            result = query.execute()
            return result.data[0] if result.data else None
        except Exception as e:
            logger.error(f"Update error in {table}: {e}")
            raise e

    def delete(self, table: str, filters: dict):
        """Delete data from table"""
        try:
            query = self.client.table(table).delete()

            for key, value in filters.items():
                query = query.eq(key, value)

            result = query.execute()
            return result.data
        except Exception as e:
            logger.error(f"Delete error in {table}: {e}")
            raise e


class Storage:
    """Object storage operations over a Supabase client"""

    def __init__(self, client: Client):
        self.client = client

    def upload(self, bucket: str, path: str, content: bytes, content_type: str = "application/pdf") -> str:
        try:
            self.client.storage.from_(bucket).upload(
                path,
                content,
                {"content-type": content_type, "cache-control": "3600", "upsert": "false"},
            )
            return path
        except Exception as e:
            logger.error(f"Upload error in bucket {bucket} for {path}: {e}")
            raise e

    def list(self, bucket: str, prefix: str) -> List[dict]:
        try:
            return self.client.storage.from_(bucket).list(prefix, {"limit": 100}) or []
        except Exception as e:
            logger.error(f"List error in bucket {bucket} for {prefix}: {e}")
            raise e

    def remove(self, bucket: str, paths: List[str]):
        if not paths:
            return []
        try:
            return self.client.storage.from_(bucket).remove(paths)
        except Exception as e:
            logger.error(f"Remove error in bucket {bucket}: {e}")
            raise e


def check_supabase_connection(db: Database) -> bool:
    """Check that the questions table is reachable"""
    try:
        db.select("questions", "id", limit=1)
        return True
    except Exception as e:
        logger.error(f"Supabase connection test failed: {e}")
        return False


# FastAPI dependencies, overridden in tests
def get_db() -> Database:
    return Database(get_supabase_admin_client())

def get_storage() -> Storage:
    return Storage(get_supabase_admin_client())
