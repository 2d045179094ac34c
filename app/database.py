from functools import lru_cache
from typing import Dict, Iterable, List, Optional
from supabase import create_client, Client
from sqlalchemy.orm import declarative_base
from app.config import settings
import logging

# Declarative base for the schema models in app.models (DDL only, see init_db.py)
Base = declarative_base()

# Supabase Client Setup
@lru_cache(maxsize=1)
def get_supabase_client() -> Client:
    """Get Supabase client for authentication operations"""
    return create_client(
        settings.supabase_url,
        settings.supabase_anon_key.get_secret_value()
    )

@lru_cache(maxsize=1)
def get_supabase_admin_client() -> Client:
    """Get Supabase admin client for table and storage operations"""
    return create_client(
        settings.supabase_url,
        settings.supabase_service_role_key.get_secret_value()
    )

def test_supabase_connection() -> bool:
    """Test Supabase connection"""
    try:
        get_supabase_admin_client().table("questions").select("id").limit(1).execute()
        return True
    except Exception as e:
        logging.error(f"Supabase connection test failed: {e}")
        return False

def _apply_filters(query, filters: Optional[dict], in_filters: Optional[Dict[str, Iterable]] = None):
    if filters:
        for key, value in filters.items():
            if value is None:
                query = query.is_(key, "null")
            else:
                query = query.eq(key, value)
    if in_filters:
        for key, values in in_filters.items():
            query = query.in_(key, list(values))
    return query

# Database operations using Supabase REST API
class Database:
    """Database operations using Supabase REST API"""

    @staticmethod
    def insert(table: str, data: dict):
        """Insert one row and return it"""
        try:
            result = get_supabase_admin_client().table(table).insert(data).execute()
            return result.data[0] if result.data else None
        except Exception as e:
            logging.error(f"Insert error in {table}: {e}")
            raise e

    @staticmethod
    def insert_many(table: str, rows: List[dict]) -> List[dict]:
        """Insert several rows in one request"""
        try:
            result = get_supabase_admin_client().table(table).insert(rows).execute()
            return result.data or []
        except Exception as e:
            logging.error(f"Bulk insert error in {table}: {e}")
            raise e

    @staticmethod
    def select(
        table: str,
        columns: str = "*",
        filters: dict = None,
        limit: int = None,
        order_by: str = None,
        desc: bool = False,
        in_filters: Dict[str, Iterable] = None,
    ) -> List[dict]:
        """Select rows; equality filters, optional IN filters, ordering and limit"""
        try:
            query = get_supabase_admin_client().table(table).select(columns)
            query = _apply_filters(query, filters, in_filters)

            if order_by:
                query = query.order(order_by, desc=desc)

            if limit:
                query = query.limit(limit)

            result = query.execute()
            return result.data
        except Exception as e:
            logging.error(f"Select error in {table}: {e}")
            raise e

    @staticmethod
    def count(table: str, filters: dict = None) -> int:
        """Exact row count"""
        try:
            query = get_supabase_admin_client().table(table).select("id", count="exact")
            query = _apply_filters(query, filters)
            result = query.execute()
            return result.count or 0
        except Exception as e:
            logging.error(f"Count error in {table}: {e}")
            raise e

    @staticmethod
    def update(table: str, data: dict, filters: dict):
        """Update rows in table, returns the first updated row"""
        try:
            query = get_supabase_admin_client().table(table).update(data)
            query = _apply_filters(query, filters)
            result = query.execute()
            return result.data[0] if result.data else None
        except Exception as e:
            logging.error(f"Update error in {table}: {e}")
            raise e

    @staticmethod
    def upsert(table: str, data, on_conflict: str = ""):
        """Insert or update on the given conflict columns"""
        try:
            result = get_supabase_admin_client().table(table).upsert(data, on_conflict=on_conflict).execute()
            return result.data
        except Exception as e:
            logging.error(f"Upsert error in {table}: {e}")
            raise e

    @staticmethod
    def delete(table: str, filters: dict):
        """Delete data from table"""
        try:
            query = get_supabase_admin_client().table(table).delete()
            query = _apply_filters(query, filters)
            result = query.execute()
            return result.data
        except Exception as e:
            logging.error(f"Delete error in {table}: {e}")
            raise e

# Global database instance
db = Database()
