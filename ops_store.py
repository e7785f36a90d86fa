#!/usr/bin/env python3
"""
Ops Store
Thin wrapper around the Supabase client for the fleet ops tables.

Every remote failure surfaces as StorageError; callers decide what to show.
"""

import logging
import os
from typing import Any, Dict, Iterable, List, Optional

import httpx
from dotenv import load_dotenv
from postgrest.exceptions import APIError
from supabase import create_client, Client

# Load environment variables from .env file
# This ensures SUPABASE_URL and SUPABASE_KEY are available
load_dotenv()

logger = logging.getLogger(__name__)

TABLES = ('products', 'drivers', 'sales', 'locations', 'schedule', 'payments', 'settings')

# No row ever carries this id; used to express "delete every row".
NIL_UUID = '00000000-0000-0000-0000-000000000000'


class OpsError(Exception):
    """Base exception for fleet ops operations"""
    pass


class ValidationAbort(OpsError):
    """Raised when an operation is refused before touching the store"""
    pass


class ConfigError(OpsError):
    """Raised when the store credentials are missing"""
    pass


class StorageError(OpsError):
    """Raised when a remote store call reports an error"""

    def __init__(self, message: str, code: Optional[str] = None):
        super().__init__(message)
        self.code = code


class OpsStore:
    """
    Table access for the hosted store.

    Pass `client` to use an already configured client (tests use a fake one);
    otherwise the client is built from SUPABASE_URL and SUPABASE_KEY.
    """

    def __init__(self, client: Optional[Client] = None):
        if client is None:
            supabase_url = os.getenv("SUPABASE_URL")
            supabase_key = os.getenv("SUPABASE_KEY")

            if not supabase_url or not supabase_key:
                raise ConfigError(
                    "❌ Missing Supabase credentials. Please set SUPABASE_URL and SUPABASE_KEY."
                )

            client = create_client(supabase_url, supabase_key)

        self.supabase = client

    # -------------------------
    # Internal utilities
    # -------------------------
    @staticmethod
    def _execute(query, action: str, table: str) -> List[Dict[str, Any]]:
        try:
            res = query.execute()
        except APIError as err:
            logger.error("%s on '%s' failed: %s", action, table, err.message)
            raise StorageError(f"{action} on '{table}' failed: {err.message}", code=err.code) from err
        except httpx.HTTPError as err:
            logger.error("%s on '%s' failed: %s", action, table, err)
            raise StorageError(f"{action} on '{table}' failed: {err}") from err
        return res.data or []

    # -------------------------
    # Core methods
    # -------------------------
    def select(self, table: str, order_by: Optional[str] = None, descending: bool = False) -> List[Dict[str, Any]]:
        """Read every row of a table, optionally ordered by one column."""
        query = self.supabase.table(table).select("*")
        if order_by:
            query = query.order(order_by, desc=descending)
        return self._execute(query, "select", table)

    def select_first(self, table: str) -> Optional[Dict[str, Any]]:
        """Return the first row of a table, or None when it is empty."""
        rows = self._execute(self.supabase.table(table).select("*").limit(1), "select", table)
        return rows[0] if rows else None

    def insert(self, table: str, rows) -> List[Dict[str, Any]]:
        """Insert one row (dict) or a batch (list of dicts); returns the stored rows."""
        return self._execute(self.supabase.table(table).insert(rows), "insert", table)

    def update(self, table: str, values: Dict[str, Any], **match) -> List[Dict[str, Any]]:
        """Update rows whose columns equal every value in `match`; returns the updated rows."""
        query = self.supabase.table(table).update(values)
        for column, value in match.items():
            query = query.eq(column, value)
        return self._execute(query, "update", table)

    def delete(self, table: str, **match) -> List[Dict[str, Any]]:
        """Delete rows whose columns equal every value in `match`."""
        if not match:
            raise ValueError("delete() needs at least one column to match; use delete_all()")
        query = self.supabase.table(table).delete()
        for column, value in match.items():
            query = query.eq(column, value)
        return self._execute(query, "delete", table)

    def delete_in(self, table: str, column: str, values: Iterable[Any]) -> List[Dict[str, Any]]:
        """Delete rows whose `column` is one of `values`."""
        query = self.supabase.table(table).delete().in_(column, list(values))
        return self._execute(query, "delete", table)

    def delete_all(self, table: str) -> List[Dict[str, Any]]:
        """Delete every row of a table."""
        query = self.supabase.table(table).delete().neq("id", NIL_UUID)
        return self._execute(query, "delete", table)
