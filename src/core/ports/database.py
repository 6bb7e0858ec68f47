# -*- coding: utf-8 -*-
"""
Database Port Interface

Defines an abstract interface for database operations, ensuring the service layer
does not depend on specific database implementations.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Protocol, runtime_checkable


@runtime_checkable
class IDatabase(Protocol):
    """Database Operations Interface

    Current implementation: DatabaseManager (SQLite)
    """

    def execute(self, sql: str, params: tuple = ()) -> Any:
        ...

    def fetch_one(self, sql: str, params: tuple = ()) -> Optional[Dict[str, Any]]:
        """Fetch a single record

        Returns:
            Record dictionary or None
        """
        ...

    def fetch_all(self, sql: str, params: tuple = ()) -> List[Dict[str, Any]]:
        ...

    def insert(self, table: str, data: Dict[str, Any]) -> int:
        """Insert a record and return the ID of the new row"""
        ...

    def delete(self, table: str, where: str, where_params: tuple) -> int:
        ...

    def transaction(self) -> Any:
        """Context manager committing or rolling back the enclosed writes"""
        ...

    def close(self) -> None:
        ...
