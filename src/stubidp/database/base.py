"""
Base protocol/interface for relational store implementations.
Both the PostgreSQL and SQLite stores must implement this protocol.
"""

from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class RelationalStore(Protocol):
    """
    Protocol defining the row operations the storage adapter needs.

    Tables and columns are addressed by name; rows are plain dicts keyed by
    column name. Implementations let driver errors propagate.
    """

    dialect: str

    async def initialize(self) -> None:
        """
        Create the tables and indexes if they do not exist.
        This should be called once when the application starts.
        """
        ...

    async def close(self) -> None:
        """Release pooled connections."""
        ...

    async def insert_or_replace(
        self,
        table: str,
        key_column: str,
        values: dict[str, Any],
    ) -> None:
        """
        Insert a row, or overwrite every given column of the row whose
        ``key_column`` matches ``values[key_column]``.

        Args:
            table: Table name
            key_column: Primary key column name
            values: Column values, including the key
        """
        ...

    async def select_one(
        self,
        table: str,
        column: str,
        value: Any,
        live_at: int | None = None,
    ) -> dict[str, Any] | None:
        """
        Return the first row where ``column`` equals ``value``.

        With ``live_at`` set, rows whose ``expires_at`` is earlier than it
        are skipped, so an expired duplicate never hides a live match.

        Returns:
            The row as a column-name mapping, or None when no row matches
        """
        ...

    async def update_by_key(
        self,
        table: str,
        key_column: str,
        key: Any,
        values: dict[str, Any],
    ) -> int:
        """
        Update columns of the row identified by ``key``.

        Returns:
            Number of rows updated
        """
        ...

    async def delete_where(self, table: str, column: str, value: Any) -> int:
        """
        Delete every row where ``column`` equals ``value``.

        Returns:
            Number of rows deleted
        """
        ...

    async def delete_expired(
        self,
        table: str,
        now: int,
        column: str | None = None,
        value: Any = None,
    ) -> int:
        """
        Delete every row whose ``expires_at`` is set and earlier than ``now``.

        The expiry check and the optional ``column`` match run as one
        statement, so a row refreshed by a concurrent upsert survives.

        Args:
            table: Table name
            now: Current time in Unix seconds
            column: Optional column restricting the delete
            value: Value ``column`` must equal

        Returns:
            Number of rows deleted
        """
        ...
