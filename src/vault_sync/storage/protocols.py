"""
Storage protocol definitions for the vault core.

The core never opens connections itself. It is handed a database handle
that can prepare SQL statements, bind parameters, execute single statements
and execute a group of statements atomically. Any backend satisfying these
protocols can be used (SQLAlchemy, a D1-style HTTP binding, a mock in tests).
"""

from typing import Any, Dict, List, Mapping, Optional, Protocol, Sequence


class PreparedStatement(Protocol):
    """
    A SQL statement with (optionally) bound parameters.

    Statements are values: `bind` returns a new statement and never mutates
    the receiver, so a prepared statement can be reused for many rows.
    """

    def bind(self, params: Mapping[str, Any]) -> "PreparedStatement":
        """
        Bind named parameters to the statement.

        Args:
            params: Mapping of parameter name to value

        Returns:
            A new statement carrying the parameters
        """
        ...

    def first(self) -> Optional[Dict[str, Any]]:
        """
        Execute the statement and return the first row.

        Returns:
            The first row as a column → value dictionary, or None if no rows
        """
        ...

    def all(self) -> List[Dict[str, Any]]:
        """Execute the statement and return every row."""
        ...

    def run(self) -> int:
        """
        Execute the statement for its side effects.

        Returns:
            Number of rows affected
        """
        ...


class DatabaseHandle(Protocol):
    """
    Protocol for the persistence collaborator.

    Implementations must execute `batch` as one atomic unit: either every
    statement in the group is applied, in order, or none is.
    """

    def prepare(self, sql: str) -> PreparedStatement:
        """
        Prepare a SQL statement using `:name` parameter placeholders.

        Args:
            sql: The statement text

        Returns:
            An unbound prepared statement
        """
        ...

    def batch(self, statements: Sequence[PreparedStatement]) -> List[int]:
        """
        Execute statements atomically, in order.

        Args:
            statements: Bound statements to execute

        Returns:
            Rows affected by each statement

        Raises:
            StorageFailure: If any statement fails (nothing from the group is applied)
        """
        ...
