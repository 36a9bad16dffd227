"""Context-bound session for snowrest operations"""

from contextlib import contextmanager
from typing import Any, Iterator, Optional, Sequence

import pandas as pd

from snowrest.context import SnowflakeContext
from snowrest.primitives import AsyncStatement, StatementResult, execution
from snowrest.primitives.result_set import Row


class Session:
    """Context-bound wrapper providing driver-style access to snowrest operations.

    Mirrors the usual database-connection surface (select/statement/
    affecting_statement/insert/update/delete) on top of the SQL API. The API is
    stateless, so transactions are tracked by nesting level here: only the
    outermost begin/commit/rollback is sent to Snowflake, and savepoints are
    not supported.

    Example:
        >>> with Session(profile="dev") as session:
        ...     with session.transaction():
        ...         session.insert("INSERT INTO events (id, kind) VALUES (?, ?)", [1, "click"])
        ...         session.update("UPDATE counters SET n = n + 1 WHERE kind = ?", ["click"])
    """

    supports_savepoints = False

    def __init__(
        self,
        profile: Optional[str] = None,
        context: Optional[SnowflakeContext] = None,
        **overrides: Any,
    ):
        """Initialize session with a profile name or existing context"""
        if profile is not None and context is not None:
            raise ValueError("Provide either 'profile' or 'context', not both")

        if context is not None:
            self._context = context
            self._owns_context = False
        else:
            self._context = SnowflakeContext(profile=profile, **overrides)
            self._owns_context = True

        self._transactions = 0

    @property
    def context(self) -> SnowflakeContext:
        """Access the underlying SnowflakeContext"""
        return self._context

    # Primitives

    def execute_sql(self, sql: str, bindings: Optional[Sequence[Any]] = None) -> StatementResult:
        """Execute SQL and return a StatementResult"""
        return execution.execute_sql(sql, self._context, bindings)

    def query(self, sql: str, bindings: Optional[Sequence[Any]] = None) -> pd.DataFrame:
        """Execute SQL and return results as a DataFrame"""
        return execution.fetch_df(sql, self._context, bindings)

    def execute_sql_async(self, sql: str, bindings: Optional[Sequence[Any]] = None) -> AsyncStatement:
        """Submit SQL without waiting and return an AsyncStatement"""
        return execution.execute_sql_async(sql, self._context, bindings)

    def execute_block(self, sql: str) -> list[list[Row]]:
        """Execute a block of SQL statements and return the rows of each"""
        return execution.execute_block(sql, self._context)

    def cancel(self, statement_handle: str) -> bool:
        """Cancel a running statement by handle"""
        return self._context.executor.cancel_statement(statement_handle)

    # Driver-style statements

    def select(self, sql: str, bindings: Optional[Sequence[Any]] = None) -> list[Row]:
        """Run a select statement and return every row"""
        return self._context.execute(sql, bindings).fetch_all()

    def cursor(self, sql: str, bindings: Optional[Sequence[Any]] = None) -> Iterator[Row]:
        """Run a select statement and yield rows as partitions are fetched"""
        yield from self._context.execute(sql, bindings).result_set

    def statement(self, sql: str, bindings: Optional[Sequence[Any]] = None) -> bool:
        """Execute a statement; True once it has completed"""
        self._context.execute(sql, bindings)
        return True

    def affecting_statement(self, sql: str, bindings: Optional[Sequence[Any]] = None) -> int:
        """Execute a statement and return the number of rows it affected"""
        return self._context.execute(sql, bindings).rows_affected

    def unprepared(self, sql: str) -> bool:
        """Execute SQL as-is, without placeholder substitution"""
        self._context.execute(sql)
        return True

    def insert(self, sql: str, bindings: Optional[Sequence[Any]] = None) -> bool:
        return self.statement(sql, bindings)

    def update(self, sql: str, bindings: Optional[Sequence[Any]] = None) -> int:
        return self.affecting_statement(sql, bindings)

    def delete(self, sql: str, bindings: Optional[Sequence[Any]] = None) -> int:
        return self.affecting_statement(sql, bindings)

    # Transactions

    @property
    def transaction_level(self) -> int:
        return self._transactions

    def begin_transaction(self) -> None:
        """Start a transaction; nested calls only increase the level"""
        if self._transactions == 0:
            self.unprepared("BEGIN TRANSACTION")
        self._transactions += 1

    def commit(self) -> None:
        """Commit when leaving the outermost level"""
        if self._transactions == 1:
            self.unprepared("COMMIT")
        self._transactions = max(0, self._transactions - 1)

    def rollback(self, to_level: Optional[int] = None) -> None:
        """Roll back to a lower level; only level 0 reaches Snowflake (no savepoints)"""
        to_level = self._transactions - 1 if to_level is None else to_level
        if to_level < 0 or to_level >= self._transactions:
            return
        if to_level == 0:
            self.unprepared("ROLLBACK")
        self._transactions = to_level

    @contextmanager
    def transaction(self) -> Iterator["Session"]:
        """Commit on success, roll back on error"""
        self.begin_transaction()
        try:
            yield self
        except BaseException:
            self.rollback()
            raise
        self.commit()

    # Lifecycle

    def close(self) -> None:
        """Close the session and underlying context if owned"""
        if self._owns_context:
            self._context.close()

    def __enter__(self) -> "Session":
        """Context manager entry"""
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        """Context manager exit"""
        self.close()

    def __repr__(self) -> str:
        return f"Session({self._context!r}, transaction_level={self._transactions})"


def create_session(
    profile: Optional[str] = None,
    context: Optional[SnowflakeContext] = None,
    **overrides: Any,
) -> Session:
    """Create a context-bound session for snowrest operations"""
    return Session(profile=profile, context=context, **overrides)
