"""SQL execution primitives.

Plain functions for executing SQL statements and fetching results.
These are thin wrappers around StatementExecutor calls made through a
SnowflakeContext.
"""

from typing import Any, Optional, Sequence, Union

import pandas as pd

from snowrest.context import SnowflakeContext
from snowrest.primitives.async_query import AsyncStatement
from snowrest.primitives.result import StatementResult
from snowrest.primitives.result_set import Row
from snowrest.primitives.sqltext import split_statements


def _resolve(context: Union[str, SnowflakeContext], overrides: dict[str, Any]) -> SnowflakeContext:
    # Convert string profile to context
    if isinstance(context, str):
        return SnowflakeContext(profile=context, **overrides)
    return context


def execute_sql(
    sql: str,
    context: Union[str, SnowflakeContext],
    bindings: Optional[Sequence[Any]] = None,
    **overrides: Any
) -> StatementResult:
    """Execute SQL statement and return result with metadata.

    Use for: DDL (CREATE/DROP/ALTER), DML (INSERT/UPDATE/DELETE)

    Args:
        sql: SQL statement to execute, with optional ? placeholders
        context: SnowflakeContext object or profile name
        bindings: Values for the ? placeholders
        **overrides: Runtime overrides for connection creation (only used if context is a string)

    Returns:
        StatementResult with access to rowcount, statement_handle and metadata

    Example:
        >>> result = execute_sql("DELETE FROM temp_table WHERE processed = ?", context="main", bindings=[True])
        >>> print(f"Deleted {result.rows_affected} rows")
        >>> print(f"Statement handle: {result.statement_handle}")

        >>> # Reuse context (only authenticates once)
        >>> ctx = SnowflakeContext(profile="main")
        >>> execute_sql("CREATE TABLE test1 (id INT)", context=ctx)
        >>> execute_sql("CREATE TABLE test2 (id INT)", context=ctx)

    Raises:
        snowrest.errors.SnowflakeError: Any authentication, query or transport error
    """
    return _resolve(context, overrides).execute(sql, bindings)


def fetch_one(
    sql: str,
    context: Union[str, SnowflakeContext],
    bindings: Optional[Sequence[Any]] = None,
    **overrides: Any
) -> Optional[Row]:
    """Execute query and return the first row.

    Returns:
        First row as a dict keyed by column name, or None if no results

    Example:
        >>> row = fetch_one("SELECT COUNT(*) AS N FROM large_table", context="main")
        >>> count = row["N"]
    """
    return _resolve(context, overrides).execute(sql, bindings).fetch_one()


def fetch_all(
    sql: str,
    context: Union[str, SnowflakeContext],
    bindings: Optional[Sequence[Any]] = None,
    **overrides: Any
) -> list[Row]:
    """Execute query and return all rows as a list of dicts.

    Example:
        >>> rows = fetch_all("SELECT id, name FROM users WHERE active = TRUE", context="main")
        >>> for row in rows:
        ...     print(f"{row['ID']}: {row['NAME']}")

    Warning:
        Loads all partitions into memory. Use fetch_batches() for large result sets.
    """
    return _resolve(context, overrides).execute(sql, bindings).fetch_all()


def fetch_df(
    sql: str,
    context: Union[str, SnowflakeContext],
    bindings: Optional[Sequence[Any]] = None,
    lowercase_columns: bool = True,
    **overrides: Any
) -> pd.DataFrame:
    """Execute query and return pandas DataFrame.

    Empty results keep their column structure.

    Args:
        sql: SQL SELECT query
        context: SnowflakeContext object or profile name
        bindings: Values for the ? placeholders
        lowercase_columns: Convert column names to lowercase (default: True)
        **overrides: Runtime overrides (only used if context is a string)

    Example:
        >>> df = fetch_df("SELECT * FROM sales WHERE date > ?", context="main", bindings=["2025-01-01"])
        >>> print(df.shape)
        (1500, 8)
    """
    result = _resolve(context, overrides).execute(sql, bindings)
    return result.to_df(lowercase_columns=lowercase_columns)


def execute_block(
    sql: str,
    context: Union[str, SnowflakeContext],
    **overrides: Any
) -> list[list[Row]]:
    """Execute a block of SQL statements and return all results.

    The block is split on semicolons outside literals and comments; each
    statement is sent on its own, in order, stopping at the first failure.

    Returns:
        List of results, one per statement. Each result is a list of rows.

    Example:
        >>> sql_block = '''
        ... CREATE TEMP TABLE temp_data (id INT);
        ... INSERT INTO temp_data VALUES (1), (2), (3);
        ... SELECT * FROM temp_data;
        ... '''
        >>> results = execute_block(sql_block, context="main")
        >>> print(results[-1])
        [{'ID': 1}, {'ID': 2}, {'ID': 3}]
    """
    ctx = _resolve(context, overrides)
    return [ctx.execute(statement).fetch_all() for statement in split_statements(sql)]


def execute_sql_async(
    sql: str,
    context: Union[str, SnowflakeContext],
    bindings: Optional[Sequence[Any]] = None,
    **overrides: Any
) -> AsyncStatement:
    """Submit a SQL statement and return a handle without waiting for it.

    Example:
        >>> job = execute_sql_async("SELECT * FROM large_table", context="main")
        >>> print(f"Statement submitted: {job.statement_handle}")

        >>> while not job.is_done():
        ...     time.sleep(5)
        >>> result = job.get_result()

    Raises:
        snowrest.errors.StatementError: If the submission returns no statement handle
    """
    ctx = _resolve(context, overrides)
    return ctx.executor.submit(sql, bindings, context=ctx.statement_context)
