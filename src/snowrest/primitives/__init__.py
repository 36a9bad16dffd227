"""Primitive operations over the Snowflake SQL API"""

from snowrest.primitives.codec import TypeFamily, ValueCodec
from snowrest.primitives.columns import ColumnMeta
from snowrest.primitives.statement_context import StatementContext
from snowrest.primitives.result_set import ResultSet
from snowrest.primitives.result import StatementResult
from snowrest.primitives.async_query import AsyncStatement
from snowrest.primitives.executor import StatementExecutor
from snowrest.primitives.sqltext import interpolate_bindings, split_statements

from snowrest.primitives.execution import (
    execute_sql,
    execute_sql_async,
    fetch_one,
    fetch_all,
    fetch_df,
    execute_block,
)

from snowrest.primitives.streaming import (
    fetch_batches,
)

__all__ = [
    # Execution engine
    "StatementExecutor",
    "StatementContext",
    "StatementResult",
    "AsyncStatement",
    "ResultSet",
    "ColumnMeta",
    "ValueCodec",
    "TypeFamily",
    "interpolate_bindings",
    "split_statements",
    # Execution
    "execute_sql",
    "execute_sql_async",
    "fetch_one",
    "fetch_all",
    "fetch_df",
    "execute_block",
    # Streaming
    "fetch_batches",
]
