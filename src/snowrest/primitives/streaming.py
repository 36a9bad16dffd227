"""Streaming primitives.

Functions for handling large result sets partition by partition.
"""

from typing import Any, Generator, Optional, Sequence, Union

import pandas as pd

from snowrest.context import SnowflakeContext


def fetch_batches(
    sql: str,
    context: Union[str, SnowflakeContext],
    bindings: Optional[Sequence[Any]] = None,
    lowercase_columns: bool = True,
    **overrides: Any
) -> Generator[pd.DataFrame, None, None]:
    """Execute query and yield one DataFrame per result partition.

    Only one partition is held in memory at a time; partition sizes are
    chosen by Snowflake.

    Args:
        sql: SQL SELECT query
        context: SnowflakeContext object or profile name
        bindings: Values for the ? placeholders
        lowercase_columns: Convert column names to lowercase (default: True)
        **overrides: Runtime overrides (only used if context is a string)

    Yields:
        pandas DataFrame batches

    Example:
        >>> for batch_df in fetch_batches("SELECT * FROM huge_table", context="main"):
        ...     process_batch(batch_df)
        ...     print(f"Processed {len(batch_df)} rows")
    """
    # Convert string profile to context object
    if isinstance(context, str):
        context = SnowflakeContext(profile=context, **overrides)

    result = context.execute(sql, bindings)
    yield from result.fetch_batches(lowercase_columns=lowercase_columns)
