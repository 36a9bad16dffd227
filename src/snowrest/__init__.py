"""
snowrest - Snowflake SQL API client

Code is organized in layers
- auth/ and config/ supply credentials and connection profiles
- primitives/ talks to the SQL API: execution, polling, partitions, value decoding
- connection/, context.py and session.py wrap these for everyday use
"""

__version__ = "0.1.0"

# Layer 1: Configuration, credentials & connection
from snowrest.config import load_profile, list_profiles, load_profile_from_env
from snowrest.auth import KeyPairTokenProvider, OAuthTokenProvider, TokenProvider, create_token_provider
from snowrest.errors import (
    AuthenticationError,
    QueryError,
    SnowflakeError,
    StatementCancelledError,
    StatementError,
    StatementTimeoutError,
)
from snowrest.connection import SnowflakeConnector
from snowrest.context import SnowflakeContext

# Layer 2: Primitives
from snowrest.primitives import (
    StatementExecutor,
    StatementResult,
    AsyncStatement,
    ResultSet,
    ValueCodec,
    execute_sql,
    execute_sql_async,
    execute_block,
    fetch_one,
    fetch_all,
    fetch_df,
    fetch_batches,
)

# Layer 3: Session
from snowrest.session import Session, create_session

__all__ = [
    # Layer 1: Configuration, credentials & connection
    "load_profile",
    "list_profiles",
    "load_profile_from_env",
    "TokenProvider",
    "KeyPairTokenProvider",
    "OAuthTokenProvider",
    "create_token_provider",
    "SnowflakeConnector",
    "SnowflakeContext",
    # Errors
    "SnowflakeError",
    "AuthenticationError",
    "QueryError",
    "StatementError",
    "StatementTimeoutError",
    "StatementCancelledError",
    # Layer 2: Primitives
    "StatementExecutor",
    "StatementResult",
    "AsyncStatement",
    "ResultSet",
    "ValueCodec",
    "execute_sql",
    "execute_sql_async",
    "execute_block",
    "fetch_one",
    "fetch_all",
    "fetch_df",
    "fetch_batches",
    # Layer 3: Session
    "Session",
    "create_session",
]
