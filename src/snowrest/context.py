"""Snowflake execution context management"""

from typing import TYPE_CHECKING, Any, Optional, Sequence

from snowrest.primitives.statement_context import StatementContext

if TYPE_CHECKING:
    from snowrest.connection import SnowflakeConnector
    from snowrest.primitives.executor import StatementExecutor
    from snowrest.primitives.result import StatementResult


class SnowflakeContext:
    """Manages the StatementExecutor lifecycle with lazy initialization.

    Also carries the database/schema/warehouse/role the caller switched to
    with the use_* methods. These are sent with every statement run through
    this context, on top of the executor's defaults.
    """

    def __init__(
        self,
        profile: Optional[str] = None,
        executor: Optional["StatementExecutor"] = None,
        **overrides: Any,
    ):
        """Initialize Snowflake context with profile or executor.

        With neither, the profile is read from SNOWFLAKE_* environment variables.
        """
        if profile is not None and executor is not None:
            raise ValueError(
                "SnowflakeContext: provide either 'profile' or 'executor', not both"
            )

        self._profile = profile
        self._executor = executor
        self._overrides = overrides
        self._connector: Optional["SnowflakeConnector"] = None
        self._owns_connector = False

        self._database: Optional[str] = None
        self._schema: Optional[str] = None
        self._warehouse: Optional[str] = None
        self._role: Optional[str] = None

    @property
    def executor(self) -> "StatementExecutor":
        """Get the StatementExecutor, creating it if needed"""
        if self._executor is None:
            from snowrest.connection import SnowflakeConnector

            self._connector = SnowflakeConnector(
                profile=self._profile, **self._overrides
            )
            self._executor = self._connector.connect()
            self._owns_connector = True

        return self._executor

    @property
    def statement_context(self) -> StatementContext:
        """Context switched to with use_*; unset values fall back to the executor's"""
        return StatementContext(
            database=self._database,
            schema=self._schema,
            warehouse=self._warehouse,
            role=self._role,
        )

    def use_database(self, database: str) -> "SnowflakeContext":
        self._database = database
        return self

    def use_schema(self, schema: str) -> "SnowflakeContext":
        self._schema = schema
        return self

    def use_warehouse(self, warehouse: str) -> "SnowflakeContext":
        self._warehouse = warehouse
        return self

    def use_role(self, role: str) -> "SnowflakeContext":
        self._role = role
        return self

    def execute(
        self,
        sql: str,
        bindings: Optional[Sequence[Any]] = None,
        **kwargs: Any,
    ) -> "StatementResult":
        """Execute a statement with this context's database/schema/warehouse/role"""
        return self.executor.execute(sql, bindings, context=self.statement_context, **kwargs)

    def close(self) -> None:
        """Close executor if owned by this context"""
        if self._owns_connector and self._connector is not None:
            self._connector.close()
            self._connector = None
            self._executor = None
            self._owns_connector = False

    def __enter__(self) -> "SnowflakeContext":
        """Context manager entry"""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        """Context manager exit"""
        self.close()

    def _scalar(self, sql: str) -> str:
        row = self.execute(sql).fetch_one()
        value = next(iter(row.values()), None) if row else None
        return str(value) if value else ""

    @property
    def current_database(self) -> str:
        """Get current database from session context"""
        return self._scalar("SELECT CURRENT_DATABASE()")

    @property
    def current_schema(self) -> str:
        """Get current schema from session context"""
        return self._scalar("SELECT CURRENT_SCHEMA()")

    @property
    def current_warehouse(self) -> str:
        """Get current warehouse from session context"""
        return self._scalar("SELECT CURRENT_WAREHOUSE()")

    @property
    def current_role(self) -> str:
        """Get current role from session context"""
        return self._scalar("SELECT CURRENT_ROLE()")

    @property
    def current_user(self) -> str:
        """Get current user from session context"""
        return self._scalar("SELECT CURRENT_USER()")

    @property
    def current_account(self) -> str:
        """Get current account identifier from session context"""
        return self._scalar("SELECT CURRENT_ACCOUNT()")

    @property
    def current_region(self) -> str:
        """Get current region from session context"""
        return self._scalar("SELECT CURRENT_REGION()")

    def __repr__(self) -> str:
        """String representation"""
        if self._executor is not None:
            return "SnowflakeContext(executor=<active>)"
        return f"SnowflakeContext(profile='{self._profile}')"
