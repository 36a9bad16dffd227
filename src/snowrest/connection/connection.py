"""SQL API connector built from a TOML profile."""

from typing import Any, Literal, Optional

from snowrest.primitives.executor import DEFAULT_MAX_POLL_ATTEMPTS, DEFAULT_POLLING_INTERVAL_MS, StatementExecutor

from .base import BaseConnector


class SnowflakeConnector(BaseConnector):
    """
    SQL API executor manager with TOML profile support.

    This class loads connection profiles from connections.toml, builds the
    token provider and manages the StatementExecutor (and its HTTP session).
    It implements the context manager protocol for automatic resource cleanup.

    Args:
        profile: Name of the profile to load from connections.toml
            (None reads SNOWFLAKE_* environment variables)
        **kwargs: Additional connection parameters to override profile settings

    Example:
        >>> with SnowflakeConnector(profile="dev") as executor:
        ...     result = executor.execute("SELECT CURRENT_VERSION()")
        ...     print(result.fetch_one())

        >>> # Override warehouse from profile
        >>> with SnowflakeConnector(profile="dev", warehouse="BIG_WH") as executor:
        ...     executor.execute("SELECT * FROM huge_table")
    """

    def __init__(self, profile: Optional[str] = None, **kwargs: Any) -> None:
        super().__init__(profile, **kwargs)
        self._executor: Optional[StatementExecutor] = None

    def connect(self) -> StatementExecutor:
        """Create the StatementExecutor if not already created"""
        if self._executor is None:
            cfg = self._cfg
            self._executor = StatementExecutor(
                account=cfg.get("account", ""),
                token_provider=self.token_provider,
                database=cfg.get("database"),
                schema=cfg.get("schema") or "PUBLIC",
                warehouse=cfg.get("warehouse"),
                role=cfg.get("role"),
                session_parameters=cfg.get("session_parameters"),
                timeout=int(cfg.get("timeout", 0)),
                polling_interval=int(cfg.get("polling_interval", DEFAULT_POLLING_INTERVAL_MS)),
                max_poll_attempts=int(cfg.get("max_poll_attempts", DEFAULT_MAX_POLL_ATTEMPTS)),
                base_url=self._base_url(),
                http=cfg.get("http"),
            )
        return self._executor

    def _base_url(self) -> Optional[str]:
        if self._cfg.get("base_url"):
            return self._cfg["base_url"]
        host = self._cfg.get("host")
        if host:
            return host if "://" in host else f"https://{host}"
        return None

    def close(self) -> None:
        """Close the executor, releasing its HTTP session"""
        if self._executor:
            self._executor.close()
            self._executor = None

    def __enter__(self) -> StatementExecutor:
        """Context manager entry: create the executor"""
        return self.connect()

    def __exit__(
        self,
        exc_type: Any,
        exc_val: Any,
        exc_tb: Any
    ) -> Literal[False]:
        """
        Context manager exit: close the executor.

        Always returns False to propagate any exceptions.
        """
        self.close()
        return False

    def __repr__(self) -> str:
        status = "connected" if self._executor else "not connected"
        return f"SnowflakeConnector(profile='{self._profile}', {status})"
