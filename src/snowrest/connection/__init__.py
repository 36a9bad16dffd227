"""Connection module exports."""

from .base import BaseConnector
from .connection import SnowflakeConnector

__all__ = [
    "BaseConnector",
    "SnowflakeConnector",
]
