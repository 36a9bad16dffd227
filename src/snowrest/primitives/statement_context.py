"""Execution context sent with every statement"""

from dataclasses import dataclass, field, replace
from typing import Any, Mapping, Optional


@dataclass(frozen=True)
class StatementContext:
    """Database, schema, warehouse, role and session parameters for a statement"""

    database: Optional[str] = None
    schema: Optional[str] = None
    warehouse: Optional[str] = None
    role: Optional[str] = None
    session_parameters: Mapping[str, Any] = field(default_factory=dict)

    def merged_with(self, overrides: Optional[Mapping[str, Any]] = None) -> "StatementContext":
        """Overlay non-empty values from a mapping or another StatementContext"""
        if overrides is None:
            return self
        if isinstance(overrides, StatementContext):
            overrides = overrides.as_dict()

        changes: dict[str, Any] = {
            key: overrides[key]
            for key in ("database", "schema", "warehouse", "role")
            if overrides.get(key)
        }
        if overrides.get("session_parameters"):
            changes["session_parameters"] = {
                **self.session_parameters,
                **overrides["session_parameters"],
            }
        return replace(self, **changes) if changes else self

    def as_dict(self) -> dict[str, Any]:
        return {
            "database": self.database,
            "schema": self.schema,
            "warehouse": self.warehouse,
            "role": self.role,
            "session_parameters": dict(self.session_parameters),
        }
