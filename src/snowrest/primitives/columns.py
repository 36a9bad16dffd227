"""Column metadata from resultSetMetaData.rowType"""

from dataclasses import dataclass, field
from typing import Any, Optional


@dataclass(frozen=True)
class ColumnMeta:
    """A single result column as described by the SQL API"""

    name: str
    type: str
    scale: Optional[int] = None
    precision: Optional[int] = None
    length: Optional[int] = None
    byte_length: Optional[int] = None
    nullable: bool = True
    raw: dict[str, Any] = field(default_factory=dict, compare=False, repr=False)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ColumnMeta":
        """Build from one rowType entry"""
        return cls(
            name=str(data.get("name", "")),
            type=str(data.get("type", "")),
            scale=data.get("scale"),
            precision=data.get("precision"),
            length=data.get("length"),
            byte_length=data.get("byteLength"),
            nullable=bool(data.get("nullable", True)),
            raw=dict(data),
        )
