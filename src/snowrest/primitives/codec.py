"""Conversion between SQL API wire values and Python values.

The SQL API returns every scalar as a JSON string (or null) and offers no
parameter binding. ``ValueCodec`` covers both directions:

- ``decode`` turns a wire string into a typed Python value using the declared
  column type from ``resultSetMetaData.rowType``
- ``to_sql_literal`` turns a Python value into inline SQL text that is safe to
  splice into a statement

Type dispatch goes through ``TypeFamily`` and a family -> decoder table. New
Snowflake types are supported by adding an entry to ``_TYPE_FAMILIES`` and, if
needed, a decoder to ``_DECODERS``.

Example:
    >>> codec = ValueCodec()
    >>> codec.decode("18262", "DATE")
    datetime.date(2020, 1, 1)
    >>> codec.to_sql_literal("O'Brien")
    "'O''Brien'"
"""

import json
import math
from collections.abc import Mapping
from datetime import date, datetime, time, timedelta, timezone, tzinfo
from decimal import Decimal
from enum import Enum
from typing import Any, Callable, Optional, Sequence, Union

from .columns import ColumnMeta

INT64_MIN = -(2**63)
INT64_MAX = 2**63 - 1

_EPOCH_DATE = date(1970, 1, 1)
_EPOCH_UTC = datetime(1970, 1, 1, tzinfo=timezone.utc)

ColumnLike = Union[ColumnMeta, Mapping[str, Any], None]


class TypeFamily(Enum):
    """Groups of Snowflake type names that decode the same way"""

    INTEGER = "integer"
    FIXED = "fixed"
    FLOAT = "float"
    BOOLEAN = "boolean"
    TEXT = "text"
    DATE = "date"
    TIME = "time"
    TIMESTAMP_NTZ = "timestamp_ntz"
    TIMESTAMP_LTZ = "timestamp_ltz"
    TIMESTAMP_TZ = "timestamp_tz"
    BINARY = "binary"
    SEMI_STRUCTURED = "semi_structured"
    GEOSPATIAL = "geospatial"


_TYPE_FAMILIES: dict[str, TypeFamily] = {
    "INTEGER": TypeFamily.INTEGER,
    "INT": TypeFamily.INTEGER,
    "BIGINT": TypeFamily.INTEGER,
    "SMALLINT": TypeFamily.INTEGER,
    "TINYINT": TypeFamily.INTEGER,
    "BYTEINT": TypeFamily.INTEGER,
    "FIXED": TypeFamily.FIXED,
    "NUMBER": TypeFamily.FIXED,
    "DECIMAL": TypeFamily.FIXED,
    "NUMERIC": TypeFamily.FIXED,
    "FLOAT": TypeFamily.FLOAT,
    "FLOAT4": TypeFamily.FLOAT,
    "FLOAT8": TypeFamily.FLOAT,
    "DOUBLE": TypeFamily.FLOAT,
    "DOUBLE PRECISION": TypeFamily.FLOAT,
    "REAL": TypeFamily.FLOAT,
    "BOOLEAN": TypeFamily.BOOLEAN,
    "TEXT": TypeFamily.TEXT,
    "VARCHAR": TypeFamily.TEXT,
    "STRING": TypeFamily.TEXT,
    "CHAR": TypeFamily.TEXT,
    "CHARACTER": TypeFamily.TEXT,
    "DATE": TypeFamily.DATE,
    "TIME": TypeFamily.TIME,
    "TIMESTAMP": TypeFamily.TIMESTAMP_NTZ,
    "TIMESTAMP_NTZ": TypeFamily.TIMESTAMP_NTZ,
    "DATETIME": TypeFamily.TIMESTAMP_NTZ,
    "TIMESTAMP_LTZ": TypeFamily.TIMESTAMP_LTZ,
    "TIMESTAMP_TZ": TypeFamily.TIMESTAMP_TZ,
    "BINARY": TypeFamily.BINARY,
    "VARBINARY": TypeFamily.BINARY,
    "VARIANT": TypeFamily.SEMI_STRUCTURED,
    "OBJECT": TypeFamily.SEMI_STRUCTURED,
    "ARRAY": TypeFamily.SEMI_STRUCTURED,
    "GEOGRAPHY": TypeFamily.GEOSPATIAL,
    "GEOMETRY": TypeFamily.GEOSPATIAL,
}


def type_family(type_name: str) -> Optional[TypeFamily]:
    """Look up the decode family for a Snowflake type name (case-insensitive)"""
    return _TYPE_FAMILIES.get(type_name.strip().upper())


def _column_attr(column: ColumnLike, name: str) -> Any:
    if column is None:
        return None
    if isinstance(column, ColumnMeta):
        return getattr(column, name, None)
    return column.get(name)


def _split_epoch(value: str) -> tuple[int, int]:
    """Split "seconds[.fraction]" into whole seconds and microseconds.

    The fraction is right-padded or cut to 9 digits (nanoseconds) and the
    leading 6 digits are kept. Digits past the microsecond are dropped, never
    rounded. A leading minus sign applies to the fraction as well.
    """
    text = value.strip()
    negative = text.startswith("-")
    whole, _, fraction = text.lstrip("+-").partition(".")
    seconds = int(whole or "0")
    nanos = fraction.ljust(9, "0")[:9]
    micros = int(nanos[:6])
    if negative:
        return -seconds, -micros
    return seconds, micros


def _to_integer(value: str) -> Union[int, str]:
    try:
        number = int(value)
    except ValueError:
        return value
    if number < INT64_MIN or number > INT64_MAX:
        return value
    return number


def _decode_integer(codec: "ValueCodec", value: str, column: ColumnLike) -> Union[int, str]:
    return _to_integer(value)


def _decode_fixed(codec: "ValueCodec", value: str, column: ColumnLike) -> Union[int, float, str]:
    scale = _column_attr(column, "scale") or 0
    if int(scale) == 0:
        return _to_integer(value)
    return float(value)


def _decode_float(codec: "ValueCodec", value: str, column: ColumnLike) -> float:
    return float(value)


def _decode_boolean(codec: "ValueCodec", value: str, column: ColumnLike) -> bool:
    return value.lower() == "true" or value == "1"


def _decode_text(codec: "ValueCodec", value: str, column: ColumnLike) -> str:
    return str(value)


def _decode_date(codec: "ValueCodec", value: str, column: ColumnLike) -> date:
    return _EPOCH_DATE + timedelta(days=int(value))


def _decode_time(codec: "ValueCodec", value: str, column: ColumnLike) -> str:
    text = value.strip()
    whole, _, fraction = text.partition(".")
    total = int(whole or "0")
    hours, remainder = divmod(total, 3600)
    minutes, seconds = divmod(remainder, 60)
    nanos = fraction.ljust(9, "0")[:9]
    return f"{hours:02d}:{minutes:02d}:{seconds:02d}.{nanos}"


def _decode_timestamp_ntz(codec: "ValueCodec", value: str, column: ColumnLike) -> datetime:
    seconds, micros = _split_epoch(value)
    return _EPOCH_UTC + timedelta(seconds=seconds, microseconds=micros)


def _decode_timestamp_ltz(codec: "ValueCodec", value: str, column: ColumnLike) -> datetime:
    return _decode_timestamp_ntz(codec, value, column).astimezone(codec.local_timezone)


def _decode_timestamp_tz(codec: "ValueCodec", value: str, column: ColumnLike) -> datetime:
    epoch, _, offset = value.strip().partition(" ")
    instant = _decode_timestamp_ntz(codec, epoch, column)
    if not offset:
        return instant
    return instant.astimezone(timezone(timedelta(minutes=int(offset))))


def _decode_binary(codec: "ValueCodec", value: str, column: ColumnLike) -> Union[bytes, str]:
    try:
        return bytes.fromhex(value)
    except ValueError:
        return value


def _decode_json(codec: "ValueCodec", value: str, column: ColumnLike) -> Any:
    try:
        return json.loads(value)
    except (ValueError, TypeError):
        return value


Decoder = Callable[["ValueCodec", str, ColumnLike], Any]

# Geospatial values are GeoJSON when they parse, otherwise WKT text passed through
_DECODERS: dict[TypeFamily, Decoder] = {
    TypeFamily.INTEGER: _decode_integer,
    TypeFamily.FIXED: _decode_fixed,
    TypeFamily.FLOAT: _decode_float,
    TypeFamily.BOOLEAN: _decode_boolean,
    TypeFamily.TEXT: _decode_text,
    TypeFamily.DATE: _decode_date,
    TypeFamily.TIME: _decode_time,
    TypeFamily.TIMESTAMP_NTZ: _decode_timestamp_ntz,
    TypeFamily.TIMESTAMP_LTZ: _decode_timestamp_ltz,
    TypeFamily.TIMESTAMP_TZ: _decode_timestamp_tz,
    TypeFamily.BINARY: _decode_binary,
    TypeFamily.SEMI_STRUCTURED: _decode_json,
    TypeFamily.GEOSPATIAL: _decode_json,
}


def _quote(text: str) -> str:
    """Single-quote text for a Snowflake string literal.

    Backslashes are doubled as well as quotes: Snowflake treats backslash as
    an escape inside single-quoted literals, so a bound value ending in a
    backslash would otherwise escape the closing quote.
    """
    return "'" + text.replace("\\", "\\\\").replace("'", "''") + "'"


class ValueCodec:
    """Decode SQL API wire values by column type and encode Python values as SQL literals"""

    def __init__(self, local_timezone: Optional[tzinfo] = None):
        """Initialize with the zone used for TIMESTAMP_LTZ values (system zone if None)"""
        self._local_timezone = local_timezone

    @property
    def local_timezone(self) -> Optional[tzinfo]:
        """Zone for TIMESTAMP_LTZ values; None means the system local zone"""
        return self._local_timezone

    def decode(self, value: Any, type_name: str, column: ColumnLike = None) -> Any:
        """Decode one wire value.

        Nulls short-circuit before dispatch. Unknown type names, non-string
        wire values and values that do not parse as their declared type are
        returned unchanged.
        """
        if value is None:
            return None
        family = type_family(type_name or "")
        if family is None or not isinstance(value, str):
            return value
        try:
            return _DECODERS[family](self, value, column)
        except (ValueError, OverflowError):
            return value

    def decode_row(self, row: Sequence[Any], columns: Sequence[ColumnMeta]) -> dict[str, Any]:
        """Map a positional wire row to {column name: decoded value}"""
        decoded: dict[str, Any] = {}
        for index, column in enumerate(columns):
            raw = row[index] if index < len(row) else None
            decoded[column.name] = self.decode(raw, column.type, column)
        return decoded

    def to_sql_literal(self, value: Any) -> str:
        """Encode a Python value as inline SQL text"""
        if value is None:
            return "NULL"
        # bool before int: bool is an int subclass
        if isinstance(value, bool):
            return "TRUE" if value else "FALSE"
        if isinstance(value, int):
            return str(value)
        if isinstance(value, float):
            if not math.isfinite(value):
                return _quote(str(value))
            return repr(value)
        if isinstance(value, Decimal):
            if not value.is_finite():
                return _quote(str(value))
            return str(value)
        if isinstance(value, datetime):
            return _quote(value.strftime("%Y-%m-%d %H:%M:%S.%f"))
        if isinstance(value, date):
            return _quote(value.strftime("%Y-%m-%d 00:00:00.000000"))
        if isinstance(value, time):
            return _quote(value.strftime("%H:%M:%S.%f"))
        if isinstance(value, (bytes, bytearray, memoryview)):
            return f"TO_BINARY('{bytes(value).hex()}', 'HEX')"
        if isinstance(value, (Mapping, list, tuple)):
            return f"PARSE_JSON({_quote(json.dumps(value, default=str))})"
        return _quote(str(value))
