"""Placeholder substitution and statement splitting for raw SQL text"""

import warnings
from typing import Any, Iterator, Optional, Sequence

from .codec import ValueCodec


def iter_segments(sql: str) -> Iterator[tuple[str, bool]]:
    """Split SQL into (text, is_code) chunks.

    Quoted literals, $$-delimited literals, double-quoted identifiers and
    comments come out as non-code chunks so callers can leave their
    contents alone. Inside $$...$$ nothing is escaped: the next $$ ends it.
    """
    length = len(sql)
    start = 0
    i = 0
    while i < length:
        char = sql[i]
        if sql.startswith("$$", i):
            end = sql.find("$$", i + 2)
            end = length if end == -1 else end + 2
        elif char in ("'", '"'):
            end = i + 1
            while end < length:
                if char == "'" and sql[end] == "\\":
                    end += 2
                    continue
                if sql[end] == char:
                    # doubled quote is an escaped quote
                    if end + 1 < length and sql[end + 1] == char:
                        end += 2
                        continue
                    break
                end += 1
            end = min(end + 1, length)
        elif sql.startswith("--", i) or sql.startswith("//", i):
            end = sql.find("\n", i)
            end = length if end == -1 else end
        elif sql.startswith("/*", i):
            end = sql.find("*/", i + 2)
            end = length if end == -1 else end + 2
        else:
            i += 1
            continue

        if i > start:
            yield sql[start:i], True
        yield sql[i:end], False
        start = i = end

    if start < length:
        yield sql[start:], True


def interpolate_bindings(
    sql: str,
    bindings: Optional[Sequence[Any]],
    codec: Optional[ValueCodec] = None,
) -> str:
    """Replace each ? placeholder with the SQL literal of the next binding.

    Placeholders inside literals, quoted identifiers and comments are not
    touched. Placeholders without a binding become NULL.

    Example:
        >>> interpolate_bindings("SELECT * FROM t WHERE a = ? AND b = '?'", ["x"])
        "SELECT * FROM t WHERE a = 'x' AND b = '?'"
    """
    if not bindings:
        return sql

    codec = codec or ValueCodec()
    out: list[str] = []
    index = 0
    for text, is_code in iter_segments(sql):
        if not is_code:
            out.append(text)
            continue
        parts = text.split("?")
        out.append(parts[0])
        for part in parts[1:]:
            value = bindings[index] if index < len(bindings) else None
            out.append(codec.to_sql_literal(value))
            out.append(part)
            index += 1

    if index != len(bindings):
        warnings.warn(
            f"Statement has {index} placeholder(s) but {len(bindings)} binding(s) were given",
            UserWarning,
            stacklevel=3,
        )
    return "".join(out)


def split_statements(sql: str) -> list[str]:
    """Split a block of SQL on top-level semicolons, dropping empty statements"""
    statements: list[str] = []
    current: list[str] = []
    for text, is_code in iter_segments(sql):
        if not is_code:
            current.append(text)
            continue
        pieces = text.split(";")
        current.append(pieces[0])
        for piece in pieces[1:]:
            statements.append("".join(current))
            current = [piece]
    statements.append("".join(current))
    return [s.strip() for s in statements if _has_code(s)]


def _has_code(statement: str) -> bool:
    return any(is_code and text.strip() for text, is_code in iter_segments(statement))
