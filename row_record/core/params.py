"""SQL placeholder handling.

Statements are always assembled with positional ``?`` markers. This module
locates those markers (ignoring string literals) and converts them to the
paramstyle a driver expects.
"""

from __future__ import annotations

import re
from functools import lru_cache

# Matches single-quoted string literals (with '' and backslash escapes handled)
_STRING_LITERAL_PATTERN = re.compile(r"'(?:[^'\\]|\\.|'')*'")


def split_placeholders(sql: str) -> list[str]:
    """Split *sql* around its ``?`` markers.

    Markers inside single-quoted literals are kept as text. The result has
    exactly one more element than there are markers, so
    ``"?".join(split_placeholders(sql)) == sql``.
    """
    segments: list[str] = [""]
    last_end = 0

    for match in _STRING_LITERAL_PATTERN.finditer(sql):
        start, end = match.span()
        _split_code(sql[last_end:start], segments)
        # Keep string literal as-is
        segments[-1] += match.group()
        last_end = end

    _split_code(sql[last_end:], segments)
    return segments


def _split_code(code: str, segments: list[str]) -> None:
    parts = code.split("?")
    segments[-1] += parts[0]
    segments.extend(parts[1:])


def count_placeholders(sql: str) -> int:
    """Number of ``?`` markers outside string literals."""
    return len(split_placeholders(sql)) - 1


def normalize_params(sql: str, paramstyle: str) -> str:
    """Convert ``?`` markers to the target param style.

    Args:
        sql: SQL string with ``?`` markers.
        paramstyle: DB-API style - 'qmark' (no conversion), 'format' (``%s``)
            or 'numeric' (``:1``, ``:2`` ...).

    Returns:
        SQL with markers converted to the target style.
    """
    if paramstyle == "qmark":
        return sql
    return _convert(sql, paramstyle)


@lru_cache(maxsize=256)
def _convert(sql: str, paramstyle: str) -> str:
    segments = split_placeholders(sql)
    if len(segments) == 1:
        # Adapters send no parameters for marker-free SQL, so nothing to escape
        return sql
    if paramstyle == "format":
        # Literal percent signs must survive the driver's own formatting pass
        segments = [segment.replace("%", "%%") for segment in segments]
        return "%s".join(segments)
    if paramstyle == "numeric":
        parts = [segments[0]]
        for index, segment in enumerate(segments[1:], start=1):
            parts.append(f":{index}")
            parts.append(segment)
        return "".join(parts)
    raise ValueError(f"Unsupported paramstyle: {paramstyle}")
