"""Cell-level parsing for semicolon-delimited UCD data rows.

Errors are raised as ``FieldSyntaxError`` carrying a 0-based offset into the
cell; the line parser turns them into positioned ``ParseError`` values.
"""

from __future__ import annotations

import re

from ucd_cache.models import ABSENT, CodePoints, Field, Points, Range, Text

HEX_RE = re.compile(r"[0-9A-Fa-f]+")
NON_HEX_RE = re.compile(r"[^0-9A-Fa-f]")
TOKEN_RE = re.compile(r"\S+")
PREFIX_RE = re.compile(r"<(\w+)>")

# Later cells only count as code points in the UCD's own spelling: upper-case
# hex, 4 to 6 digits. Short values such as "0" or "L" stay text.
UCD_POINT = r"[0-9A-F]{4,6}"
CODE_POINT_LIST_RE = re.compile(rf"(?:<(\w+)>\s+)?{UCD_POINT}(?:\s+{UCD_POINT})*")
CODE_POINT_RANGE_RE = re.compile(rf"({UCD_POINT})\.\.({UCD_POINT})")


class FieldSyntaxError(Exception):
    """Malformed cell content at ``offset`` (0-based, relative to the cell)."""

    def __init__(self, offset: int, expected: str) -> None:
        self.offset = offset
        self.expected = expected
        super().__init__(f"offset {offset}: expected {expected}")


def _parse_hex(token: str, offset: int) -> int:
    """Parse one hex token, reporting the first bad character on failure."""

    if not token:
        raise FieldSyntaxError(offset, "hexadecimal code point")
    bad = NON_HEX_RE.search(token)
    if bad:
        raise FieldSyntaxError(offset + bad.start(), "hexadecimal code point")
    return int(token, 16)


def parse_code_points(cell: str) -> CodePoints:
    """Parse the leading code point cell of a data row.

    Accepted shapes are a single hex value, several space-separated hex values,
    an inclusive ``XXXX..YYYY`` range, and a ``<word>``-prefixed value list.

    Args:
        cell: Raw cell text, surrounding whitespace allowed.

    Returns:
        ``Points`` or ``Range`` describing the cell.

    Raises:
        FieldSyntaxError: If the cell is empty or not in one of those shapes.
    """

    tokens = [(match.start(), match.group()) for match in TOKEN_RE.finditer(cell)]
    if not tokens:
        raise FieldSyntaxError(len(cell), "code point")

    prefix = None
    if tokens[0][1].startswith("<"):
        start, token = tokens[0]
        match = PREFIX_RE.fullmatch(token)
        if not match:
            raise FieldSyntaxError(start, "<word> prefix")
        prefix = match.group(1)
        tokens = tokens[1:]
        if not tokens:
            raise FieldSyntaxError(len(cell.rstrip()), "code point after prefix")

    if prefix is None and len(tokens) == 1 and ".." in tokens[0][1]:
        start, token = tokens[0]
        first_text, _, last_text = token.partition("..")
        first = _parse_hex(first_text, start)
        last = _parse_hex(last_text, start + len(first_text) + 2)
        if first > last:
            raise FieldSyntaxError(start, "range start not greater than range end")
        return Range(first, last)

    points = tuple(_parse_hex(token, start) for start, token in tokens)
    return Points(points, prefix)


def parse_range(cell: str) -> Range:
    """Parse a cell that must name a range; a single value covers itself.

    Raises:
        FieldSyntaxError: If the cell is not a single value or ``..`` range.
    """

    parsed = parse_code_points(cell)
    if isinstance(parsed, Range):
        return parsed
    if parsed.prefix is not None or len(parsed.points) != 1:
        raise FieldSyntaxError(len(cell) - len(cell.lstrip()), "code point range")
    return Range(parsed.points[0], parsed.points[0])


def parse_text_cell(cell: str) -> Field:
    """Return ``Absent`` for an empty cell, otherwise trimmed ``Text``."""

    value = cell.strip()
    if not value:
        return ABSENT
    return Text(value)


def parse_cell(cell: str) -> Field:
    """Parse a non-leading data cell.

    Cells written entirely as UCD code points (a range, or a list optionally
    tagged with ``<word>`` as in decomposition mappings) become ``Range`` or
    ``Points``; every other non-empty cell is ``Text``.
    """

    value = cell.strip()
    if not value:
        return ABSENT

    match = CODE_POINT_RANGE_RE.fullmatch(value)
    if match:
        first, last = int(match.group(1), 16), int(match.group(2), 16)
        if first <= last:
            return Range(first, last)
        return Text(value)

    match = CODE_POINT_LIST_RE.fullmatch(value)
    if match:
        prefix = match.group(1)
        tokens = value.split()
        if prefix is not None:
            tokens = tokens[1:]
        return Points(tuple(int(token, 16) for token in tokens), prefix)

    return Text(value)
