"""Parser for Unicode Character Database text files.

The grammar is line oriented. Comment lines may carry header metadata (file
name and version, date, field definitions) or directives that open entries
(``Property:``, ``Derived Property:``, ``@missing:``). ``@name`` lines mark
segments. Every other non-blank line is a semicolon-delimited data row whose
first cell is a code point, list of code points, or range.

A directive keyword commits the line: once recognized, a malformed payload is a
``ParseError`` instead of silently becoming an ordinary comment. Parsing is a
single pass with all state local to the call, so concurrent calls on different
inputs never interact.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
import re
from typing import Iterable

from ucd_cache.errors import ParseError
from ucd_cache.models import Entry, FieldDef, ParsedFile
from ucd_cache.ucd.fields import (
    FieldSyntaxError,
    parse_cell,
    parse_code_points,
    parse_range,
    parse_text_cell,
)

CONTROL_CHAR_RE = re.compile(r"[\x00-\x08\x0a-\x1f\x7f]")
COMMENT_START_RE = re.compile(r"(?<!\\)#")

MISSING_RE = re.compile(r"\s*@missing\s*:", re.IGNORECASE)
PROPERTY_RE = re.compile(r"\s*(?P<derived>Derived\s+)?Property\s*:", re.IGNORECASE)
PROPERTY_VALUE_RE = re.compile(
    r"\s*(?P<name>[A-Za-z0-9_][A-Za-z0-9_ .\-]*?)\s*(?P<trailing>\(.*\))?\s*"
)
DATE_RE = re.compile(r"\s*Date\s*:", re.IGNORECASE)
DATE_VALUE_RE = re.compile(
    r"\s*(?P<year>\d{4})-(?P<month>\d{2})-(?P<day>\d{2})"
    r"(?:,?\s+(?P<hour>\d{1,2}):(?P<minute>\d{2}):(?P<second>\d{2})"
    r"(?:\s+(?P<tz>GMT|UTC|Z))?)?"
    r"(?:\s*\[[^\]]*\])?\s*"
)
FIELD_DEF_RE = re.compile(
    r"\s*(?:(?P<word>[A-Za-z]+)\s+field|field\s+(?P<number>\d+))\s*:(?P<description>.*)",
    re.IGNORECASE,
)
NAME_RE = re.compile(
    r"\s*(?P<name>[A-Za-z][\w\-]*?)-(?P<major>\d+)\.(?P<minor>\d+)\.(?P<patch>\d+)\.txt\s*"
)
SEGMENT_RE = re.compile(r"\w+")

ORDINALS = {
    word: index
    for index, word in enumerate(
        [
            "first",
            "second",
            "third",
            "fourth",
            "fifth",
            "sixth",
            "seventh",
            "eighth",
            "ninth",
            "tenth",
            "eleventh",
            "twelfth",
            "thirteenth",
            "fourteenth",
            "fifteenth",
            "sixteenth",
            "seventeenth",
            "eighteenth",
            "nineteenth",
            "twentieth",
        ],
        start=1,
    )
}
ARTICLES = {"a", "an", "the"}


@dataclass
class _FileBuilder:
    """Mutable accumulator owned by a single ``parse_lines`` call."""

    name: str | None = None
    date: datetime | None = None
    version: tuple[int, int, int] | None = None
    field_defs: dict[int, FieldDef] = field(default_factory=dict)
    entries: list[Entry] = field(default_factory=list)
    segment: str | None = None

    def build(self) -> ParsedFile:
        return ParsedFile(
            name=self.name,
            date=self.date,
            version=self.version,
            field_defs=dict(sorted(self.field_defs.items())),
            entries=tuple(self.entries),
        )


@dataclass(frozen=True)
class _Line:
    """One source line plus its position, used to build positioned errors."""

    number: int
    text: str

    def error(self, column: int, expected: str) -> ParseError:
        return ParseError(self.number, column, expected, self.text)

    def field_error(self, exc: FieldSyntaxError, cell_column: int) -> ParseError:
        return self.error(cell_column + exc.offset, exc.expected)


def _split_comment(text: str) -> tuple[str, str | None]:
    """Split ``text`` at the first unescaped ``#`` into data and trimmed comment."""

    match = COMMENT_START_RE.search(text)
    if not match:
        return text, None
    return text[: match.start()], text[match.end() :].strip()


def _split_cells(data: str, column: int) -> list[tuple[str, int]]:
    """Split ``data`` on ``;`` keeping the 1-based column where each cell starts."""

    cells: list[tuple[str, int]] = []
    for cell in data.split(";"):
        cells.append((cell, column))
        column += len(cell) + 1
    return cells


def _description_word(description: str) -> str:
    """Return the leading keyword of a field description, skipping an article."""

    tokens = description.split()
    if len(tokens) > 1 and tokens[0].lower() in ARTICLES:
        tokens = tokens[1:]
    return tokens[0] if tokens else ""


def _parse_missing(line: _Line, body: str, column: int, builder: _FileBuilder) -> None:
    """Parse ``@missing: <range>; <value>...`` into a missing-value entry."""

    data, comment = _split_comment(body)
    cells = _split_cells(data, column)
    if len(cells) < 2:
        raise line.error(column + len(data.rstrip()), "';' followed by @missing value")

    range_cell, range_column = cells[0]
    try:
        covered = parse_range(range_cell)
    except FieldSyntaxError as exc:
        raise line.field_error(exc, range_column) from exc

    values = tuple(parse_text_cell(cell) for cell, _ in cells[1:])
    builder.entries.append(
        Entry(
            fields=(covered, *values),
            segment=builder.segment,
            comment=comment,
            missing=True,
        )
    )


def _parse_property(
    line: _Line, body: str, column: int, derived: bool, builder: _FileBuilder
) -> None:
    """Parse ``Property: name`` / ``Derived Property: name (note)`` directives."""

    match = PROPERTY_VALUE_RE.fullmatch(body)
    if not match:
        stripped = len(body) - len(body.lstrip())
        raise line.error(column + stripped, "property name")
    builder.entries.append(
        Entry(
            property=match.group("name"),
            segment=builder.segment,
            comment=match.group("trailing"),
            derived=derived,
        )
    )


def _parse_date(line: _Line, body: str, column: int, builder: _FileBuilder) -> None:
    """Parse ``Date: YYYY-MM-DD[, HH:MM:SS [TZ]]`` into a UTC timestamp."""

    value_column = column + len(body) - len(body.lstrip())
    match = DATE_VALUE_RE.fullmatch(body)
    if not match:
        raise line.error(value_column, "date as YYYY-MM-DD[, HH:MM:SS GMT]")
    parts = match.groupdict()
    try:
        stamp = datetime(
            int(parts["year"]),
            int(parts["month"]),
            int(parts["day"]),
            int(parts["hour"] or 0),
            int(parts["minute"] or 0),
            int(parts["second"] or 0),
            tzinfo=timezone.utc,
        )
    except ValueError as exc:
        raise line.error(value_column, "valid calendar date and time") from exc
    if builder.date is None:
        builder.date = stamp


def _parse_field_def(
    line: _Line, match: re.Match[str], column: int, builder: _FileBuilder
) -> bool:
    """Record a field definition; return ``False`` when the line is plain prose."""

    word = match.group("word")
    if word is not None:
        ordinal = ORDINALS.get(word.lower())
        if ordinal is None:
            return False
    else:
        ordinal = int(match.group("number"))
        if ordinal < 1:
            raise line.error(column + match.start("number"), "field number of at least 1")

    description = match.group("description").strip()
    builder.field_defs[ordinal - 1] = FieldDef(
        word=_description_word(description),
        description=description,
    )
    return True


def _parse_comment_line(line: _Line, hash_index: int, builder: _FileBuilder) -> None:
    """Dispatch a ``#`` line to the directive it spells, if any."""

    body = line.text[hash_index + 1 :]
    # 1-based column of body[0]
    column = hash_index + 2

    match = MISSING_RE.match(body)
    if match:
        _parse_missing(line, body[match.end() :], column + match.end(), builder)
        return

    match = PROPERTY_RE.match(body)
    if match:
        derived = match.group("derived") is not None
        _parse_property(line, body[match.end() :], column + match.end(), derived, builder)
        return

    match = DATE_RE.match(body)
    if match:
        _parse_date(line, body[match.end() :], column + match.end(), builder)
        return

    match = FIELD_DEF_RE.fullmatch(body)
    if match and _parse_field_def(line, match, column, builder):
        return

    match = NAME_RE.fullmatch(body)
    if match:
        if builder.name is None:
            builder.name = match.group("name")
        if builder.version is None:
            builder.version = (
                int(match.group("major")),
                int(match.group("minor")),
                int(match.group("patch")),
            )


def _parse_segment_line(line: _Line, at_index: int, builder: _FileBuilder) -> None:
    """Parse an ``@identifier`` segment marker."""

    data, _ = _split_comment(line.text[at_index + 1 :])
    identifier = data.rstrip()
    match = SEGMENT_RE.match(identifier)
    end = match.end() if match else 0
    if end == 0 or end != len(identifier):
        raise line.error(at_index + 2 + end, "segment identifier of word characters")
    builder.segment = identifier


def _parse_data_line(line: _Line, builder: _FileBuilder) -> None:
    """Parse one semicolon-delimited data row."""

    data, comment = _split_comment(line.text)
    cells = _split_cells(data, 1)

    first_cell, first_column = cells[0]
    try:
        code_points = parse_code_points(first_cell)
    except FieldSyntaxError as exc:
        raise line.field_error(exc, first_column) from exc

    builder.entries.append(
        Entry(
            fields=(code_points, *(parse_cell(cell) for cell, _ in cells[1:])),
            segment=builder.segment,
            comment=comment,
        )
    )


def parse_lines(lines: Iterable[str]) -> ParsedFile:
    """Parse an iterable of UCD lines into a ``ParsedFile``.

    Line terminators (``\\n`` or ``\\r\\n``) are stripped; any other control
    character apart from tab is rejected.

    Args:
        lines: Source lines, with or without terminators.

    Returns:
        Immutable parse result with entries in source order.

    Raises:
        ParseError: At the first malformed line. No partial result is returned.
    """

    builder = _FileBuilder()
    for number, raw in enumerate(lines, start=1):
        line = _Line(number, raw.rstrip("\n").removesuffix("\r"))

        bad = CONTROL_CHAR_RE.search(line.text)
        if bad:
            raise line.error(bad.start() + 1, "printable character")

        stripped = line.text.lstrip()
        if not stripped:
            continue
        indent = len(line.text) - len(stripped)

        if stripped.startswith("#"):
            _parse_comment_line(line, indent, builder)
        elif stripped.startswith("@"):
            _parse_segment_line(line, indent, builder)
        else:
            _parse_data_line(line, builder)

    return builder.build()


def parse(text: str) -> ParsedFile:
    """Parse the full text of a UCD file.

    Args:
        text: Whole file content.

    Returns:
        Immutable parse result; identical text always yields an equal result.

    Raises:
        ParseError: On malformed input, with 1-based line and column.
    """

    return parse_lines(text.split("\n"))
