"""Record model produced by the UCD text parser.

Every record is an immutable dataclass so a parse result can be shared freely
between threads and compared structurally. Field cells form a closed union of
``Points``, ``Range``, ``Text`` and ``Absent``; callers dispatch on the concrete
type rather than sniffing raw strings.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Iterator, Union


@dataclass(frozen=True)
class Points:
    """One or more explicit code points, optionally tagged with a ``<word>`` prefix.

    Named-alias and decomposition cells such as ``<circle> 5F97`` keep the word
    inside the angle brackets in ``prefix``.
    """

    points: tuple[int, ...]
    prefix: str | None = None


@dataclass(frozen=True)
class Range:
    """Inclusive code point range written as ``XXXX..YYYY``."""

    first: int
    last: int

    def __post_init__(self) -> None:
        if self.first > self.last:
            raise ValueError(f"Range start {self.first:04X} exceeds end {self.last:04X}")

    def __len__(self) -> int:
        return self.last - self.first + 1

    def __contains__(self, code_point: object) -> bool:
        return isinstance(code_point, int) and self.first <= code_point <= self.last


@dataclass(frozen=True)
class Text:
    """Plain trimmed cell text."""

    value: str


@dataclass(frozen=True)
class Absent:
    """Empty cell between two delimiters."""


ABSENT = Absent()

CodePoints = Union[Points, Range]
Field = Union[Points, Range, Text, Absent]


def is_code_points(value: Field) -> bool:
    """Return whether ``value`` is a ``Points`` or ``Range`` cell."""

    return isinstance(value, (Points, Range))


@dataclass(frozen=True)
class FieldDef:
    """Column definition declared in a file header.

    ``word`` is the leading keyword of ``description`` and is empty when the
    header leaves the description blank.
    """

    word: str
    description: str


@dataclass(frozen=True)
class Entry:
    """One logical row of a UCD file.

    Data rows carry their cells in ``fields``; property directives produce an
    entry with no fields and ``property`` set; ``@missing`` directives produce an
    entry with ``missing`` set whose first field is the covered range. When
    ``fields`` is non-empty its first item is always a ``Points`` or ``Range``.
    """

    fields: tuple[Field, ...] = ()
    property: str | None = None
    segment: str | None = None
    comment: str | None = None
    missing: bool = False
    derived: bool = False


@dataclass(frozen=True)
class ParsedFile:
    """Structured view of one UCD text file.

    ``field_defs`` is keyed by 0-based column ordinal and may have gaps; entries
    keep source order.
    """

    name: str | None = None
    date: datetime | None = None
    version: tuple[int, int, int] | None = None
    field_defs: dict[int, FieldDef] = field(default_factory=dict)
    entries: tuple[Entry, ...] = ()

    def __iter__(self) -> Iterator[Entry]:
        return iter(self.entries)

    def __len__(self) -> int:
        return len(self.entries)
