"""Plain-text summaries of parsed UCD files."""

from __future__ import annotations

from collections import Counter
from typing import Sequence

from ucd_cache.models import ParsedFile, Points, Range


def collect_property_counts(parsed: ParsedFile) -> dict[str, int]:
    """Count data rows under each ``Property:`` directive.

    Rows seen before any property directive are counted under ``""``.

    Args:
        parsed: Parse result.

    Returns:
        Dictionary of property name to data row count.
    """

    counter: Counter[str] = Counter()
    current = ""
    for entry in parsed.entries:
        if entry.property is not None:
            current = entry.property
            counter.setdefault(current, 0)
            continue
        if entry.missing:
            continue
        counter[current] += 1
    return dict(counter)


def collect_segment_counts(parsed: ParsedFile) -> dict[str, int]:
    """Count data rows by ``@segment`` marker; unsegmented rows use ``""``."""

    counter: Counter[str] = Counter()
    for entry in parsed.entries:
        if entry.fields and not entry.missing:
            counter[entry.segment or ""] += 1
    return dict(counter)


def count_code_points(parsed: ParsedFile) -> int:
    """Sum the code points named by data rows, expanding ranges."""

    total = 0
    for entry in parsed.entries:
        if entry.missing or not entry.fields:
            continue
        first = entry.fields[0]
        if isinstance(first, Range):
            total += len(first)
        elif isinstance(first, Points):
            total += len(first.points)
    return total


def format_table(headers: Sequence[str], data_rows: Sequence[Sequence[str]]) -> str:
    """Format rows as an ASCII table for terminal output.

    Columns whose cells are all decimal digits are right-aligned.

    Args:
        headers: Table headers.
        data_rows: Row values.

    Returns:
        Monospace table string.
    """

    columns = list(zip(headers, *data_rows))
    widths = [max(len(value) for value in column) for column in columns]
    numeric = [bool(data_rows) and all(value.isdigit() for value in column[1:]) for column in columns]

    def render(values: Sequence[str]) -> str:
        cells = [
            value.rjust(width) if is_numeric else value.ljust(width)
            for value, width, is_numeric in zip(values, widths, numeric)
        ]
        return " | ".join(cells)

    separator_line = "-+-".join("-" * width for width in widths)
    return "\n".join([render(headers), separator_line, *(render(row) for row in data_rows)])


def build_summary(parsed: ParsedFile, label: str | None = None) -> str:
    """Build a terminal summary of one parse result.

    Args:
        parsed: Parse result.
        label: Display name; defaults to the name line of the file.

    Returns:
        Multi-line summary text ending without a newline.
    """

    title = label or parsed.name or "<unnamed>"
    version = ".".join(str(part) for part in parsed.version) if parsed.version else "unknown"
    date = parsed.date.isoformat() if parsed.date else "unknown"
    missing = sum(1 for entry in parsed.entries if entry.missing)

    lines = [
        f"{title}: version {version}, date {date}",
        f"entries={len(parsed.entries)} code_points={count_code_points(parsed)} missing={missing}",
    ]

    if parsed.field_defs:
        rows = [
            [str(index + 1), item.word, item.description]
            for index, item in parsed.field_defs.items()
        ]
        lines.extend(["", format_table(["field", "word", "description"], rows)])

    property_counts = collect_property_counts(parsed)
    if any(name for name in property_counts):
        rows = [
            [name or "(none)", str(count)]
            for name, count in sorted(property_counts.items(), key=lambda item: (-item[1], item[0]))
        ]
        lines.extend(["", format_table(["property", "rows"], rows)])

    segment_counts = collect_segment_counts(parsed)
    if any(name for name in segment_counts):
        rows = [[name or "(none)", str(count)] for name, count in segment_counts.items()]
        lines.extend(["", format_table(["segment", "rows"], rows)])

    return "\n".join(lines)
