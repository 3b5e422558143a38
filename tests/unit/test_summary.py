"""Unit tests for parse-result summaries."""

from __future__ import annotations

from ucd_cache.reporting.summary import (
    build_summary,
    collect_property_counts,
    collect_segment_counts,
    count_code_points,
    format_table,
)
from ucd_cache.ucd.parser import parse

DERIVED = (
    "# DerivedCoreProperties-15.1.0.txt\n"
    "# Date: 2023-08-07, 15:21:24 GMT\n"
    "# Derived Property: Math\n"
    "002B          ; Math # Sm       PLUS SIGN\n"
    "003C..003E    ; Math # Sm   [3] LESS-THAN SIGN..GREATER-THAN SIGN\n"
    "# Derived Property: Alphabetic\n"
    "# @missing: 0000..10FFFF; No\n"
    "0041..005A    ; Alphabetic # L&  [26] LATIN CAPITAL LETTER A..LATIN CAPITAL LETTER Z\n"
)


def test_collect_property_counts_groups_rows_under_directives() -> None:
    parsed = parse(DERIVED)

    assert collect_property_counts(parsed) == {"Math": 2, "Alphabetic": 1}


def test_collect_segment_counts() -> None:
    parsed = parse("0040;x\n@Part0\n0041;A\n0042;B\n@Part1\n0043;C\n")

    assert collect_segment_counts(parsed) == {"": 1, "Part0": 2, "Part1": 1}


def test_count_code_points_expands_ranges() -> None:
    assert count_code_points(parse(DERIVED)) == 1 + 3 + 26


def test_format_table_pads_columns() -> None:
    table = format_table(["property", "rows"], [["Math", "2"], ["Alphabetic", "1"]])

    assert table.splitlines() == [
        "property   | rows",
        "-----------+-----",
        "Math       |    2",
        "Alphabetic |    1",
    ]


def test_format_table_without_rows_keeps_headers_left_aligned() -> None:
    assert format_table(["segment", "rows"], []).splitlines() == [
        "segment | rows",
        "--------+-----",
    ]


def test_build_summary_mentions_version_and_properties() -> None:
    summary = build_summary(parse(DERIVED))

    assert summary.splitlines()[0] == (
        "DerivedCoreProperties: version 15.1.0, date 2023-08-07T15:21:24+00:00"
    )
    assert "entries=6 code_points=30 missing=1" in summary
    assert "Math" in summary
    assert "Alphabetic" in summary
