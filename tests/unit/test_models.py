"""Unit tests for record model invariants."""

from __future__ import annotations

import pytest

from ucd_cache.models import ABSENT, Absent, Entry, ParsedFile, Points, Range, Text, is_code_points


def test_range_requires_ordered_bounds() -> None:
    with pytest.raises(ValueError, match="exceeds"):
        Range(2, 1)

    covered = Range(0x41, 0x43)
    assert len(covered) == 3
    assert 0x42 in covered
    assert 0x44 not in covered


def test_absent_instances_compare_equal() -> None:
    assert Absent() == ABSENT
    assert Text("") != ABSENT


def test_is_code_points() -> None:
    assert is_code_points(Points((1,)))
    assert is_code_points(Range(1, 2))
    assert not is_code_points(Text("x"))
    assert not is_code_points(ABSENT)


def test_parsed_file_iterates_entries() -> None:
    entries = (Entry(fields=(Points((1,)),)), Entry(property="Age"))
    parsed = ParsedFile(entries=entries)

    assert list(parsed) == list(entries)
    assert len(parsed) == 2
    assert parsed.field_defs == {}
