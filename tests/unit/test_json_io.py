"""Unit tests for JSON serialization of parse results."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from ucd_cache.io.json_io import dumps, field_to_json, parsed_file_to_dict, write_json
from ucd_cache.models import ABSENT, Points, Range, Text
from ucd_cache.ucd.parser import parse


def test_field_to_json_covers_every_variant() -> None:
    assert field_to_json(Points((0x41, 0x301))) == {"points": [0x41, 0x301]}
    assert field_to_json(Points((0x5F97,), prefix="circle")) == {
        "points": [0x5F97],
        "prefix": "circle",
    }
    assert field_to_json(Range(0, 0x10FFFF)) == {"range": [0, 0x10FFFF]}
    assert field_to_json(Text("Lu")) == "Lu"
    assert field_to_json(ABSENT) is None


def test_field_to_json_rejects_unknown_values() -> None:
    with pytest.raises(TypeError):
        field_to_json("raw")  # type: ignore[arg-type]


def test_parsed_file_to_dict_matches_source_layout() -> None:
    parsed = parse(
        "# Blocks-15.1.0.txt\n"
        "# Date: 2023-07-28, 15:47:20 GMT\n"
        "# Third field: Status\n"
        "# Derived Property: bar (no longer used)\n"
        "@Part0\n"
        "# @missing: 0000..10FFFF; Unassigned # comment\n"
        "1;\n"
    )

    assert parsed_file_to_dict(parsed) == {
        "name": "Blocks",
        "date": "2023-07-28T15:47:20Z",
        "version": [15, 1, 0],
        "fields": {"3": {"word": "Status", "description": "Status"}},
        "entries": [
            {"fields": [], "property": "bar", "derived": True, "comment": "(no longer used)"},
            {
                "fields": [{"range": [0, 0x10FFFF]}, "Unassigned"],
                "segment": "Part0",
                "comment": "comment",
                "missing": True,
            },
            {"fields": [{"points": [1]}, None], "segment": "Part0"},
        ],
    }


def test_write_json_round_trips_through_json_module(tmp_path: Path) -> None:
    parsed = parse("0041;LATIN CAPITAL LETTER A;Lu\n")
    output = tmp_path / "out.json"

    write_json(parsed, output)

    assert json.loads(output.read_text(encoding="utf-8")) == json.loads(dumps(parsed))
    assert json.loads(dumps(parsed))["date"] is None
