"""JSON serialization of parse results for dumps and downstream tooling."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from ucd_cache.models import Absent, Entry, Field, ParsedFile, Points, Range, Text


def field_to_json(value: Field) -> Any:
    """Convert one field cell to a JSON-ready value.

    ``Points`` becomes ``{"points": [...]}`` (plus ``"prefix"`` when tagged),
    ``Range`` becomes ``{"range": [first, last]}``, ``Text`` its string and
    ``Absent`` ``None``.
    """

    if isinstance(value, Points):
        payload: dict[str, Any] = {"points": list(value.points)}
        if value.prefix is not None:
            payload["prefix"] = value.prefix
        return payload
    if isinstance(value, Range):
        return {"range": [value.first, value.last]}
    if isinstance(value, Text):
        return value.value
    if isinstance(value, Absent):
        return None
    raise TypeError(f"Unsupported field type: {type(value).__name__}")


def entry_to_dict(entry: Entry) -> dict[str, Any]:
    """Convert an entry, omitting unset optional attributes."""

    payload: dict[str, Any] = {"fields": [field_to_json(value) for value in entry.fields]}
    if entry.property is not None:
        payload["property"] = entry.property
        payload["derived"] = entry.derived
    if entry.segment is not None:
        payload["segment"] = entry.segment
    if entry.comment is not None:
        payload["comment"] = entry.comment
    if entry.missing:
        payload["missing"] = True
    return payload


def parsed_file_to_dict(parsed: ParsedFile) -> dict[str, Any]:
    """Convert a parse result to plain JSON-compatible data.

    Field definitions are keyed by their 1-based ordinal as a string so gaps
    survive the round trip through JSON objects.
    """

    return {
        "name": parsed.name,
        "date": parsed.date.isoformat().replace("+00:00", "Z") if parsed.date else None,
        "version": list(parsed.version) if parsed.version else None,
        "fields": {
            str(index + 1): {"word": item.word, "description": item.description}
            for index, item in parsed.field_defs.items()
        },
        "entries": [entry_to_dict(entry) for entry in parsed.entries],
    }


def dumps(parsed: ParsedFile, indent: int | None = 2) -> str:
    """Serialize a parse result to a JSON string."""

    return json.dumps(parsed_file_to_dict(parsed), indent=indent, ensure_ascii=False)


def write_json(parsed: ParsedFile, output_path: Path) -> None:
    """Write a parse result as UTF-8 JSON."""

    with output_path.open("w", encoding="utf-8") as handle:
        handle.write(dumps(parsed))
        handle.write("\n")
