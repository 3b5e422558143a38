"""Fetch, cache and parse Unicode Character Database text files."""

from .cache.fetcher import FileInfo, UcdFetcher, UcdVersion, normalize_etag
from .cache.state import FileState, StateStore
from .config import CacheSettings, is_ci
from .errors import FetchError, HttpStatusError, ParseError, UcdError, VersionInfoError
from .models import ABSENT, Absent, Entry, FieldDef, ParsedFile, Points, Range, Text
from .ucd.parser import parse

__all__ = [
    "ABSENT",
    "Absent",
    "CacheSettings",
    "Entry",
    "FetchError",
    "FieldDef",
    "FileInfo",
    "FileState",
    "HttpStatusError",
    "ParseError",
    "ParsedFile",
    "Points",
    "Range",
    "StateStore",
    "Text",
    "UcdError",
    "UcdFetcher",
    "UcdVersion",
    "VersionInfoError",
    "is_ci",
    "normalize_etag",
    "parse",
]
