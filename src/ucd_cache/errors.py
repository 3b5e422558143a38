"""Exception hierarchy for parsing and cache/transport failures.

The two families never overlap: ``ParseError`` means the bytes were obtained but
are malformed, while ``FetchError`` subclasses mean the bytes (or their metadata)
could not be obtained or stored.
"""

from __future__ import annotations


class UcdError(Exception):
    """Base class for all package errors."""


class ParseError(UcdError, ValueError):
    """Malformed UCD text at a specific 1-based line and column.

    Attributes:
        line: 1-based line number of the offending text.
        column: 1-based column of the first offending character.
        expected: Short description of what the grammar expected there.
        source_line: The offending source line, without its terminator.
    """

    def __init__(self, line: int, column: int, expected: str, source_line: str = "") -> None:
        self.line = line
        self.column = column
        self.expected = expected
        self.source_line = source_line
        super().__init__(f"line {line}, column {column}: expected {expected}")

    def format(self) -> str:
        """Render the error with the source line and a caret under the column."""

        if not self.source_line:
            return str(self)
        printable = "".join(ch if ch.isprintable() else "?" for ch in self.source_line)
        caret = " " * (self.column - 1) + "^"
        return f"{self}\n  {printable}\n  {caret}"


class FetchError(UcdError):
    """Base class for network, cache and persisted-state failures."""


class HttpStatusError(FetchError):
    """Origin answered with a status other than 200 or 304."""

    def __init__(self, status: int, url: str) -> None:
        self.status = status
        self.url = url
        super().__init__(f"HTTP Status {status} for {url}")


class CacheError(FetchError):
    """Local cache directory is unusable, or a resolved file has no usable text."""


class StateStoreError(FetchError):
    """Persisted state document is unreadable or malformed."""


class VersionInfoError(UcdError):
    """UCD ReadMe lacks the release date or version line."""
