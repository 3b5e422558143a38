"""Conditional fetching of UCD files through a local file cache.

``UcdFetcher`` resolves a logical file name (``Blocks.txt``,
``emoji/emoji-data.txt``) to current text. Under continuous integration it
serves the cache without touching the network unless configured otherwise;
elsewhere it issues a conditional GET and only rewrites the cached copy when the
server sends a fresh body.

Calls are sequential and hold no locks. Concurrent calls for the same name in
the same cache directory may interleave their writes; callers that fetch in
parallel must serialize access per name themselves.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import date, datetime
from email.utils import formatdate
import logging
from pathlib import Path
import re
import shutil

import requests

from ucd_cache.cache.state import FileState, StateStore
from ucd_cache.config import CacheSettings, is_ci
from ucd_cache.errors import CacheError, HttpStatusError, VersionInfoError
from ucd_cache.io.cache_files import (
    ensure_cache_dir,
    has_cached_text,
    read_cached_text,
    write_cached_text,
)
from ucd_cache.models import ParsedFile
from ucd_cache.ucd.parser import parse

LOGGER = logging.getLogger(__name__)

BAD_ETAG = "---000---"
README_NAME = "ReadMe.txt"

# Apache decorates compressed responses' ETags with "-gzip" and then fails to
# match the decorated value on If-None-Match.
# See: https://bz.apache.org/bugzilla/show_bug.cgi?id=39727
GZIP_ETAG_RE = re.compile(r'-gzip(?="?$)')
README_DATE_RE = re.compile(r"^# Date: (?P<date>\d+-\d+-\d+)", re.MULTILINE)
README_VERSION_RE = re.compile(r"Version (?P<version>\d+\.\d+\.\d+) of", re.IGNORECASE)


def normalize_etag(etag: str) -> str:
    """Strip a trailing ``-gzip`` marker from an ETag.

    The marker may sit just inside the closing quote (``"abc-gzip"``) or at the
    very end of an unquoted value. Weak ``W/`` prefixes are preserved.
    """

    return GZIP_ETAG_RE.sub("", etag, count=1)


def http_date_now() -> str:
    """Return the current time as an RFC 7231 HTTP date."""

    return formatdate(usegmt=True)


def conditional_headers(etag: str | None, last_modified: str | None) -> dict[str, str]:
    """Build conditional request headers from known validators."""

    headers: dict[str, str] = {}
    if last_modified:
        headers["If-Modified-Since"] = last_modified
    if etag and etag != BAD_ETAG:
        headers["If-None-Match"] = normalize_etag(etag)
    return headers


@dataclass(frozen=True)
class FileInfo:
    """Outcome of one fetch.

    Attributes:
        name: Logical file name.
        status: ``200`` when fresh text was downloaded, ``304`` when the cached
            copy is current (or the network was skipped under CI).
        etag: Normalized ETag to resubmit next time.
        last_modified: ``Last-Modified`` value to resubmit next time.
        text: File text, or ``None`` when the caller did not ask for it.
        parsed: Parse result, present only when parsing was requested and done.
    """

    name: str
    status: int
    etag: str
    last_modified: str
    text: str | None = None
    parsed: ParsedFile | None = None


@dataclass(frozen=True)
class UcdVersion:
    """Release date and version of the upstream UCD."""

    date: date
    version: str
    last_modified: str
    etag: str

    @property
    def version_tuple(self) -> tuple[int, int, int]:
        major, minor, patch = (int(part) for part in self.version.split("."))
        return major, minor, patch


def parse_readme_version(text: str) -> tuple[date, str]:
    """Extract the release date and ``X.Y.Z`` version from ``ReadMe.txt``.

    Args:
        text: ReadMe content.

    Returns:
        ``(release_date, version)`` tuple.

    Raises:
        VersionInfoError: If the date line or version phrase is absent.
    """

    match_date = README_DATE_RE.search(text)
    match_version = README_VERSION_RE.search(text)
    if not match_date or not match_version:
        raise VersionInfoError("Invalid ReadMe: missing '# Date:' line or 'Version X.Y.Z of'")
    try:
        released = datetime.strptime(match_date.group("date"), "%Y-%m-%d").date()
    except ValueError as exc:
        raise VersionInfoError(f"Invalid ReadMe date: {match_date.group('date')}") from exc
    return released, match_version.group("version")


class UcdFetcher:
    """Cache manager for one cache directory and upstream prefix.

    Args:
        settings: Cache location, upstream prefix and CI policy.
        session: Object with a ``requests.Session``-compatible ``get``; a new
            session is created when omitted.
        state: Validator store; defaults to ``ucd-state.json`` in the cache root.
    """

    def __init__(
        self,
        settings: CacheSettings | None = None,
        session: requests.Session | None = None,
        state: StateStore | None = None,
    ) -> None:
        self.settings = settings if settings is not None else CacheSettings()
        self._owns_session = session is None
        self.session = session if session is not None else requests.Session()
        self.state = state if state is not None else StateStore(self.settings.state_path)

    @classmethod
    def create(
        cls,
        settings: CacheSettings | None = None,
        session: requests.Session | None = None,
        state: StateStore | None = None,
    ) -> UcdFetcher:
        """Construct a fetcher and run :meth:`init`."""

        return cls(settings=settings, session=session, state=state).init()

    @property
    def cache_dir(self) -> Path:
        return self.settings.cache_dir

    def close(self) -> None:
        """Close the HTTP session if this fetcher created it."""

        if self._owns_session:
            self.session.close()

    def __enter__(self) -> UcdFetcher:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def init(self) -> UcdFetcher:
        """Create the cache root if needed and load persisted state.

        Raises:
            CacheError: If the cache path exists but is not a directory.
            StateStoreError: If the state document is malformed.
        """

        ensure_cache_dir(self.cache_dir)
        self.state.load()
        LOGGER.debug("Using cache directory %s (%d files tracked)", self.cache_dir, len(self.state))
        return self

    def remove_cache_dir(self) -> None:
        """Delete the cache root and everything under it."""

        shutil.rmtree(self.cache_dir)

    def fetch(
        self,
        name: str,
        *,
        etag: str | None = None,
        last_modified: str | None = None,
        ci: bool | None = None,
        read_cached: bool = True,
    ) -> FileInfo:
        """Resolve ``name`` to current text.

        Args:
            name: Logical file name under the upstream prefix.
            etag: ETag from a previous fetch; the stored one is used otherwise.
            last_modified: ``Last-Modified`` from a previous fetch; the stored
                one is used otherwise.
            ci: Override for CI detection.
            read_cached: Whether to read cached text when the result is ``304``.

        Returns:
            ``FileInfo`` with status ``200`` or ``304``.

        Raises:
            HttpStatusError: For any other HTTP status.
            CacheError: If a fresh body is not valid UTF-8.
            requests.RequestException: For connection-level failures.
            OSError: For cache read/write failures, including reading a file
                that was never cached.
        """

        stored = self.state.get(name)

        if is_ci(ci) and not self.settings.check_in_ci:
            LOGGER.info("CI detected; serving %s from cache without a network check", name)
            return FileInfo(
                name=name,
                status=304,
                etag=etag or (stored.etag if stored else BAD_ETAG),
                last_modified=last_modified or (stored.date if stored else http_date_now()),
                text=read_cached_text(self.cache_dir, name) if read_cached else None,
            )

        if stored is not None and has_cached_text(self.cache_dir, name):
            etag = etag or stored.etag
            last_modified = last_modified or stored.date

        url = self.settings.url_for(name)
        headers = conditional_headers(etag, last_modified)
        LOGGER.debug('Checking "%s" with headers: %s', url, headers)
        response = self.session.get(url, headers=headers, timeout=self.settings.timeout)
        status = response.status_code

        if status == 200:
            new_etag = normalize_etag(response.headers.get("ETag") or BAD_ETAG)
            new_modified = response.headers.get("Last-Modified") or http_date_now()
            try:
                text = response.content.decode("utf-8")
            except UnicodeDecodeError as exc:
                raise CacheError(f"{name}: response body is not valid UTF-8") from exc
            path = write_cached_text(self.cache_dir, name, text)
            LOGGER.info("Downloaded %s (%d chars) to %s", name, len(text), path)
            self.state.set(name, FileState(etag=new_etag, date=new_modified))
            return FileInfo(name=name, status=200, etag=new_etag, last_modified=new_modified, text=text)

        if status == 304:
            # 304 responses may omit validators; keep the ones that were sent.
            new_etag = normalize_etag(response.headers.get("ETag") or etag or BAD_ETAG)
            new_modified = response.headers.get("Last-Modified") or last_modified or http_date_now()
            LOGGER.debug("%s not modified", name)
            self.state.set(name, FileState(etag=new_etag, date=new_modified))
            return FileInfo(
                name=name,
                status=304,
                etag=new_etag,
                last_modified=new_modified,
                text=read_cached_text(self.cache_dir, name) if read_cached else None,
            )

        LOGGER.error("Unexpected HTTP status %d for %s", status, url)
        raise HttpStatusError(status, url)

    def parse(
        self,
        name: str,
        *,
        etag: str | None = None,
        last_modified: str | None = None,
        ci: bool | None = None,
        force: bool = False,
    ) -> FileInfo:
        """Fetch ``name`` and parse it when fresh text arrived.

        A ``304`` result is only parsed when ``force`` is set, in which case the
        cached copy is re-read.

        Raises:
            ParseError: If the resolved text is malformed.
        """

        info = self.fetch(
            name,
            etag=etag,
            last_modified=last_modified,
            ci=ci,
            read_cached=force,
        )
        if info.text is not None and (info.status == 200 or force):
            return replace(info, parsed=parse(info.text))
        return info

    def fetch_version(
        self,
        *,
        etag: str | None = None,
        last_modified: str | None = None,
        ci: bool | None = None,
    ) -> UcdVersion:
        """Report the release date and version of the upstream UCD.

        Raises:
            CacheError: If no ReadMe text could be resolved.
            VersionInfoError: If the ReadMe lacks a date or version.
        """

        info = self.fetch(README_NAME, etag=etag, last_modified=last_modified, ci=ci)
        if info.text is None:
            raise CacheError(f"No text available for {README_NAME}")
        released, version = parse_readme_version(info.text)
        return UcdVersion(
            date=released,
            version=version,
            last_modified=info.last_modified,
            etag=info.etag,
        )
