"""Runtime settings for the UCD cache and continuous-integration detection."""

from __future__ import annotations

from dataclasses import dataclass, field
import os
from pathlib import Path
from typing import Mapping

UCD_PREFIX = "https://www.unicode.org/Public/UCD/latest/ucd/"
DEFAULT_TIMEOUT = 30.0
STATE_FILE_NAME = "ucd-state.json"

# Travis, CircleCI, Cirrus, GitLab, AppVeyor, GitHub Actions set CI;
# Jenkins and TeamCity set BUILD_NUMBER; TaskCluster sets RUN_ID.
CI_ENV_VARS = ("CI", "CONTINUOUS_INTEGRATION", "BUILD_NUMBER", "RUN_ID")
FALSY_VALUES = {"", "0", "false", "no", "off"}


def _env_flag(value: str | None) -> bool:
    """Interpret an environment variable value as a boolean flag."""

    if value is None:
        return False
    return value.strip().lower() not in FALSY_VALUES


def is_ci(override: bool | None = None, environ: Mapping[str, str] | None = None) -> bool:
    """Report whether the process runs under continuous integration.

    Args:
        override: Explicit per-call answer; wins over the environment when set.
        environ: Environment mapping to inspect, ``os.environ`` by default.

    Returns:
        ``True`` when ``override`` is truthy, or when it is ``None`` and any of
        the well-known CI variables holds a truthy value.
    """

    if override is not None:
        return bool(override)
    env = os.environ if environ is None else environ
    return any(_env_flag(env.get(name)) for name in CI_ENV_VARS)


def normalize_prefix(prefix: str) -> str:
    """Return ``prefix`` with exactly one trailing slash."""

    return prefix.rstrip("/") + "/"


@dataclass(frozen=True)
class CacheSettings:
    """Immutable settings for one cache directory and upstream location.

    Attributes:
        cache_dir: Root directory for cached files and the state document.
        prefix: Base URL that logical file names are appended to.
        check_in_ci: Contact the network even when running under CI.
        timeout: Per-request timeout in seconds.
    """

    cache_dir: Path = field(default_factory=Path.cwd)
    prefix: str = UCD_PREFIX
    check_in_ci: bool = False
    timeout: float = DEFAULT_TIMEOUT

    def __post_init__(self) -> None:
        object.__setattr__(self, "cache_dir", Path(self.cache_dir).expanduser().resolve())
        object.__setattr__(self, "prefix", normalize_prefix(self.prefix))
        if self.timeout <= 0:
            raise ValueError(f"timeout must be positive, got {self.timeout}")

    @property
    def state_path(self) -> Path:
        """Location of the persisted state document inside ``cache_dir``."""

        return self.cache_dir / STATE_FILE_NAME

    def url_for(self, name: str) -> str:
        """Build the upstream URL for a logical file name."""

        return self.prefix + name.lstrip("/")


def settings_from_env(environ: Mapping[str, str] | None = None, **overrides) -> CacheSettings:
    """Build settings from ``UCD_*`` environment variables.

    Recognized variables are ``UCD_CACHE_DIR``, ``UCD_PREFIX``,
    ``UCD_CHECK_IN_CI`` and ``UCD_TIMEOUT``. Keyword overrides whose value is not
    ``None`` take precedence over the environment.

    Args:
        environ: Environment mapping to inspect, ``os.environ`` by default.
        **overrides: ``CacheSettings`` field values supplied by the caller.

    Returns:
        Fully resolved settings.

    Raises:
        ValueError: If ``UCD_TIMEOUT`` is not a positive number.
    """

    env = os.environ if environ is None else environ
    values: dict[str, object] = {}
    if env.get("UCD_CACHE_DIR"):
        values["cache_dir"] = Path(env["UCD_CACHE_DIR"])
    if env.get("UCD_PREFIX"):
        values["prefix"] = env["UCD_PREFIX"]
    if "UCD_CHECK_IN_CI" in env:
        values["check_in_ci"] = _env_flag(env["UCD_CHECK_IN_CI"])
    if env.get("UCD_TIMEOUT"):
        try:
            values["timeout"] = float(env["UCD_TIMEOUT"])
        except ValueError as exc:
            raise ValueError(f"Invalid UCD_TIMEOUT: {env['UCD_TIMEOUT']!r}") from exc

    values.update({key: value for key, value in overrides.items() if value is not None})
    return CacheSettings(**values)
