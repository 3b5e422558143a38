"""Unit tests for the command-line entry point."""

from __future__ import annotations

import json
from pathlib import Path
from unittest.mock import MagicMock

import pytest
import requests

from ucd_cache import cli
from ucd_cache.cache.fetcher import UcdFetcher
from ucd_cache.config import CacheSettings


def test_parse_command_prints_summary(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    source = tmp_path / "Blocks.txt"
    source.write_text("# Blocks-15.1.0.txt\n0000..007F; Basic Latin\n", encoding="utf-8")

    assert cli.main(["parse", str(source)]) == 0

    out = capsys.readouterr().out
    assert f"{source}: version 15.1.0" in out
    assert "code_points=128" in out


def test_parse_command_json(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    source = tmp_path / "Blocks.txt"
    source.write_text("0041;A\n", encoding="utf-8")

    assert cli.main(["parse", "--json", str(source)]) == 0

    payload = json.loads(capsys.readouterr().out)
    assert payload["entries"] == [{"fields": [{"points": [0x41]}, "A"]}]


def test_parse_command_reports_errors(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    source = tmp_path / "bad.txt"
    source.write_text("0041;A\nzz;B\n", encoding="utf-8")

    assert cli.main(["parse", str(source)]) == 1

    out = capsys.readouterr().out
    assert "line 2, column 1" in out


def test_version_command_uses_fetcher(
    tmp_path: Path, capsys: pytest.CaptureFixture[str], monkeypatch: pytest.MonkeyPatch
) -> None:
    response = MagicMock()
    response.status_code = 200
    response.headers = {}
    response.content = b"# Date: 2023-08-28\nfor Version 15.1.0 of the Unicode Standard.\n"
    session = MagicMock()
    session.get.return_value = response
    settings = CacheSettings(cache_dir=tmp_path, prefix="https://example.test/", check_in_ci=True)
    monkeypatch.setattr(
        cli, "_build_fetcher", lambda args: UcdFetcher.create(settings, session=session)
    )

    assert cli.main(["version"]) == 0

    assert "Unicode 15.1.0 (2023-08-28)" in capsys.readouterr().out


def test_fetch_command_reports_http_errors(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    response = MagicMock()
    response.status_code = 404
    response.headers = {}
    session = MagicMock()
    session.get.return_value = response
    settings = CacheSettings(cache_dir=tmp_path, prefix="https://example.test/", check_in_ci=True)
    monkeypatch.setattr(
        cli, "_build_fetcher", lambda args: UcdFetcher.create(settings, session=session)
    )

    assert cli.main(["fetch", "Missing.txt"]) == 1


def test_fetch_command_reports_connection_errors(
    tmp_path: Path, caplog: pytest.LogCaptureFixture, monkeypatch: pytest.MonkeyPatch
) -> None:
    session = MagicMock()
    session.get.side_effect = requests.ConnectionError("down")
    settings = CacheSettings(cache_dir=tmp_path, prefix="https://example.test/", check_in_ci=True)
    monkeypatch.setattr(
        cli, "_build_fetcher", lambda args: UcdFetcher.create(settings, session=session)
    )

    assert cli.main(["fetch", "Blocks.txt"]) == 1
    assert "down" in caplog.text


def test_version_command_in_ci_without_cached_readme(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("CI", "true")
    monkeypatch.delenv("UCD_CHECK_IN_CI", raising=False)

    assert cli.main(["version", "--cache-dir", str(tmp_path / "cache")]) == 1


def test_parse_command_missing_file(tmp_path: Path) -> None:
    assert cli.main(["parse", str(tmp_path / "absent.txt")]) == 1


def test_verbose_flag_only_configures_logging(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("CI", "true")
    monkeypatch.delenv("UCD_CHECK_IN_CI", raising=False)
    cache = tmp_path / "cache"
    cache.mkdir()
    (cache / "Blocks.txt").write_text("0041;A\n", encoding="utf-8")

    assert cli.main(["-v", "fetch", "Blocks.txt", "--cache-dir", str(cache)]) == 0

    assert "Blocks.txt: status=304" in capsys.readouterr().out
