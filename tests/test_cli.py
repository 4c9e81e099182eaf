"""Tests for the command line interface."""

import json

import pytest
from typer.testing import CliRunner

from conftest import spotify_entry
from songvec import config
from songvec.cli import app

runner = CliRunner()


@pytest.fixture
def catalog(tmp_path, monkeypatch):
    monkeypatch.setattr(config, "DB_PATH", tmp_path / "db")
    tracks = [
        spotify_entry("a", artist="A"),
        spotify_entry("b", artist="B", energy=0.2),
        spotify_entry("c", artist="C", genres=["rock"], energy=0.9),
    ]
    path = tmp_path / "catalog.json"
    path.write_text(json.dumps({"tracks": tracks, "playlists": [{"id": "pl", "name": "Mix", "track_ids": ["a"]}]}))
    return path


def test_ingest_and_query(catalog) -> None:
    result = runner.invoke(app, ["ingest", str(catalog)])
    assert result.exit_code == 0, result.output
    assert "Done: 3 tracks, 1 playlists" in result.output

    result = runner.invoke(app, ["similar", "a", "-n", "1", "--mode", "hybrid"])
    assert result.exit_code == 0, result.output
    assert "Tracks similar to: a" in result.output
    assert " 1. " in result.output
    assert " 2. " not in result.output

    result = runner.invoke(app, ["playlist", "pl", "--mode", "diverse", "--genre", "rock"])
    assert result.exit_code == 0, result.output
    assert "C - Song c" in result.output

    result = runner.invoke(app, ["analyze", "pl"])
    assert result.exit_code == 0, result.output
    assert "Mix: 1 tracks" in result.output


def test_unknown_track(catalog) -> None:
    runner.invoke(app, ["ingest", str(catalog)])
    result = runner.invoke(app, ["similar", "missing"])
    assert result.exit_code == 1


def test_invalid_options(catalog) -> None:
    runner.invoke(app, ["ingest", str(catalog)])
    result = runner.invoke(app, ["similar", "a", "--popularity-min", "80", "--popularity-max", "10"])
    assert result.exit_code == 1


def test_ingest_missing_file(tmp_path) -> None:
    result = runner.invoke(app, ["ingest", str(tmp_path / "nope.json")])
    assert result.exit_code == 1
