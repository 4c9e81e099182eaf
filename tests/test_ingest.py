"""Tests for catalog ingestion and storage round-trips."""

import json
import logging

import numpy as np
import pytest

from conftest import spotify_entry
from songvec.db import all_rows, find_by_id, get_or_create_playlists, get_or_create_songs
from songvec.embed import compose_track_vector
from songvec.ingest import ingest_catalog, parse_tracks
from songvec.models import TrackFeatures
from songvec.vectors import AUDIO_DIM, COMBINED_DIM, GENRE_DIM


def _write_catalog(tmp_path, tracks, playlists=()):
    path = tmp_path / "catalog.json"
    path.write_text(json.dumps({"tracks": list(tracks), "playlists": list(playlists)}))
    return path


class TestParseTracks:
    def test_skips_unusable_entries(self, caplog) -> None:
        good = spotify_entry("a")
        no_features = spotify_entry("b")
        del no_features["audio_features"]
        no_id = spotify_entry("")
        with caplog.at_level(logging.WARNING):
            tracks = parse_tracks([good, no_features, no_id])
        assert [t.id for t in tracks] == ["a"]
        assert "No audio features found for track: b" in caplog.text


class TestIngestCatalog:
    def test_stores_vectors(self, tmp_path, db) -> None:
        path = _write_catalog(tmp_path, [spotify_entry("a"), spotify_entry("b", genres=["rock"])])
        assert ingest_catalog(path, db=db) == (2, 0)

        row = find_by_id(get_or_create_songs(db), "a")
        assert row is not None
        assert len(row["audio_vec"]) == AUDIO_DIM
        assert len(row["genre_vec"]) == GENRE_DIM
        assert len(row["combined_vec"]) == COMBINED_DIM
        assert row["release_year"] == 2018

        entry = spotify_entry("a")
        expected = compose_track_vector(TrackFeatures.from_spotify(entry, entry["audio_features"], entry["genres"]))
        assert np.array_equal(np.array(row["combined_vec"]), expected)

    def test_stored_track_round_trips(self, tmp_path, db) -> None:
        entry = spotify_entry("a", genres=["pop", "funk"])
        ingest_catalog(_write_catalog(tmp_path, [entry]), db=db)
        row = find_by_id(get_or_create_songs(db), "a")
        original = TrackFeatures.from_spotify(entry, entry["audio_features"], entry["genres"])
        assert TrackFeatures.from_row(row) == original

    def test_reingest_overwrites(self, tmp_path, db) -> None:
        ingest_catalog(_write_catalog(tmp_path, [spotify_entry("a", energy=0.1)]), db=db)
        ingest_catalog(_write_catalog(tmp_path, [spotify_entry("a", energy=0.9)]), db=db)
        rows = all_rows(get_or_create_songs(db)).to_pylist()
        assert len(rows) == 1
        assert rows[0]["energy"] == pytest.approx(0.9)

    def test_playlists_analyzed(self, tmp_path, db, caplog) -> None:
        tracks = [spotify_entry("a"), spotify_entry("b", genres=["rock"])]
        playlists = [
            {"id": "pl", "name": "Mix", "description": None, "track_ids": ["a", "b", "missing"]},
            {"id": "empty", "name": "Empty", "track_ids": ["missing"]},
        ]
        with caplog.at_level(logging.WARNING):
            assert ingest_catalog(_write_catalog(tmp_path, tracks, playlists), db=db) == (2, 1)
        assert "Skipping playlist empty" in caplog.text

        row = find_by_id(get_or_create_playlists(db), "pl")
        assert row["name"] == "Mix"
        assert row["track_ids"] == ["a", "b"]
        assert row["track_count"] == 2
        assert len(row["playlist_vec"]) == COMBINED_DIM
        assert np.linalg.norm(row["playlist_vec"]) == pytest.approx(1.0)

    def test_no_usable_tracks(self, tmp_path, db) -> None:
        with pytest.raises(RuntimeError):
            ingest_catalog(_write_catalog(tmp_path, []), db=db)

    def test_rejects_non_object(self, tmp_path, db) -> None:
        path = tmp_path / "catalog.json"
        path.write_text("[]")
        with pytest.raises(ValueError):
            ingest_catalog(path, db=db)
