"""Shared fixtures for songvec tests."""

import numpy as np
import pytest

from songvec.db import get_db
from songvec.models import CandidateRecord, TrackFeatures


def make_track(track_id: str = "t1", **overrides) -> TrackFeatures:
    values = {
        "id": track_id,
        "acousticness": 0.2,
        "danceability": 0.7,
        "energy": 0.8,
        "instrumentalness": 0.1,
        "liveness": 0.15,
        "loudness": -6.0,
        "speechiness": 0.05,
        "tempo": 120.0,
        "valence": 0.6,
        "mode": 1,
        "key": 5,
        "time_signature": 4,
        "popularity": 70,
        "release_date": "2015-06-01",
        "duration_ms": 210_000,
        "has_preview": True,
        "genres": ("pop",),
        "name": f"Song {track_id}",
        "artist": "Artist",
        "album": "Album",
    }
    values.update(overrides)
    return TrackFeatures(**values)


def make_candidate(
    cand_id: str,
    vector: list[float],
    popularity: int = 50,
    genres: tuple[str, ...] = (),
    artist: str = "Artist",
    release_year: int | None = 2010,
) -> CandidateRecord:
    return CandidateRecord(
        id=cand_id,
        vector=np.array(vector, dtype=np.float64),
        popularity=popularity,
        genres=genres,
        artist=artist,
        release_year=release_year,
    )


def spotify_entry(track_id: str, artist: str = "Artist", genres: list[str] | None = None, **features) -> dict:
    audio = {
        "acousticness": 0.3,
        "danceability": 0.6,
        "energy": 0.7,
        "instrumentalness": 0.0,
        "liveness": 0.1,
        "loudness": -8.0,
        "speechiness": 0.04,
        "tempo": 110.0,
        "valence": 0.5,
        "mode": 0,
        "key": 2,
        "time_signature": 4,
    }
    audio.update(features)
    return {
        "id": track_id,
        "name": f"Song {track_id}",
        "artists": [{"name": artist}],
        "album": {"name": "Album", "release_date": "2018-03-09"},
        "popularity": 60,
        "duration_ms": 180_000,
        "preview_url": "https://example.com/preview.mp3",
        "audio_features": audio,
        "genres": genres if genres is not None else ["pop"],
    }


@pytest.fixture
def db(tmp_path):
    return get_db(tmp_path / "db")
