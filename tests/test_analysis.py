"""Tests for playlist analysis."""

import numpy as np
import pytest

from conftest import make_track
from songvec.analysis import analyze_playlist
from songvec.embed import VectorComposer, aggregate_playlist_vector


def test_analyze_playlist_summaries() -> None:
    tracks = [
        make_track("a", energy=0.2, key=5, mode=1, genres=("pop", "rock"), duration_ms=100_000),
        make_track("b", energy=0.4, key=7, mode=0, genres=("pop",), duration_ms=200_000, popularity=30),
        make_track("c", energy=0.9, key=7, mode=0, genres=("Jazz", "rock", "pop"), duration_ms=300_000, popularity=20),
    ]
    analysis = analyze_playlist("pl", tracks)

    assert analysis.name == "Playlist pl"
    assert analysis.track_ids == ("a", "b", "c")
    assert analysis.track_count == 3
    assert analysis.total_duration_ms == 600_000
    assert analysis.averages["energy"] == pytest.approx(0.5)
    assert analysis.avg_popularity == pytest.approx(40.0)
    assert analysis.dominant_key == 7
    assert analysis.dominant_mode == 0
    assert analysis.dominant_time_signature == 4
    assert analysis.dominant_genres == ("pop", "rock", "jazz")


def test_playlist_vector_matches_aggregate() -> None:
    composer = VectorComposer(current_year=2050)
    tracks = [make_track("a"), make_track("b", valence=0.1, genres=("techno",))]
    analysis = analyze_playlist("pl", tracks, name="Mix", composer=composer)
    expected = aggregate_playlist_vector([composer.compose(t) for t in tracks])
    assert analysis.name == "Mix"
    assert np.array_equal(analysis.vector, expected)


def test_dominant_ties_go_to_first_seen() -> None:
    tracks = [make_track("a", key=3), make_track("b", key=9)]
    assert analyze_playlist("pl", tracks).dominant_key == 3


def test_empty_playlist_rejected() -> None:
    with pytest.raises(ValueError):
        analyze_playlist("pl", [])
