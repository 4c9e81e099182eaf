"""Compose fixed-layout track vectors and aggregate them into playlist vectors.

Combined vector layout (128 coordinates):

    0-11    audio vector
    12-31   first 20 coordinates of the genre vector
    32-35   popularity, release year, duration, has preview
    36-127  repeated (energy*danceability, valence*energy,
            acousticness*instrumentalness, 0)

The layout is part of the stored format; do not reorder.
"""

from collections.abc import Iterable, Sequence

import numpy as np

from songvec.genres import GenreEmbedder
from songvec.models import TrackFeatures
from songvec.normalize import normalize_duration, normalize_loudness, normalize_tempo, normalize_year
from songvec.vectors import (
    COMBINED_DIM,
    InputShapeError,
    VectorLike,
    as_vector,
    freeze,
    l2_normalize,
    zero_vector,
)

GENRE_SLICE = 20


def compose_audio_vector(track: TrackFeatures) -> np.ndarray:
    vec = np.array(
        [
            track.acousticness,
            track.danceability,
            track.energy,
            track.instrumentalness,
            track.liveness,
            normalize_loudness(track.loudness),
            track.speechiness,
            normalize_tempo(track.tempo),
            track.valence,
            1.0 if track.mode else 0.0,
            track.key / 11,
            track.time_signature / 7,
        ],
        dtype=np.float64,
    )
    return freeze(vec)


class VectorComposer:
    def __init__(self, genre_embedder: GenreEmbedder | None = None, current_year: int | None = None) -> None:
        self.genre_embedder = genre_embedder or GenreEmbedder()
        self.current_year = current_year

    def genre_vector(self, genres: Iterable[str]) -> np.ndarray:
        return self.genre_embedder.embed(genres)

    def metadata_features(self, track: TrackFeatures) -> list[float]:
        return [
            track.popularity / 100,
            normalize_year(track.release_date, self.current_year),
            normalize_duration(track.duration_ms),
            1.0 if track.has_preview else 0.0,
        ]

    def compose(self, track: TrackFeatures) -> np.ndarray:
        audio = compose_audio_vector(track)
        genre = self.genre_vector(track.genres)

        combined = [*audio.tolist(), *genre[:GENRE_SLICE].tolist(), *self.metadata_features(track)]

        energy, danceability, valence = audio[2], audio[1], audio[8]
        interactions = [
            float(energy * danceability),
            float(valence * energy),
            float(audio[0] * audio[3]),
            0.0,
        ]
        while len(combined) < COMBINED_DIM:
            combined.extend(interactions)

        return l2_normalize(combined[:COMBINED_DIM])


_default_composer = VectorComposer()


def compose_track_vector(track: TrackFeatures) -> np.ndarray:
    return _default_composer.compose(track)


def compose_genre_vector(genres: Iterable[str]) -> np.ndarray:
    return _default_composer.genre_vector(genres)


def aggregate_playlist_vector(vectors: Sequence[VectorLike]) -> np.ndarray:
    """Mean of member vectors, L2-normalized.

    An empty playlist yields the all-zero combined vector.
    """
    if len(vectors) == 0:
        return zero_vector(COMBINED_DIM)

    members = [as_vector(v) for v in vectors]
    dim = len(members[0])
    for i, vec in enumerate(members):
        if len(vec) != dim:
            raise InputShapeError(f"Vector {i} has length {len(vec)}, expected {dim}")

    return l2_normalize(np.mean(np.stack(members), axis=0))
