"""Data models for tracks, ranking candidates and results."""

import logging
import math
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

import numpy as np

from songvec import config
from songvec.normalize import parse_release_year
from songvec.vectors import as_vector, freeze

logger = logging.getLogger(__name__)

UNIT_FEATURES = (
    "acousticness",
    "danceability",
    "energy",
    "instrumentalness",
    "liveness",
    "speechiness",
    "valence",
)

# The nine continuous descriptors, in catalog order
CONTINUOUS_FEATURES = (
    "acousticness",
    "danceability",
    "energy",
    "instrumentalness",
    "liveness",
    "loudness",
    "speechiness",
    "tempo",
    "valence",
)

FEATURE_DEFAULTS: dict[str, float] = {
    **{name: 0.5 for name in UNIT_FEATURES},
    "loudness": -30.0,
    "tempo": 125.0,
    "mode": 1,
    "key": 0,
    "time_signature": 4,
    "popularity": 50,
    "duration_ms": 0,
}


def _number(payload: Mapping[str, Any], key: str, cast: type, track_id: str) -> Any:
    raw = payload.get(key)
    if raw is None or isinstance(raw, bool):
        logger.warning("Track %s: missing %s, using default %s", track_id, key, FEATURE_DEFAULTS[key])
        return cast(FEATURE_DEFAULTS[key])
    try:
        value = float(raw)
        if not math.isfinite(value):
            raise ValueError(value)
        return cast(value) if cast is int else cast(raw)
    except (TypeError, ValueError, OverflowError):
        logger.warning("Track %s: bad %s %r, using default %s", track_id, key, raw, FEATURE_DEFAULTS[key])
        return cast(FEATURE_DEFAULTS[key])


@dataclass(frozen=True)
class TrackFeatures:
    id: str
    acousticness: float
    danceability: float
    energy: float
    instrumentalness: float
    liveness: float
    loudness: float
    speechiness: float
    tempo: float
    valence: float
    mode: int
    key: int
    time_signature: int
    popularity: int
    release_date: str | None
    duration_ms: int
    has_preview: bool
    genres: tuple[str, ...] = ()
    name: str = ""
    artist: str = ""
    album: str = ""

    @property
    def release_year(self) -> int | None:
        return parse_release_year(self.release_date)

    @classmethod
    def from_spotify(
        cls,
        track: Mapping[str, Any],
        audio_features: Mapping[str, Any],
        genres: list[str] | tuple[str, ...] = (),
    ) -> "TrackFeatures":
        """Build a record from a catalog track object and its audio features.

        Missing or malformed numeric fields fall back to FEATURE_DEFAULTS.
        """
        track_id = str(track.get("id") or audio_features.get("id") or "")
        album = track.get("album") or {}
        artists = track.get("artists") or []
        preview = track.get("preview_url")

        values = {name: _number(audio_features, name, float, track_id) for name in CONTINUOUS_FEATURES}
        return cls(
            id=track_id,
            **values,
            mode=_number(audio_features, "mode", int, track_id),
            key=_number(audio_features, "key", int, track_id),
            time_signature=_number(audio_features, "time_signature", int, track_id),
            popularity=_number(track, "popularity", int, track_id),
            release_date=album.get("release_date") or None,
            duration_ms=_number(track, "duration_ms", int, track_id),
            has_preview=isinstance(preview, str) and bool(preview),
            genres=tuple(g for g in genres if isinstance(g, str)),
            name=str(track.get("name") or ""),
            artist=", ".join(str(a.get("name", "")) for a in artists if a.get("name")),
            album=str(album.get("name") or ""),
        )

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "TrackFeatures":
        """Rebuild a record from a stored songs row."""
        return cls(
            id=row["id"],
            **{name: float(row[name]) for name in CONTINUOUS_FEATURES},
            mode=int(row["mode"]),
            key=int(row["key"]),
            time_signature=int(row["time_signature"]),
            popularity=int(row["popularity"]),
            release_date=row.get("release_date") or None,
            duration_ms=int(row["duration_ms"]),
            has_preview=bool(row["has_preview"]),
            genres=tuple(row.get("genres") or ()),
            name=row.get("name") or "",
            artist=row.get("artist") or "",
            album=row.get("album") or "",
        )


@dataclass(frozen=True)
class CandidateRecord:
    """A rankable track: identifier, combined vector and ranking metadata."""

    id: str
    vector: np.ndarray = field(repr=False, compare=False)
    popularity: int = 0
    genres: tuple[str, ...] = ()
    artist: str = ""
    release_year: int | None = None
    name: str = ""

    def __post_init__(self) -> None:
        vec = as_vector(self.vector)
        if vec is self.vector:
            vec = vec.copy()
        object.__setattr__(self, "vector", freeze(vec))
        object.__setattr__(self, "genres", tuple(self.genres))

    @classmethod
    def from_row(cls, row: Mapping[str, Any], vector_key: str = "combined_vec") -> "CandidateRecord":
        year = row.get("release_year")
        return cls(
            id=row["id"],
            vector=np.asarray(row[vector_key], dtype=np.float64),
            popularity=int(row.get("popularity") or 0),
            genres=tuple(row.get("genres") or ()),
            artist=row.get("artist") or "",
            release_year=int(year) if year else None,
            name=row.get("name") or "",
        )


@dataclass(frozen=True)
class SimilarityResult:
    candidate: CandidateRecord
    similarity: float
    hybrid_score: float | None = None

    @property
    def score(self) -> float:
        """Score used for ordering: the blended score when hybrid-scored."""
        return self.similarity if self.hybrid_score is None else self.hybrid_score

    @property
    def id(self) -> str:
        return self.candidate.id


@dataclass(frozen=True)
class RankOptions:
    """Pre-filters and weights for the rank family.

    Every filter is applied before scoring.
    """

    limit: int = config.DEFAULT_LIMIT
    threshold: float = config.DEFAULT_THRESHOLD
    exclude_ids: frozenset[str] = frozenset()
    genre_filter: tuple[str, ...] | None = None
    popularity_min: int | None = None
    popularity_max: int | None = None
    year_min: int | None = None
    year_max: int | None = None
    popularity_weight: float = config.DEFAULT_POPULARITY_WEIGHT
    genre_boost: float = config.DEFAULT_GENRE_BOOST
    diversity_weight: float = config.DEFAULT_DIVERSITY_WEIGHT

    def __post_init__(self) -> None:
        object.__setattr__(self, "exclude_ids", frozenset(self.exclude_ids))
        if self.genre_filter is not None:
            object.__setattr__(self, "genre_filter", tuple(self.genre_filter))
        if self.limit < 0:
            raise ValueError(f"limit must be non-negative, got {self.limit}")
        for name in ("popularity_weight", "diversity_weight"):
            value = getattr(self, name)
            if not 0.0 <= value <= 1.0:
                raise ValueError(f"{name} must be within [0, 1], got {value}")
        if self.genre_boost < 0:
            raise ValueError(f"genre_boost must be non-negative, got {self.genre_boost}")
        for low, high in (("popularity_min", "popularity_max"), ("year_min", "year_max")):
            lo, hi = getattr(self, low), getattr(self, high)
            if lo is not None and hi is not None and lo > hi:
                raise ValueError(f"{low} ({lo}) is greater than {high} ({hi})")


@dataclass(frozen=True)
class PlaylistAnalysis:
    playlist_id: str
    name: str
    description: str | None
    track_ids: tuple[str, ...]
    track_count: int
    total_duration_ms: int
    averages: dict[str, float]
    avg_popularity: float
    dominant_key: int
    dominant_mode: int
    dominant_time_signature: int
    dominant_genres: tuple[str, ...]
    vector: np.ndarray = field(repr=False, compare=False)
