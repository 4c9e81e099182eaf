"""Map free-text genre labels onto a fixed-dimension genre vector."""

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType

import numpy as np

from songvec.vectors import GENRE_DIM, l2_normalize, zero_vector

UNKNOWN_GENRE = "unknown"

# Base vectors occupy the first ten coordinates of the genre space.
# Pop-like genres load the first five, rock-like genres the second five.
_REFERENCE_GENRES: dict[str, tuple[float, ...]] = {
    "pop": (1.0, 0.8, 0.6, 0.5, 0.7, 0.0, 0.0, 0.0, 0.0, 0.0),
    "dance pop": (1.0, 0.9, 0.8, 0.6, 0.8, 0.0, 0.0, 0.0, 0.0, 0.0),
    "electropop": (0.9, 0.8, 0.7, 0.8, 0.9, 0.0, 0.0, 0.0, 0.0, 0.0),
    "rock": (0.0, 0.0, 0.0, 0.0, 0.0, 1.0, 0.8, 0.6, 0.5, 0.7),
    "alternative rock": (0.0, 0.0, 0.0, 0.0, 0.0, 0.9, 0.8, 0.7, 0.6, 0.6),
    "indie rock": (0.0, 0.0, 0.0, 0.0, 0.0, 0.8, 0.9, 0.8, 0.7, 0.5),
    "hard rock": (0.0, 0.0, 0.0, 0.0, 0.0, 1.0, 0.7, 0.5, 0.9, 0.8),
    "electronic": (0.2, 0.9, 0.8, 1.0, 0.7, 0.0, 0.0, 0.0, 0.0, 0.0),
    "house": (0.3, 1.0, 0.9, 0.9, 0.8, 0.0, 0.0, 0.0, 0.0, 0.0),
    "techno": (0.1, 0.9, 0.8, 1.0, 0.6, 0.0, 0.0, 0.0, 0.0, 0.0),
    "edm": (0.4, 1.0, 1.0, 0.8, 0.9, 0.0, 0.0, 0.0, 0.0, 0.0),
    "hip hop": (0.3, 0.8, 0.7, 0.2, 0.6, 0.0, 0.0, 0.0, 0.0, 0.0),
    "rap": (0.2, 0.7, 0.6, 0.1, 0.5, 0.0, 0.0, 0.0, 0.0, 0.0),
    "trap": (0.4, 0.9, 0.8, 0.3, 0.7, 0.0, 0.0, 0.0, 0.0, 0.0),
    "r&b": (0.6, 0.7, 0.6, 0.3, 0.8, 0.0, 0.0, 0.0, 0.0, 0.0),
    "soul": (0.7, 0.6, 0.7, 0.2, 0.9, 0.0, 0.0, 0.0, 0.0, 0.0),
    "funk": (0.8, 0.9, 0.8, 0.4, 0.8, 0.0, 0.0, 0.0, 0.0, 0.0),
}

_REFERENCE_FALLBACK = (0.5,) * 10


@dataclass(frozen=True)
class GenreTable:
    """Read-only lookup of genre name to base vector, with a fallback entry.

    Names are matched case-insensitively. Base vectors may be shorter than
    the genre space; they fill its low-order coordinates.
    """

    vectors: Mapping[str, tuple[float, ...]]
    fallback: tuple[float, ...]
    dim: int = field(default=GENRE_DIM)

    def __post_init__(self) -> None:
        if not self.fallback:
            raise ValueError("Genre table needs a non-empty fallback vector")
        cleaned: dict[str, tuple[float, ...]] = {}
        for name, base in self.vectors.items():
            cleaned[name.strip().lower()] = tuple(float(v) for v in base)
        for name, base in [*cleaned.items(), (UNKNOWN_GENRE, tuple(self.fallback))]:
            if len(base) > self.dim:
                raise ValueError(f"Base vector for {name!r} exceeds {self.dim} dimensions")
        object.__setattr__(self, "vectors", MappingProxyType(cleaned))
        object.__setattr__(self, "fallback", tuple(float(v) for v in self.fallback))

    def lookup(self, genre: str) -> tuple[float, ...]:
        return self.vectors.get(genre.strip().lower(), self.fallback)

    def __contains__(self, genre: object) -> bool:
        return isinstance(genre, str) and genre.strip().lower() in self.vectors


DEFAULT_GENRE_TABLE = GenreTable(vectors=_REFERENCE_GENRES, fallback=_REFERENCE_FALLBACK)


def clean_genres(genres: Iterable[str]) -> list[str]:
    """Lower-case, de-duplicate and sort genre labels, dropping blanks."""
    return sorted({g.strip().lower() for g in genres if g and g.strip()})


class GenreEmbedder:
    """Averages the base vectors of a genre set and L2-normalizes the result."""

    def __init__(self, table: GenreTable = DEFAULT_GENRE_TABLE) -> None:
        self.table = table

    @property
    def dim(self) -> int:
        return self.table.dim

    def embed(self, genres: Iterable[str]) -> np.ndarray:
        labels = clean_genres(genres)
        if not labels:
            return zero_vector(self.dim)

        vec = np.zeros(self.dim, dtype=np.float64)
        for label in labels:
            base = self.table.lookup(label)
            vec[: len(base)] += np.asarray(base, dtype=np.float64) / len(labels)

        return l2_normalize(vec)
