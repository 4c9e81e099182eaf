"""Vector primitives shared by embedding and ranking."""

from collections.abc import Sequence

import numpy as np

AUDIO_DIM = 12
GENRE_DIM = 50
COMBINED_DIM = 128

VectorLike = np.ndarray | Sequence[float]


class InputShapeError(ValueError):
    """Raised when vectors of mismatched length are combined."""


def freeze(vec: np.ndarray) -> np.ndarray:
    """Mark a vector read-only so it can be shared as a value."""
    vec.flags.writeable = False
    return vec


def as_vector(values: VectorLike) -> np.ndarray:
    vec = np.asarray(values, dtype=np.float64)
    if vec.ndim != 1:
        raise InputShapeError(f"Expected a 1-D vector, got shape {vec.shape}")
    return vec


def zero_vector(dim: int) -> np.ndarray:
    return freeze(np.zeros(dim, dtype=np.float64))


def l2_normalize(values: VectorLike) -> np.ndarray:
    """Scale to unit length. The all-zero vector is returned unchanged."""
    vec = as_vector(values)
    norm = np.linalg.norm(vec)
    if norm == 0:
        return freeze(vec.copy())
    return freeze(vec / norm)


def cosine_similarity(a: VectorLike, b: VectorLike) -> float:
    """Cosine similarity in [-1, 1].

    Returns 0.0 when either vector has zero or non-finite norm.
    """
    va = as_vector(a)
    vb = as_vector(b)
    if va.shape != vb.shape:
        raise InputShapeError(f"Vectors must have the same length: {len(va)} != {len(vb)}")

    norm_a = np.linalg.norm(va)
    norm_b = np.linalg.norm(vb)
    if norm_a == 0 or norm_b == 0 or not np.isfinite(norm_a * norm_b):
        return 0.0
    score = float(np.dot(va, vb) / (norm_a * norm_b))
    return max(-1.0, min(1.0, score))
