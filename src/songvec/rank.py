"""Candidate ranking: plain similarity, hybrid re-weighting and greedy diversity."""

import logging
from collections.abc import Sequence
from enum import Enum

from songvec import config
from songvec.models import CandidateRecord, RankOptions, SimilarityResult
from songvec.normalize import clamp
from songvec.vectors import VectorLike, as_vector, cosine_similarity

logger = logging.getLogger(__name__)


class RankStrategy(str, Enum):
    PLAIN = "plain"
    HYBRID = "hybrid"
    DIVERSE = "diverse"


def _passes_filters(candidate: CandidateRecord, options: RankOptions, genre_filter: set[str]) -> bool:
    if candidate.id in options.exclude_ids:
        return False
    if genre_filter and not genre_filter.intersection(g.lower() for g in candidate.genres):
        return False
    if options.popularity_min is not None and candidate.popularity < options.popularity_min:
        return False
    if options.popularity_max is not None and candidate.popularity > options.popularity_max:
        return False
    if options.year_min is not None or options.year_max is not None:
        year = candidate.release_year
        if year is None:
            return False
        if options.year_min is not None and year < options.year_min:
            return False
        if options.year_max is not None and year > options.year_max:
            return False
    return True


def _genre_filter(options: RankOptions) -> set[str]:
    return {g.strip().lower() for g in options.genre_filter or () if g.strip()}


def _score_pool(
    query: VectorLike,
    candidates: Sequence[CandidateRecord],
    options: RankOptions,
) -> list[SimilarityResult]:
    """Filter, score and threshold the pool. Order follows the input."""
    query_vec = as_vector(query)
    genre_filter = _genre_filter(options)
    pool = [c for c in candidates if _passes_filters(c, options, genre_filter)]
    logger.debug("Scoring %d of %d candidates", len(pool), len(candidates))

    results = []
    for candidate in pool:
        similarity = clamp(cosine_similarity(query_vec, candidate.vector))
        if similarity < options.threshold:
            continue
        results.append(SimilarityResult(candidate=candidate, similarity=similarity))
    return results


def _sort(results: list[SimilarityResult]) -> list[SimilarityResult]:
    # Stable: equal scores keep input order
    return sorted(results, key=lambda r: r.score, reverse=True)


def rank(
    query: VectorLike,
    candidates: Sequence[CandidateRecord],
    options: RankOptions | None = None,
) -> list[SimilarityResult]:
    """Rank candidates by clamped cosine similarity to the query."""
    options = options or RankOptions()
    results = _sort(_score_pool(query, candidates, options))
    return results[: options.limit]


def _genre_matches(candidate: CandidateRecord, genre_filter: Sequence[str]) -> int:
    wanted = [g.lower() for g in genre_filter if g.strip()]
    return sum(1 for genre in candidate.genres if any(w in genre.lower() for w in wanted))


def hybrid_rank(
    query: VectorLike,
    candidates: Sequence[CandidateRecord],
    options: RankOptions | None = None,
) -> list[SimilarityResult]:
    """Rank by similarity blended with popularity, plus a genre-match boost.

    The boost applies only when a genre filter is set. Candidate genres
    count as matches when they contain a filter genre (case-insensitive).
    """
    options = options or RankOptions()
    weight = options.popularity_weight

    blended = []
    for result in _score_pool(query, candidates, options):
        candidate = result.candidate
        score = result.similarity * (1 - weight) + (candidate.popularity / 100) * weight
        if options.genre_filter and options.genre_boost > 0:
            matches = _genre_matches(candidate, options.genre_filter)
            if matches > 0:
                score += options.genre_boost * (matches / max(len(candidate.genres), 1))
        blended.append(SimilarityResult(candidate, result.similarity, hybrid_score=clamp(score)))

    return _sort(blended)[: options.limit]


def _redundancy(candidate: CandidateRecord, chosen: CandidateRecord) -> float:
    artist_match = 1.0 if candidate.artist and candidate.artist == chosen.artist else 0.0
    chosen_genres = set(chosen.genres)
    overlap = sum(1 for g in candidate.genres if g in chosen_genres) / max(len(candidate.genres), 1)
    return 0.5 * artist_match + 0.5 * overlap


def diverse_rank(
    query: VectorLike,
    candidates: Sequence[CandidateRecord],
    options: RankOptions | None = None,
) -> list[SimilarityResult]:
    """Greedy diversity-aware selection over an oversampled pool.

    Takes the top candidate first, then repeatedly the candidate maximizing
    score*(1-w) + (1 - min redundancy to the selection)*w, where
    redundancy mixes artist identity and genre overlap. Not globally
    optimal; cost is O(limit * pool size).
    """
    options = options or RankOptions()
    limit = options.limit
    pool_size = min(limit * config.OVERSAMPLE_FACTOR, config.MAX_OVERSAMPLE)
    remaining = _sort(_score_pool(query, candidates, options))[:pool_size]

    if len(remaining) <= limit:
        return remaining

    weight = options.diversity_weight
    selected = [remaining.pop(0)]

    while len(selected) < limit and remaining:
        best_index = 0
        best_score = float("-inf")
        for i, result in enumerate(remaining):
            redundancy = min(_redundancy(result.candidate, chosen.candidate) for chosen in selected)
            combined = result.score * (1 - weight) + (1 - redundancy) * weight
            if combined > best_score:
                best_score = combined
                best_index = i
        selected.append(remaining.pop(best_index))

    return selected


_STRATEGIES = {
    RankStrategy.PLAIN: rank,
    RankStrategy.HYBRID: hybrid_rank,
    RankStrategy.DIVERSE: diverse_rank,
}


def rank_with_strategy(
    strategy: RankStrategy | str,
    query: VectorLike,
    candidates: Sequence[CandidateRecord],
    options: RankOptions | None = None,
) -> list[SimilarityResult]:
    return _STRATEGIES[RankStrategy(strategy)](query, candidates, options)
