"""Similarity queries against the stored catalog."""

import dataclasses
import logging

import lancedb

from songvec.db import (
    all_rows,
    find_by_id,
    find_similarities,
    get_db,
    get_or_create_playlists,
    get_or_create_similarity_cache,
    get_or_create_songs,
    upsert_similarities,
)
from songvec.models import CandidateRecord, RankOptions, SimilarityResult
from songvec.rank import RankStrategy, rank_with_strategy

logger = logging.getLogger(__name__)


def _catalog_candidates(db: lancedb.DBConnection) -> list[CandidateRecord]:
    rows = all_rows(get_or_create_songs(db)).to_pylist()
    return [CandidateRecord.from_row(row) for row in rows]


def _excluding(options: RankOptions | None, ids: set[str]) -> RankOptions:
    options = options or RankOptions()
    return dataclasses.replace(options, exclude_ids=options.exclude_ids | ids)


def similar_tracks(
    track_id: str,
    strategy: RankStrategy | str = RankStrategy.PLAIN,
    options: RankOptions | None = None,
    db: lancedb.DBConnection | None = None,
) -> list[SimilarityResult]:
    """Find stored songs most similar to the given song, excluding itself."""
    if db is None:
        db = get_db()
    query = find_by_id(get_or_create_songs(db), track_id)
    if query is None:
        raise LookupError(f"Track not found: {track_id}")

    options = _excluding(options, {track_id})
    results = rank_with_strategy(strategy, query["combined_vec"], _catalog_candidates(db), options)
    logger.info("Ranked %d results for track %s (%s)", len(results), track_id, RankStrategy(strategy).value)
    return results


def tracks_for_playlist(
    playlist_id: str,
    strategy: RankStrategy | str = RankStrategy.PLAIN,
    options: RankOptions | None = None,
    exclude_members: bool = True,
    db: lancedb.DBConnection | None = None,
) -> list[SimilarityResult]:
    """Find stored songs most similar to a playlist's aggregate vector."""
    if db is None:
        db = get_db()
    playlist = find_by_id(get_or_create_playlists(db), playlist_id)
    if playlist is None:
        raise LookupError(f"Playlist not found: {playlist_id}")

    if exclude_members:
        options = _excluding(options, set(playlist["track_ids"] or ()))
    results = rank_with_strategy(strategy, playlist["playlist_vec"], _catalog_candidates(db), options)
    logger.info("Ranked %d results for playlist %s (%s)", len(results), playlist_id, RankStrategy(strategy).value)
    return results


def cache_similarity_scores(
    source_id: str,
    results: list[SimilarityResult],
    db: lancedb.DBConnection | None = None,
) -> None:
    """Persist ranking scores keyed by (source, target)."""
    if db is None:
        db = get_db()
    upsert_similarities(get_or_create_similarity_cache(db), source_id, results)


def cached_similarities(
    source_id: str,
    limit: int = 50,
    db: lancedb.DBConnection | None = None,
) -> list[tuple[str, float]]:
    """Cached (target_id, score) pairs for a source, best first."""
    if db is None:
        db = get_db()
    rows = find_similarities(get_or_create_similarity_cache(db), source_id)
    rows.sort(key=lambda r: r["score"], reverse=True)
    return [(r["target_id"], r["score"]) for r in rows[:limit]]
