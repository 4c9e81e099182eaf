"""Ingest a catalog export: compose vectors for tracks and analyze playlists."""

import json
import logging
from pathlib import Path
from typing import Any

import lancedb
from tqdm import tqdm

from songvec.analysis import analyze_playlist
from songvec.config import BATCH_SIZE
from songvec.db import (
    find_songs,
    get_db,
    get_or_create_playlists,
    get_or_create_songs,
    playlist_row,
    song_row,
    upsert_playlists,
    upsert_songs,
)
from songvec.embed import VectorComposer, compose_audio_vector
from songvec.models import TrackFeatures

logger = logging.getLogger(__name__)


def load_catalog(path: Path) -> dict[str, Any]:
    with open(path, encoding="utf-8") as f:
        catalog = json.load(f)
    if not isinstance(catalog, dict):
        raise ValueError(f"Catalog {path} must be a JSON object with 'tracks' and 'playlists'")
    return catalog


def parse_tracks(entries: list[dict]) -> list[TrackFeatures]:
    """Convert catalog track entries, skipping ones that cannot be embedded."""
    tracks = []
    for entry in entries:
        if not entry.get("id"):
            logger.warning("Skipping track without id: %r", entry.get("name"))
            continue
        features = entry.get("audio_features")
        if not features:
            logger.warning("No audio features found for track: %s", entry["id"])
            continue
        tracks.append(TrackFeatures.from_spotify(entry, features, entry.get("genres") or ()))
    return tracks


def ingest_tracks(
    tracks: list[TrackFeatures],
    db: lancedb.DBConnection,
    composer: VectorComposer | None = None,
) -> int:
    """Compose and store vectors for each track. Returns count stored."""
    composer = composer or VectorComposer()
    songs_table = get_or_create_songs(db)

    batch: list[dict] = []
    for track in tqdm(tracks, desc="Embedding tracks", unit="track"):
        batch.append(song_row(
            track,
            compose_audio_vector(track),
            composer.genre_vector(track.genres),
            composer.compose(track),
        ))
        if len(batch) >= BATCH_SIZE:
            upsert_songs(songs_table, batch)
            batch.clear()

    if batch:
        upsert_songs(songs_table, batch)

    return len(tracks)


def ingest_playlists(
    entries: list[dict],
    db: lancedb.DBConnection,
    composer: VectorComposer | None = None,
) -> int:
    """Analyze playlists from their stored members. Returns count stored."""
    composer = composer or VectorComposer()
    songs_table = get_or_create_songs(db)
    playlists_table = get_or_create_playlists(db)

    rows = []
    for entry in entries:
        playlist_id = entry.get("id")
        if not playlist_id:
            logger.warning("Skipping playlist without id: %r", entry.get("name"))
            continue
        track_ids = [str(t) for t in entry.get("track_ids") or []]
        members = [TrackFeatures.from_row(row) for row in find_songs(songs_table, track_ids)]
        if len(members) < len(track_ids):
            logger.warning(
                "Playlist %s: %d of %d tracks not in catalog",
                playlist_id, len(track_ids) - len(members), len(track_ids),
            )
        if not members:
            logger.warning("Skipping playlist %s: no known tracks", playlist_id)
            continue
        analysis = analyze_playlist(
            playlist_id,
            members,
            name=entry.get("name"),
            description=entry.get("description"),
            composer=composer,
        )
        rows.append(playlist_row(analysis))

    for i in range(0, len(rows), BATCH_SIZE):
        upsert_playlists(playlists_table, rows[i : i + BATCH_SIZE])

    return len(rows)


def ingest_catalog(path: Path, db: lancedb.DBConnection | None = None) -> tuple[int, int]:
    """Ingest a catalog JSON export.

    Returns (track_count, playlist_count).
    """
    catalog = load_catalog(path)
    tracks = parse_tracks(catalog.get("tracks") or [])
    if not tracks:
        raise RuntimeError(f"No usable tracks in catalog {path}")

    if db is None:
        db = get_db()
    composer = VectorComposer()

    track_count = ingest_tracks(tracks, db, composer)
    logger.info("Stored vectors for %d tracks", track_count)
    playlist_count = ingest_playlists(catalog.get("playlists") or [], db, composer)
    logger.info("Stored analysis for %d playlists", playlist_count)
    return track_count, playlist_count
