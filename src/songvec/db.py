"""LanceDB schema and read/write operations."""

from collections.abc import Sequence
from pathlib import Path

import lancedb
import numpy as np
import pyarrow as pa
import pyarrow.compute as pc

from songvec import config
from songvec.models import CONTINUOUS_FEATURES, PlaylistAnalysis, SimilarityResult, TrackFeatures
from songvec.vectors import AUDIO_DIM, COMBINED_DIM, GENRE_DIM


def _vec_field(name: str, dim: int) -> pa.Field:
    return pa.field(name, pa.list_(pa.float64(), dim))


SONGS_SCHEMA = pa.schema([
    pa.field("id", pa.string()),
    pa.field("name", pa.string()),
    pa.field("artist", pa.string()),
    pa.field("album", pa.string()),
    *[pa.field(name, pa.float64()) for name in CONTINUOUS_FEATURES],
    pa.field("mode", pa.int32()),
    pa.field("key", pa.int32()),
    pa.field("time_signature", pa.int32()),
    pa.field("popularity", pa.int32()),
    pa.field("release_date", pa.string()),
    pa.field("release_year", pa.int32()),
    pa.field("duration_ms", pa.int64()),
    pa.field("has_preview", pa.bool_()),
    pa.field("genres", pa.list_(pa.string())),
    _vec_field("audio_vec", AUDIO_DIM),
    _vec_field("genre_vec", GENRE_DIM),
    _vec_field("combined_vec", COMBINED_DIM),
])

PLAYLISTS_SCHEMA = pa.schema([
    pa.field("id", pa.string()),
    pa.field("name", pa.string()),
    pa.field("description", pa.string()),
    pa.field("track_ids", pa.list_(pa.string())),
    pa.field("track_count", pa.int32()),
    pa.field("total_duration_ms", pa.int64()),
    *[pa.field(f"avg_{name}", pa.float64()) for name in CONTINUOUS_FEATURES],
    pa.field("avg_popularity", pa.float64()),
    pa.field("dominant_key", pa.int32()),
    pa.field("dominant_mode", pa.int32()),
    pa.field("dominant_time_signature", pa.int32()),
    pa.field("dominant_genres", pa.list_(pa.string())),
    _vec_field("playlist_vec", COMBINED_DIM),
])

SIMILARITY_SCHEMA = pa.schema([
    pa.field("id", pa.string()),
    pa.field("source_id", pa.string()),
    pa.field("target_id", pa.string()),
    pa.field("score", pa.float64()),
])


def get_db(path: Path | None = None) -> lancedb.DBConnection:
    db_path = Path(path) if path is not None else config.DB_PATH
    db_path.mkdir(parents=True, exist_ok=True)
    return lancedb.connect(str(db_path))


def _get_or_create(db: lancedb.DBConnection, name: str, schema: pa.Schema) -> lancedb.table.Table:
    if name in db.table_names():
        return db.open_table(name)
    return db.create_table(name, schema=schema)


def get_or_create_songs(db: lancedb.DBConnection) -> lancedb.table.Table:
    return _get_or_create(db, "songs", SONGS_SCHEMA)


def get_or_create_playlists(db: lancedb.DBConnection) -> lancedb.table.Table:
    return _get_or_create(db, "playlists", PLAYLISTS_SCHEMA)


def get_or_create_similarity_cache(db: lancedb.DBConnection) -> lancedb.table.Table:
    return _get_or_create(db, "similarity_cache", SIMILARITY_SCHEMA)


def _upsert(table: lancedb.table.Table, rows: list[dict], schema: pa.Schema) -> None:
    """Insert or overwrite rows by id via merge-insert."""
    if not rows:
        return
    data = pa.Table.from_pylist(rows, schema=schema)
    table.merge_insert("id").when_matched_update_all().when_not_matched_insert_all().execute(data)


def song_row(
    track: TrackFeatures,
    audio_vec: np.ndarray,
    genre_vec: np.ndarray,
    combined_vec: np.ndarray,
) -> dict:
    return {
        "id": track.id,
        "name": track.name,
        "artist": track.artist,
        "album": track.album,
        **{name: float(getattr(track, name)) for name in CONTINUOUS_FEATURES},
        "mode": track.mode,
        "key": track.key,
        "time_signature": track.time_signature,
        "popularity": track.popularity,
        "release_date": track.release_date,
        "release_year": track.release_year or 0,
        "duration_ms": track.duration_ms,
        "has_preview": track.has_preview,
        "genres": list(track.genres),
        "audio_vec": audio_vec.tolist(),
        "genre_vec": genre_vec.tolist(),
        "combined_vec": combined_vec.tolist(),
    }


def playlist_row(analysis: PlaylistAnalysis) -> dict:
    return {
        "id": analysis.playlist_id,
        "name": analysis.name,
        "description": analysis.description,
        "track_ids": list(analysis.track_ids),
        "track_count": analysis.track_count,
        "total_duration_ms": analysis.total_duration_ms,
        **{f"avg_{name}": analysis.averages[name] for name in CONTINUOUS_FEATURES},
        "avg_popularity": analysis.avg_popularity,
        "dominant_key": analysis.dominant_key,
        "dominant_mode": analysis.dominant_mode,
        "dominant_time_signature": analysis.dominant_time_signature,
        "dominant_genres": list(analysis.dominant_genres),
        "playlist_vec": analysis.vector.tolist(),
    }


def upsert_songs(table: lancedb.table.Table, rows: list[dict]) -> None:
    _upsert(table, rows, SONGS_SCHEMA)


def upsert_playlists(table: lancedb.table.Table, rows: list[dict]) -> None:
    _upsert(table, rows, PLAYLISTS_SCHEMA)


def upsert_similarities(table: lancedb.table.Table, source_id: str, results: Sequence[SimilarityResult]) -> None:
    rows = [
        {
            "id": f"{source_id}::{r.id}",
            "source_id": source_id,
            "target_id": r.id,
            "score": float(r.score),
        }
        for r in results
    ]
    _upsert(table, rows, SIMILARITY_SCHEMA)


def all_rows(table: lancedb.table.Table) -> pa.Table:
    return table.to_arrow()


def _find_by(table: lancedb.table.Table, column: str, value: str) -> pa.Table:
    arrow = table.to_arrow()
    if len(arrow) == 0:
        return arrow
    return arrow.filter(pc.equal(arrow[column], value))


def find_by_id(table: lancedb.table.Table, record_id: str) -> dict | None:
    arrow = _find_by(table, "id", record_id)
    if len(arrow) == 0:
        return None
    return arrow.slice(0, 1).to_pylist()[0]


def find_similarities(table: lancedb.table.Table, source_id: str) -> list[dict]:
    return _find_by(table, "source_id", source_id).to_pylist()


def find_songs(table: lancedb.table.Table, ids: Sequence[str]) -> list[dict]:
    """Rows for the given ids, in the order requested. Unknown ids are skipped."""
    arrow = table.to_arrow()
    if len(arrow) == 0 or not ids:
        return []
    matched = arrow.filter(pc.is_in(arrow["id"], value_set=pa.array(list(ids), pa.string())))
    by_id = {row["id"]: row for row in matched.to_pylist()}
    return [by_id[i] for i in ids if i in by_id]
