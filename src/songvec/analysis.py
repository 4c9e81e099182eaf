"""Playlist-level summaries: feature averages, dominant traits and the playlist vector."""

from collections import Counter
from collections.abc import Sequence

from songvec.embed import VectorComposer, aggregate_playlist_vector
from songvec.models import CONTINUOUS_FEATURES, PlaylistAnalysis, TrackFeatures

TOP_GENRES = 5


def _most_common(values: list[int]) -> int:
    # Counter keeps first-seen order, so ties go to the earliest value
    return Counter(values).most_common(1)[0][0]


def analyze_playlist(
    playlist_id: str,
    tracks: Sequence[TrackFeatures],
    name: str | None = None,
    description: str | None = None,
    composer: VectorComposer | None = None,
) -> PlaylistAnalysis:
    """Summarize a playlist from its member tracks.

    The playlist vector is always recomputed from every member; there is
    no incremental update.
    """
    if not tracks:
        raise ValueError(f"Playlist {playlist_id} has no tracks to analyze")

    composer = composer or VectorComposer()
    count = len(tracks)

    averages = {
        feature: sum(getattr(t, feature) for t in tracks) / count
        for feature in CONTINUOUS_FEATURES
    }

    genre_counter: Counter[str] = Counter()
    for track in tracks:
        genre_counter.update(g.lower() for g in track.genres)

    return PlaylistAnalysis(
        playlist_id=playlist_id,
        name=name or f"Playlist {playlist_id}",
        description=description,
        track_ids=tuple(t.id for t in tracks),
        track_count=count,
        total_duration_ms=sum(t.duration_ms for t in tracks),
        averages=averages,
        avg_popularity=sum(t.popularity for t in tracks) / count,
        dominant_key=_most_common([t.key for t in tracks]),
        dominant_mode=_most_common([t.mode for t in tracks]),
        dominant_time_signature=_most_common([t.time_signature for t in tracks]),
        dominant_genres=tuple(g for g, _ in genre_counter.most_common(TOP_GENRES)),
        vector=aggregate_playlist_vector([composer.compose(t) for t in tracks]),
    )
