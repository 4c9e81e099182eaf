"""CLI entrypoint for songvec."""

import logging
from pathlib import Path

import typer

from songvec import config
from songvec.models import RankOptions, SimilarityResult
from songvec.rank import RankStrategy
from songvec.vectors import InputShapeError

app = typer.Typer(
    name="songvec",
    help="Feature-vector track recommendation engine",
    no_args_is_help=True,
)


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log progress at INFO level"),
) -> None:
    level = logging.INFO if verbose else config.LOG_LEVEL
    logging.basicConfig(level=level, format="%(asctime)s - %(levelname)s - %(name)s - %(message)s")


def _options(
    limit: int,
    threshold: float,
    genre: list[str] | None,
    popularity_min: int | None,
    popularity_max: int | None,
    year_min: int | None,
    year_max: int | None,
    popularity_weight: float,
    genre_boost: float,
    diversity_weight: float,
) -> RankOptions:
    try:
        return RankOptions(
            limit=limit,
            threshold=threshold,
            genre_filter=tuple(genre) if genre else None,
            popularity_min=popularity_min,
            popularity_max=popularity_max,
            year_min=year_min,
            year_max=year_max,
            popularity_weight=popularity_weight,
            genre_boost=genre_boost,
            diversity_weight=diversity_weight,
        )
    except ValueError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)


def _print_results(results: list[SimilarityResult]) -> None:
    if not results:
        typer.echo("No matching tracks")
        return
    for i, r in enumerate(results, 1):
        c = r.candidate
        year = f" ({c.release_year})" if c.release_year else ""
        typer.echo(f"  {i:2d}. {c.artist} - {c.name or c.id}{year} [{r.score:.3f}]")


LimitOpt = typer.Option(config.DEFAULT_LIMIT, "-n", "--limit", help="Number of results")
ModeOpt = typer.Option(RankStrategy.PLAIN, "--mode", help="Ranking strategy")
ThresholdOpt = typer.Option(config.DEFAULT_THRESHOLD, "--threshold", help="Minimum similarity (0-1)")
GenreOpt = typer.Option(None, "--genre", help="Only tracks sharing one of these genres (repeatable)")
PopMinOpt = typer.Option(None, "--popularity-min", help="Minimum popularity (0-100)")
PopMaxOpt = typer.Option(None, "--popularity-max", help="Maximum popularity (0-100)")
YearMinOpt = typer.Option(None, "--year-min", help="Earliest release year")
YearMaxOpt = typer.Option(None, "--year-max", help="Latest release year")
PopWeightOpt = typer.Option(config.DEFAULT_POPULARITY_WEIGHT, "--popularity-weight", help="Hybrid popularity weight (0-1)")
BoostOpt = typer.Option(config.DEFAULT_GENRE_BOOST, "--genre-boost", help="Hybrid genre-match boost")
DiversityOpt = typer.Option(config.DEFAULT_DIVERSITY_WEIGHT, "--diversity-weight", help="Diversity weight (0-1)")
CacheOpt = typer.Option(False, "--cache", help="Store the scores in the similarity cache")


@app.command()
def ingest(
    catalog: Path = typer.Argument(..., help="Path to a catalog JSON export"),
) -> None:
    """Compose vectors for catalog tracks and analyze its playlists."""
    if not catalog.is_file():
        typer.echo(f"Error: {catalog} is not a file", err=True)
        raise typer.Exit(1)

    from songvec.ingest import ingest_catalog

    typer.echo(f"Ingesting {catalog}...")
    try:
        tracks, playlists = ingest_catalog(catalog)
    except (ValueError, RuntimeError) as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)
    typer.echo(f"Done: {tracks} tracks, {playlists} playlists")


@app.command()
def similar(
    track_id: str = typer.Argument(..., help="Track id"),
    n: int = LimitOpt,
    mode: RankStrategy = ModeOpt,
    threshold: float = ThresholdOpt,
    genre: list[str] | None = GenreOpt,
    popularity_min: int | None = PopMinOpt,
    popularity_max: int | None = PopMaxOpt,
    year_min: int | None = YearMinOpt,
    year_max: int | None = YearMaxOpt,
    popularity_weight: float = PopWeightOpt,
    genre_boost: float = BoostOpt,
    diversity_weight: float = DiversityOpt,
    cache: bool = CacheOpt,
) -> None:
    """Find tracks similar to a stored track."""
    from songvec.recommend import cache_similarity_scores, similar_tracks

    options = _options(
        n, threshold, genre, popularity_min, popularity_max,
        year_min, year_max, popularity_weight, genre_boost, diversity_weight,
    )
    try:
        results = similar_tracks(track_id, mode, options)
    except LookupError as e:
        typer.echo(f"Error: {e.args[0]}", err=True)
        raise typer.Exit(1)
    except InputShapeError:
        typer.echo("Could not compute recommendations for this input", err=True)
        raise typer.Exit(1)

    typer.echo(f"\nTracks similar to: {track_id}\n")
    _print_results(results)
    if cache:
        cache_similarity_scores(track_id, results)


@app.command()
def playlist(
    playlist_id: str = typer.Argument(..., help="Playlist id"),
    n: int = LimitOpt,
    mode: RankStrategy = ModeOpt,
    threshold: float = ThresholdOpt,
    genre: list[str] | None = GenreOpt,
    popularity_min: int | None = PopMinOpt,
    popularity_max: int | None = PopMaxOpt,
    year_min: int | None = YearMinOpt,
    year_max: int | None = YearMaxOpt,
    popularity_weight: float = PopWeightOpt,
    genre_boost: float = BoostOpt,
    diversity_weight: float = DiversityOpt,
    include_members: bool = typer.Option(False, "--include-members", help="Allow tracks already in the playlist"),
    cache: bool = CacheOpt,
) -> None:
    """Recommend tracks for a stored playlist."""
    from songvec.recommend import cache_similarity_scores, tracks_for_playlist

    options = _options(
        n, threshold, genre, popularity_min, popularity_max,
        year_min, year_max, popularity_weight, genre_boost, diversity_weight,
    )
    try:
        results = tracks_for_playlist(playlist_id, mode, options, exclude_members=not include_members)
    except LookupError as e:
        typer.echo(f"Error: {e.args[0]}", err=True)
        raise typer.Exit(1)
    except InputShapeError:
        typer.echo("Could not compute recommendations for this input", err=True)
        raise typer.Exit(1)

    typer.echo(f"\nRecommendations for playlist: {playlist_id}\n")
    _print_results(results)
    if cache:
        cache_similarity_scores(playlist_id, results)


@app.command()
def analyze(
    playlist_id: str = typer.Argument(..., help="Playlist id"),
) -> None:
    """Show the stored analysis of a playlist."""
    from songvec.db import find_by_id, get_db, get_or_create_playlists
    from songvec.models import CONTINUOUS_FEATURES

    row = find_by_id(get_or_create_playlists(get_db()), playlist_id)
    if row is None:
        typer.echo(f"Error: Playlist not found: {playlist_id}", err=True)
        raise typer.Exit(1)

    typer.echo(f"\n{row['name']}: {row['track_count']} tracks, {row['total_duration_ms'] // 60000} min\n")
    typer.echo("Averages:")
    for name in CONTINUOUS_FEATURES:
        typer.echo(f"  {name}: {row[f'avg_{name}']:.3f}")
    typer.echo(f"  popularity: {row['avg_popularity']:.1f}")

    typer.echo(f"\nKey: {row['dominant_key']}  Mode: {row['dominant_mode']}  Time signature: {row['dominant_time_signature']}")
    typer.echo("\nTop Genres:")
    for genre in row["dominant_genres"] or []:
        typer.echo(f"  {genre}")


if __name__ == "__main__":
    app()
