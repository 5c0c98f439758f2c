"""
Add commands - resolve a show's seasons and put them on the watchlist
"""

import logging
import sys

from rich.console import Console
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.table import Table

from watchlog.exceptions import RunCancelled, StorageError, ValidationError
from watchlog.jikan import JikanClient
from watchlog.models import AnimeRecord, ResolutionResult, ResolutionState
from watchlog.resolver import SeasonResolver
from watchlog.storage import WatchlistStore
from watchlog.watchlist import add_manual_show, add_show

logger = logging.getLogger(__name__)
console = Console()


def pick_seed(
    client: JikanClient, query: str, pick: int = 1, limit: int = 10
) -> AnimeRecord | None:
    """Search the catalog and return the pick-th result (1-based)"""
    results = client.search(query, limit=limit)
    if not results:
        console.print(f"[yellow]No anime found for '{query}'[/yellow]")
        return None
    if not 1 <= pick <= len(results):
        console.print(f"[red]Error:[/red] --pick must be between 1 and {len(results)}")
        return None
    return results[pick - 1]


def resolve_seasons(client: JikanClient, seed: AnimeRecord) -> ResolutionResult:
    """
    Run a season resolution with a progress spinner

    Ctrl+C cancels the run; partial results are discarded.

    Raises:
        RunCancelled: if the run was cancelled or timed out
    """
    resolver = SeasonResolver(client)
    try:
        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            console=console,
        ) as progress:
            task = progress.add_task(
                f"Fetching season details for {seed.display_title}...", total=None
            )
            result = resolver.resolve(seed)
            progress.update(task, completed=True)
    except KeyboardInterrupt:
        client.sequencer.cancel()
        raise RunCancelled("Season lookup cancelled by user") from None

    return result


def print_seasons(result: ResolutionResult):
    """Display the resolved seasons"""
    table = Table(title=f"Seasons of {result.title} ({len(result.seasons)})")
    table.add_column("Season", style="cyan")
    table.add_column("MAL ID", style="dim")
    table.add_column("Episodes", style="blue")
    table.add_column("Watched", style="green")
    table.add_column("Selected", style="magenta")

    for season in result.seasons:
        table.add_row(
            str(season.season_number),
            str(season.mal_id) if season.mal_id is not None else "-",
            str(season.episodes) if season.episodes is not None else "Unknown",
            str(season.episodes_watched),
            "✓" if season.selected else "✗",
        )

    console.print(table)
    if result.state == ResolutionState.FALLBACK:
        console.print("[yellow]⚠ Could not fetch related seasons, using basic data[/yellow]")


def seasons_command(client: JikanClient, query: str, pick: int = 1, limit: int = 10):
    """Resolve and display the seasons of a show without saving anything"""
    seed = pick_seed(client, query, pick, limit)
    if seed is None:
        sys.exit(1)

    try:
        result = resolve_seasons(client, seed)
    except RunCancelled as e:
        console.print(f"[yellow]{e}[/yellow]")
        sys.exit(1)

    print_seasons(result)
    stats = client.sequencer.stats()
    console.print(
        f"[dim]{stats['total_requests']} catalog request(s), "
        f"{stats['total_wait_seconds']}s waiting for rate limits[/dim]"
    )


def add_command(
    client: JikanClient,
    store: WatchlistStore,
    user_id: str,
    query: str,
    pick: int = 1,
    skip: tuple = (),
    unwatched: bool = False,
    status: str = "watching",
    rating: int | None = None,
    notes: str | None = None,
    dry_run: bool = False,
    limit: int = 10,
):
    """
    Resolve a show's seasons and add the selected ones to the watchlist

    Args:
        client: Catalog client
        store: Watchlist store
        user_id: Owner of the new entries
        query: Title to search for
        pick: Which search result to use (1-based)
        skip: Season numbers to leave out
        unwatched: Start every season at 0 watched episodes
        status: Watch status for every added season
        rating: Optional rating (1-10)
        notes: Optional notes
        dry_run: If True, show what would be added without saving
        limit: Number of search results to pick from
    """
    seed = pick_seed(client, query, pick, limit)
    if seed is None:
        sys.exit(1)

    try:
        result = resolve_seasons(client, seed)
    except RunCancelled as e:
        console.print(f"[yellow]{e}[/yellow]")
        sys.exit(1)

    for season in result.seasons:
        if season.season_number in skip:
            season.selected = False
        if unwatched:
            season.episodes_watched = 0

    print_seasons(result)

    if dry_run:
        selected = len(result.selected_seasons)
        console.print(
            f"\n[yellow]DRY RUN:[/yellow] Would add {selected} season(s) of {result.title}"
        )
        return

    try:
        created = add_show(store, user_id, result, status, rating, notes)
    except ValidationError as e:
        console.print(f"[red]Error:[/red] {e}")
        sys.exit(1)
    except StorageError as e:
        console.print(f"[red]Failed to add anime:[/red] {e}")
        logger.exception("Error while saving seasons")
        sys.exit(1)

    plural = "s" if len(created) != 1 else ""
    console.print(f"[green]✓ {len(created)} season{plural} added successfully![/green]")


def add_manual_command(
    store: WatchlistStore,
    user_id: str,
    title: str,
    seasons: int = 1,
    episodes: int | None = None,
    watched: int = 0,
    status: str = "watching",
    rating: int | None = None,
):
    """Add a show typed in by hand, without catalog data"""
    try:
        created = add_manual_show(
            store,
            user_id,
            title,
            number_of_seasons=seasons,
            total_episodes=episodes,
            episodes_watched=watched,
            status=status,
            rating=rating,
        )
    except ValidationError as e:
        console.print(f"[red]Error:[/red] {e}")
        sys.exit(1)
    except StorageError as e:
        console.print(f"[red]Failed to add anime:[/red] {e}")
        sys.exit(1)

    plural = "s" if len(created) != 1 else ""
    console.print(f"[green]✓ {len(created)} season{plural} added successfully![/green]")
