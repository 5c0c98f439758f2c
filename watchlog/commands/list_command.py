"""
List command - Display tracked shows grouped by title
"""

import logging
import sys

from rich.console import Console
from rich.table import Table

from watchlog.exceptions import StorageError, ValidationError
from watchlog.storage import WatchlistStore
from watchlog.utils import format_episodes
from watchlog.watchlist import edit_entry, remove_entry, update_progress

logger = logging.getLogger(__name__)
console = Console()


def list_command(store: WatchlistStore, user_id: str, status: str | None = None):
    """Execute the list command logic"""
    try:
        shows = store.list_entries_by_show_title(user_id)
    except StorageError as e:
        console.print(f"[red]Error:[/red] {e}")
        sys.exit(1)

    if status:
        shows = {
            title: [s for s in seasons if s.status == status]
            for title, seasons in shows.items()
        }
        shows = {title: seasons for title, seasons in shows.items() if seasons}

    if not shows:
        console.print("[yellow]No anime on your watchlist[/yellow]")
        return

    total_seasons = sum(len(seasons) for seasons in shows.values())
    table = Table(title=f"Watchlist ({len(shows)} shows, {total_seasons} seasons)")
    table.add_column("Title", style="green")
    table.add_column("Season", style="cyan")
    table.add_column("Progress", style="blue")
    table.add_column("Status", style="magenta")
    table.add_column("Rating", style="yellow")
    table.add_column("ID", style="dim")

    for title, seasons in shows.items():
        for index, season in enumerate(seasons):
            table.add_row(
                title if index == 0 else "",
                str(season.season_number),
                format_episodes(season.episodes_watched, season.total_episodes),
                season.status,
                str(season.rating) if season.rating is not None else "-",
                season.id,
            )

    console.print(table)


def progress_command(store: WatchlistStore, entry_id: str, watched: int):
    """Record watched episodes for one tracked season"""
    try:
        entry = update_progress(store, entry_id, watched)
    except ValidationError as e:
        console.print(f"[red]Error:[/red] {e}")
        sys.exit(1)
    except StorageError as e:
        console.print(f"[red]Error:[/red] {e}")
        logger.exception("Error updating progress")
        sys.exit(1)

    console.print(
        f"[green]✓ {entry.title} Season {entry.season_number}:[/green] "
        f"{format_episodes(entry.episodes_watched, entry.total_episodes)} "
        f"({entry.status})"
    )


def edit_command(
    store: WatchlistStore,
    entry_id: str,
    status: str | None = None,
    rating: int | None = None,
    notes: str | None = None,
):
    """Change status, rating or notes of one tracked season"""
    try:
        entry = edit_entry(store, entry_id, status=status, rating=rating, notes=notes)
    except ValidationError as e:
        console.print(f"[red]Error:[/red] {e}")
        sys.exit(1)
    except StorageError as e:
        console.print(f"[red]Error:[/red] {e}")
        logger.exception("Error editing entry")
        sys.exit(1)

    rating_text = str(entry.rating) if entry.rating is not None else "-"
    console.print(
        f"[green]✓ {entry.title} Season {entry.season_number} updated:[/green] "
        f"{entry.status}, rating {rating_text}"
    )


def delete_command(store: WatchlistStore, entry_id: str):
    """Remove one tracked season from the watchlist"""
    try:
        entry = remove_entry(store, entry_id)
    except ValidationError as e:
        console.print(f"[red]Error:[/red] {e}")
        sys.exit(1)
    except StorageError as e:
        console.print(f"[red]Error:[/red] {e}")
        logger.exception("Error deleting entry")
        sys.exit(1)

    console.print(
        f"[green]✓ Removed {entry.title} Season {entry.season_number}[/green]"
    )
