"""
Search command - find catalog entries by title
"""

from rich.console import Console
from rich.table import Table

from watchlog.jikan import JikanClient

console = Console()


def search_command(client: JikanClient, query: str, limit: int = 10):
    """Print catalog matches for a title query"""
    results = client.search(query, limit=limit)
    if not results:
        console.print(f"[yellow]No anime found for '{query}'[/yellow]")
        return

    table = Table(title=f"Search results for '{query}' ({len(results)})")
    table.add_column("#", style="dim")
    table.add_column("MAL ID", style="cyan")
    table.add_column("Title", style="green")
    table.add_column("Type", style="magenta")
    table.add_column("Episodes", style="blue")
    table.add_column("Aired", style="dim")
    table.add_column("Score", style="yellow")

    for index, anime in enumerate(results, start=1):
        table.add_row(
            str(index),
            str(anime.mal_id),
            anime.display_title,
            anime.media_type or "-",
            str(anime.episodes) if anime.episodes is not None else "?",
            (anime.aired_from or "-")[:10],
            f"{anime.score:.2f}" if anime.score is not None else "-",
        )

    console.print(table)
