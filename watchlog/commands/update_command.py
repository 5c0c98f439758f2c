"""
Update command - check tracked shows for new episodes and seasons
"""

import logging
import sys

from rich.console import Console
from rich.table import Table

from watchlog.exceptions import RunCancelled, StorageError
from watchlog.jikan import JikanClient
from watchlog.models import EPISODE_RELEASE, UpdateReport
from watchlog.storage import WatchlistStore
from watchlog.updates import UpdateChecker

logger = logging.getLogger(__name__)
console = Console()


def update_command(
    client: JikanClient,
    store: WatchlistStore,
    user_id: str,
    reraise_interrupt: bool = False,
) -> UpdateReport | None:
    """
    Run one update check and print what was found

    Args:
        client: Catalog client
        store: Watchlist store
        user_id: Owner of the tracked shows
        reraise_interrupt: Cancel the run and re-raise KeyboardInterrupt
            instead of returning, so a caller loop can stop too

    Returns:
        The UpdateReport, or None if the run was cancelled
    """
    checker = UpdateChecker(client, store)
    console.print("[blue]Checking for new episodes and seasons...[/blue]")

    try:
        report = checker.check(user_id)
    except KeyboardInterrupt:
        client.sequencer.cancel()
        console.print("[yellow]Update check cancelled[/yellow]")
        if reraise_interrupt:
            raise
        return None
    except RunCancelled as e:
        console.print(f"[yellow]Update check stopped:[/yellow] {e}")
        return None
    except StorageError as e:
        console.print(f"[red]Error:[/red] {e}")
        logger.exception("Error during update check")
        sys.exit(1)

    for notification in report.notifications:
        icon = "📺" if notification["notification_type"] == EPISODE_RELEASE else "🎉"
        console.print(f"  {icon} {notification['message']}")

    console.print("\n[bold]Summary:[/bold]")
    console.print(f"  [green]Episode updates: {report.episode_updates}[/green]")
    console.print(f"  [green]New seasons: {report.new_seasons}[/green]")
    if report.failed_shows:
        console.print(
            f"  [red]Failed: {len(report.failed_shows)}[/red] "
            f"({', '.join(report.failed_shows)})"
        )

    return report


def notifications_command(
    store: WatchlistStore, user_id: str, show_all: bool = False, mark_read: bool = False
):
    """List release notifications"""
    try:
        notifications = store.list_notifications(user_id, unread_only=not show_all)
    except StorageError as e:
        console.print(f"[red]Error:[/red] {e}")
        sys.exit(1)

    if not notifications:
        console.print("[dim]No notifications[/dim]")
        return

    table = Table(title=f"Notifications ({len(notifications)})")
    table.add_column("Date", style="dim")
    table.add_column("Type", style="magenta")
    table.add_column("Message", style="green")
    table.add_column("Read", style="cyan")
    table.add_column("ID", style="dim")

    for notification in notifications:
        table.add_row(
            notification.created_at or "-",
            notification.notification_type,
            notification.message,
            "✓" if notification.read else "",
            notification.id,
        )
    console.print(table)

    if mark_read:
        try:
            store.mark_all_notifications_read(user_id)
        except StorageError as e:
            console.print(f"[red]Error:[/red] {e}")
            sys.exit(1)
        console.print("[green]✓ All notifications marked as read[/green]")


def read_notification_command(store: WatchlistStore, notification_id: str):
    """Mark one notification as read"""
    try:
        found = store.mark_notification_read(notification_id)
    except StorageError as e:
        console.print(f"[red]Error:[/red] {e}")
        sys.exit(1)

    if not found:
        console.print(f"[red]Error:[/red] No notification with id {notification_id}")
        sys.exit(1)
    console.print("[green]✓ Notification marked as read[/green]")
