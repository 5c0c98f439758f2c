"""
Command Line Interface (CLI) with Click
"""

import logging
import sys
import time

import click
import schedule
from rich.console import Console

from watchlog.cli_config import build_client, load_config_from_args, setup_context
from watchlog.commands import (
    add_command,
    add_manual_command,
    delete_command,
    edit_command,
    list_command,
    notifications_command,
    progress_command,
    read_notification_command,
    search_command,
    seasons_command,
    test_command,
    update_command,
)
from watchlog.config import LOG_LEVELS, SCHEDULE_UNITS, Config
from watchlog.models import WATCH_STATUSES
from watchlog.storage import WatchlistStore
from watchlog.utils import setup_logging

logger = logging.getLogger(__name__)
console = Console()


@click.group()
@click.option(
    "--config", "-c", type=click.Path(exists=True), help="YAML configuration file"
)
@click.option("--db", envvar="WATCHLOG_DB", help="Watchlist database path")
@click.option("--user", envvar="WATCHLOG_USER", help="Watchlist owner id")
@click.option(
    "--log-level",
    type=click.Choice(LOG_LEVELS),
    help="Log level (default: log_level from config, else WARNING)",
)
@click.pass_context
def cli(ctx, config, db, user, log_level):
    """watchlog - Anime watchlist logbook with automatic season detection"""

    # Load and validate configuration
    cfg = load_config_from_args(config, db, user, log_level)

    # Setup logging
    setup_logging(cfg.log_level)

    # Setup context
    ctx.ensure_object(dict)
    ctx.obj.update(setup_context(cfg))


@cli.command()
@click.argument("query")
@click.option("--limit", "-l", type=click.IntRange(1, 25), help="Number of results")
@click.pass_context
def search(ctx, query, limit):
    """Search the anime catalog"""
    config: Config = ctx.obj["config"]
    search_command(build_client(config), query, limit or config.search_limit)


@cli.command()
@click.argument("query")
@click.option("--pick", "-p", default=1, show_default=True, help="Search result to use")
@click.pass_context
def seasons(ctx, query, pick):
    """Show the seasons of an anime without adding it"""
    config: Config = ctx.obj["config"]
    seasons_command(build_client(config), query, pick, config.search_limit)


@cli.command()
@click.argument("query")
@click.option("--pick", "-p", default=1, show_default=True, help="Search result to use")
@click.option(
    "--skip", "-s", type=int, multiple=True, help="Season number to leave out (repeatable)"
)
@click.option(
    "--unwatched",
    is_flag=True,
    help="Start all seasons at 0 watched episodes (default: already completed)",
)
@click.option(
    "--status",
    type=click.Choice(WATCH_STATUSES),
    default="watching",
    show_default=True,
)
@click.option("--rating", type=click.IntRange(1, 10), help="Rating (1-10)")
@click.option("--notes", help="Notes")
@click.option("--dry-run", "-d", is_flag=True, help="Simulation mode (don't save)")
@click.pass_context
def add(ctx, query, pick, skip, unwatched, status, rating, notes, dry_run):
    """Add an anime and its seasons to the watchlist"""
    config: Config = ctx.obj["config"]
    store: WatchlistStore = ctx.obj["store"]
    add_command(
        build_client(config),
        store,
        config.user_id,
        query,
        pick=pick,
        skip=skip,
        unwatched=unwatched,
        status=status,
        rating=rating,
        notes=notes,
        dry_run=dry_run,
        limit=config.search_limit,
    )


@cli.command("add-manual")
@click.argument("title")
@click.option("--seasons", type=click.IntRange(1), default=1, show_default=True)
@click.option("--episodes", type=click.IntRange(0), help="Episodes per season")
@click.option("--watched", type=click.IntRange(0), default=0, show_default=True)
@click.option(
    "--status",
    type=click.Choice(WATCH_STATUSES),
    default="watching",
    show_default=True,
)
@click.option("--rating", type=click.IntRange(1, 10), help="Rating (1-10)")
@click.pass_context
def add_manual(ctx, title, seasons, episodes, watched, status, rating):
    """Add an anime by hand, without catalog data"""
    config: Config = ctx.obj["config"]
    store: WatchlistStore = ctx.obj["store"]
    add_manual_command(
        store, config.user_id, title, seasons, episodes, watched, status, rating
    )


@cli.command("list")
@click.option("--status", type=click.Choice(WATCH_STATUSES), help="Filter by status")
@click.pass_context
def list_shows(ctx, status):
    """List tracked anime grouped by title"""
    config: Config = ctx.obj["config"]
    list_command(ctx.obj["store"], config.user_id, status)


@cli.command()
@click.argument("entry_id")
@click.argument("watched", type=click.IntRange(0))
@click.pass_context
def progress(ctx, entry_id, watched):
    """Set the watched episode count of a tracked season"""
    progress_command(ctx.obj["store"], entry_id, watched)


@cli.command()
@click.argument("entry_id")
@click.option("--status", type=click.Choice(WATCH_STATUSES), help="New watch status")
@click.option("--rating", type=click.IntRange(1, 10), help="Rating (1-10)")
@click.option("--notes", help="Notes")
@click.pass_context
def edit(ctx, entry_id, status, rating, notes):
    """Change status, rating or notes of a tracked season"""
    edit_command(ctx.obj["store"], entry_id, status=status, rating=rating, notes=notes)


@cli.command()
@click.argument("entry_id")
@click.confirmation_option(prompt="Remove this season from the watchlist?")
@click.pass_context
def delete(ctx, entry_id):
    """Remove a tracked season and its notifications"""
    delete_command(ctx.obj["store"], entry_id)


@cli.command("check-updates")
@click.pass_context
def check_updates(ctx):
    """Check tracked anime for new episodes and seasons"""
    config: Config = ctx.obj["config"]
    update_command(build_client(config), ctx.obj["store"], config.user_id)


@cli.command()
@click.option("--all", "show_all", is_flag=True, help="Include read notifications")
@click.option("--mark-read", is_flag=True, help="Mark all notifications as read")
@click.pass_context
def notifications(ctx, show_all, mark_read):
    """Show release notifications"""
    config: Config = ctx.obj["config"]
    notifications_command(ctx.obj["store"], config.user_id, show_all, mark_read)


@cli.command()
@click.argument("notification_id")
@click.pass_context
def read(ctx, notification_id):
    """Mark one notification as read"""
    read_notification_command(ctx.obj["store"], notification_id)


@cli.command()
@click.pass_context
def test(ctx):
    """Test connection to the catalog and the database"""
    config: Config = ctx.obj["config"]
    test_command(config, build_client(config), ctx.obj["store"])


@cli.command("schedule-mode")
@click.option(
    "--interval",
    type=int,
    help="Override schedule interval from config",
)
@click.option(
    "--unit",
    type=click.Choice(SCHEDULE_UNITS),
    help="Override schedule unit from config",
)
@click.pass_context
def schedule_mode(ctx, interval, unit):
    """Run update checks on a schedule"""

    config: Config = ctx.obj["config"]
    store: WatchlistStore = ctx.obj["store"]

    # Use command-line args if provided, otherwise use config
    schedule_interval = interval if interval is not None else config.schedule_interval
    schedule_unit = unit if unit is not None else config.schedule_unit

    if schedule_interval < 1:
        console.print(f"[red]Invalid schedule interval:[/red] {schedule_interval}")
        sys.exit(1)

    console.print("[bold cyan]watchlog - Schedule Mode[/bold cyan]")
    console.print(f"Checking for updates every {schedule_interval} {schedule_unit}")
    console.print("Press Ctrl+C to stop\n")

    def run_check():
        """Run one update check with a fresh catalog client"""
        try:
            console.print(f"\n[bold blue]{'=' * 60}[/bold blue]")
            console.print(
                f"[bold blue]Running scheduled check at {time.strftime('%Y-%m-%d %H:%M:%S')}[/bold blue]"
            )
            console.print(f"[bold blue]{'=' * 60}[/bold blue]\n")

            update_command(
                build_client(config), store, config.user_id, reraise_interrupt=True
            )

            console.print(
                f"\n[dim]Next run in {schedule_interval} {schedule_unit}[/dim]"
            )

        except Exception as e:
            console.print(f"[red]Error during scheduled check:[/red] {e}")
            logger.exception("Error during scheduled check")

    # Setup schedule based on unit
    schedule_job = getattr(schedule.every(schedule_interval), schedule_unit)
    schedule_job.do(run_check)

    try:
        # Run immediately on start
        console.print("[yellow]Running initial check...[/yellow]")
        run_check()

        # Keep running
        while True:
            schedule.run_pending()
            time.sleep(1)
    except KeyboardInterrupt:
        schedule.cancel_job(schedule_job)
        console.print("\n\n[yellow]Schedule mode stopped by user[/yellow]")
        sys.exit(0)


def main():
    """Main entry point"""
    cli(obj={})


if __name__ == "__main__":
    main()
