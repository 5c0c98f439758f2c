"""
CLI configuration handler
"""

import sys
from pathlib import Path

from rich.console import Console

from .config import Config
from .jikan import JikanClient
from .rate_limit import RequestSequencer
from .storage import WatchlistStore

console = Console()


def load_config_from_args(
    config_file: str | None,
    db_path: str | None,
    user_id: str | None,
    log_level: str | None = None,
) -> Config:
    """
    Load configuration from CLI arguments and files

    Args:
        config_file: Path to config file
        db_path: Database path from CLI
        user_id: User id from CLI
        log_level: Log level from CLI, overrides the configured one

    Returns:
        Config object

    Raises:
        SystemExit if configuration is invalid
    """
    try:
        if config_file:
            cfg = Config.from_env_and_file(Path(config_file))
        else:
            # Fall back to the default file, then to environment/defaults
            cfg = Config.from_env_and_file(Path("watchlog.yaml"))

        if db_path:
            cfg.database_path = db_path
        if user_id:
            cfg.user_id = user_id
        if log_level:
            cfg.log_level = log_level
    except Exception as e:
        console.print(f"[red]Configuration error:[/red] {e}")
        sys.exit(1)

    return cfg


def build_client(config: Config) -> JikanClient:
    """Create a catalog client with its own request sequencer"""
    sequencer = RequestSequencer(
        min_interval=config.request_delay,
        max_run_seconds=config.max_run_seconds,
    )
    return JikanClient(
        config.jikan_url, sequencer=sequencer, timeout=config.request_timeout
    )


def open_store(config: Config) -> WatchlistStore:
    """
    Open the watchlist database, creating tables if needed

    Raises:
        SystemExit if the database cannot be initialised
    """
    store = WatchlistStore(config.database_path)
    try:
        store.init_db()
    except Exception as e:
        console.print(f"[red]Database error:[/red] {e}")
        console.print(f"\nCheck that {config.database_path} is writable")
        sys.exit(1)
    return store


def setup_context(config: Config) -> dict:
    """
    Setup CLI context with config and watchlist store

    Catalog clients are built per command run (build_client) so that no
    request sequencer is shared between runs.

    Args:
        config: Configuration object

    Returns:
        Dictionary with context objects
    """
    return {
        "config": config,
        "store": open_store(config),
    }
