"""
Miscellaneous utilities
"""

import logging


def setup_logging(log_level: str = "INFO"):
    """Configure logging system"""
    numeric_level = getattr(logging, log_level.upper(), None)
    if not isinstance(numeric_level, int):
        numeric_level = logging.INFO

    logging.basicConfig(
        level=numeric_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def format_episodes(watched: int, total: int | None) -> str:
    """Format watched/total episodes, e.g. '3/12' or '3/?'"""
    return f"{watched}/{total if total is not None else '?'}"
