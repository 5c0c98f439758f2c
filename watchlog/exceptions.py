"""
Exception hierarchy for watchlog
"""


class WatchlogError(Exception):
    """Base exception for all watchlog errors"""


class ConfigError(WatchlogError):
    """Configuration is missing or invalid"""


class StorageError(WatchlogError):
    """A read or write against the watchlist database failed"""


class ValidationError(WatchlogError):
    """User input was rejected before anything was written"""


class RunCancelled(WatchlogError):
    """A resolution or update run was abandoned before it finished"""
