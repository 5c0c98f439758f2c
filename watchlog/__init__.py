"""
watchlog - anime watchlist logbook with automatic season resolution
"""

__version__ = "1.0.0"
