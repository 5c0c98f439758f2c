"""
Commands module for watchlog CLI
"""

from .add_command import add_command, add_manual_command, seasons_command
from .list_command import delete_command, edit_command, list_command, progress_command
from .search_command import search_command
from .test_command import test_command
from .update_command import (
    notifications_command,
    read_notification_command,
    update_command,
)

__all__ = [
    "add_command",
    "add_manual_command",
    "delete_command",
    "edit_command",
    "list_command",
    "notifications_command",
    "progress_command",
    "read_notification_command",
    "search_command",
    "seasons_command",
    "test_command",
    "update_command",
]
