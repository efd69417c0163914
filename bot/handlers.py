"""Facade re-exporting every Telegram handler."""

from bot.handlers_base import diag_command, handle_message, help_command, start_command
from bot.handlers_library import fav_command, library_command, rate_command, watch_command
from bot.handlers_ratings import clear_cache_command, episode_command, rating_command

__all__ = [
    "start_command",
    "help_command",
    "diag_command",
    "handle_message",
    "rating_command",
    "episode_command",
    "clear_cache_command",
    "fav_command",
    "watch_command",
    "rate_command",
    "library_command",
]
