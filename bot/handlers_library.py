"""Favorites, watchlist and personal rating handlers."""

from __future__ import annotations

from typing import Optional, Sequence

from telegram import Update
from telegram.ext import ContextTypes

from bot.commands import COMMAND_FAV, COMMAND_WATCH
from bot.handlers_ratings import _parse_positive_int
from bot.handlers_texts import LIBRARY_ITEM_USAGE_TEXT, RATE_USAGE_TEXT, format_library
from bot.handlers_transport import _send
from core.library import MAX_USER_RATING, MIN_USER_RATING, LibraryItem
from core.ratings_models import RatingSubject, normalize_subject_type
from core.services import get_services


def _parse_library_item(args: Sequence[str]) -> Optional[LibraryItem]:
    if len(args) < 2:
        return None
    media_type = normalize_subject_type(args[0])
    tmdb_id = _parse_positive_int(args[1])
    if media_type is None or tmdb_id is None:
        return None
    return LibraryItem(media_type=media_type, tmdb_id=tmdb_id, title=" ".join(args[2:]).strip())


async def fav_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    item = _parse_library_item(context.args or [])
    if item is None:
        await _send(update, LIBRARY_ITEM_USAGE_TEXT.format(command=COMMAND_FAV))
        return
    added = get_services().library.toggle_favorite(item)
    name = item.title or item.key
    await _send(update, f"❤️ {name} — в избранном." if added else f"💔 {name} убран из избранного.")


async def watch_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    item = _parse_library_item(context.args or [])
    if item is None:
        await _send(update, LIBRARY_ITEM_USAGE_TEXT.format(command=COMMAND_WATCH))
        return
    added = get_services().library.toggle_watchlist(item)
    name = item.title or item.key
    await _send(update, f"🕒 {name} — в списке «посмотреть позже»." if added else f"✔️ {name} убран из списка.")


async def rate_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    args = context.args or []
    item = _parse_library_item(args[:2])
    rating = _parse_positive_int(args[2]) if len(args) >= 3 else None
    if item is None or rating is None or not MIN_USER_RATING <= rating <= MAX_USER_RATING:
        await _send(update, RATE_USAGE_TEXT)
        return
    stored = get_services().library.rate_item(item.key, rating)
    await _send(update, f"✍️ Оценка {item.key}: {stored}/10")


async def library_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    services = get_services()
    library = services.library
    favorites = library.favorites
    watchlist = library.watchlist
    # Warm the ratings of listed titles so the next /rating answers from cache.
    services.ratings.ensure_for_list(
        RatingSubject(item.media_type, item.tmdb_id) for item in favorites + watchlist
    )
    await _send(update, format_library(favorites, watchlist, library.user_ratings))


__all__ = [
    "fav_command",
    "watch_command",
    "rate_command",
    "library_command",
]
