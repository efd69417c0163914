"""Shared handler texts and formatting of ratings/library for chat replies."""

from __future__ import annotations

from typing import Dict, List, Optional

from bot.commands import (
    COMMAND_EPISODE,
    COMMAND_RATE,
    COMMAND_RATING,
    HELP_COMMAND_ORDER,
    HELP_COMMAND_SPECS,
    slash,
)
from core.library import LibraryItem
from core.ratings_models import SUBJECT_MOVIE, RatingRecord


def _build_help_text() -> str:
    lines = ["Команды:"]
    for command in HELP_COMMAND_ORDER:
        usage_suffix, description = HELP_COMMAND_SPECS[command]
        lines.append(f"• {slash(command, usage_suffix)} — {description}")
    return "\n".join(lines)


HELP_TEXT = _build_help_text()

START_TEXT = (
    "👋 Привет! Я показываю рейтинги фильмов и сериалов и веду вашу библиотеку.\n"
    f"Например: {slash(COMMAND_RATING)} movie 603"
)
RATING_USAGE_TEXT = f"Формат: {slash(COMMAND_RATING)} <movie|show> <tmdb_id>"
EPISODE_USAGE_TEXT = f"Формат: {slash(COMMAND_EPISODE)} <tmdb_id сериала> <сезон> <серия>"
LIBRARY_ITEM_USAGE_TEXT = "Формат: /{command} <movie|show> <tmdb_id> [название]"
RATE_USAGE_TEXT = f"Формат: {slash(COMMAND_RATE)} <movie|show> <tmdb_id> <1-10>"
UNKNOWN_TEXT_GUIDE = "Не понял запрос. Список команд — /help"
CACHE_CLEARED_TEXT = "🧹 Кэш рейтингов очищен."
ERROR_REPLY_TEXT = "Произошла временная ошибка. Попробуйте ещё раз."

_MEDIA_LABELS = {SUBJECT_MOVIE: "фильм"}


def media_label(media_type: str) -> str:
    return _MEDIA_LABELS.get(media_type, "сериал")


def format_rating_record(title: str, record: Optional[RatingRecord], *, stale: bool = False) -> str:
    if record is None or record.is_miss:
        return f"⭐ {title}: рейтинг недоступен"
    lines = [f"⭐ {title}"]
    if record.primary_rating:
        votes = f" ({record.vote_count} голосов)" if record.vote_count else ""
        lines.append(f"IMDb: {record.primary_rating}/10{votes}")
    if record.secondary_score:
        lines.append(f"Metacritic: {record.secondary_score}")
    if record.tertiary_score:
        lines.append(f"Rotten Tomatoes: {record.tertiary_score}")
    if record.external_id:
        lines.append(f"https://www.imdb.com/title/{record.external_id}/")
    if stale:
        lines.append("(данные обновляются в фоне)")
    return "\n".join(lines)


def _item_line(item: LibraryItem, user_ratings: Dict[str, int]) -> str:
    name = item.title or item.key
    if item.year:
        name = f"{name} ({item.year})"
    rating = user_ratings.get(item.key)
    suffix = f" — ваша оценка {rating}/10" if rating is not None else ""
    return f"• {name} [{media_label(item.media_type)}]{suffix}"


def format_library(
    favorites: List[LibraryItem],
    watchlist: List[LibraryItem],
    user_ratings: Dict[str, int],
) -> str:
    if not favorites and not watchlist and not user_ratings:
        return "📚 Библиотека пуста."
    lines: List[str] = []
    if favorites:
        lines.append("❤️ Избранное:")
        lines.extend(_item_line(item, user_ratings) for item in favorites)
    if watchlist:
        if lines:
            lines.append("")
        lines.append("🕒 Посмотреть позже:")
        lines.extend(_item_line(item, user_ratings) for item in watchlist)
    listed = {item.key for item in favorites} | {item.key for item in watchlist}
    rated_only = sorted(key for key in user_ratings if key not in listed)
    if rated_only:
        if lines:
            lines.append("")
        lines.append("✍️ Оценки:")
        lines.extend(f"• {key} — {user_ratings[key]}/10" for key in rated_only)
    return "\n".join(lines)


__all__ = [
    "HELP_TEXT",
    "START_TEXT",
    "RATING_USAGE_TEXT",
    "EPISODE_USAGE_TEXT",
    "LIBRARY_ITEM_USAGE_TEXT",
    "RATE_USAGE_TEXT",
    "UNKNOWN_TEXT_GUIDE",
    "CACHE_CLEARED_TEXT",
    "ERROR_REPLY_TEXT",
    "media_label",
    "format_rating_record",
    "format_library",
]
