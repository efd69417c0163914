"""Command identifiers and registration order."""

from __future__ import annotations

from typing import Dict, Tuple

COMMAND_START = "start"
COMMAND_HELP = "help"
COMMAND_DIAG = "diag"
COMMAND_RATING = "rating"
COMMAND_EPISODE = "episode"
COMMAND_CLEAR_CACHE = "clearcache"
COMMAND_FAV = "fav"
COMMAND_WATCH = "watch"
COMMAND_RATE = "rate"
COMMAND_LIBRARY = "library"

BASE_COMMANDS = (
    COMMAND_START,
    COMMAND_HELP,
    COMMAND_DIAG,
)

RATINGS_COMMANDS = (
    COMMAND_RATING,
    COMMAND_EPISODE,
    COMMAND_CLEAR_CACHE,
)

LIBRARY_COMMANDS = (
    COMMAND_FAV,
    COMMAND_WATCH,
    COMMAND_RATE,
    COMMAND_LIBRARY,
)

REGISTRY_ORDER = (
    COMMAND_START,
    COMMAND_HELP,
    COMMAND_RATING,
    COMMAND_EPISODE,
    COMMAND_LIBRARY,
    COMMAND_FAV,
    COMMAND_WATCH,
    COMMAND_RATE,
    COMMAND_DIAG,
    COMMAND_CLEAR_CACHE,
)

HELP_COMMAND_ORDER = (
    COMMAND_RATING,
    COMMAND_EPISODE,
    COMMAND_FAV,
    COMMAND_WATCH,
    COMMAND_RATE,
    COMMAND_LIBRARY,
    COMMAND_CLEAR_CACHE,
    COMMAND_DIAG,
    COMMAND_HELP,
)

HELP_COMMAND_SPECS: Dict[str, Tuple[str, str]] = {
    COMMAND_RATING: (" <movie|show> <tmdb_id>", "рейтинги IMDb, Metacritic и Rotten Tomatoes"),
    COMMAND_EPISODE: (" <tmdb_id сериала> <сезон> <серия>", "рейтинг отдельной серии"),
    COMMAND_FAV: (" <movie|show> <tmdb_id> [название]", "добавить в избранное или убрать"),
    COMMAND_WATCH: (" <movie|show> <tmdb_id> [название]", "добавить в «посмотреть позже» или убрать"),
    COMMAND_RATE: (" <movie|show> <tmdb_id> <1-10>", "поставить свою оценку"),
    COMMAND_LIBRARY: ("", "избранное, список и ваши оценки"),
    COMMAND_CLEAR_CACHE: ("", "очистить кэш рейтингов"),
    COMMAND_DIAG: ("", "диагностика сервисов"),
    COMMAND_HELP: ("", "помощь"),
}

ALL_COMMANDS = (
    *BASE_COMMANDS,
    *RATINGS_COMMANDS,
    *LIBRARY_COMMANDS,
)


def slash(command: str, suffix: str = "") -> str:
    return f"/{command}{suffix}"


__all__ = [
    "COMMAND_START",
    "COMMAND_HELP",
    "COMMAND_DIAG",
    "COMMAND_RATING",
    "COMMAND_EPISODE",
    "COMMAND_CLEAR_CACHE",
    "COMMAND_FAV",
    "COMMAND_WATCH",
    "COMMAND_RATE",
    "COMMAND_LIBRARY",
    "BASE_COMMANDS",
    "RATINGS_COMMANDS",
    "LIBRARY_COMMANDS",
    "REGISTRY_ORDER",
    "HELP_COMMAND_ORDER",
    "HELP_COMMAND_SPECS",
    "ALL_COMMANDS",
    "slash",
]
