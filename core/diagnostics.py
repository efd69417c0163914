"""Startup diagnostics for the ratings bot."""

from __future__ import annotations

from pathlib import Path

from core.config import (
    ACCOUNT_ID,
    CLOUD_SYNC_ENABLED,
    GOOGLE_CREDENTIALS,
    GOOGLE_SHEET_NAME,
    OMDB_API_KEY,
    RATINGS_CACHE_TTL_SECONDS,
    RATINGS_MAX_CONCURRENT,
    TELEGRAM_TOKEN,
    TMDB_API_KEY,
)
from core.local_store import default_store_path


def _format_status(ok: bool) -> str:
    return "✅" if ok else "⚠️"


def _configured(value: object) -> str:
    return "задан" if value else "не найден"


def print_startup_diagnostics() -> None:
    """Print startup diagnostics before the bot starts."""

    print("🔎 Предстартовая проверка окружения:")

    print(f"{_format_status(bool(TELEGRAM_TOKEN))} TELEGRAM_TOKEN: {_configured(TELEGRAM_TOKEN)}")
    print(f"{_format_status(bool(TMDB_API_KEY))} TMDB_API_KEY: {_configured(TMDB_API_KEY)}")
    omdb_note = _configured(OMDB_API_KEY)
    if not OMDB_API_KEY:
        omdb_note += " (рейтинги будут помечаться как недоступные)"
    print(f"{_format_status(bool(OMDB_API_KEY))} OMDB_API_KEY: {omdb_note}")

    store_path = default_store_path()
    store_note = f"{store_path} ({'есть' if store_path.exists() else 'будет создан'})"
    print(f"{_format_status(True)} Локальный кэш: {store_note}")
    print(
        f"{_format_status(True)} Кэш рейтингов: TTL {RATINGS_CACHE_TTL_SECONDS / 3600:.0f} ч, "
        f"до {RATINGS_MAX_CONCURRENT} запросов одновременно"
    )

    if not CLOUD_SYNC_ENABLED:
        print(f"{_format_status(True)} Облачная синхронизация: выключена")
        return

    sheet_ok = bool(GOOGLE_SHEET_NAME)
    print(f"{_format_status(sheet_ok)} GOOGLE_SHEET_NAME: {_configured(GOOGLE_SHEET_NAME)}")
    credentials_ok = False
    credentials_note = "не найден"
    if GOOGLE_CREDENTIALS:
        credentials_path = Path(GOOGLE_CREDENTIALS)
        credentials_ok = credentials_path.exists()
        state = "файл найден" if credentials_ok else "файл не найден"
        credentials_note = f"{state} ({credentials_path})"
    print(f"{_format_status(credentials_ok)} GOOGLE_CREDENTIALS: {credentials_note}")
    print(f"{_format_status(sheet_ok and credentials_ok)} Облачная синхронизация: аккаунт {ACCOUNT_ID}")
