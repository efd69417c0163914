"""Base handlers: greeting, help, diagnostics and the unknown-text fallback."""

from __future__ import annotations

from typing import List

from telegram import Update
from telegram.ext import ContextTypes

from bot.handlers_texts import HELP_TEXT, START_TEXT, UNKNOWN_TEXT_GUIDE
from bot.handlers_transport import _send
from core.config import OMDB_API_KEY, TMDB_API_KEY
from core.runtime_monitor import error_counts, get_recent_errors
from core.services import get_services


async def start_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    await _send(update, START_TEXT)
    await _send(update, HELP_TEXT)


async def help_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    await _send(update, HELP_TEXT)


def build_diag_lines() -> List[str]:
    services = get_services()
    stats = services.ratings.stats()
    lines = ["🩺 Диагностика сервисов"]
    lines.append(f"• TMDB: {'OK' if TMDB_API_KEY else 'DISABLED'}")
    lines.append(f"• OMDb: {'OK' if OMDB_API_KEY else 'DISABLED'}")
    lines.append(
        f"• Кэш рейтингов: {stats['entries']} записей, без данных {stats['misses']}, "
        f"в работе {stats['active']}/{stats['max_concurrent']}, в очереди {stats['in_flight'] - stats['active']}"
    )
    sync = services.cloud_sync
    if sync is None:
        lines.append("• Облако: disabled")
    else:
        lines.append(f"• Облако: {'OK (' + sync.user_id + ')' if sync.signed_in else 'нет связи'}")

    counts = error_counts()
    if counts:
        summary = ", ".join(f"{source}={count}" for source, count in sorted(counts.items()))
        lines.append(f"• Ошибок с запуска: {summary}")

    recent_errors = get_recent_errors(limit=6)
    lines.append("")
    if recent_errors:
        lines.append("Recent errors:")
        for event in recent_errors:
            lines.append(f"- {event.timestamp_utc} [{event.source}] {event.error_type}: {event.message}")
    else:
        lines.append("Recent errors: none")
    return lines


async def diag_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    await _send(update, "\n".join(build_diag_lines()))


async def handle_message(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    await _send(update, UNKNOWN_TEXT_GUIDE)


__all__ = [
    "start_command",
    "help_command",
    "build_diag_lines",
    "diag_command",
    "handle_message",
]
