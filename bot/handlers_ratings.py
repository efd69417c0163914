"""Rating lookup handlers."""

from __future__ import annotations

import logging
from typing import Optional, Sequence

from telegram import Update
from telegram.ext import ContextTypes

from bot.handlers_texts import (
    CACHE_CLEARED_TEXT,
    EPISODE_USAGE_TEXT,
    RATING_USAGE_TEXT,
    format_rating_record,
    media_label,
)
from bot.handlers_transport import _send, _typing
from core.ratings_models import SUBJECT_SHOW, RatingSubject, cache_key_for, normalize_subject_type
from core.services import get_services

logger = logging.getLogger(__name__)


def _parse_positive_int(value: str) -> Optional[int]:
    try:
        number = int(str(value).strip())
    except (TypeError, ValueError):
        return None
    return number if number > 0 else None


def _parse_subject_args(args: Sequence[str]) -> Optional[RatingSubject]:
    if len(args) < 2:
        return None
    subject_type = normalize_subject_type(args[0])
    subject_id = _parse_positive_int(args[1])
    if subject_type is None or subject_id is None:
        return None
    return RatingSubject(subject_type, subject_id)


def _parse_episode_args(args: Sequence[str]) -> Optional[RatingSubject]:
    if len(args) < 3:
        return None
    show_id = _parse_positive_int(args[0])
    season = _parse_positive_int(args[1])
    episode = _parse_positive_int(args[2])
    if show_id is None or season is None or episode is None:
        return None
    return RatingSubject(SUBJECT_SHOW, show_id, season=season, episode=episode)


def _subject_title(subject: RatingSubject) -> str:
    if subject.is_episode:
        return f"сериал {subject.subject_id}, S{subject.season:02d}E{subject.episode:02d}"
    return f"{media_label(subject.subject_type)} {subject.subject_id}"


async def _reply_with_rating(update: Update, context, subject: RatingSubject) -> None:
    ratings = get_services().ratings
    key = cache_key_for(subject)
    title = _subject_title(subject)

    cached = ratings.get_cached(key)
    if cached is not None:
        fresh = ratings.is_fresh(cached)
        if not fresh:
            ratings.ensure_for_list([subject], max_to_enqueue=1)
        await _send(update, format_rating_record(title, cached, stale=not fresh))
        return

    async with _typing(update, context):
        record = await ratings.refresh(key, subject)
    await _send(update, format_rating_record(title, record))


async def rating_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    subject = _parse_subject_args(context.args or [])
    if subject is None:
        await _send(update, RATING_USAGE_TEXT)
        return
    await _reply_with_rating(update, context, subject)


async def episode_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    subject = _parse_episode_args(context.args or [])
    if subject is None:
        await _send(update, EPISODE_USAGE_TEXT)
        return
    await _reply_with_rating(update, context, subject)


async def clear_cache_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    get_services().ratings.clear_cache()
    logger.info("Ratings cache cleared by chat %s", getattr(update.effective_chat, "id", "na"))
    await _send(update, CACHE_CLEARED_TEXT)


__all__ = [
    "rating_command",
    "episode_command",
    "clear_cache_command",
]
