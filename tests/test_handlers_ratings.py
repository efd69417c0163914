"""Tests for rating command parsing and replies."""

from __future__ import annotations

import unittest
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock, patch

from bot import handlers_ratings
from bot.handlers_library import _parse_library_item
from bot.handlers_texts import RATING_USAGE_TEXT
from core.ratings_models import RatingRecord, RatingSubject


def _update() -> SimpleNamespace:
    return SimpleNamespace(
        effective_message=SimpleNamespace(reply_text=AsyncMock()),
        effective_chat=None,
    )


def _ratings(cached=None, fresh=True, refreshed=None) -> MagicMock:
    ratings = MagicMock()
    ratings.get_cached.return_value = cached
    ratings.is_fresh.return_value = fresh
    ratings.refresh = AsyncMock(return_value=refreshed)
    return ratings


class ParseArgsTests(unittest.TestCase):
    def test_subject_args(self) -> None:
        self.assertEqual(
            handlers_ratings._parse_subject_args(["movie", "603"]), RatingSubject("movie", 603)
        )
        self.assertEqual(handlers_ratings._parse_subject_args(["tv", "1399"]), RatingSubject("show", 1399))
        self.assertIsNone(handlers_ratings._parse_subject_args(["book", "1"]))
        self.assertIsNone(handlers_ratings._parse_subject_args(["movie", "-1"]))
        self.assertIsNone(handlers_ratings._parse_subject_args(["movie"]))

    def test_episode_args(self) -> None:
        subject = handlers_ratings._parse_episode_args(["1399", "1", "2"])
        self.assertEqual(subject, RatingSubject("show", 1399, season=1, episode=2))
        self.assertIsNone(handlers_ratings._parse_episode_args(["1399", "1"]))
        self.assertIsNone(handlers_ratings._parse_episode_args(["1399", "x", "2"]))

    def test_library_item_keeps_title(self) -> None:
        item = _parse_library_item(["movie", "603", "The", "Matrix"])
        self.assertEqual(item.key, "movie:603")
        self.assertEqual(item.title, "The Matrix")
        self.assertIsNone(_parse_library_item(["movie", "zero"]))


class RatingCommandTests(unittest.IsolatedAsyncioTestCase):
    async def test_bad_args_reply_with_usage(self) -> None:
        update = _update()
        await handlers_ratings.rating_command(update, SimpleNamespace(args=["movie"]))
        update.effective_message.reply_text.assert_awaited_once()
        self.assertEqual(update.effective_message.reply_text.await_args.kwargs["text"], RATING_USAGE_TEXT)

    async def test_fresh_cached_record_answers_without_refresh(self) -> None:
        ratings = _ratings(cached=RatingRecord(fetched_at=1, primary_rating="8.7"))
        update = _update()
        with patch.object(handlers_ratings, "get_services", return_value=SimpleNamespace(ratings=ratings)):
            await handlers_ratings.rating_command(update, SimpleNamespace(args=["movie", "603"]))

        ratings.get_cached.assert_called_once_with("movie:603")
        ratings.refresh.assert_not_awaited()
        ratings.ensure_for_list.assert_not_called()
        self.assertIn("IMDb: 8.7/10", update.effective_message.reply_text.await_args.kwargs["text"])

    async def test_stale_record_is_shown_and_refreshed_in_background(self) -> None:
        ratings = _ratings(cached=RatingRecord(fetched_at=1, primary_rating="8.7"), fresh=False)
        update = _update()
        with patch.object(handlers_ratings, "get_services", return_value=SimpleNamespace(ratings=ratings)):
            await handlers_ratings.rating_command(update, SimpleNamespace(args=["movie", "603"]))

        ratings.ensure_for_list.assert_called_once_with([RatingSubject("movie", 603)], max_to_enqueue=1)
        self.assertIn("в фоне", update.effective_message.reply_text.await_args.kwargs["text"])

    async def test_unknown_title_waits_for_lookup(self) -> None:
        ratings = _ratings(refreshed=RatingRecord(fetched_at=1))
        update = _update()
        with patch.object(handlers_ratings, "get_services", return_value=SimpleNamespace(ratings=ratings)):
            await handlers_ratings.episode_command(update, SimpleNamespace(args=["1399", "1", "2"]))

        ratings.refresh.assert_awaited_once_with(
            "episode:1399:1:2", RatingSubject("show", 1399, season=1, episode=2)
        )
        self.assertIn("рейтинг недоступен", update.effective_message.reply_text.await_args.kwargs["text"])

    async def test_clear_cache_command(self) -> None:
        ratings = _ratings()
        update = _update()
        with patch.object(handlers_ratings, "get_services", return_value=SimpleNamespace(ratings=ratings)):
            await handlers_ratings.clear_cache_command(update, SimpleNamespace(args=[]))
        ratings.clear_cache.assert_called_once_with()


if __name__ == "__main__":
    unittest.main()
