"""Smoke tests for handler facades and bot wiring."""

from __future__ import annotations

import importlib
import unittest
from unittest.mock import patch


class HandlersSmokeTests(unittest.TestCase):
    def test_handler_facade_resolves_all_exports(self) -> None:
        module = importlib.import_module("bot.handlers")
        for name in module.__all__:
            getattr(module, name)

    def test_create_bot_registers_expected_handlers(self) -> None:
        setup_bot = importlib.import_module("bot.setup_bot")
        with patch.object(setup_bot, "TELEGRAM_TOKEN", "123456:TEST_TOKEN"):
            app = setup_bot.create_bot()

        handlers = app.handlers.get(0, [])
        callback_names = []
        for handler in handlers:
            callback = getattr(handler, "callback", None)
            if callback is not None:
                callback_names.append(callback.__name__)

        for name in (
            "start_command",
            "help_command",
            "diag_command",
            "rating_command",
            "episode_command",
            "clear_cache_command",
            "fav_command",
            "watch_command",
            "rate_command",
            "library_command",
            "handle_message",
        ):
            self.assertIn(name, callback_names)


if __name__ == "__main__":
    unittest.main()
