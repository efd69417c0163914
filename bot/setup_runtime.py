"""Runtime hooks used during bot application setup and shutdown."""

from __future__ import annotations

import logging

from telegram import BotCommand
from telegram.ext import Application

from bot.commands import HELP_COMMAND_SPECS, REGISTRY_ORDER
from bot.handlers_texts import ERROR_REPLY_TEXT
from core.runtime_monitor import record_error
from core.services import get_services, shutdown_services

logger = logging.getLogger(__name__)


class PatchedApplication(Application):
    """Application subclass that re-introduces missing private slots.

    python-telegram-bot 21.2 accidentally omits the ``__stop_running_marker`` slot
    from :class:`telegram.ext.Application.__slots__`. When the base
    ``Application`` initialiser tries to assign to the attribute, Python raises
    :class:`AttributeError` because instances don't have a ``__dict__``.
    """

    _base_slots = tuple(Application.__slots__)
    _extra_slots = []
    if "_Application__stop_running_marker" not in _base_slots:
        _extra_slots.append("_Application__stop_running_marker")
    if "__weakref__" not in _base_slots:
        _extra_slots.append("__weakref__")
    __slots__ = _base_slots + tuple(_extra_slots)


async def on_startup(app: Application) -> None:
    services = get_services()
    await services.start()
    stats = services.ratings.stats()
    logger.info("Ratings cache ready with %s entries.", stats["entries"])
    try:
        await app.bot.set_my_commands(
            [
                BotCommand(command, HELP_COMMAND_SPECS.get(command, ("", command))[1])
                for command in REGISTRY_ORDER
            ]
        )
    except Exception as exc:
        logger.warning("TELEGRAM ERROR: %s %s", type(exc).__name__, exc)


async def on_shutdown(app: Application) -> None:
    await shutdown_services()
    logger.info("Services stopped, ratings cache flushed.")


async def on_error(update, context) -> None:
    error = getattr(context, "error", None)
    if isinstance(error, BaseException):
        logger.error(
            "BOT ERROR: %s %s",
            type(error).__name__,
            error,
            exc_info=(type(error), error, error.__traceback__),
        )
        record_error("telegram", error)
    else:
        logger.error("BOT ERROR: %s", error)
        record_error("telegram", str(error))

    if update and getattr(update, "effective_message", None):
        try:
            await update.effective_message.reply_text(ERROR_REPLY_TEXT)
        except Exception:
            pass


__all__ = [
    "PatchedApplication",
    "on_startup",
    "on_shutdown",
    "on_error",
]
