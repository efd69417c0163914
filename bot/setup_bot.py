"""Bot setup helpers."""

from telegram.ext import (
    Application,
    ApplicationBuilder,
    CommandHandler,
    MessageHandler,
    filters,
)

from bot.commands import (
    COMMAND_CLEAR_CACHE,
    COMMAND_DIAG,
    COMMAND_EPISODE,
    COMMAND_FAV,
    COMMAND_HELP,
    COMMAND_LIBRARY,
    COMMAND_RATE,
    COMMAND_RATING,
    COMMAND_START,
    COMMAND_WATCH,
)
from bot.handlers import (
    clear_cache_command,
    diag_command,
    episode_command,
    fav_command,
    handle_message,
    help_command,
    library_command,
    rate_command,
    rating_command,
    start_command,
    watch_command,
)
from bot.setup_runtime import PatchedApplication, on_error, on_shutdown, on_startup
from core.config import TELEGRAM_TOKEN


def create_bot() -> Application:
    builder = ApplicationBuilder()

    if "_Application__stop_running_marker" not in Application.__slots__:
        builder.application_class(PatchedApplication)

    app = (
        builder.token(TELEGRAM_TOKEN)
        .post_init(on_startup)
        .post_shutdown(on_shutdown)
        .build()
    )

    app.add_handler(CommandHandler(COMMAND_START, start_command))
    app.add_handler(CommandHandler(COMMAND_HELP, help_command))
    app.add_handler(CommandHandler(COMMAND_DIAG, diag_command))
    app.add_handler(CommandHandler(COMMAND_RATING, rating_command))
    app.add_handler(CommandHandler(COMMAND_EPISODE, episode_command))
    app.add_handler(CommandHandler(COMMAND_CLEAR_CACHE, clear_cache_command))
    app.add_handler(CommandHandler(COMMAND_FAV, fav_command))
    app.add_handler(CommandHandler(COMMAND_WATCH, watch_command))
    app.add_handler(CommandHandler(COMMAND_RATE, rate_command))
    app.add_handler(CommandHandler(COMMAND_LIBRARY, library_command))
    app.add_handler(MessageHandler(filters.TEXT & ~filters.COMMAND, handle_message))
    app.add_error_handler(on_error)

    return app
