import logging

from bot.setup_bot import create_bot
from core.diagnostics import print_startup_diagnostics
from core.logging_setup import setup_logging

logger = logging.getLogger(__name__)

if __name__ == "__main__":
    setup_logging()
    print_startup_diagnostics()
    app = create_bot()
    logger.info("Ratings bot started (Ctrl+C to exit).")
    app.run_polling()
