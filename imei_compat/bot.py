"""
Main entrypoint for the Telegram bot.

Creates the Application, builds the device resolver once, sets up
handlers and starts in webhook or long polling mode depending on
configuration.
"""

from __future__ import annotations

import logging

from telegram.ext import (
    AIORateLimiter,
    Application,
    ApplicationBuilder,
    CallbackQueryHandler,
    CommandHandler,
    MessageHandler,
    filters,
)

from imei_compat.engines.ai_lookup import build_default_lookup
from imei_compat.engines.reference_data import load_reference_data
from imei_compat.engines.resolver import DeviceResolver
from imei_compat.handlers.imei import handle_imei_message
from imei_compat.handlers.network import network_command
from imei_compat.handlers.start import start, start_check_callback
from imei_compat.utils.config import settings
from imei_compat.utils.logging import setup_logging


async def on_startup(app: Application) -> None:
    """Load reference data and store a shared resolver in bot_data."""
    lookup = build_default_lookup(settings)
    app.bot_data["resolver"] = DeviceResolver(
        reference=load_reference_data(),
        lookup=lookup,
        timeout=settings.AI_TIMEOUT_SECONDS,
        network=settings.DEFAULT_NETWORK,
    )
    logging.getLogger(__name__).info(
        "Device resolver ready (external lookup: %s)",
        getattr(lookup, "name", "disabled"),
    )


def build_application() -> Application:
    """Create and configure the Telegram Application."""
    setup_logging()
    logging.getLogger(__name__).info("Starting IMEI compatibility bot")

    if not settings.BOT_TOKEN:
        raise RuntimeError("BOT_TOKEN is not set")

    application = (
        ApplicationBuilder()
        .token(settings.BOT_TOKEN)
        .rate_limiter(AIORateLimiter())  # basic rate limiter for Telegram API itself
        .post_init(on_startup)
        .build()
    )

    # === Command handlers ===
    application.add_handler(CommandHandler("start", start))
    application.add_handler(CommandHandler("network", network_command))

    # === Callback query handlers ===
    application.add_handler(CallbackQueryHandler(start_check_callback, pattern="^check_imei$"))

    # === Message handlers ===
    # IMEIs and model names are both plain text; the handler tells them apart.
    application.add_handler(MessageHandler(filters.TEXT & ~filters.COMMAND, handle_imei_message))

    return application


def main() -> None:
    """Entrypoint called by 'python -m imei_compat.bot'."""
    app = build_application()

    if settings.WEBHOOK_URL:
        # Webhook mode (for production)
        logging.getLogger(__name__).info("Running in webhook mode.")
        app.run_webhook(
            listen="0.0.0.0",
            port=settings.PORT,
            url_path="webhook",
            webhook_url=f"{settings.WEBHOOK_URL}/webhook",
        )
    else:
        # Long polling mode (for development / simple hosting)
        logging.getLogger(__name__).info("Running in polling mode.")
        app.run_polling()


if __name__ == "__main__":
    main()
