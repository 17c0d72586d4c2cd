"""
Handler for plain text messages.

This:
- validates IMEIs and resolves them (tables, then AI lookup, then default)
- reports invalid IMEIs
- treats anything that isn't number-like as a model name
"""

from __future__ import annotations

import logging
import re

from telegram import Update
from telegram.ext import ContextTypes

from imei_compat.engines.resolver import DeviceResolver
from imei_compat.utils.i18n import get_lang_code
from imei_compat.utils.imei import is_valid_imei, mask_imei, normalize_imei
from .common import current_network, format_resolution, reply_with_disclaimer
from .start import handle_invalid_imei

logger = logging.getLogger(__name__)

# Digits with optional spaces/dashes: the user meant to type an IMEI.
_NUMBER_LIKE = re.compile(r"^[\d\s-]+$")


async def handle_imei_message(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    lang = get_lang_code(update)
    text = update.effective_message.text.strip()
    resolver: DeviceResolver = context.bot_data["resolver"]
    network = current_network(context)

    if _NUMBER_LIKE.match(text):
        if not is_valid_imei(text):
            await handle_invalid_imei(update, context)
            return

        imei = normalize_imei(text)
        await context.bot.send_chat_action(chat_id=update.effective_message.chat_id, action="typing")
        result = await resolver.resolve_by_imei(imei, network)
        logger.info("IMEI %s resolved via %s", mask_imei(imei), result.provenance.value)
        await reply_with_disclaimer(update, context, format_resolution(lang, result, network, imei=imei))
        return

    result = resolver.resolve_by_model_name(text)
    logger.info("Model name lookup resolved via %s", result.provenance.value)
    await reply_with_disclaimer(update, context, format_resolution(lang, result, network))
