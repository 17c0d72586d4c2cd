"""
Handler for /start command and initial inline keyboard flow.
"""

from __future__ import annotations

from telegram import InlineKeyboardButton, InlineKeyboardMarkup, Update
from telegram.ext import ContextTypes

from imei_compat.utils.i18n import add_disclaimer, get_lang_code, t
from .common import reply_with_disclaimer


async def start(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """/start command handler: welcome text and a 'Check IMEI' button."""
    lang = get_lang_code(update)

    keyboard = [
        [
            InlineKeyboardButton(t(lang, "btn_check_imei"), callback_data="check_imei"),
        ]
    ]
    reply_markup = InlineKeyboardMarkup(keyboard)

    text = f"{t(lang, 'start_welcome')}\n\n{t(lang, 'start_cta')}"
    await update.message.reply_text(
        add_disclaimer(lang, text),
        reply_markup=reply_markup,
    )


async def start_check_callback(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """
    Handle inline keyboard 'Check IMEI' press.

    We ask user to send 15-digit IMEI.
    """
    lang = get_lang_code(update)
    query = update.callback_query
    await query.answer()

    await query.edit_message_text(add_disclaimer(lang, t(lang, "prompt_imei")))


async def handle_invalid_imei(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Invalid IMEI reply with a 'Try again' button."""
    lang = get_lang_code(update)

    keyboard = [[InlineKeyboardButton(t(lang, "btn_try_again"), callback_data="check_imei")]]
    markup = InlineKeyboardMarkup(keyboard)

    await reply_with_disclaimer(update, context, t(lang, "invalid_imei"), reply_markup=markup)
