"""
/network command: show or change the carrier results are reported for.
"""

from __future__ import annotations

from telegram import Update
from telegram.ext import ContextTypes

from imei_compat.utils.i18n import get_lang_code, t
from .common import current_network, reply_with_disclaimer


async def network_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """'/network' shows the current network, '/network T-Mobile' changes it."""
    lang = get_lang_code(update)
    name = " ".join(context.args or []).strip()

    if not name:
        await reply_with_disclaimer(update, context, t(lang, "network_current", network=current_network(context)))
        return

    context.user_data["network"] = name
    await reply_with_disclaimer(update, context, t(lang, "network_set", network=name))
