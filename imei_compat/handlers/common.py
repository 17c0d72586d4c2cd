"""
Common helpers for handlers:
- replying with disclaimer
- rendering a resolution result as a chat message
- picking the user's target network
"""

from __future__ import annotations

from typing import List

from telegram import Update
from telegram.ext import ContextTypes

from imei_compat.models.device import ResolutionResult, WifiCalling
from imei_compat.utils.config import settings
from imei_compat.utils.i18n import add_disclaimer, get_lang_code, t
from imei_compat.utils.imei import derive_example_imei, suffix_imei


async def reply_with_disclaimer(
    update: Update,
    context: ContextTypes.DEFAULT_TYPE,
    text: str,
    **kwargs,
):
    """
    Send a message that always includes the disclaimer.

    This central helper makes it harder to forget the legal line.
    """
    lang = get_lang_code(update)
    final_text = add_disclaimer(lang, text)
    await update.effective_message.reply_text(final_text, **kwargs)


def current_network(context: ContextTypes.DEFAULT_TYPE) -> str:
    """Network chosen with /network, or the configured default."""
    # user_data is None for channel posts.
    return (context.user_data or {}).get("network") or settings.DEFAULT_NETWORK


def _mark(flag: bool) -> str:
    return "✅" if flag else "❌"


def format_resolution(
    lang: str,
    result: ResolutionResult,
    network: str,
    imei: str | None = None,
) -> str:
    """
    Render a result for chat.

    With an IMEI we show its last digits; without one (model-name lookups)
    we show the TAC and an example IMEI built from it.
    """
    device = result.device
    caps = result.capabilities
    lines: List[str] = []

    if device is not None:
        lines.append(t(lang, "result_header", make=device.make, model=device.model))
    if imei:
        lines.append(t(lang, "result_imei", suffix=suffix_imei(imei), tac=result.tac or "-"))
    elif result.tac:
        lines.append(t(lang, "result_model_tac", tac=result.tac, example=derive_example_imei(result.tac)))

    lines.append("")
    lines.append(t(lang, "result_network", network=network))
    lines.append(f"{_mark(caps.four_g)} {t(lang, 'cap_four_g')}")
    lines.append(f"{_mark(caps.five_g)} {t(lang, 'cap_five_g')}")
    lines.append(f"{_mark(caps.volte)} {t(lang, 'cap_volte')}")
    wifi = t(lang, f"wifi_{caps.wifi_calling.value}")
    lines.append(f"{_mark(caps.wifi_calling is not WifiCalling.NOT_SUPPORTED)} {t(lang, 'cap_wifi_calling')}: {wifi}")

    if result.provenance is not None:
        lines.append("")
        lines.append(t(lang, f"source_{result.provenance.value}"))

    return "\n".join(lines)
