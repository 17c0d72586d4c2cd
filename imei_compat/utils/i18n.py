"""
Very small i18n layer that loads translations from JSON files.

We don't use heavy frameworks here; we just:
- load locales/en.json, locales/es.json, etc.
- pick messages by key and language code
- fall back to the configured fallback language
"""

from __future__ import annotations

import json
import os
from functools import lru_cache
from typing import Any, Dict

from telegram import Update

from .config import settings

LOCALES_DIR = os.path.join(os.path.dirname(os.path.dirname(__file__)), "locales")


@lru_cache
def load_locale(lang: str) -> Dict[str, str]:
    """
    Load a locale JSON file and return its dictionary.

    If the file doesn't exist, fall back to the configured locale.
    """
    file_path = os.path.join(LOCALES_DIR, f"{lang}.json")
    if not os.path.exists(file_path):
        file_path = os.path.join(LOCALES_DIR, f"{settings.LOCALE_FALLBACK}.json")

    with open(file_path, "r", encoding="utf-8") as f:
        return json.load(f)


def get_lang_code(update: Update) -> str:
    """
    Decide which language to use for this update.

    Telegram user.language_code if we ship that locale, else the fallback.
    """
    tg_lang = update.effective_user.language_code if update.effective_user else None
    if tg_lang and os.path.exists(os.path.join(LOCALES_DIR, f"{tg_lang}.json")):
        return tg_lang

    return settings.LOCALE_FALLBACK


def t(lang: str, key: str, **kwargs: Any) -> str:
    """
    Translate a key into a text for the given language.

    kwargs are used to format placeholders, e.g. {network}.
    """
    data = load_locale(lang)
    text = data.get(key, key)
    if kwargs:
        try:
            text = text.format(**kwargs)
        except KeyError:
            # A translation with a placeholder we weren't given; show it raw.
            pass
    return text


def add_disclaimer(lang: str, text: str) -> str:
    """Append the disclaimer line from locale to any outgoing message."""
    disclaimer = t(lang, "disclaimer")
    return f"{text}\n\n{disclaimer}"
