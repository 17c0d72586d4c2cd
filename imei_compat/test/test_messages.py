"""
Tests for chat message rendering and translations.
"""

from imei_compat.engines.reference_data import DEFAULT_REFERENCE_PATH, load_reference_data
from imei_compat.engines.resolver import DeviceResolver
from imei_compat.handlers.common import format_resolution
from imei_compat.utils.i18n import add_disclaimer, load_locale, t


def _resolver():
    return DeviceResolver(reference=load_reference_data(DEFAULT_REFERENCE_PATH))


def test_locales_have_the_same_keys():
    assert set(load_locale("en")) == set(load_locale("es"))


def test_unknown_locale_falls_back():
    assert t("xx", "btn_try_again") == t("en", "btn_try_again")


def test_missing_key_returns_key():
    assert t("en", "no_such_key") == "no_such_key"


def test_placeholders():
    assert "T-Mobile" in t("en", "network_set", network="T-Mobile")


def test_add_disclaimer():
    text = add_disclaimer("en", "hello")
    assert text.startswith("hello\n\n")
    assert text.endswith(t("en", "disclaimer"))


def test_format_model_result_shows_example_imei():
    result = _resolver().resolve_by_model_name("Galaxy S24 Ultra")
    text = format_resolution("en", result, "AT&T")
    assert "Samsung Galaxy S24 Ultra" in text
    assert "TAC: 35932811" in text
    assert "Example IMEI: 35932811801234" in text
    assert "Compatibility with AT&T:" in text


def test_format_default_result():
    result = _resolver().resolve_by_model_name("Nokia 3310")
    text = format_resolution("en", result, "AT&T", imei="999999999999999")
    assert "Unknown Device" in text
    assert "...9999" in text
    assert t("en", "source_default") in text
    assert "✅" not in text
