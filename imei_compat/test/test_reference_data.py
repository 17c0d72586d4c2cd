"""
Tests for loading the device reference tables.
"""

import json

import pytest

from imei_compat.engines.reference_data import (
    DEFAULT_REFERENCE_PATH,
    ReferenceDataError,
    load_reference_data,
    parse_reference_data,
)
from imei_compat.models.device import WifiCalling


@pytest.fixture
def bundled():
    return load_reference_data(DEFAULT_REFERENCE_PATH)


def test_bundled_file_loads(bundled):
    assert len(bundled.catalog) == 15
    assert len(bundled.known_imeis) == 6
    assert len(bundled.patterns) == 14
    assert bundled.default_device.model == "Unknown Device"
    assert bundled.default_device.capabilities.wifi_calling is WifiCalling.NOT_SUPPORTED


def test_load_is_cached(bundled):
    assert load_reference_data(DEFAULT_REFERENCE_PATH) is bundled


def test_known_imeis_agree_with_device_tac(bundled):
    for imei, record in bundled.known_imeis.items():
        assert imei[:8] == record.tac


def test_every_pattern_reaches_its_own_model(bundled):
    # If a broad pattern sat before a specific one, the specific model name
    # would resolve to the broad model instead.
    for entry in bundled.patterns:
        first = next(p for p in bundled.patterns if p.matches(entry.device.model))
        assert first.device.model == entry.device.model


def test_known_imeis_are_read_only(bundled):
    with pytest.raises(TypeError):
        bundled.known_imeis["000000000000000"] = bundled.catalog[0]


def test_find_model_returns_first_variant(bundled):
    # Two Pixel 8 Pro variants; the global one is listed first.
    assert bundled.find_model("Pixel 8 Pro").tac == "35596523"
    assert bundled.find_model("Nokia 3310") is None


def test_load_custom_file(tmp_path):
    path = tmp_path / "devices.json"
    path.write_text(
        json.dumps(
            {
                "devices": [{"id": "x1", "make": "Acme", "model": "X1", "tac": "12345678"}],
                "knownImeis": {"123456780000001": "x1"},
                "patterns": [{"pattern": "acme\\s*x1", "device": "x1"}],
            }
        ),
        encoding="utf-8",
    )
    data = load_reference_data(str(path))
    assert data.catalog[0].make == "Acme"
    assert data.known_imeis["123456780000001"].model == "X1"
    assert data.patterns[0].matches("ACME X1 phone")
    # No default given: the built-in unknown device is used.
    assert data.default_device.make == "Unknown"


@pytest.mark.parametrize(
    "raw",
    [
        [],
        {"devices": [{"make": "Acme", "model": "X1"}]},
        {"devices": ["x1"]},
        {"devices": [{"id": "x1", "make": "Acme", "model": "X1", "tac": "1234"}]},
        {"devices": [{"id": "x1", "make": "Acme", "model": "X1", "tac": 12345678}]},
        {"devices": [{"id": "x1", "make": "A", "model": "X1"}, {"id": "x1", "make": "A", "model": "X2"}]},
        {"devices": [], "knownImeis": {"123456780000001": "missing"}},
        {"devices": [{"id": "x1", "make": "A", "model": "X1"}], "patterns": [{"pattern": "(", "device": "x1"}]},
        {"devices": [{"id": "x1", "make": "A", "model": "X1"}], "patterns": [{"device": "x1"}]},
        {"devices": [{"id": "x1", "make": "A", "model": "X1", "tac": "١٢٣٤٥٦٧٨"}]},
        {"devices": {"x1": {"make": "A", "model": "X1"}}},
        {"patterns": 3},
        {"knownImeis": ["013266008012345"]},
        {"default": "x"},
        {"default": None},
    ],
)
def test_structural_errors(raw):
    with pytest.raises(ReferenceDataError):
        parse_reference_data(raw)


def test_unreadable_file(tmp_path):
    bad = tmp_path / "broken.json"
    bad.write_text("{not json", encoding="utf-8")
    with pytest.raises(ReferenceDataError):
        load_reference_data(str(bad))
    with pytest.raises(ReferenceDataError):
        load_reference_data(str(tmp_path / "missing.json"))
