"""
Tests for the device value types and their JSON shape.
"""

import dataclasses

import pytest

from imei_compat.models.device import (
    DeviceRecord,
    NetworkCapabilities,
    Provenance,
    ResolutionResult,
    WifiCalling,
)


def test_capabilities_to_dict():
    caps = NetworkCapabilities(four_g=True, five_g=False, volte=True, wifi_calling=WifiCalling.LIMITED)
    assert caps.to_dict() == {"fourG": True, "fiveG": False, "volte": True, "wifiCalling": "limited"}


def test_capabilities_default_is_all_negative():
    assert NetworkCapabilities().to_dict() == {
        "fourG": False,
        "fiveG": False,
        "volte": False,
        "wifiCalling": "not_supported",
    }


def test_capabilities_from_dict():
    caps = NetworkCapabilities.from_dict({"fourG": True, "fiveG": True, "wifiCalling": " Supported "})
    assert caps == NetworkCapabilities(four_g=True, five_g=True, volte=False, wifi_calling=WifiCalling.SUPPORTED)
    assert NetworkCapabilities.from_dict(None) == NetworkCapabilities()
    assert NetworkCapabilities.from_dict("fast") == NetworkCapabilities()


def test_wifi_calling_coerce():
    assert WifiCalling.coerce("limited") is WifiCalling.LIMITED
    assert WifiCalling.coerce(WifiCalling.SUPPORTED) is WifiCalling.SUPPORTED
    assert WifiCalling.coerce(None) is WifiCalling.NOT_SUPPORTED
    assert WifiCalling.coerce("sometimes") is WifiCalling.NOT_SUPPORTED


def test_records_are_immutable():
    record = DeviceRecord(make="Apple", model="iPhone 15")
    with pytest.raises(dataclasses.FrozenInstanceError):
        record.model = "iPhone 16"  # type: ignore[misc]


def test_result_to_dict():
    record = DeviceRecord(
        make="Apple",
        model="iPhone 14 Pro",
        tac="01326600",
        year=2022,
        model_number="A2892",
        capabilities=NetworkCapabilities(True, True, True, WifiCalling.SUPPORTED),
    )
    result = ResolutionResult(found=True, device=record, tac="01326600", provenance=Provenance.EXACT)
    data = result.to_dict()
    assert data["found"] is True
    assert data["provenance"] == "exact"
    assert data["tac"] == "01326600"
    assert data["device"]["make"] == "Apple"
    assert data["device"]["modelNumber"] == "A2892"
    assert data["capabilities"]["wifiCalling"] == "supported"


def test_miss_to_dict_still_has_capabilities():
    data = ResolutionResult(found=False).to_dict()
    assert data["device"] is None
    assert data["provenance"] is None
    assert data["capabilities"]["fourG"] is False


def test_provenance_wire_values():
    assert [p.value for p in Provenance] == ["exact", "tac-prefix", "pattern", "external", "default"]
