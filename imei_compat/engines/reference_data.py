"""
Static device reference tables.

The tables live in a JSON file (data/devices.json by default) that we load
once and then only read:
- devices: the catalog, in file order
- knownImeis: full IMEI -> device id
- patterns: ordered regexes over free-text model names -> device id

Pattern order is evaluation order: the first match wins, so specific
variants ("iPhone 15 Pro") must come before their base model ("iPhone 15").
Tests build their own ReferenceData instead of touching the file.
"""

from __future__ import annotations

import json
import logging
import os
import re
from dataclasses import dataclass, field
from functools import lru_cache
from types import MappingProxyType
from typing import Any, Dict, Mapping, Tuple

from imei_compat.models.device import DeviceRecord, NetworkCapabilities
from imei_compat.utils.config import settings
from imei_compat.utils.imei import TAC_LENGTH, is_ascii_digits

logger = logging.getLogger(__name__)

DATA_DIR = os.path.join(os.path.dirname(os.path.dirname(__file__)), "data")
DEFAULT_REFERENCE_PATH = os.path.join(DATA_DIR, "devices.json")

UNKNOWN_DEVICE = DeviceRecord(make="Unknown", model="Unknown Device")


class ReferenceDataError(ValueError):
    """The reference file is unreadable or structurally wrong."""


@dataclass(frozen=True)
class ModelPattern:
    """A regex over model names bound to the device it identifies."""

    pattern: re.Pattern
    device: DeviceRecord

    def matches(self, text: str) -> bool:
        return self.pattern.search(text) is not None


@dataclass(frozen=True)
class ReferenceData:
    catalog: Tuple[DeviceRecord, ...] = ()
    known_imeis: Mapping[str, DeviceRecord] = field(default_factory=dict)
    patterns: Tuple[ModelPattern, ...] = ()
    default_device: DeviceRecord = UNKNOWN_DEVICE

    def find_model(self, name: str) -> DeviceRecord | None:
        """Return the first catalog record whose model name equals `name`."""
        for record in self.catalog:
            if record.model == name:
                return record
        return None


def _parse_device(entry: Any) -> Tuple[str, DeviceRecord]:
    if not isinstance(entry, Mapping):
        raise ReferenceDataError(f"Device entry must be an object, got {entry!r}")
    try:
        key = entry["id"]
        make = entry["make"]
        model = entry["model"]
    except KeyError as exc:
        raise ReferenceDataError(f"Device entry is missing {exc.args[0]!r}: {entry!r}") from exc

    tac = entry.get("tac")
    if tac is not None and (not isinstance(tac, str) or len(tac) != TAC_LENGTH or not is_ascii_digits(tac)):
        raise ReferenceDataError(f"Device {key!r} has a malformed TAC {tac!r}")

    record = DeviceRecord(
        make=make,
        model=model,
        tac=tac,
        year=entry.get("year"),
        model_number=entry.get("modelNumber"),
        network_bands=entry.get("networkBands"),
        carrier_variant=entry.get("carrierVariant"),
        capabilities=NetworkCapabilities.from_dict(entry.get("capabilities")),
    )
    return key, record


def _entries(raw: Mapping[str, Any], name: str) -> list:
    value = raw.get(name, [])
    if not isinstance(value, list):
        raise ReferenceDataError(f"{name} must be a list, got {type(value).__name__}")
    return value


def parse_reference_data(raw: Mapping[str, Any]) -> ReferenceData:
    """Build ReferenceData from the decoded JSON document."""
    if not isinstance(raw, Mapping):
        raise ReferenceDataError("Reference data must be a JSON object")

    by_id: Dict[str, DeviceRecord] = {}
    catalog = []
    for entry in _entries(raw, "devices"):
        key, record = _parse_device(entry)
        if key in by_id:
            raise ReferenceDataError(f"Duplicate device id {key!r}")
        by_id[key] = record
        catalog.append(record)

    def lookup(key: str, where: str) -> DeviceRecord:
        try:
            return by_id[key]
        except KeyError:
            raise ReferenceDataError(f"{where} refers to unknown device {key!r}") from None

    raw_imeis = raw.get("knownImeis", {})
    if not isinstance(raw_imeis, Mapping):
        raise ReferenceDataError("knownImeis must be an object of IMEI -> device id")
    known_imeis = {imei: lookup(key, f"IMEI {imei}") for imei, key in raw_imeis.items()}

    patterns = []
    for entry in _entries(raw, "patterns"):
        try:
            regex = re.compile(entry["pattern"], re.IGNORECASE)
            device = lookup(entry["device"], f"Pattern {entry['pattern']!r}")
        except (KeyError, TypeError) as exc:
            raise ReferenceDataError(f"Malformed pattern entry {entry!r}") from exc
        except re.error as exc:
            raise ReferenceDataError(f"Bad regex in pattern entry {entry!r}: {exc}") from exc
        patterns.append(ModelPattern(pattern=regex, device=device))

    default_device = UNKNOWN_DEVICE
    if "default" in raw:
        default = raw["default"]
        if not isinstance(default, Mapping):
            raise ReferenceDataError(f"default must be an object, got {default!r}")
        default_device = DeviceRecord(
            make=default.get("make", UNKNOWN_DEVICE.make),
            model=default.get("model", UNKNOWN_DEVICE.model),
            capabilities=NetworkCapabilities.from_dict(default.get("capabilities")),
        )

    return ReferenceData(
        catalog=tuple(catalog),
        known_imeis=MappingProxyType(known_imeis),
        patterns=tuple(patterns),
        default_device=default_device,
    )


@lru_cache
def _load_file(path: str) -> ReferenceData:
    try:
        with open(path, "r", encoding="utf-8") as f:
            raw = json.load(f)
    except (OSError, json.JSONDecodeError) as exc:
        raise ReferenceDataError(f"Cannot read reference data from {path}: {exc}") from exc

    data = parse_reference_data(raw)
    logger.info(
        "Loaded %d devices, %d known IMEIs, %d model patterns from %s",
        len(data.catalog),
        len(data.known_imeis),
        len(data.patterns),
        path,
    )
    return data


def load_reference_data(path: str | None = None) -> ReferenceData:
    """
    Load (and cache) reference data.

    Order: explicit path, then REFERENCE_DATA_PATH, then the bundled file.
    """
    return _load_file(path or settings.REFERENCE_DATA_PATH or DEFAULT_REFERENCE_PATH)
