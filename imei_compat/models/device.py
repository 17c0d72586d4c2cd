"""
Device value types.

All of them are immutable and built fresh per request. to_dict() gives the
JSON shape the calling service sends back ({device, capabilities, ...}).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Mapping


class WifiCalling(str, Enum):
    SUPPORTED = "supported"
    LIMITED = "limited"
    NOT_SUPPORTED = "not_supported"

    @classmethod
    def coerce(cls, value: Any) -> "WifiCalling":
        """Map a loosely typed value to a member; anything unknown is NOT_SUPPORTED."""
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            try:
                return cls(value.strip().lower())
            except ValueError:
                pass
        return cls.NOT_SUPPORTED


class Provenance(str, Enum):
    """Which resolution step produced a result."""

    EXACT = "exact"
    TAC_PREFIX = "tac-prefix"
    PATTERN = "pattern"
    EXTERNAL = "external"
    DEFAULT = "default"


@dataclass(frozen=True)
class NetworkCapabilities:
    """Fixed-shape capability set; unknown means the negative default."""

    four_g: bool = False
    five_g: bool = False
    volte: bool = False
    wifi_calling: WifiCalling = WifiCalling.NOT_SUPPORTED

    @classmethod
    def from_dict(cls, data: Mapping[str, Any] | None) -> "NetworkCapabilities":
        """
        Build from a camelCase mapping (reference file or AI payload).

        Only real booleans count as True; a missing or odd value becomes False.
        """
        if not isinstance(data, Mapping):
            return cls()
        return cls(
            four_g=data.get("fourG") is True,
            five_g=data.get("fiveG") is True,
            volte=data.get("volte") is True,
            wifi_calling=WifiCalling.coerce(data.get("wifiCalling")),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "fourG": self.four_g,
            "fiveG": self.five_g,
            "volte": self.volte,
            "wifiCalling": self.wifi_calling.value,
        }


@dataclass(frozen=True)
class DeviceRecord:
    """A known (or guessed) device."""

    make: str
    model: str
    tac: str | None = None
    year: int | None = None
    model_number: str | None = None
    network_bands: str | None = None
    carrier_variant: str | None = None
    capabilities: NetworkCapabilities = field(default_factory=NetworkCapabilities)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "make": self.make,
            "model": self.model,
            "tac": self.tac,
            "year": self.year,
            "modelNumber": self.model_number,
            "specifications": {
                "networkBands": self.network_bands,
                "carrierVariant": self.carrier_variant,
            },
        }


@dataclass(frozen=True)
class ResolutionResult:
    """
    Outcome of a resolve call.

    found=False only comes out of the narrow helpers (resolve_by_tac,
    match_model_name). The top-level resolve functions always return a device,
    falling back to the unknown device with provenance DEFAULT.
    """

    found: bool
    device: DeviceRecord | None = None
    tac: str | None = None
    provenance: Provenance | None = None
    tac_analysis: str | None = None

    @property
    def capabilities(self) -> NetworkCapabilities:
        if self.device is None:
            return NetworkCapabilities()
        return self.device.capabilities

    @property
    def is_default(self) -> bool:
        return self.provenance is Provenance.DEFAULT

    def to_dict(self) -> Dict[str, Any]:
        return {
            "found": self.found,
            "provenance": self.provenance.value if self.provenance else None,
            "tac": self.tac,
            "tacAnalysis": self.tac_analysis,
            "device": self.device.to_dict() if self.device else None,
            "capabilities": self.capabilities.to_dict(),
        }


MISS = ResolutionResult(found=False)
