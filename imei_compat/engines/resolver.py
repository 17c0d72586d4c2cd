"""
Device resolution engine.

Given an IMEI (or a free-text model name) we try, in order, stopping at the
first hit:
1. exact table match (known IMEI, or exact catalog model name)
2. TAC match against the catalog (IMEI path only)
3. ordered regex patterns over the model name (model path only)
4. the external AI lookup, if one is configured (IMEI path only)
5. the unknown device with all capabilities off

Steps 1-3 are table scans over read-only data. Step 4 is the only network
call; any error, timeout or empty answer there is a miss. Step 5 can't fail,
so resolve_by_imei / resolve_by_model_name always return a usable result.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import replace

from imei_compat.engines.ai_lookup import DeviceLookup
from imei_compat.engines.reference_data import ReferenceData, load_reference_data
from imei_compat.models.device import MISS, DeviceRecord, Provenance, ResolutionResult
from imei_compat.utils.config import settings
from imei_compat.utils.imei import FAC_LENGTH, IMEI_LENGTH, TAC_LENGTH, is_ascii_digits, mask_imei, normalize_imei

logger = logging.getLogger(__name__)

# Rough manufacturer hints for TACs we don't know, checked in order.
TAC_RANGE_HINTS = (
    (("01", "86"), "TAC pattern suggests possible Apple device."),
    (("35",), "TAC pattern suggests possible Samsung/Android device."),
    (("99",), "TAC pattern suggests possible test/development device."),
)


def describe_unknown_tac(tac: str) -> str:
    """Human readable note for a TAC that matched nothing."""
    if not tac:
        return "No TAC available."
    for prefixes, hint in TAC_RANGE_HINTS:
        if tac.startswith(prefixes):
            return f"TAC {tac} not found in database. {hint}"
    return f"TAC {tac} not found in database. TAC pattern not recognized - manufacturer unknown."


class DeviceResolver:
    """
    Resolve devices against reference data, with an optional AI fallback.

    The resolver holds no per-request state and can be shared freely.
    Callers are expected to validate IMEIs (is_valid_imei) first; input that
    isn't a 15-digit string is still handled, it just ends at the default.
    """

    def __init__(
        self,
        reference: ReferenceData | None = None,
        lookup: DeviceLookup | None = None,
        timeout: float | None = None,
        network: str | None = None,
    ) -> None:
        self.reference = reference if reference is not None else load_reference_data()
        self.lookup = lookup
        self.timeout = timeout if timeout is not None else settings.AI_TIMEOUT_SECONDS
        self.network = network or settings.DEFAULT_NETWORK

    # --- narrow helpers: found=False on a miss ---

    def resolve_by_tac(self, tac: str) -> ResolutionResult:
        """
        Match a TAC against the catalog.

        Heuristic, not authoritative: an exact 8-digit TAC wins, otherwise
        the first device sharing the 6-digit FAC is returned.
        """
        candidate = normalize_imei(tac)[:TAC_LENGTH]
        if len(candidate) < FAC_LENGTH or not is_ascii_digits(candidate):
            return MISS

        for record in self.reference.catalog:
            if record.tac == candidate:
                return ResolutionResult(
                    found=True,
                    device=record,
                    tac=candidate,
                    provenance=Provenance.TAC_PREFIX,
                    tac_analysis=f"TAC {candidate} matched a known device.",
                )

        fac = candidate[:FAC_LENGTH]
        for record in self.reference.catalog:
            if record.tac and record.tac[:FAC_LENGTH] == fac:
                return ResolutionResult(
                    found=True,
                    device=record,
                    tac=candidate,
                    provenance=Provenance.TAC_PREFIX,
                    tac_analysis=(
                        f"TAC {candidate} partially matched (FAC: {fac}). "
                        "Device identified from similar TAC pattern - please verify model."
                    ),
                )
        return MISS

    def match_model_name(self, text: str) -> ResolutionResult:
        """Exact catalog model name first, then the ordered patterns."""
        if not isinstance(text, str) or not text.strip():
            return MISS
        name = text.strip()

        record = self.reference.find_model(name)
        if record is not None:
            return ResolutionResult(found=True, device=record, tac=record.tac, provenance=Provenance.EXACT)

        for entry in self.reference.patterns:
            if entry.matches(name):
                return ResolutionResult(
                    found=True,
                    device=entry.device,
                    tac=entry.device.tac,
                    provenance=Provenance.PATTERN,
                )
        return MISS

    def resolve_locally(self, imei: str) -> ResolutionResult:
        """Steps 1 and 2 for an IMEI: known IMEI table, then TAC."""
        value = normalize_imei(imei)
        if not value:
            return MISS

        record = self.reference.known_imeis.get(value)
        if record is not None:
            tac = value[:TAC_LENGTH]
            return ResolutionResult(
                found=True,
                device=record,
                tac=tac,
                provenance=Provenance.EXACT,
                tac_analysis=f"TAC {tac} matched in reference database. This is a known device configuration.",
            )
        return self.resolve_by_tac(value)

    def default_result(self, tac: str | None = None) -> ResolutionResult:
        return ResolutionResult(
            found=True,
            device=self.reference.default_device,
            tac=tac or None,
            provenance=Provenance.DEFAULT,
            tac_analysis=describe_unknown_tac(tac or ""),
        )

    # --- top level: always a usable result ---

    async def resolve_by_imei(self, imei: str, network: str | None = None) -> ResolutionResult:
        value = normalize_imei(imei)

        result = self.resolve_locally(value)
        if result.found:
            logger.debug("Resolved %s locally (%s)", mask_imei(value), result.provenance.value)
            return result

        digits_only = is_ascii_digits(value)
        tac = value[:TAC_LENGTH] if digits_only else ""
        if self.lookup is not None and digits_only and len(value) == IMEI_LENGTH:
            external = await self._external_lookup(value, network or self.network)
            if external is not None:
                return external

        logger.info("No match for %s, returning default device", mask_imei(value))
        return self.default_result(tac)

    def resolve_by_model_name(self, text: str) -> ResolutionResult:
        result = self.match_model_name(text)
        if result.found:
            return result
        logger.info("No model match for %r, returning default device", text)
        return self.default_result()

    async def _external_lookup(self, imei: str, network: str) -> ResolutionResult | None:
        """Step 4. Anything other than a device record is a miss."""
        masked = mask_imei(imei)
        try:
            device = await asyncio.wait_for(self.lookup(imei, network), timeout=self.timeout)
        except asyncio.TimeoutError:
            logger.warning("External lookup for %s timed out after %.1fs", masked, self.timeout)
            return None
        except asyncio.CancelledError:
            task = asyncio.current_task()
            if task is not None and task.cancelling():
                raise
            logger.warning("External lookup for %s was cancelled", masked)
            return None
        except Exception as e:
            logger.warning("External lookup for %s failed: %s", masked, e)
            return None

        if not isinstance(device, DeviceRecord):
            logger.info("External lookup for %s returned no device", masked)
            return None

        tac = imei[:TAC_LENGTH]
        if device.tac is None:
            device = replace(device, tac=tac)
        return ResolutionResult(
            found=True,
            device=device,
            tac=tac,
            provenance=Provenance.EXTERNAL,
            tac_analysis=f"TAC {tac} identified by external lookup for {network}; not locally verified.",
        )
