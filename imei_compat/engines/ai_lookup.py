"""
External device identification through AI providers.

We call, through the vendor SDKs:
- Gemini (google-genai, async client), or
- OpenAI (openai, AsyncOpenAI chat completions)

Both are asked for a JSON description of the device behind an IMEI and its
capabilities on a target network. The resolver treats every failure here as
a miss, so adapters only need to be honest: return None when the provider
answers with an error status, raise for a payload we can't use.
"""

from __future__ import annotations

import json
import logging
from abc import ABC, abstractmethod
from typing import Any, Awaitable, Callable, Mapping

import openai
from google import genai
from google.genai import errors as genai_errors
from google.genai import types

from imei_compat.models.device import DeviceRecord, NetworkCapabilities
from imei_compat.utils.config import Settings
from imei_compat.utils.imei import analyze_structure, mask_imei

logger = logging.getLogger(__name__)

# async (imei, network) -> DeviceRecord | None
DeviceLookup = Callable[[str, str], Awaitable["DeviceRecord | None"]]

SYSTEM_PROMPT = (
    "You are an expert in mobile device identification and IMEI/TAC analysis. "
    "You know GSMA TAC allocation ranges, the network bands of devices sold in "
    "North America and carrier-specific VoLTE and Wi-Fi calling provisioning. "
    "Always respond with valid JSON in the exact format requested."
)


class DeviceLookupError(Exception):
    """The provider answered, but not with something we can use."""


class MalformedPayloadError(DeviceLookupError, ValueError):
    pass


def build_prompt(imei: str, network: str) -> str:
    """Prompt asking for device identity and network compatibility as JSON."""
    parts = analyze_structure(imei)
    return f"""Identify the mobile device behind this IMEI and its compatibility with the {network} network.

- Full IMEI: {imei}
- TAC (Type Allocation Code): {parts.tac}
- FAC (Final Assembly Code): {parts.fac}

The TAC is the primary identifier of make and model. If the TAC is unknown to you,
give your best estimate from the TAC range.

Respond with JSON in this format:
{{
  "make": "Manufacturer",
  "model": "Model name",
  "year": 2023,
  "modelNumber": "Official model number if known",
  "tacAnalysis": "Short explanation of what the TAC reveals",
  "networkCapabilities": {{
    "fourG": true,
    "fiveG": true,
    "volte": true,
    "wifiCalling": "supported" | "limited" | "not_supported"
  }},
  "specifications": {{
    "networkBands": "Supported LTE and 5G bands",
    "carrierVariant": "Regional or carrier variant if known"
  }}
}}

Be specific about {network}: VoLTE and Wi-Fi calling depend on carrier provisioning."""


def parse_device_payload(payload: Any, tac: str | None = None) -> DeviceRecord:
    """
    Turn a decoded provider payload into a DeviceRecord.

    Raises MalformedPayloadError if the payload is not an object or names
    neither make nor model. Missing capability flags become False.
    """
    if isinstance(payload, (str, bytes)):
        try:
            payload = json.loads(payload)
        except json.JSONDecodeError as exc:
            raise MalformedPayloadError(f"Provider returned invalid JSON: {exc}") from exc

    if not isinstance(payload, Mapping):
        raise MalformedPayloadError(f"Expected a JSON object, got {type(payload).__name__}")

    make = payload.get("make")
    model = payload.get("model")
    if not isinstance(make, str) or not make.strip():
        make = None
    if not isinstance(model, str) or not model.strip():
        model = None
    if make is None and model is None:
        raise MalformedPayloadError("Payload names neither make nor model")

    specs = payload.get("specifications")
    if not isinstance(specs, Mapping):
        specs = {}
    year = payload.get("year")
    model_number = payload.get("modelNumber")

    return DeviceRecord(
        make=(make or "Unknown").strip(),
        model=(model or "Unknown Device").strip(),
        tac=tac,
        year=year if isinstance(year, int) and not isinstance(year, bool) else None,
        model_number=model_number if isinstance(model_number, str) else None,
        network_bands=specs.get("networkBands") if isinstance(specs.get("networkBands"), str) else None,
        carrier_variant=specs.get("carrierVariant") if isinstance(specs.get("carrierVariant"), str) else None,
        capabilities=NetworkCapabilities.from_dict(payload.get("networkCapabilities")),
    )


class AILookup(ABC):
    """
    Shared plumbing: build the prompt, ask the provider, parse the device.

    A client can be passed in (tests do); otherwise one is created on first
    use and reused for later calls. Providers are called without retries.
    """

    name = "ai"
    # SDK errors that mean "the provider answered with an error status".
    status_errors: tuple = ()

    def __init__(self, api_key: str, model: str, timeout: float = 10.0, client: Any = None) -> None:
        self.api_key = api_key
        self.model = model
        self.timeout = timeout
        self._client = client

    @property
    def client(self) -> Any:
        if self._client is None:
            self._client = self.create_client()
        return self._client

    @abstractmethod
    def create_client(self) -> Any:
        """Build the SDK client."""

    @abstractmethod
    async def generate(self, prompt: str) -> str | None:
        """Send the prompt and return the raw JSON text of the answer."""

    async def __call__(self, imei: str, network: str) -> DeviceRecord | None:
        try:
            text = await self.generate(build_prompt(imei, network))
        except self.status_errors as e:
            logger.warning("%s lookup for %s was rejected: %s", self.name, mask_imei(imei), e)
            return None

        if not text:
            raise MalformedPayloadError(f"{self.name} returned an empty answer")
        return parse_device_payload(text, tac=analyze_structure(imei).tac)


class GeminiLookup(AILookup):
    name = "gemini"
    status_errors = (genai_errors.APIError,)

    def create_client(self) -> genai.Client:
        # HttpOptions.timeout is in milliseconds.
        return genai.Client(
            api_key=self.api_key,
            http_options=types.HttpOptions(timeout=int(self.timeout * 1000)),
        )

    async def generate(self, prompt: str) -> str | None:
        response = await self.client.aio.models.generate_content(
            model=self.model,
            contents=prompt,
            config=types.GenerateContentConfig(
                system_instruction=SYSTEM_PROMPT,
                response_mime_type="application/json",
                temperature=0.1,
            ),
        )
        return response.text


class OpenAILookup(AILookup):
    name = "openai"
    status_errors = (openai.APIStatusError,)

    def create_client(self) -> openai.AsyncOpenAI:
        return openai.AsyncOpenAI(api_key=self.api_key, timeout=self.timeout, max_retries=0)

    async def generate(self, prompt: str) -> str | None:
        response = await self.client.chat.completions.create(
            model=self.model,
            messages=[
                {"role": "system", "content": SYSTEM_PROMPT},
                {"role": "user", "content": prompt},
            ],
            response_format={"type": "json_object"},
            temperature=0.1,
        )
        if not response.choices:
            return None
        return response.choices[0].message.content


def build_default_lookup(config: Settings) -> DeviceLookup | None:
    """
    Pick the AI adapter from settings.

    AI_PROVIDER=auto prefers Gemini, then OpenAI, by whichever key is set.
    Missing credentials mean no external step at all.
    """
    provider = config.AI_PROVIDER
    timeout = config.AI_TIMEOUT_SECONDS

    if provider in ("auto", "gemini") and config.GEMINI_API_KEY:
        return GeminiLookup(config.GEMINI_API_KEY, config.GEMINI_MODEL, timeout=timeout)
    if provider in ("auto", "openai") and config.OPENAI_API_KEY:
        return OpenAILookup(config.OPENAI_API_KEY, config.OPENAI_MODEL, timeout=timeout)

    if provider != "none":
        logger.info("No API key for AI provider %r; external device lookup disabled", provider)
    return None
